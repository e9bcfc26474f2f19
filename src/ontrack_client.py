#!/usr/bin/env python3
"""
Ontrack REST client
"""

from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import requests

from constants import BUILD_INTERVAL_FILTER

TraceLogger = Callable[[str], None]


class OntrackClientError(Exception):
    """Raised when Ontrack answers with an unexpected status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class OntrackNotFoundError(OntrackClientError):
    """Raised when Ontrack answers 404"""


class OntrackConfigurationError(OntrackClientError):
    """Raised when a connection cannot be built from the configuration"""


class OntrackConnection:
    """Builder for an Ontrack handle"""

    def __init__(self, url: str):
        self.url = url
        self.user = None
        self.password = None
        self.trace_logger: Optional[TraceLogger] = None

    @classmethod
    def create(cls, url: str) -> "OntrackConnection":
        if not url or not url.strip():
            raise OntrackConfigurationError("Ontrack URL is not configured")
        url = url.strip()
        if not url.startswith(("http://", "https://")):
            raise OntrackConfigurationError(f"Ontrack URL must be an HTTP(S) URL: {url}")
        return cls(url)

    def logger(self, trace_logger: TraceLogger) -> "OntrackConnection":
        self.trace_logger = trace_logger
        return self

    def authenticate(self, user: str, password: Optional[str]) -> "OntrackConnection":
        self.user = user
        self.password = password or ""
        return self

    def build(self) -> "Ontrack":
        session = requests.Session()
        session.headers.update({"Accept": "application/json"})
        if self.user:
            session.auth = (self.user, self.password)
        return Ontrack(self.url, session, self.trace_logger)


class Ontrack:
    """Handle on an Ontrack server, bound as `ontrack` in DSL scripts"""

    def __init__(self, url: str, session: requests.Session, trace_logger: Optional[TraceLogger] = None):
        self.url = url.rstrip("/")
        self.session = session
        self.trace_logger = trace_logger

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """GET a JSON resource, path being relative to the Ontrack URL"""
        url = f"{self.url}/{path.lstrip('/')}"
        # URL as sent, query string included
        sent_url = requests.Request("GET", url, params=params).prepare().url
        if self.trace_logger:
            self.trace_logger(f"[ontrack] GET {sent_url}")

        response = self.session.get(url, params=params)

        if self.trace_logger:
            self.trace_logger(f"[ontrack] {response.status_code} {sent_url}")
        if response.status_code == 404:
            raise OntrackNotFoundError(f"Not found: {url}", 404)
        if response.status_code >= 400:
            raise OntrackClientError(
                f"Ontrack request failed ({response.status_code}): {url}",
                response.status_code,
            )
        return response.json()

    def project(self, project: str) -> "OntrackProject":
        data = self.get(f"structure/entity/project/{_segment(project)}")
        return OntrackProject(self, data)

    def branch(self, project: str, branch: str) -> "OntrackBranch":
        data = self.get(f"structure/entity/branch/{_segment(project)}/{_segment(branch)}")
        return OntrackBranch(self, data)

    def build(self, project: str, branch: str, build: str) -> "OntrackBuild":
        data = self.get(
            f"structure/entity/build/{_segment(project)}/{_segment(branch)}/{_segment(build)}"
        )
        return OntrackBuild(self, data)

    def __repr__(self):
        return f"Ontrack({self.url})"


def _segment(value: str) -> str:
    return quote(str(value), safe="")


class OntrackEntity:
    """Any tracked entity returned by Ontrack (project, branch, build...)"""

    def __init__(self, ontrack: Ontrack, data: Dict[str, Any]):
        self.ontrack = ontrack
        self.data = data

    @property
    def id(self) -> int:
        return self.data.get("id")

    @property
    def name(self) -> str:
        return self.data.get("name")

    @property
    def description(self) -> str:
        return self.data.get("description", "")

    def link(self, name: str) -> Optional[str]:
        """Ontrack resources carry their links as `_<name>` fields"""
        return self.data.get(f"_{name}")

    def __eq__(self, other):
        return type(self) is type(other) and self.id == other.id

    def __hash__(self):
        return hash((type(self).__name__, self.id))

    def __repr__(self):
        return f"{type(self).__name__}({self.name})"


class OntrackProject(OntrackEntity):

    def branch(self, name: str) -> "OntrackBranch":
        return self.ontrack.branch(self.name, name)


class OntrackBranch(OntrackEntity):

    @property
    def project(self) -> str:
        return (self.data.get("project") or {}).get("name")

    def build(self, name: str) -> "OntrackBuild":
        return self.ontrack.build(self.project, self.name, name)

    def interval_filter(self, from_build: str, to_build: str) -> List["OntrackBuild"]:
        """Builds between two build names, in the order Ontrack lists them"""
        data = self.ontrack.get(
            f"structure/branches/{self.id}/view/{BUILD_INTERVAL_FILTER}",
            params={"from": from_build, "to": to_build},
        )
        return [OntrackBuild(self.ontrack, view["build"]) for view in data.get("buildViews", [])]


class OntrackBuild(OntrackEntity):

    @property
    def branch(self) -> str:
        return (self.data.get("branch") or {}).get("name")

    def get_change_log(self, other: "OntrackBuild") -> "OntrackChangeLog":
        data = self.ontrack.get("extension/scm/changeLog", params={"from": self.id, "to": other.id})
        return OntrackChangeLog(self.ontrack, data)


class OntrackChangeLog:
    """Change log between two builds, its sections being fetched on access"""

    def __init__(self, ontrack: Ontrack, data: Dict[str, Any]):
        self.ontrack = ontrack
        self.data = data

    @property
    def uuid(self) -> str:
        return self.data.get("uuid")

    @property
    def from_build(self) -> OntrackBuild:
        return OntrackBuild(self.ontrack, self.data.get("from") or {})

    @property
    def to_build(self) -> OntrackBuild:
        return OntrackBuild(self.ontrack, self.data.get("to") or {})

    def link(self, name: str) -> Optional[str]:
        return self.data.get(f"_{name}")

    @property
    def commits(self) -> List[Dict[str, Any]]:
        return self._section("commits")

    @property
    def issues(self) -> List[Dict[str, Any]]:
        return self._section("issues")

    @property
    def files(self) -> List[Dict[str, Any]]:
        return self._section("files")

    def _section(self, name: str) -> List[Dict[str, Any]]:
        data = self.ontrack.get(f"extension/scm/changeLog/{self.uuid}/{name}")
        return data.get(name, [])
