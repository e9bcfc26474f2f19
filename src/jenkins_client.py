#!/usr/bin/env python3
"""
Jenkins client utilities
"""

import os
from typing import Any, Dict, Mapping, Optional

import requests

from config import JenkinsConfiguration

BUILD_TREE = "number,url,actions[parameters[name,value]],previousBuild[number,url]"


class JenkinsClientError(Exception):
    """Raised when the Jenkins API cannot be read"""


class JenkinsBuild:
    """A Jenkins build, as seen from a step running inside it"""

    def __init__(self, config: JenkinsConfiguration, build_url: Optional[str] = None,
                 environment: Optional[Mapping[str, str]] = None):
        self.config = config
        self.build_url = build_url or config.build_url
        if self.build_url and not self.build_url.endswith("/"):
            self.build_url += "/"
        self.environment = environment if environment is not None else dict(os.environ)
        self._data: Optional[Dict[str, Any]] = None

    @classmethod
    def current(cls) -> "JenkinsBuild":
        return cls(JenkinsConfiguration.from_env())

    def logger(self, message: str) -> None:
        """Console log of the build"""
        print(message)

    @property
    def data(self) -> Dict[str, Any]:
        if self._data is None:
            self._data = self._get_build_data()
        return self._data

    @property
    def number(self) -> Optional[int]:
        return self.data.get("number")

    def get_parameter(self, name: str) -> Optional[str]:
        """Value of a build parameter, None when the build does not have it"""
        for action in self.data.get("actions") or []:
            # ParametersAction and its subclasses, like MatrixChildParametersAction
            if not action or "parameters" not in action:
                continue
            for parameter in action["parameters"] or []:
                if parameter.get("name") == name:
                    return _parameter_string(parameter.get("value"))
        return None

    def get_previous_build(self) -> Optional["JenkinsBuild"]:
        previous = self.data.get("previousBuild")
        if not previous or not previous.get("url"):
            return None
        return JenkinsBuild(self.config, previous["url"], self.environment)

    def add_action(self, action) -> str:
        """Publishes a display action next to the build, returns the written path"""
        report_dir = self.config.report_dir or os.path.join(self.config.workspace, "ontrack")
        os.makedirs(report_dir, exist_ok=True)
        path = os.path.join(report_dir, action.file_name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(action.render())
        self.logger(f"📎 {action.display_name} written to {path}")
        return path

    def _get_build_data(self) -> Dict[str, Any]:
        if not self.build_url:
            raise JenkinsClientError("BUILD_URL is not set - not running inside a Jenkins build?")
        url = f"{self.build_url}api/json"
        auth = None
        if self.config.user:
            auth = (self.config.user, self.config.api_token or "")

        response = requests.get(url, params={"tree": BUILD_TREE}, auth=auth)

        if response.status_code != 200:
            raise JenkinsClientError(f"Error getting build {url}: {response.status_code}")
        return response.json()

    def __repr__(self):
        return f"JenkinsBuild({self.build_url})"


def _parameter_string(value: Any) -> Optional[str]:
    """Parameter value as Jenkins prints it"""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
