#!/usr/bin/env python3
"""
Configuration read from the Jenkins build environment
"""

import os
from dataclasses import dataclass
from typing import Optional


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("true", "1", "yes")


@dataclass
class OntrackConfiguration:
    ontrack_url: str
    ontrack_user: Optional[str] = None
    ontrack_password: Optional[str] = None
    ontrack_trace: bool = False

    @classmethod
    def from_env(cls) -> "OntrackConfiguration":
        # Read on every call, so a changed global configuration is picked up
        return cls(
            ontrack_url=os.getenv("ONTRACK_URL", ""),
            ontrack_user=os.getenv("ONTRACK_USER"),
            ontrack_password=os.getenv("ONTRACK_PASSWORD"),
            ontrack_trace=_flag(os.getenv("ONTRACK_TRACE")),
        )


@dataclass
class JenkinsConfiguration:
    build_url: str
    job_url: str = ""
    build_number: str = ""
    workspace: str = "."
    user: Optional[str] = None
    api_token: Optional[str] = None
    report_dir: Optional[str] = None

    @classmethod
    def from_env(cls) -> "JenkinsConfiguration":
        workspace = os.getenv("WORKSPACE", ".")
        return cls(
            build_url=os.getenv("BUILD_URL", ""),
            job_url=os.getenv("JOB_URL", ""),
            build_number=os.getenv("BUILD_NUMBER", ""),
            workspace=workspace,
            user=os.getenv("JENKINS_USER"),
            api_token=os.getenv("JENKINS_API_TOKEN"),
            report_dir=os.getenv("ONTRACK_REPORT_DIR") or os.path.join(workspace, "ontrack"),
        )
