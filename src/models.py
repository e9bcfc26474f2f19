#!/usr/bin/env python3
"""
Data models for the Ontrack Jenkins steps
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class BuildResult(Enum):
    """Outcome of a step, mapped to a process exit code"""
    SUCCESS = 0
    FAILURE = 1
    UNSTABLE = 2

    @property
    def exit_code(self) -> int:
        return self.value


@dataclass(frozen=True)
class ChangeLogCommit:
    id: str
    short_id: str
    author: str
    timestamp: str
    message: str
    formatted_message: str
    link: Optional[str] = None


@dataclass(frozen=True)
class ChangeLogIssue:
    key: str
    display_key: str
    summary: str
    status: str
    update_time: str
    url: Optional[str] = None


@dataclass(frozen=True)
class ChangeLogFile:
    path: str
    change_types: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ChangeLogEntry:
    """Change log between two Ontrack builds, reduced for display"""
    from_build: str
    to_build: str
    page: Optional[str]
    commits: List[ChangeLogCommit] = field(default_factory=list)
    issues: List[ChangeLogIssue] = field(default_factory=list)
    files: List[ChangeLogFile] = field(default_factory=list)

