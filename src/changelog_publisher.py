#!/usr/bin/env python3
"""
Publication of the Ontrack change log between two Jenkins builds
"""

from typing import Optional

from changelog_view import OntrackChangeLogAction
from config import OntrackConfiguration
from connector import create_ontrack_connector
from constants import NO_CHANGE_LOG_PREFIX
from models import ChangeLogCommit, ChangeLogEntry, ChangeLogFile, ChangeLogIssue
from ontrack_client import OntrackChangeLog, OntrackNotFoundError
from plugin_support import expand


class OntrackChangelogPublisher:

    def __init__(self, project: str, branch: str, build_name_parameter: str,
                 distinct_builds: bool = False, collect_files: bool = False):
        # Project and branch names may contain ${VAR} placeholders
        self.project = project
        self.branch = branch
        # Parameter holding the Ontrack build name on a Jenkins build
        self.build_name_parameter = build_name_parameter
        # One change log per intermediate build instead of a single one
        self.distinct_builds = distinct_builds
        self.collect_files = collect_files

    def perform(self, build) -> bool:
        project_name = expand(self.project, build.environment)
        branch_name = expand(self.branch, build.environment)

        last_build_name = self.get_build_name(build)

        previous_build_name = None
        previous_build = build.get_previous_build()
        if previous_build is not None:
            previous_build_name = self.get_build_name(previous_build)

        if _is_blank(last_build_name):
            return self.no_change_log(build, "No build name can be retrieved from the current build")
        elif previous_build is None:
            return self.no_change_log(build, "There is no previous build")
        elif _is_blank(previous_build_name):
            return self.no_change_log(build, "No build name can be retrieved from the previous build")

        trace = build.logger if OntrackConfiguration.from_env().ontrack_trace else None
        ontrack = create_ontrack_connector(trace)

        try:
            build_1 = ontrack.build(project_name, branch_name, previous_build_name)
        except OntrackNotFoundError:
            return self.no_change_log(build, f"Build {previous_build_name} cannot be found.")
        try:
            build_n = ontrack.build(project_name, branch_name, last_build_name)
        except OntrackNotFoundError:
            return self.no_change_log(build, f"Build {last_build_name} cannot be found.")

        builds = [build_1, build_n]
        if self.distinct_builds:
            builds = ontrack.branch(project_name, branch_name).interval_filter(build_1.name, build_n.name)

        change_logs = []
        for a, b in zip(builds, builds[1:]):
            if a.id != b.id:
                change_logs.append(self.collect_info(a.get_change_log(b)))

        build.add_action(OntrackChangeLogAction(build, change_logs))
        return True

    def collect_info(self, change_log: OntrackChangeLog) -> ChangeLogEntry:
        """Reduces a change log to what the side panel displays"""
        commits = [
            ChangeLogCommit(
                id=commit.get("id"),
                short_id=commit.get("shortId"),
                author=commit.get("author"),
                timestamp=commit.get("timestamp"),
                message=commit.get("message"),
                formatted_message=commit.get("formattedMessage"),
                link=commit.get("link"),
            )
            for commit in change_log.commits
        ]
        issues = [
            ChangeLogIssue(
                key=issue.get("key"),
                display_key=issue.get("displayKey"),
                summary=issue.get("summary"),
                status=issue.get("status"),
                update_time=issue.get("updateTime"),
                url=issue.get("url"),
            )
            for issue in change_log.issues
        ]
        files = []
        if self.collect_files:
            files = [
                ChangeLogFile(path=file.get("path"), change_types=tuple(file.get("changeTypes") or ()))
                for file in change_log.files
            ]
        return ChangeLogEntry(
            from_build=change_log.from_build.name,
            to_build=change_log.to_build.name,
            page=change_log.link("page"),
            commits=commits,
            issues=issues,
            files=files,
        )

    def no_change_log(self, build, reason: str) -> bool:
        build.logger(f"{NO_CHANGE_LOG_PREFIX} {reason}")
        return True

    def get_build_name(self, build) -> Optional[str]:
        return build.get_parameter(self.build_name_parameter)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()
