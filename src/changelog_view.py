#!/usr/bin/env python3
"""
HTML side panel for the Ontrack change log
"""

from html import escape
from typing import List, Optional

from constants import CHANGE_LOG_DISPLAY_NAME, CHANGE_LOG_URL_NAME
from models import ChangeLogCommit, ChangeLogEntry, ChangeLogFile, ChangeLogIssue


def _link(text: str, url: Optional[str]) -> str:
    if url:
        return f'<a href="{escape(url)}">{escape(text or "")}</a>'
    return escape(text or "")


class OntrackChangeLogAction:
    """Change log attached to a Jenkins build"""

    display_name = CHANGE_LOG_DISPLAY_NAME
    url_name = CHANGE_LOG_URL_NAME

    def __init__(self, build, change_logs: List[ChangeLogEntry]):
        self.build = build
        self.change_logs = list(change_logs)

    @property
    def file_name(self) -> str:
        return f"{self.url_name}.html"

    def render(self) -> str:
        parts = [
            "<!DOCTYPE html>",
            "<html>",
            f"<head><meta charset=\"utf-8\"><title>{escape(self.display_name)}</title></head>",
            "<body>",
            f"<h1>{escape(self.display_name)}</h1>",
        ]
        if not self.change_logs:
            parts.append("<p>No change log.</p>")
        for change_log in self.change_logs:
            parts.append(render_change_log(change_log))
        parts += ["</body>", "</html>"]
        return "\n".join(parts) + "\n"


def render_change_log(change_log: ChangeLogEntry) -> str:
    title = f"From {change_log.from_build} to {change_log.to_build}"
    html = '<div class="ontrack-changelog">\n'
    html += f"<h2>{_link(title, change_log.page)}</h2>\n"
    html += render_commits(change_log.commits)
    if change_log.issues:
        html += render_issues(change_log.issues)
    if change_log.files:
        html += render_files(change_log.files)
    html += "</div>"
    return html


def render_commits(commits: List[ChangeLogCommit]) -> str:
    html = "<h3>Commits</h3>\n<table>\n"
    html += "<tr><th>Commit</th><th>Author</th><th>Message</th></tr>\n"
    for commit in commits:
        if commit.link:
            commit_id = _link(commit.short_id, commit.link)
        else:
            commit_id = escape(commit.id or "")
        # Formatted messages are HTML produced by Ontrack
        message = commit.formatted_message or escape(commit.message or "")
        html += f"<tr><td>{commit_id}</td><td>{escape(commit.author or '')}</td><td>{message}</td></tr>\n"
    html += "</table>\n"
    return html


def render_issues(issues: List[ChangeLogIssue]) -> str:
    html = "<h3>Issues</h3>\n<table>\n"
    html += "<tr><th>Issue</th><th>Status</th><th>Summary</th></tr>\n"
    for issue in issues:
        html += (
            f"<tr><td>{_link(issue.display_key, issue.url)}</td>"
            f"<td>{escape(issue.status or '')}</td>"
            f"<td>{escape(issue.summary or '')}</td></tr>\n"
        )
    html += "</table>\n"
    return html


def render_files(files: List[ChangeLogFile]) -> str:
    html = "<h3>Files</h3>\n<table>\n"
    html += "<tr><th>Path</th><th>Changes</th></tr>\n"
    for file in files:
        html += f"<tr><td>{escape(file.path or '')}</td><td>{escape(', '.join(file.change_types))}</td></tr>\n"
    html += "</table>\n"
    return html
