#!/usr/bin/env python3
"""
Tests for the change log publication
"""

import unittest
from unittest.mock import Mock, patch
import os
import sys

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from changelog_publisher import OntrackChangelogPublisher
from changelog_view import OntrackChangeLogAction
from ontrack_client import OntrackBuild, OntrackChangeLog, OntrackNotFoundError


class FakeBuild:
    """Jenkins build recording the log and the attached actions"""

    def __init__(self, parameters=None, previous=None, environment=None):
        self.parameters = parameters or {}
        self.previous = previous
        self.environment = environment or {}
        self.lines = []
        self.actions = []

    def logger(self, message):
        self.lines.append(message)

    def get_parameter(self, name):
        return self.parameters.get(name)

    def get_previous_build(self):
        return self.previous

    def add_action(self, action):
        self.actions.append(action)


def make_change_log(ontrack, a, b):
    return OntrackChangeLog(ontrack, {
        "uuid": f"{a.name}-{b.name}",
        "from": a.data,
        "to": b.data,
        "_page": f"https://ontrack/#/changelog/{a.name}-{b.name}",
    })


class TestOntrackChangelogPublisher(unittest.TestCase):

    def setUp(self):
        self.env_patcher = patch.dict(os.environ, {"ONTRACK_URL": "https://ontrack"})
        self.env_patcher.start()
        self.patch_connector = patch("changelog_publisher.create_ontrack_connector")
        self.mock_connector = self.patch_connector.start()

        self.ontrack = Mock()
        self.mock_connector.return_value = self.ontrack
        self.builds = {}
        self.ontrack.build.side_effect = self._lookup_build
        self.sections = {
            "commits": [{
                "id": "a1b2c3d4",
                "shortId": "a1b2c3d",
                "author": "Jane",
                "timestamp": "2016-02-01T10:00:00",
                "message": "#12 Fix",
                "formattedMessage": "<a href=\"https://issues/12\">#12</a> Fix",
                "link": "https://scm/commit/a1b2c3d4",
            }],
            "issues": [{
                "key": "12",
                "displayKey": "#12",
                "summary": "Crash",
                "status": "closed",
                "updateTime": "2016-02-01T11:00:00",
                "url": "https://issues/12",
            }],
            "files": [{"path": "src/App.java", "changeTypes": ["MODIFIED", "RENAMED"]}],
        }
        self.ontrack.get.side_effect = self._get_section

    def tearDown(self):
        self.patch_connector.stop()
        self.env_patcher.stop()

    def _add_build(self, build_id, name):
        build = OntrackBuild(self.ontrack, {"id": build_id, "name": name})
        build.get_change_log = Mock(side_effect=lambda other, a=build: make_change_log(self.ontrack, a, other))
        self.builds[name] = build
        return build

    def _lookup_build(self, project, branch, name):
        if name not in self.builds:
            raise OntrackNotFoundError(f"Build {name} not found", 404)
        return self.builds[name]

    def _get_section(self, path, params=None):
        name = path.rsplit("/", 1)[-1]
        return {name: self.sections[name]}

    def _jenkins_builds(self, current="42", previous="41"):
        previous_build = FakeBuild({"ONTRACK_BUILD": previous}) if previous is not False else None
        return FakeBuild({"ONTRACK_BUILD": current}, previous_build, {"PROJECT": "proj"})

    def test_blank_current_build_name(self):
        for name in (None, "", "  "):
            with self.subTest(name=name):
                build = self._jenkins_builds(current=name)
                publisher = OntrackChangelogPublisher("P", "B", "ONTRACK_BUILD")

                self.assertTrue(publisher.perform(build))
                self.assertEqual(build.actions, [])
                self.assertEqual(
                    build.lines,
                    ["No change log can be computed. No build name can be retrieved from the current build"],
                )
        self.mock_connector.assert_not_called()

    def test_no_previous_build(self):
        build = self._jenkins_builds(previous=False)

        self.assertTrue(OntrackChangelogPublisher("P", "B", "ONTRACK_BUILD").perform(build))
        self.assertEqual(build.actions, [])
        self.assertIn("No change log can be computed. There is no previous build", build.lines)

    def test_blank_previous_build_name(self):
        build = self._jenkins_builds(previous=None)

        self.assertTrue(OntrackChangelogPublisher("P", "B", "ONTRACK_BUILD").perform(build))
        self.assertEqual(build.actions, [])
        self.assertIn(
            "No change log can be computed. No build name can be retrieved from the previous build", build.lines
        )

    def test_build_not_found(self):
        self._add_build(41, "41")
        build = self._jenkins_builds()

        self.assertTrue(OntrackChangelogPublisher("P", "B", "ONTRACK_BUILD").perform(build))
        self.assertEqual(build.actions, [])
        self.assertIn("No change log can be computed. Build 42 cannot be found.", build.lines)

    def test_previous_build_not_found(self):
        self._add_build(42, "42")
        build = self._jenkins_builds()

        self.assertTrue(OntrackChangelogPublisher("P", "B", "ONTRACK_BUILD").perform(build))
        self.assertEqual(build.actions, [])
        self.assertIn("No change log can be computed. Build 41 cannot be found.", build.lines)
        self.ontrack.build.assert_called_once_with("P", "B", "41")

    def test_two_builds(self):
        self._add_build(41, "41")
        self._add_build(42, "42")
        build = self._jenkins_builds()
        publisher = OntrackChangelogPublisher("${PROJECT}", "master", "ONTRACK_BUILD")

        self.assertTrue(publisher.perform(build))

        self.ontrack.build.assert_any_call("proj", "master", "41")
        self.ontrack.build.assert_any_call("proj", "master", "42")
        self.ontrack.branch.assert_not_called()
        action = build.actions[0]
        self.assertIsInstance(action, OntrackChangeLogAction)
        self.assertIs(action.build, build)
        self.assertEqual(len(action.change_logs), 1)
        entry = action.change_logs[0]
        self.assertEqual((entry.from_build, entry.to_build), ("41", "42"))
        self.assertEqual(entry.page, "https://ontrack/#/changelog/41-42")
        self.assertEqual(entry.commits[0].short_id, "a1b2c3d")
        self.assertEqual(entry.commits[0].formatted_message, "<a href=\"https://issues/12\">#12</a> Fix")
        self.assertEqual(entry.issues[0].display_key, "#12")
        self.assertEqual(entry.issues[0].update_time, "2016-02-01T11:00:00")
        # Files are not collected by default
        self.assertEqual(entry.files, [])

    def test_collect_files(self):
        self._add_build(41, "41")
        self._add_build(42, "42")
        build = self._jenkins_builds()

        OntrackChangelogPublisher("P", "B", "ONTRACK_BUILD", collect_files=True).perform(build)

        files = build.actions[0].change_logs[0].files
        self.assertEqual(files[0].path, "src/App.java")
        self.assertEqual(files[0].change_types, ("MODIFIED", "RENAMED"))

    def test_distinct_builds(self):
        b37 = self._add_build(37, "37")
        b39 = self._add_build(39, "39")
        b42 = self._add_build(42, "42")
        self.ontrack.branch.return_value.interval_filter.return_value = [b37, b39, b42]
        build = self._jenkins_builds(current="42", previous="37")

        OntrackChangelogPublisher("P", "B", "ONTRACK_BUILD", distinct_builds=True).perform(build)

        self.ontrack.branch.assert_called_once_with("P", "B")
        self.ontrack.branch.return_value.interval_filter.assert_called_once_with("37", "42")
        entries = build.actions[0].change_logs
        self.assertEqual([(e.from_build, e.to_build) for e in entries], [("37", "39"), ("39", "42")])

    def test_identical_adjacent_builds_are_skipped(self):
        b41 = self._add_build(41, "41")
        b42 = self._add_build(42, "42")
        self.ontrack.branch.return_value.interval_filter.return_value = [b41, b41, b42, b42]
        build = self._jenkins_builds()

        OntrackChangelogPublisher("P", "B", "ONTRACK_BUILD", distinct_builds=True).perform(build)

        entries = build.actions[0].change_logs
        self.assertEqual([(e.from_build, e.to_build) for e in entries], [("41", "42")])

    def test_same_build_gives_empty_change_log(self):
        self._add_build(42, "42")
        build = self._jenkins_builds(current="42", previous="42")

        self.assertTrue(OntrackChangelogPublisher("P", "B", "ONTRACK_BUILD").perform(build))
        self.assertEqual(build.actions[0].change_logs, [])

    def test_same_requests_on_repeated_calls(self):
        b41 = self._add_build(41, "41")
        self._add_build(42, "42")
        publisher = OntrackChangelogPublisher("P", "B", "ONTRACK_BUILD")

        publisher.perform(self._jenkins_builds())
        first = self.ontrack.build.call_args_list[:]
        publisher.perform(self._jenkins_builds())

        self.assertEqual(self.ontrack.build.call_args_list, first + first)
        self.assertEqual(b41.get_change_log.call_count, 2)
        self.assertEqual(self.mock_connector.call_count, 2)

    def test_unexpected_errors_propagate(self):
        self._add_build(41, "41")
        self._add_build(42, "42")
        self.ontrack.branch.return_value.interval_filter.side_effect = RuntimeError("Ontrack down")
        build = self._jenkins_builds()

        with self.assertRaises(RuntimeError):
            OntrackChangelogPublisher("P", "B", "ONTRACK_BUILD", distinct_builds=True).perform(build)
        self.assertEqual(build.actions, [])

    def test_trace_only_when_configured(self):
        self._add_build(41, "41")
        self._add_build(42, "42")
        build = self._jenkins_builds()

        OntrackChangelogPublisher("P", "B", "ONTRACK_BUILD").perform(build)
        self.mock_connector.assert_called_with(None)

        with patch.dict(os.environ, {"ONTRACK_TRACE": "true"}):
            OntrackChangelogPublisher("P", "B", "ONTRACK_BUILD").perform(build)
        self.mock_connector.assert_called_with(build.logger)


if __name__ == "__main__":
    unittest.main()
