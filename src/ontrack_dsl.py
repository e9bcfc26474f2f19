#!/usr/bin/env python3
"""
Ontrack DSL step: runs a Python script against an Ontrack handle
"""

import ast
from dataclasses import dataclass
from typing import Any, Dict, Optional

from connector import create_ontrack_connector
from constants import DSL_RESULT_NAME, JENKINS_BINDING, ONTRACK_BINDING
from models import BuildResult
from ontrack_client import OntrackEntity
from plugin_support import parse_properties


class JenkinsConnector:
    """Host operations offered to DSL scripts as `jenkins`"""

    def __init__(self, build=None):
        self.build = build
        self.result: Optional[BuildResult] = None

    def success(self) -> None:
        self.result = BuildResult.SUCCESS

    def unstable(self) -> None:
        self.result = BuildResult.UNSTABLE

    def failure(self) -> None:
        self.result = BuildResult.FAILURE

    def env(self, name: str, default: Optional[str] = None) -> Optional[str]:
        if self.build is None:
            return default
        return self.build.environment.get(name, default)

    def parameter(self, name: str) -> Optional[str]:
        if self.build is None:
            return None
        return self.build.get_parameter(name)

    def __repr__(self):
        return f"JenkinsConnector(result={self.result.name if self.result else None})"


@dataclass
class OntrackDSLResult:
    """Value returned by a DSL script and the Jenkins facade it ran with"""
    shell_result: Any
    jenkins: JenkinsConnector

    def build_result(self) -> BuildResult:
        if self.jenkins.result is not None:
            return self.jenkins.result
        return to_jenkins_result(self.shell_result)


def to_jenkins_result(shell_result: Any) -> BuildResult:
    """Success for None, 0, False, "" and any Ontrack entity, failure otherwise"""
    if (shell_result is None
            or shell_result is False
            or (type(shell_result) is int and shell_result == 0)
            or (isinstance(shell_result, str) and shell_result == "")
            or isinstance(shell_result, OntrackEntity)):
        return BuildResult.SUCCESS
    return BuildResult.FAILURE


def evaluate(script: str, bindings: Dict[str, Any]) -> Any:
    """Executes the script with the bindings as globals.

    The value of a trailing expression statement is returned; without one,
    the value the script assigned to `result` (or None). An injected
    `result` binding the script never assigns is not a result.
    """
    tree = ast.parse(script, filename="<ontrack-dsl>", mode="exec")
    last = None
    if tree.body and isinstance(tree.body[-1], ast.Expr):
        last = ast.Expression(tree.body.pop().value)
    assigns_result = _assigns(tree, DSL_RESULT_NAME)

    exec(compile(tree, "<ontrack-dsl>", "exec"), bindings)
    if last is not None:
        return eval(compile(last, "<ontrack-dsl>", "eval"), bindings)
    if assigns_result:
        return bindings.get(DSL_RESULT_NAME)
    return None


def _assigns(tree: ast.AST, name: str) -> bool:
    return any(
        isinstance(node, ast.Name) and node.id == name and isinstance(node.ctx, ast.Store)
        for node in ast.walk(tree)
    )


class OntrackDSL:

    def __init__(self, script: str, inject_environment: str = "", inject_properties: str = "",
                 ontrack_log: bool = False):
        self.script = script
        self.inject_environment = inject_environment or ""
        self.inject_properties = inject_properties or ""
        self.ontrack_log = ontrack_log

    def run(self, build) -> OntrackDSLResult:
        logger = build.logger
        # Traces of the Ontrack requests only when asked for
        ontrack = create_ontrack_connector(logger if self.ontrack_log else None)
        jenkins = JenkinsConnector(build)

        values: Dict[str, Any] = {}
        for name in self.inject_environment.split(","):
            name = name.strip()
            if not name:
                continue
            value = build.environment.get(name)
            if value is not None:
                values[name] = value
        values.update(parse_properties(self.inject_properties, build.environment))

        logger("Injecting following values:")
        for name, value in values.items():
            logger(f" - {name} = {value}")

        values[ONTRACK_BINDING] = ontrack
        values[JENKINS_BINDING] = jenkins

        logger("Ontrack DSL script running...")
        shell_result = evaluate(self.script, values)
        if self.ontrack_log:
            logger(f"Ontrack DSL script returned result: {shell_result}")
        else:
            logger("Ontrack DSL script returned result.")

        return OntrackDSLResult(shell_result, jenkins)
