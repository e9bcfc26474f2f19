#!/usr/bin/env python3
"""
Ontrack steps for Jenkins builds
"""

import argparse
import sys
from typing import List, Optional

from changelog_publisher import OntrackChangelogPublisher
from jenkins_client import JenkinsBuild
from models import BuildResult
from ontrack_dsl import OntrackDSL


def _read(text: Optional[str], path: Optional[str]) -> str:
    if path:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    return text or ""


def run_dsl(args, build: JenkinsBuild) -> int:
    script = _read(args.script, args.script_file)
    if not script.strip():
        raise ValueError("No Ontrack DSL script given")
    properties = _read(args.inject_properties, args.inject_properties_file)

    print("🔍 Running Ontrack DSL script...")
    dsl = OntrackDSL(script, args.inject_environment, properties, args.log)
    result = dsl.run(build).build_result()

    if result == BuildResult.SUCCESS:
        print("✅ Ontrack DSL step succeeded")
    else:
        print(f"🚨 Ontrack DSL step result: {result.name}")
    return result.exit_code


def run_changelog(args, build: JenkinsBuild) -> int:
    print(f"🔍 Computing Ontrack change log for {args.project}/{args.branch}...")
    publisher = OntrackChangelogPublisher(
        args.project,
        args.branch,
        args.build_name_parameter,
        distinct_builds=args.distinct_builds,
        collect_files=args.collect_files,
    )
    ok = publisher.perform(build)
    print("✅ Change log step complete!")
    return 0 if ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ontrack-jenkins", description="Ontrack steps for Jenkins builds")
    subparsers = parser.add_subparsers(dest="command", required=True)

    dsl = subparsers.add_parser("dsl", help="Run an Ontrack DSL script")
    script = dsl.add_mutually_exclusive_group(required=True)
    script.add_argument("--script", help="Script text")
    script.add_argument("--script-file", help="Path to the script")
    dsl.add_argument("--inject-environment", default="",
                     help="Comma-separated environment variables to bind into the script")
    properties = dsl.add_mutually_exclusive_group()
    properties.add_argument("--inject-properties", default="", help="name=value lines to bind into the script")
    properties.add_argument("--inject-properties-file", help="File of name=value lines")
    dsl.add_argument("--log", action="store_true", help="Trace Ontrack requests and print the script result")
    dsl.set_defaults(func=run_dsl)

    changelog = subparsers.add_parser("changelog", help="Publish the Ontrack change log since the previous build")
    changelog.add_argument("--project", required=True, help="Ontrack project, may use ${VAR}")
    changelog.add_argument("--branch", required=True, help="Ontrack branch, may use ${VAR}")
    changelog.add_argument("--build-name-parameter", required=True,
                           help="Jenkins parameter holding the Ontrack build name")
    changelog.add_argument("--distinct-builds", action="store_true",
                           help="One change log per intermediate Ontrack build")
    changelog.add_argument("--collect-files", action="store_true", help="Include the changed files")
    changelog.set_defaults(func=run_changelog)

    return parser


def main(argv: Optional[List[str]] = None):
    """Entry point for the Ontrack steps"""
    args = build_parser().parse_args(argv)
    try:
        build = JenkinsBuild.current()
        exit_code = args.func(args, build)
    except Exception as e:
        print(f"❌ Ontrack step failed: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
