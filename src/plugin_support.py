#!/usr/bin/env python3
"""
Helpers shared by the Ontrack steps
"""

from string import Template
from typing import Dict, Mapping, Optional


def expand(template: Optional[str], environment: Mapping[str, str]) -> str:
    """Replaces ${NAME} and $NAME placeholders with build environment values"""
    if not template or not template.strip():
        return ""
    return Template(template).safe_substitute(environment)


def parse_properties(text: Optional[str], environment: Mapping[str, str]) -> Dict[str, str]:
    """Parses `name=value` lines, expanding the values against the environment"""
    properties = {}
    if not text:
        return properties
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        name, sep, value = line.partition("=")
        if not sep:
            continue
        name = name.strip()
        if name:
            properties[name] = expand(value.strip(), environment)
    return properties
