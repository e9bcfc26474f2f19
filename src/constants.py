#!/usr/bin/env python3
"""
Constants for the Ontrack Jenkins steps
"""

# Prefix of every explanatory line when no change log is published
NO_CHANGE_LOG_PREFIX = "No change log can be computed."

# Fixed names bound into the DSL script scope
ONTRACK_BINDING = "ontrack"
JENKINS_BINDING = "jenkins"

# Name a DSL script can assign when its last statement is not an expression
DSL_RESULT_NAME = "result"

# Build filter used by Ontrack to list the builds between two build names
BUILD_INTERVAL_FILTER = "net.nemerosa.ontrack.service.BuildIntervalFilterProvider"

# Change log side panel
CHANGE_LOG_DISPLAY_NAME = "Ontrack change log"
CHANGE_LOG_URL_NAME = "ontrack-changelog"
