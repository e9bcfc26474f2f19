#!/usr/bin/env python3
"""
Creation of the Ontrack handle from the global configuration
"""

from typing import Optional

from config import OntrackConfiguration
from ontrack_client import Ontrack, OntrackConnection, TraceLogger


def create_ontrack_connector(logger: Optional[TraceLogger] = None) -> Ontrack:
    """Builds a new Ontrack handle, tracing requests to `logger` when given"""
    config = OntrackConfiguration.from_env()
    connection = OntrackConnection.create(config.ontrack_url)
    if logger is not None:
        connection = connection.logger(logger)
    user = config.ontrack_user
    if user and user.strip():
        connection = connection.authenticate(user, config.ontrack_password)
    return connection.build()
