# Copyright (c) Microsoft. All rights reserved.

import logging
import warnings

"""
Logging and tracing setup shared by the labs.
"""

# Libraries that are noisy at INFO during MCP sessions.
_QUIET_LOGGERS = {
    "asyncio": logging.WARNING,
    "azure.core.pipeline.policies.http_logging_policy": logging.WARNING,
    "azure.identity": logging.WARNING,
    "httpx": logging.WARNING,
    "mcp": logging.INFO,
    "agent_framework": logging.INFO,
}


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")
    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, quiet_level))

    # Known MCP client issue during shutdown
    warnings.filterwarnings("ignore", message=".*cancel scope.*")


def configure_tracing(enabled: bool, enable_sensitive_data: bool = False) -> bool:
    """Send agent_framework traces to the configured OpenTelemetry exporters.

    Returns whether tracing was switched on.
    """
    if not enabled:
        return False

    from agent_framework.observability import configure_otel_providers

    configure_otel_providers(enable_sensitive_data=enable_sensitive_data)
    logging.getLogger(__name__).info("OpenTelemetry tracing enabled")
    return True
