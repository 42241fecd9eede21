"""
System Constants and Enumerations

This module defines the constants shared across the Gemini proxy: wire
format markers for the SSE stream, client-facing error messages, upstream
request defaults and HTTP header names.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for magic strings
- Error messages are part of the public contract and must not drift
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Request processing stages used as the ``stage`` field in log entries.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}
    """

    REQUEST_VALIDATION = "1.0_REQUEST_VALIDATION"
    UPSTREAM_REQUEST = "2.0_UPSTREAM_REQUEST"
    STREAM_RELAY = "3.0_STREAM_RELAY"
    HEARTBEAT = "3.H_HEARTBEAT"
    CLEANUP = "4.0_CLEANUP"


class CancelReason(str, Enum):
    """Why an in-flight upstream call was abandoned."""

    TIMEOUT = "timeout"
    CLIENT_DISCONNECTED = "client_disconnected"


# ============================================================================
# Upstream Defaults
# ============================================================================

DEFAULT_GEMINI_MODEL = "gemini-1.5-pro"
DEFAULT_GEMINI_BASE_URL = "https://generative.googleapis.com/v1beta2"
DEFAULT_MAX_OUTPUT_TOKENS = 512

# Milliseconds, matching the REQUEST_TIMEOUT environment variable
DEFAULT_REQUEST_TIMEOUT_MS = 30000

DEFAULT_PORT = 3000
DEFAULT_MAX_REQUEST_BODY_BYTES = 256 * 1024

# ============================================================================
# HTTP Headers
# ============================================================================

HEADER_THREAD_ID = "X-Thread-ID"

# ============================================================================
# SSE Wire Format
# ============================================================================

SSE_MEDIA_TYPE = "text/event-stream"
SSE_DONE_PAYLOAD = "[DONE]"
SSE_HEARTBEAT_COMMENT = "heartbeat"

# Heartbeat interval (seconds)
SSE_HEARTBEAT_INTERVAL = 15.0

SSE_RESPONSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

# ============================================================================
# Client-Facing Error Messages
# ============================================================================

ERROR_MESSAGE_REQUIRED = "message required"
ERROR_MESSAGE_NOT_TEXT = "message must be a string"
ERROR_API_KEY_MISSING = "GEMINI_API_KEY not configured in server"

# In-band stream errors
ERROR_UPSTREAM = "Upstream error"
ERROR_NO_STREAM = "No stream from upstream"
ERROR_TIMED_OUT = "AI request timed out"
ERROR_INTERNAL = "Internal server error"

# Non-streaming JSON errors
ERROR_UPSTREAM_API = "Upstream AI API error"
ERROR_PAYLOAD_TOO_LARGE = "request entity too large"
