"""
Configuration Module

Type-safe configuration for the Gemini proxy.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Wire-format markers, error messages, defaults and enums

Usage:
------
```python
from gemini_proxy.core.config import get_settings
from gemini_proxy.core.config.constants import ERROR_UPSTREAM

settings = get_settings()
settings.upstream_url        # https://.../models/gemini-1.5-pro:generateText
settings.REQUEST_TIMEOUT     # 30000 (ms)
```

Environment Variables:
---------------------
```bash
GEMINI_API_KEY=...
GEMINI_MODEL=gemini-1.5-pro
REQUEST_TIMEOUT=30000
PORT=3000
LOG_LEVEL=INFO
LOG_FORMAT=json
```
"""

from gemini_proxy.core.config.constants import (
    HEADER_THREAD_ID,
    SSE_HEARTBEAT_INTERVAL,
    CancelReason,
    Stage,
)
from gemini_proxy.core.config.settings import Settings, get_settings, reload_settings

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
    "Stage",
    "CancelReason",
    "HEADER_THREAD_ID",
    "SSE_HEARTBEAT_INTERVAL",
]
