"""
Chat Service

Non-streaming proxy: forward one prompt, wait for the whole upstream reply,
pull the generated text out of it.

The upstream call goes through the same ``GeminiClient.open()`` helper as the
streaming relay. There is no client-disconnect trigger here, so the request
token is only ever fired by the timeout.
"""

from typing import Any

import httpx
import orjson

from gemini_proxy.core.config.constants import (
    ERROR_INTERNAL,
    ERROR_TIMED_OUT,
    ERROR_UPSTREAM_API,
)
from gemini_proxy.core.exceptions import (
    ProviderAPIError,
    ProviderTimeoutError,
    ProxyBaseError,
    RequestCancelledError,
)
from gemini_proxy.core.logging import get_logger
from gemini_proxy.core.resilience import CancellationToken
from gemini_proxy.llm_stream.providers import GeminiClient

logger = get_logger(__name__)


def _first(items: Any) -> dict | None:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else orjson.dumps(value).decode()


def extract_reply(data: Any) -> str:
    """
    Pull the reply text out of an upstream payload.

    Fallback chain:
        1. ``candidates[0].output`` if present and non-empty
        2. ``output[0].content`` if present and non-empty
        3. compact JSON of the whole payload (``"null"`` for a non-JSON body)
    """
    if isinstance(data, dict):
        candidate = _first(data.get("candidates"))
        if candidate is not None and candidate.get("output"):
            return _as_text(candidate["output"])

        output = _first(data.get("output"))
        if output is not None and output.get("content"):
            return _as_text(output["content"])

    return orjson.dumps(data).decode()


class ChatService:
    """
    Service for the ``/api/gemini_chat`` endpoint.

    Errors are raised as ProxyBaseError subclasses carrying their HTTP status:
    - ProviderAPIError (502): upstream answered non-2xx
    - ProviderTimeoutError (504): no response headers within REQUEST_TIMEOUT
    - ProxyBaseError (500): anything unexpected
    """

    def __init__(self, client: GeminiClient):
        self._client = client

    async def chat(self, message: str, thread_id: str | None = None) -> str:
        token = CancellationToken(thread_id=thread_id)

        try:
            async with self._client.open(message, token) as upstream:
                if not upstream.is_success:
                    body = await self._client.read_error_body(upstream, token)
                    logger.error(
                        "Upstream API error",
                        status_code=upstream.status_code,
                        body=body,
                        thread_id=thread_id,
                    )
                    raise ProviderAPIError(
                        ERROR_UPSTREAM_API,
                        thread_id=thread_id,
                        details={"status_code": upstream.status_code},
                    )

                data = await self._read_json(upstream, token)

        except (RequestCancelledError, httpx.TimeoutException) as e:
            logger.warning("AI request timed out", error_type=type(e).__name__, thread_id=thread_id)
            raise ProviderTimeoutError(ERROR_TIMED_OUT, thread_id=thread_id) from e

        except ProxyBaseError:
            raise

        except Exception as e:
            logger.exception("Chat request failed", error_type=type(e).__name__, thread_id=thread_id)
            raise ProxyBaseError(ERROR_INTERNAL, thread_id=thread_id) from e

        reply = extract_reply(data)
        logger.info("chat_completed", reply_length=len(reply), thread_id=thread_id)
        return reply

    async def _read_json(self, upstream: httpx.Response, token: CancellationToken) -> Any:
        """Read the full body; a body that is not JSON yields None."""
        await token.guard(upstream.aread())
        try:
            return orjson.loads(upstream.content)
        except orjson.JSONDecodeError:
            logger.warning("upstream_body_not_json", body_length=len(upstream.content), thread_id=token.thread_id)
            return None
