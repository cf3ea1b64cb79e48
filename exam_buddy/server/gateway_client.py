# server/gateway_client.py
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from .config import Settings
from .errors import (
    ConfigurationError,
    QuotaExhausted,
    RateLimited,
    TransportFailure,
    UpstreamFailure,
)

logger = logging.getLogger(__name__)


class GatewayClient:
    """
    Thin client for an OpenAI-style /chat/completions endpoint.

    One call to `complete` is one POST (plus optional retries on transport
    failures when `settings.transport_retries` > 0). Status 429 and 402 are
    surfaced immediately and never retried.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.settings = settings
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.settings.base_url.rstrip('/')}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        if not self.settings.api_key:
            raise ConfigurationError(
                "Server configuration error. Please try again later.",
                detail="LLM_GATEWAY_API_KEY (or LOVABLE_API_KEY) is not configured",
            )
        return {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
        }

    def _post(self, payload: Dict[str, Any], headers: Dict[str, str]) -> httpx.Response:
        retries = self.settings.transport_retries
        attempt = 0
        while True:
            try:
                with httpx.Client(
                    timeout=self.settings.timeout_seconds,
                    transport=self._transport,
                ) as client:
                    return client.post(self.url, json=payload, headers=headers)
            except httpx.TransportError as exc:
                if attempt >= retries:
                    logger.error("Gateway transport error: %r", exc)
                    raise TransportFailure(
                        "AI gateway is unreachable",
                        detail=f"{type(exc).__name__}: {exc}",
                    ) from exc
                delay = self.settings.retry_backoff_seconds * (2 ** attempt)
                attempt += 1
                logger.warning(
                    "Gateway transport error (%s), retrying in %.2fs (%d/%d)",
                    type(exc).__name__,
                    delay,
                    attempt,
                    retries,
                )
                time.sleep(delay)

    def complete(self, model: str, system_prompt: str, user_prompt: str) -> Optional[str]:
        """
        Send one chat-completion request and return the assistant's text.

        Returns None when the gateway answered 2xx but carried no content;
        the normalizer decides what to do with that.
        """
        headers = self._headers()
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        payload = {
            "model": model,
            "messages": messages,
            "temperature": self.settings.temperature,
        }

        logger.info("Calling gateway model=%s key=%s", model, self.settings.key_prefix)
        resp = self._post(payload, headers)

        if resp.status_code == 429:
            raise RateLimited("Rate limit exceeded. Please try again later.")
        if resp.status_code == 402:
            raise QuotaExhausted("Service credits exhausted. Please try again later.")
        if not resp.is_success:
            logger.error("AI gateway error: status=%s body=%s", resp.status_code, resp.text)
            raise UpstreamFailure(
                "AI gateway request failed",
                status=resp.status_code,
                detail=resp.text,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            logger.error("AI gateway returned non-JSON body: %s", resp.text)
            raise UpstreamFailure(
                "AI gateway returned an invalid body",
                status=resp.status_code,
                detail=resp.text,
            ) from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None

        if content is not None and not isinstance(content, str):
            content = str(content)
        logger.debug("Gateway content (first 200 chars): %s", (content or "")[:200])
        return content
