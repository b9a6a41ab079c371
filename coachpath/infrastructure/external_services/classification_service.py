"""
Rule-guided trajectory classification over an LLM gateway

Sends the recent message window and the provider's enumerated trajectory
rules to an OpenAI-compatible chat-completions endpoint and turns the JSON
answer into a ClassificationOutcome.

Failure handling is fail-open:
- transport errors, timeouts, non-2xx, empty content → ServiceUnavailable
- unparseable JSON, "steady", unknown indicator types → NoMatch
Neither is raised to the caller.
"""

import json
import re
from typing import Any, Dict, List, Optional, Sequence

import httpx
import structlog

from ...application.interfaces import IClassificationService
from ...domain.entities import Message
from ...domain.exceptions import ClassificationServiceError
from ...domain.value_objects import (
    ClassificationOutcome,
    IndexedRule,
    IndicatorType,
    Matched,
    NoMatch,
    ServiceUnavailable,
    resolve_rule_index,
    rules_for_prompt,
)
from .trajectory_prompts import build_classification_messages

logger = structlog.get_logger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\n?")

SERVICE_NAME = "llm_gateway"


class GatewayClassificationService(IClassificationService):
    """
    Trajectory classifier backed by a hosted LLM gateway

    A single request per call, no retries. The caller decides whether to
    invoke the service at all (credential configured, rules present).
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        model: str,
        temperature: float = 0.3,
        timeout: float = 8.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Args:
            api_key: Gateway API key; without it the service is unavailable
            base_url: OpenAI-compatible API root, e.g. https://host/v1
            model: Model identifier understood by the gateway
            temperature: Sampling temperature
            timeout: Request timeout in seconds
            client: Preconfigured HTTP client (tests)
        """
        self.api_key = api_key
        self.model = model
        self.temperature = temperature

        self.client = client
        if self.client is None and api_key:
            self.client = httpx.AsyncClient(
                base_url=base_url,
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json"
                },
                timeout=timeout
            )

    @property
    def is_available(self) -> bool:
        return bool(self.api_key) and self.client is not None

    async def classify(
        self,
        messages: Sequence[Message],
        rules: Sequence[IndexedRule]
    ) -> ClassificationOutcome:
        """
        Classify the seeker's recent direction against the rules

        Args:
            messages: Full recent window, oldest first
            rules: Rule snapshots; model-reported indices resolve into these

        Returns:
            Matched, NoMatch or ServiceUnavailable
        """
        if not self.is_available:
            return ServiceUnavailable(reason="classification service not configured")

        try:
            content = await self._request_completion(messages, rules)
        except ClassificationServiceError as e:
            logger.warning("classification_service_unavailable", error=e.message)
            return ServiceUnavailable(reason=e.message)

        return self.parse_response(content, rules)

    async def _request_completion(
        self,
        messages: Sequence[Message],
        rules: Sequence[IndexedRule]
    ) -> str:
        """Call the chat-completions endpoint and return the raw content."""
        request_data = {
            "model": self.model,
            "messages": build_classification_messages(
                [message.to_prompt_dict() for message in messages],
                rules_for_prompt(rules)
            ),
            "temperature": self.temperature
        }

        try:
            response = await self.client.post("/chat/completions", json=request_data)
        except httpx.TimeoutException as e:
            raise ClassificationServiceError(SERVICE_NAME, "request timed out") from e
        except httpx.HTTPError as e:
            raise ClassificationServiceError(SERVICE_NAME, f"transport error: {e}") from e

        if not 200 <= response.status_code < 300:
            raise ClassificationServiceError(SERVICE_NAME, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except (ValueError, RecursionError) as e:
            raise ClassificationServiceError(SERVICE_NAME, "response body is not JSON") from e

        content = _extract_content(data)
        if not content:
            raise ClassificationServiceError(SERVICE_NAME, "empty completion")

        return content

    def parse_response(self, content: str, rules: Sequence[IndexedRule]) -> ClassificationOutcome:
        """Parse model output into an outcome."""
        cleaned = _CODE_FENCE.sub("", content).strip()

        try:
            result = json.loads(cleaned)
        except (json.JSONDecodeError, RecursionError) as e:
            # Deeply nested output exhausts the decoder stack
            logger.warning("classification_response_unparseable", error=str(e))
            return NoMatch(reason="unparseable classification response")

        if not isinstance(result, dict):
            logger.warning("classification_response_not_object", kind=type(result).__name__)
            return NoMatch(reason="unparseable classification response")

        reason = str(result.get("reason") or "")
        indicator_type = IndicatorType.parse(result.get("indicator_type"))

        if indicator_type is None:
            if result.get("indicator_type"):
                logger.warning(
                    "classification_unknown_indicator_type",
                    indicator_type=result.get("indicator_type")
                )
            return NoMatch(reason=reason or "no indicator type reported")

        if not indicator_type.is_positive:
            return NoMatch(reason=reason or "no rule matched")

        return Matched(
            indicator_type=indicator_type,
            rule=resolve_rule_index(rules, result.get("matched_rule_index")),
            reason=reason
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self.client is not None:
            await self.client.aclose()


def _extract_content(data: Any) -> Optional[str]:
    """Pull choices[0].message.content out of a completion body."""
    if not isinstance(data, dict):
        return None

    choices: List[Dict[str, Any]] = data.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return None

    message = choices[0].get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None

    return content if isinstance(content, str) else None
