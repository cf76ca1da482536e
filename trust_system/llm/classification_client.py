"""HTTP client for the external classification/moderation service.

The service is an opaque JSON request/response endpoint. Three instances are
used: claim extraction, moderation and fact-checking of published events.
Each is "configured" only when both its endpoint and its API key are set.
"""

from typing import Any, Dict, Optional

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from trust_system.config.settings import settings
from trust_system.data_management.schemas import (
    Event,
    FactCheckVerdict,
    ModerationDecision,
    PendingRecord,
)


class ServiceNotConfiguredError(RuntimeError):
    """Raised when the client is used without an endpoint or API key."""


def _is_transient(exc: BaseException) -> bool:
    """Network errors and 5xx responses are worth retrying; 4xx are not."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False


class ClassificationServiceClient:
    """
    Bearer-authenticated JSON POST client with retry.

    Usage:
        client = ClassificationServiceClient.for_moderation()
        if client.configured:
            decision = await client.moderate(record)

    Attributes:
        endpoint: Service URL
        timeout: Per-request timeout in seconds
        max_retries: Total attempts for transient failures
    """

    def __init__(
        self,
        endpoint: Optional[str],
        api_key: Optional[str],
        timeout: float = 30.0,
        max_retries: int = 3,
        http_client: Optional[httpx.AsyncClient] = None,
        name: str = "classification",
    ):
        self.endpoint = endpoint
        self._api_key = api_key
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.name = name
        self._http_client = http_client
        self._owns_client = http_client is None
        self.logger = logger.bind(component="ClassificationServiceClient", service=name)

    @classmethod
    def for_extraction(cls, **kwargs: Any) -> "ClassificationServiceClient":
        """Client for the extraction endpoint from settings."""
        kwargs.setdefault("timeout", settings.service_timeout)
        return cls(
            settings.extraction_endpoint,
            settings.extraction_api_key,
            name="extraction",
            **kwargs,
        )

    @classmethod
    def for_moderation(cls, **kwargs: Any) -> "ClassificationServiceClient":
        """Client for the moderation endpoint from settings."""
        kwargs.setdefault("timeout", settings.service_timeout)
        return cls(
            settings.moderation_endpoint,
            settings.moderation_api_key,
            name="moderation",
            **kwargs,
        )

    @classmethod
    def for_fact_check(cls, **kwargs: Any) -> "ClassificationServiceClient":
        """Client for the fact-check endpoint from settings."""
        kwargs.setdefault("timeout", settings.service_timeout)
        return cls(
            settings.fact_check_endpoint,
            settings.fact_check_api_key,
            name="fact_check",
            **kwargs,
        )

    @property
    def configured(self) -> bool:
        return bool(self.endpoint and self._api_key)

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "ClassificationServiceClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def post_json(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a JSON payload and return the decoded JSON object.

        Raises:
            ServiceNotConfiguredError: endpoint or API key missing
            httpx.HTTPError: request failed after all attempts
            ValueError: response body is not a JSON object
        """
        if not self.configured:
            raise ServiceNotConfiguredError(f"{self.name} service not configured")

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=8),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        ):
            with attempt:
                response = await self._client().post(
                    self.endpoint, json=payload, headers=headers, timeout=self.timeout
                )
                response.raise_for_status()

        body = response.json()
        if not isinstance(body, dict):
            raise ValueError(f"{self.name} service returned {type(body).__name__}, expected object")
        return body

    async def extract(
        self, instruction: str, title: str, url: str, text: str
    ) -> Dict[str, Any]:
        """Ask the service to turn one article into a claim object."""
        return await self.post_json(
            {
                "instruction": instruction,
                "article": {"title": title, "url": url, "text": text},
            }
        )

    async def moderate(self, record: PendingRecord) -> ModerationDecision:
        """Ask the service to approve or reject a pending record."""
        body = await self.post_json(
            {
                "date": record.date,
                "title": record.title,
                "description": record.description,
                "sources": record.sources,
                "author": record.author,
            }
        )
        decision = ModerationDecision.model_validate(body)
        self.logger.debug(
            "Moderation decision received",
            pending_id=record.id,
            approved=decision.approved,
            status=decision.status.value if decision.status else None,
        )
        return decision

    async def fact_check(self, event: Event) -> FactCheckVerdict:
        """Ask the service whether a published event holds up."""
        body = await self.post_json(
            {
                "eventId": event.id,
                "date": event.date,
                "title": event.title,
                "description": event.description,
                "sources": event.sources,
            }
        )
        verdict = FactCheckVerdict.model_validate(body)
        self.logger.debug("Fact-check verdict received", event_id=event.id, verified=verdict.verified)
        return verdict
