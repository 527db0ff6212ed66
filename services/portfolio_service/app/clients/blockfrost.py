"""Blockfrost account lookups.

``GET {base_url}/accounts/{stake_key}`` authenticated with the ``project_id``
header. One attempt per call: no retry, no caching. Lovelace amounts stay
decimal strings end to end so values beyond 2**53 survive untouched.
"""

from __future__ import annotations

import time
from typing import Annotated
from urllib.parse import quote

import httpx
from loguru import logger
from opentelemetry import trace
from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic import ValidationError as PydanticValidationError

from ..errors import AccountLookupError, ParseError, UpstreamError
from ..metrics import account_lookup_latency_seconds, account_lookup_total
from ..settings import PortfolioSettings

PROJECT_ID_HEADER = "project_id"
_BODY_LOG_LIMIT = 512

DecimalString = Annotated[str, StringConstraints(pattern=r"^-?[0-9]+(\.[0-9]+)?$")]


class AccountSnapshot(BaseModel):
    """Point-in-time staking view of a stake address."""

    # strict: no int->str or "true"->bool coercion, amounts must arrive as JSON strings
    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    stake_address: str | None = None
    active: bool
    controlled_amount: DecimalString
    rewards_sum: DecimalString


class AccountInfoClient:
    """Async client for the Blockfrost ``/accounts`` endpoint.

    The underlying ``httpx.AsyncClient`` is meant to live for the whole process
    so its connection pool is reused across requests. Pass ``http_client`` to
    supply a preconfigured one (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 5.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @classmethod
    def from_settings(cls, settings: PortfolioSettings) -> AccountInfoClient:
        return cls(
            settings.blockfrost_base_url,
            settings.blockfrost_api_key.get_secret_value(),
            timeout=settings.blockfrost_timeout_seconds,
        )

    def account_url(self, stake_key: str) -> str:
        return f"{self.base_url}/accounts/{quote(stake_key, safe='')}"

    async def fetch(self, stake_key: str) -> AccountSnapshot:
        """Return the account snapshot for ``stake_key``.

        Raises ``UpstreamError`` for transport failures and non-2xx statuses,
        ``ParseError`` when a 2xx body does not decode into a snapshot.
        """
        tracer = trace.get_tracer(__name__)
        log = logger.bind(stake_key=stake_key)
        start = time.perf_counter()
        with tracer.start_as_current_span("blockfrost.accounts.get") as span:
            try:
                snapshot = await self._fetch(stake_key, log)
            except AccountLookupError as exc:
                account_lookup_total.labels(outcome=exc.kind).inc()
                span.set_attribute("blockfrost.outcome", exc.kind)
                raise
            finally:
                account_lookup_latency_seconds.observe(time.perf_counter() - start)
            account_lookup_total.labels(outcome="success").inc()
            span.set_attribute("blockfrost.outcome", "success")
        return snapshot

    async def _fetch(self, stake_key: str, log) -> AccountSnapshot:
        url = self.account_url(stake_key)
        try:
            response = await self._client.get(url, headers={PROJECT_ID_HEADER: self._api_key})
        except httpx.HTTPError as exc:
            log.warning("blockfrost.transport_error: {}", exc.__class__.__name__)
            raise UpstreamError(stake_key, reason=f"{exc.__class__.__name__}: {exc}") from exc

        if not response.is_success:
            log.warning(
                "blockfrost.status_error status={} body={}",
                response.status_code,
                response.text[:_BODY_LOG_LIMIT],
            )
            raise UpstreamError(stake_key, status_code=response.status_code)

        try:
            return AccountSnapshot.model_validate_json(response.content)
        except PydanticValidationError as exc:
            log.warning(
                "blockfrost.parse_error errors={} body={}",
                exc.error_count(),
                response.text[:_BODY_LOG_LIMIT],
            )
            raise ParseError(stake_key, reason=_summarize(exc)) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _summarize(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "<body>"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)
