"""Current-price provider backed by the Yahoo Finance chart endpoint."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Protocol

import httpx
from tenacity import AsyncRetrying, RetryError, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.core.config import Settings, get_settings
from app.core.errors import MarketDataError
from app.core.logging import get_logger
from schemas.market_quote import PriceQuote

LOG = get_logger(__name__)

_TRANSIENT_STATUSES = (429, 500, 502, 503, 504)


class MarketDataProvider(Protocol):
    async def fetch_price(self, symbol: str) -> Optional[PriceQuote]:
        """Return the current price for ``symbol`` or ``None``; never raises."""


class TemporaryMarketDataError(MarketDataError):
    """Retryable upstream failure (throttling, 5xx, transport error)."""


class YahooChartClient:
    """Async quote client with bounded timeouts and retry/backoff.

    Every failure mode is logged and surfaces as ``None`` so a missing quote
    only leaves the pick unverified until the next run.
    """

    def __init__(self, settings: Optional[Settings] = None, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._settings = settings or get_settings()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "YahooChartClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()

    async def start(self) -> None:
        """Initialise the underlying httpx client."""

        if self._client is None:
            timeout = httpx.Timeout(self._settings.http_timeout_seconds)
            self._client = httpx.AsyncClient(
                base_url=str(self._settings.market_data_base_url),
                timeout=timeout,
                transport=self._transport,
                headers={"User-Agent": "Mozilla/5.0 (compatible; pick-truth-engine)"},
            )

    async def close(self) -> None:
        """Dispose of the HTTP client."""

        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_price(self, symbol: str) -> Optional[PriceQuote]:
        if self._client is None:
            raise RuntimeError("Client not started")
        try:
            payload = await self._get_chart(symbol)
        except MarketDataError as exc:
            LOG.warning("Price fetch failed", symbol=symbol, status=exc.status_code, error=str(exc))
            return None

        price = self._extract_price(payload)
        if price is None:
            LOG.warning("No usable price in chart response", symbol=symbol)
            return None
        return PriceQuote(symbol=symbol.upper(), price=price)

    async def _get_chart(self, symbol: str) -> Any:
        async def do_request() -> Any:
            try:
                response = await self._client.get(
                    f"/v8/finance/chart/{symbol}",
                    params={"interval": "1d", "range": "1d"},
                )
            except httpx.HTTPError as exc:
                raise TemporaryMarketDataError(f"Transport error: {exc.__class__.__name__}") from exc
            if response.status_code in _TRANSIENT_STATUSES:
                raise TemporaryMarketDataError(
                    f"Chart request throttled or unavailable ({response.status_code})",
                    response.status_code,
                )
            if response.status_code >= 400:
                raise MarketDataError(f"Chart request rejected ({response.status_code})", response.status_code)
            try:
                return response.json()
            except ValueError as exc:
                raise MarketDataError("Chart response is not JSON", response.status_code) from exc

        try:
            async for attempt in AsyncRetrying(
                reraise=True,
                stop=stop_after_attempt(self._settings.http_retry_attempts),
                wait=wait_exponential(multiplier=self._settings.http_retry_backoff_seconds, max=10),
                retry=retry_if_exception_type(TemporaryMarketDataError),
            ):
                with attempt:
                    return await do_request()
        except RetryError as exc:
            err = exc.last_attempt.exception()
            raise MarketDataError(f"Chart request failed after retries: {err}") from err
        raise MarketDataError("Chart request made no attempts")

    @staticmethod
    def _extract_price(payload: Any) -> Optional[float]:
        if not isinstance(payload, dict):
            return None
        chart = payload.get("chart")
        results = chart.get("result") if isinstance(chart, dict) else None
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            return None
        meta = results[0].get("meta")
        if not isinstance(meta, dict):
            return None
        price = meta.get("regularMarketPrice") or meta.get("previousClose")
        if not isinstance(price, (int, float)) or price <= 0:
            return None
        return float(price)


class PriceBook:
    """Run-scoped price cache; each distinct symbol is fetched at most once.

    Symbols are fetched concurrently in batches of ``batch_size`` with
    ``batch_delay`` seconds between batches to respect provider quotas.
    """

    def __init__(self, provider: MarketDataProvider, *, batch_size: int = 5, batch_delay: float = 0.5) -> None:
        self._provider = provider
        self._batch_size = max(1, batch_size)
        self._batch_delay = batch_delay
        self._quotes: Dict[str, Optional[PriceQuote]] = {}

    async def prefetch(self, symbols: Iterable[str]) -> None:
        pending: List[str] = []
        for symbol in symbols:
            if symbol not in self._quotes and symbol not in pending:
                pending.append(symbol)

        for start in range(0, len(pending), self._batch_size):
            if start:
                await asyncio.sleep(self._batch_delay)
            batch = pending[start : start + self._batch_size]
            quotes = await asyncio.gather(*(self._safe_fetch(symbol) for symbol in batch))
            self._quotes.update(zip(batch, quotes))

    async def get(self, symbol: str) -> Optional[PriceQuote]:
        if symbol not in self._quotes:
            await self.prefetch([symbol])
        return self._quotes[symbol]

    async def _safe_fetch(self, symbol: str) -> Optional[PriceQuote]:
        try:
            return await self._provider.fetch_price(symbol)
        except Exception as exc:  # provider contract is "never raises"; keep the run alive if one does
            LOG.warning("Price provider raised", symbol=symbol, error=str(exc))
            return None


__all__ = ["MarketDataProvider", "TemporaryMarketDataError", "YahooChartClient", "PriceBook"]
