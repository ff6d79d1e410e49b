import contextlib
import logging
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from domain.exceptions.currency import ProviderError
from domain.models.currency import (
    Currency,
    ExchangeRate,
    ProviderDescriptor,
    QuoteType,
    RateFrequency,
    RateSource,
)
from utils.time import iter_month_chunks

logger = logging.getLogger(__name__)


class ExchangeRateProvider(ABC):
    """
    Base class for rate providers, handling common HTTP logic.

    ``fetch_rates`` splits the requested range at calendar month boundaries and
    issues one remote call per month, so a single fetch covers every date-level
    lookup within that month.
    """

    currency: Currency
    quote_type: QuoteType
    source: RateSource
    default_frequency: RateFrequency = RateFrequency.DAILY
    supported_frequencies: frozenset[RateFrequency] = frozenset({RateFrequency.DAILY})

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: int = 10,
        retry_attempts: int = 3,
        retry_wait: float = 1,
    ):
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._retrying = AsyncRetrying(
            stop=stop_after_attempt(retry_attempts),
            wait=wait_exponential(multiplier=retry_wait, max=10),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )

    @property
    def name(self) -> str:
        return self.source.value.lower()

    @property
    def descriptor(self) -> ProviderDescriptor:
        return ProviderDescriptor(
            currency=self.currency,
            quote_type=self.quote_type,
            source=self.source,
            default_frequency=self.default_frequency,
            supported_frequencies=self.supported_frequencies,
        )

    async def fetch_rates(
        self, start_date: date, end_date: date, frequency: RateFrequency
    ) -> list[ExchangeRate]:
        if end_date < start_date:
            raise ValueError("end_date must be later than or equal to start_date")
        if frequency not in self.supported_frequencies:
            raise ProviderError(f"{self.name} does not provide {frequency.value} rates")

        results: list[ExchangeRate] = []
        for chunk_start, chunk_end in iter_month_chunks(start_date, end_date):
            results.extend(await self._fetch_period(chunk_start, chunk_end, frequency))

        logger.debug(
            f"{self.name} returned {len(results)} {frequency.value} rates "
            f"for {start_date} - {end_date}"
        )
        return results

    @abstractmethod
    async def _fetch_period(
        self, start_date: date, end_date: date, frequency: RateFrequency
    ) -> list[ExchangeRate]:
        """Fetches rates for a range lying within a single calendar month."""

    async def _get(
        self, url: str, params: dict | None = None, empty_on_404: bool = False
    ) -> httpx.Response | None:
        """GET with retries on transport errors; HTTP and network failures become ProviderError."""
        try:
            async for attempt in self._retrying.copy():
                with attempt:
                    response = await self._client.get(url, params=params)
            if empty_on_404 and response.status_code == 404:
                return None
            response.raise_for_status()
            return response

        except httpx.HTTPStatusError as e:
            msg = None
            with contextlib.suppress(Exception):
                msg = e.response.json().get("message")
            raise ProviderError(
                f"{self.name} HTTP error {e.response.status_code}: {msg or e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise ProviderError(f"{self.name} request failed: {e.__class__.__name__}") from e

    def _make_rate(
        self, code: str, day: date, value, frequency: RateFrequency
    ) -> ExchangeRate | None:
        """Builds a rate for a known, non-base currency; returns None for anything else."""
        try:
            currency = Currency(code.upper())
        except ValueError:
            return None
        if currency == self.currency:
            return None

        return ExchangeRate(
            source=self.source,
            frequency=frequency,
            currency=currency,
            date=day,
            rate=Decimal(str(value)),
        )

    async def close(self) -> None:
        """Cleanly close the HTTP client."""
        await self._client.aclose()
