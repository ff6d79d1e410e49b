import logging
import threading
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from domain.models.currency import (
    RATE_PRECISION,
    Currency,
    ExchangeRate,
    RateFrequency,
    RateSource,
)

logger = logging.getLogger(__name__)


class RateCache:
    """
    In-memory rates keyed by (source, frequency, currency, date).

    Buckets are created under a lock; writes into an existing bucket are
    last-writer-wins. Fetches are monthly, so a bucket holds roughly the dates
    of the months requested so far and a linear scan stays cheap.
    """

    def __init__(self, precision: int = RATE_PRECISION):
        self.precision = precision
        self._rates: dict[
            tuple[RateSource, RateFrequency], dict[Currency, dict[date, Decimal]]
        ] = {}
        self._lock = threading.Lock()

    def _bucket(
        self, source: RateSource, frequency: RateFrequency, currency: Currency
    ) -> dict[date, Decimal]:
        with self._lock:
            currencies = self._rates.setdefault((source, frequency), {})
            return currencies.setdefault(currency, {})

    def _round(self, value: Decimal) -> Decimal:
        return round(value, self.precision)

    def upsert(self, rate: ExchangeRate) -> bool:
        """Stores the rate and returns True when the cached value changed."""
        dates = self._bucket(rate.source, rate.frequency, rate.currency)
        saved_rate = dates.get(rate.date)

        if saved_rate is not None:
            if self._round(saved_rate) == self._round(rate.rate):
                return False
            logger.warning(
                f"Overwriting exchange rate. Currency: {rate.currency.value}. "
                f"Saved rate: {saved_rate}. New rate: {rate.rate}. "
                f"Source: {rate.source.value}. Frequency: {rate.frequency.value}"
            )

        dates[rate.date] = rate.rate
        return True

    def load(self, rates: Iterable[ExchangeRate]) -> list[ExchangeRate]:
        """Upserts every rate and returns the ones that need persisting."""
        return [rate for rate in rates if self.upsert(rate)]

    def lookup(
        self, source: RateSource, frequency: RateFrequency, currency: Currency, day: date
    ) -> Decimal | None:
        currencies = self._rates.get((source, frequency))
        if currencies is None:
            return None
        return currencies.get(currency, {}).get(day)

    def find_latest_on_or_before(
        self, source: RateSource, frequency: RateFrequency, currency: Currency, day: date
    ) -> tuple[date, Decimal] | None:
        currencies = self._rates.get((source, frequency))
        if currencies is None or currency not in currencies:
            return None

        dates = currencies[currency]
        best_date = max((d for d in list(dates) if d <= day), default=None)
        if best_date is None:
            return None
        return best_date, dates[best_date]

    def has_source(self, source: RateSource, frequency: RateFrequency) -> bool:
        return (source, frequency) in self._rates

    def has_currency(
        self, source: RateSource, frequency: RateFrequency, currency: Currency
    ) -> bool:
        return bool(self._rates.get((source, frequency), {}).get(currency))
