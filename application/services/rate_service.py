import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Protocol

from application.services.currency_service import PeggedCurrencyTable, parse_currency
from domain.exceptions.currency import (
    NoRateFoundError,
    RateResolutionError,
    UnsupportedCurrencyError,
    UnsupportedSourceError,
)
from domain.models.currency import (
    Currency,
    ExchangeRate,
    PeggedCurrency,
    QuoteType,
    RateFrequency,
    RateSource,
)
from infrastructure.cache.rate_cache import RateCache
from infrastructure.providers.base import ExchangeRateProvider
from infrastructure.providers.registry import ProviderRegistry
from utils.time import month_range, previous_month_range, start_of_month, utc_today

logger = logging.getLogger(__name__)


def _rate_key(rate: ExchangeRate) -> tuple:
    return rate.source, rate.frequency, rate.currency, rate.date


class RateStore(Protocol):
    async def load_rates(self, min_date: date, max_date: date) -> list[ExchangeRate]: ...

    async def save_rates(self, rates: Iterable[ExchangeRate]) -> int: ...

    async def load_pegged_currencies(self) -> list[PeggedCurrency]: ...


class RateService:
    """
    Resolves exchange rates through cache, store and provider tiers.

    ``get_rate(A, B, ...)`` returns the number of B units worth one A unit, or
    None when no rate on or before the requested date can be found. Provider and
    store failures inside a tier are logged and resolution moves on to the next
    tier; only malformed input raises.
    """

    def __init__(
        self,
        providers: ProviderRegistry,
        store: RateStore,
        cache: RateCache | None = None,
        pegged: PeggedCurrencyTable | None = None,
        today: Callable[[], date] = utc_today,
        daily_refresh_window_days: int = 4,
    ):
        self.providers = providers
        self.store = store
        self.cache = cache or RateCache()
        self._pegged = pegged
        self.today = today
        self.daily_refresh_window_days = daily_refresh_window_days
        self._unsaved: dict[tuple, ExchangeRate] = {}

    @property
    def pegged(self) -> PeggedCurrencyTable:
        return self._pegged if self._pegged is not None else PeggedCurrencyTable()

    async def start(self) -> None:
        """Loads the pegged-currency table once."""
        if self._pegged is None:
            self._pegged = PeggedCurrencyTable(await self.store.load_pegged_currencies())
            logger.info(f"Loaded {len(self._pegged)} pegged currencies")

    async def get_rate(
        self,
        from_currency: str | Currency,
        to_currency: str | Currency,
        day: date,
        source: RateSource,
        frequency: RateFrequency | None = None,
    ) -> Decimal | None:
        from_currency = parse_currency(from_currency)
        to_currency = parse_currency(to_currency)
        provider = self.providers.get(source)
        frequency = frequency or provider.default_frequency
        if frequency not in provider.supported_frequencies:
            raise UnsupportedSourceError(f"{source.value} does not provide {frequency.value} rates")
        if isinstance(day, datetime):
            day = day.date()

        return await self._resolve(from_currency, to_currency, day, provider, frequency)

    async def _resolve(
        self,
        from_currency: Currency,
        to_currency: Currency,
        day: date,
        provider: ExchangeRateProvider,
        frequency: RateFrequency,
    ) -> Decimal | None:
        if from_currency == to_currency:
            return Decimal(1)

        base = provider.currency
        if from_currency != base and to_currency != base:
            # Both legs touch the base currency, so this recursion is one hop deep.
            to_base = await self._resolve(from_currency, base, day, provider, frequency)
            if to_base is None:
                return None
            from_base = await self._resolve(base, to_currency, day, provider, frequency)
            if from_base is None:
                return None
            return to_base * from_base

        return await self._resolve_leg(from_currency, to_currency, day, provider, frequency)

    async def _resolve_leg(
        self,
        from_currency: Currency,
        to_currency: Currency,
        day: date,
        provider: ExchangeRateProvider,
        frequency: RateFrequency,
    ) -> Decimal | None:
        month_start, month_end = month_range(day)

        def find(min_date: date | None = None) -> Decimal | None:
            try:
                return self._find_rate(
                    from_currency, to_currency, day, provider, frequency, min_date=min_date
                )
            except RateResolutionError:
                return None

        # Until the month has been fetched, an older cached rate may be stale.
        try:
            return self._find_rate(
                from_currency, to_currency, day, provider, frequency, min_date=month_start
            )
        except UnsupportedCurrencyError as e:
            self._log_unresolved(e, from_currency, to_currency, day, provider, frequency)
            return None
        except NoRateFoundError:
            pass

        await self._load_from_store(month_start, month_end)
        if (rate := find(month_start)) is not None:
            return rate

        await self._fetch_and_store(provider, month_start, month_end, frequency)
        if (rate := find()) is not None:
            return rate

        if day > self.today():
            current_start, current_end = month_range(self.today())
            if current_start != month_start:
                await self._fetch_and_store(provider, current_start, current_end, frequency)
                if (rate := find()) is not None:
                    return rate

        # The previous valid rate may sit in the month before, e.g. on the 1st.
        previous_start, previous_end = previous_month_range(day)
        await self._fetch_and_store(provider, previous_start, previous_end, frequency)

        try:
            return self._find_rate(from_currency, to_currency, day, provider, frequency)
        except RateResolutionError as e:
            self._log_unresolved(e, from_currency, to_currency, day, provider, frequency)
            return None

    def _find_rate(
        self,
        from_currency: Currency,
        to_currency: Currency,
        day: date,
        provider: ExchangeRateProvider,
        frequency: RateFrequency,
        follow_pegs: bool = True,
        min_date: date | None = None,
    ) -> Decimal:
        """
        Searches the cache for the latest rate on or before ``day``.

        Rates dated before ``min_date`` are treated as missing.
        """
        # Only the peg hop gets here with equal currencies, when the peg target is the base.
        if from_currency == to_currency:
            return Decimal(1)

        source = provider.source
        base = provider.currency
        lookup_currency = from_currency if to_currency == base else to_currency

        if not self.cache.has_source(source, frequency):
            raise NoRateFoundError(lookup_currency)

        if not self.cache.has_currency(source, frequency, lookup_currency):
            pegged = self.pegged.get(lookup_currency) if follow_pegs else None
            if pegged is None:
                raise UnsupportedCurrencyError(lookup_currency)

            other_currency = to_currency if to_currency == base else from_currency
            pegged_to_rate = self._find_rate(
                other_currency, pegged.pegged_to, day, provider, frequency,
                follow_pegs=False, min_date=min_date,
            )
            if to_currency == base:
                return pegged.rate / pegged_to_rate
            return pegged_to_rate / pegged.rate

        found = self.cache.find_latest_on_or_before(source, frequency, lookup_currency, day)
        if found is None or (min_date is not None and found[0] < min_date):
            raise NoRateFoundError(lookup_currency)

        _, rate = found
        return self._apply_quote_type(provider, from_currency, to_currency, rate)

    @staticmethod
    def _apply_quote_type(
        provider: ExchangeRateProvider,
        from_currency: Currency,
        to_currency: Currency,
        rate: Decimal,
    ) -> Decimal:
        base = provider.currency
        if provider.quote_type == QuoteType.DIRECT:
            if to_currency == base:
                return rate
            if from_currency == base:
                return Decimal(1) / rate
        elif provider.quote_type == QuoteType.INDIRECT:
            if from_currency == base:
                return rate
            if to_currency == base:
                return Decimal(1) / rate
        raise ValueError(f"Unsupported quote type {provider.quote_type}")

    async def _load_from_store(self, min_date: date, max_date: date) -> None:
        try:
            rates = await self.store.load_rates(min_date, max_date)
        except Exception as e:
            logger.error(f"Failed to load rates from store for {min_date} - {max_date}: {e}")
            return
        self.cache.load(rates)

    async def _fetch_and_store(
        self,
        provider: ExchangeRateProvider,
        start_date: date,
        end_date: date,
        frequency: RateFrequency,
    ) -> int:
        """Fetches a range from the provider, caches it and persists the changed rows."""
        try:
            rates = await provider.fetch_rates(start_date, end_date, frequency)
        except Exception as e:
            logger.error(
                f"Failed to fetch rates for {provider.source.value} {frequency.value} "
                f"{start_date} - {end_date}: {e}"
            )
            return 0

        await self._save_changed(self.cache.load(rates))
        return len(rates)

    async def _save_changed(self, changed: list[ExchangeRate]) -> bool:
        """
        Persists changed rates together with any left over from a failed save.

        The cache already holds these values, so a later upsert would not report
        them as changed again; they stay queued until a save succeeds.
        """
        for rate in changed:
            self._unsaved[_rate_key(rate)] = rate
        if not self._unsaved:
            return True

        batch = list(self._unsaved.values())
        self._unsaved.clear()
        try:
            await self.store.save_rates(batch)
        except Exception as e:
            logger.error(f"Failed to save {len(batch)} rates, retrying with the next save: {e}")
            for rate in batch:
                self._unsaved.setdefault(_rate_key(rate), rate)
            return False
        return True

    def _log_unresolved(
        self,
        error: RateResolutionError,
        from_currency: Currency,
        to_currency: Currency,
        day: date,
        provider: ExchangeRateProvider,
        frequency: RateFrequency,
    ) -> None:
        if isinstance(error, UnsupportedCurrencyError):
            reason = f"{error.currency.value} has no {provider.source.value} rates and is not pegged"
        else:
            reason = "no rate on or before the requested date"

        logger.error(
            f"No {provider.source.value} {frequency.value} exchange rate found for "
            f"{day:%Y-%m-%d}. FromCurrency: {from_currency.value}, "
            f"ToCurrency: {to_currency.value}. Reason: {reason}"
        )

    async def update_rates(self) -> None:
        """Refreshes the latest window of every registered source."""
        today = self.today()
        for provider in self.providers:
            try:
                if RateFrequency.DAILY in provider.supported_frequencies:
                    # a few days back in case previous runs were missed
                    start = today - timedelta(days=self.daily_refresh_window_days)
                    frequency = RateFrequency.DAILY
                else:
                    start = start_of_month(today)
                    frequency = RateFrequency.MONTHLY

                rates = await provider.fetch_rates(start, today, frequency)
                changed = self.cache.load(rates)
                await self._save_changed(changed)
                logger.info(
                    f"Updated {provider.source.value} rates: "
                    f"{len(rates)} fetched, {len(changed)} changed"
                )
            except Exception as e:
                logger.error(f"Failed to update rates for {provider.source.value}: {e}")

    async def ensure_minimum_date_range(
        self, min_date: date, sources: Iterable[RateSource] | None = None
    ) -> bool:
        """Fetches every rate from ``min_date`` until today; False if any source failed."""
        today = self.today()
        if min_date > today:
            raise ValueError("min_date must not be in the future")

        providers = [
            self.providers.get(source)
            for source in (sources if sources is not None else self.providers.sources())
        ]

        result = True
        for provider in providers:
            try:
                rates = await provider.fetch_rates(min_date, today, provider.default_frequency)
                if not await self._save_changed(self.cache.load(rates)):
                    result = False
            except Exception as e:
                logger.error(f"Failed to load rates since {min_date} for {provider.source.value}: {e}")
                result = False
        return result
