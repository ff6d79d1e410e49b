import csv
import io
from datetime import date

from domain.exceptions.currency import ProviderError
from domain.models.currency import (
    Currency,
    ExchangeRate,
    QuoteType,
    RateFrequency,
    RateSource,
)
from infrastructure.providers.base import ExchangeRateProvider


class ECBProvider(ExchangeRateProvider):
    """European Central Bank reference rates, EUR based, daily and monthly."""

    BASE_URL = "https://data-api.ecb.europa.eu/service/data/EXR"

    currency = Currency.EUR
    quote_type = QuoteType.INDIRECT
    source = RateSource.ECB
    default_frequency = RateFrequency.DAILY
    supported_frequencies = frozenset({RateFrequency.DAILY, RateFrequency.MONTHLY})

    def __init__(self, base_url: str | None = None, **kwargs):
        super().__init__(**kwargs)
        self.base_url = (base_url or self.BASE_URL).rstrip("/")

    def _series_key(self, frequency: RateFrequency) -> str:
        # D..EUR.SP00.A: every currency against EUR, spot, average
        prefix = "D" if frequency == RateFrequency.DAILY else "M"
        return f"{prefix}..EUR.SP00.A"

    async def _fetch_period(
        self, start_date: date, end_date: date, frequency: RateFrequency
    ) -> list[ExchangeRate]:
        if frequency == RateFrequency.DAILY:
            period = (start_date.isoformat(), end_date.isoformat())
        else:
            period = (start_date.strftime("%Y-%m"), end_date.strftime("%Y-%m"))

        response = await self._get(
            f"{self.base_url}/{self._series_key(frequency)}",
            {"startPeriod": period[0], "endPeriod": period[1], "format": "csvdata"},
            empty_on_404=True,
        )
        # ECB answers 404 when the period holds no observations (weekends, future)
        if response is None:
            return []

        try:
            return self._parse_csv(response.text, frequency)
        except (KeyError, ValueError, ArithmeticError) as e:
            raise ProviderError(f"ECB response parsing error: {str(e)}") from e

    def _parse_csv(self, text: str, frequency: RateFrequency) -> list[ExchangeRate]:
        rates = []
        for row in csv.DictReader(io.StringIO(text)):
            if not row["OBS_VALUE"]:
                continue
            if frequency == RateFrequency.DAILY:
                day = date.fromisoformat(row["TIME_PERIOD"])
            else:
                year, month = row["TIME_PERIOD"].split("-")
                day = date(int(year), int(month), 1)

            rate = self._make_rate(row["CURRENCY"], day, row["OBS_VALUE"], frequency)
            if rate is not None:
                rates.append(rate)
        return rates
