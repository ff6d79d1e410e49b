from datetime import date


import httpx


from domain.exceptions.currency import ProviderError
from domain.models.currency import (
    Currency,
    ExchangeRate,
    QuoteType,
    RateFrequency,
    RateSource,
)
from infrastructure.providers.base import ExchangeRateProvider


class OpenExchangeProvider(ExchangeRateProvider):
    BASE_URL = "https://openexchangerates.org/api"

    currency = Currency.USD
    quote_type = QuoteType.INDIRECT
    source = RateSource.OPENEXCHANGE

    def __init__(self, app_id: str, client: httpx.AsyncClient | None = None, **kwargs):
        super().__init__(client=client, **kwargs)
        self.app_id = app_id

    @property
    def name(self) -> str:
        return "openexchange"

    async def _request(self, endpoint: str, params: dict) -> dict:
        params["app_id"] = self.app_id
        response = await self._get(f"{self.BASE_URL}/{endpoint}", params=params)

        try:
            data = response.json()
        except Exception as e:
            raise ProviderError(f"OpenExchange response parsing error: {str(e)}") from e

        if data.get("error"):
            message = data.get("description", data.get("message", "Unknown error"))
            raise ProviderError(f"OpenExchange API error: {message}")

        return data

    async def _fetch_period(
        self, start_date: date, end_date: date, frequency: RateFrequency
    ) -> list[ExchangeRate]:
        data = await self._request(
            "time-series.json",
            {
                "start": start_date.isoformat(),
                "end": end_date.isoformat(),
                "base": self.currency.value,
            },
        )

        try:
            return [
                rate
                for day, day_rates in data["rates"].items()
                for code, value in day_rates.items()
                if (rate := self._make_rate(code, date.fromisoformat(day), value, frequency))
            ]
        except (KeyError, AttributeError, ValueError, ArithmeticError) as e:
            raise ProviderError(f"OpenExchange response parsing error: {str(e)}") from e
