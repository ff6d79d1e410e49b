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


class FixerIOProvider(ExchangeRateProvider):
	BASE_URL = 'http://data.fixer.io/api'

	currency = Currency.EUR
	quote_type = QuoteType.INDIRECT
	source = RateSource.FIXERIO

	def __init__(self, api_key: str, client: httpx.AsyncClient | None = None, **kwargs):
		super().__init__(client=client, **kwargs)
		self.api_key = api_key

	@property
	def name(self) -> str:
		return 'fixerio'

	async def _request(self, endpoint: str, params: dict) -> dict:
		params['access_key'] = self.api_key
		response = await self._get(f'{self.BASE_URL}/{endpoint}', params=params)

		try:
			data = response.json()
		except Exception as e:
			raise ProviderError(f'Fixer.io response parsing error: {str(e)}') from e

		if not data.get('success', False):
			info = data.get('error', {}).get('info', 'Unknown error')
			raise ProviderError(f'Fixer.io API error: {info}')

		return data

	async def _fetch_period(
		self, start_date: date, end_date: date, frequency: RateFrequency
	) -> list[ExchangeRate]:
		data = await self._request(
			'timeseries',
			{
				'start_date': start_date.isoformat(),
				'end_date': end_date.isoformat(),
				'base': self.currency.value,
			},
		)

		try:
			rates = []
			for day, day_rates in data['rates'].items():
				rate_date = date.fromisoformat(day)
				for code, value in day_rates.items():
					rate = self._make_rate(code, rate_date, value, frequency)
					if rate is not None:
						rates.append(rate)
			return rates
		except (KeyError, AttributeError, ValueError, ArithmeticError) as e:
			raise ProviderError(f'Fixer.io response parsing error: {str(e)}') from e
