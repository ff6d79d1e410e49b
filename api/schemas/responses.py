from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from domain.models.currency import Currency, QuoteType, RateFrequency, RateSource


class ExchangeRateResponse(BaseModel):
	from_currency: Currency = Field(..., description='Source currency code')
	to_currency: Currency = Field(..., description='Target currency code')
	rate_date: date = Field(..., description='Date the rate was requested for')
	source: RateSource = Field(..., description='Provider of the rate')
	frequency: RateFrequency = Field(..., description='Rate frequency')
	rate: Decimal = Field(..., description='Units of to_currency per one from_currency')

	class ConfigDict:
		json_schema_extra = {
			'example': {
				'from_currency': 'USD',
				'to_currency': 'EUR',
				'rate_date': '2025-09-26',
				'source': 'ECB',
				'frequency': 'daily',
				'rate': 0.8550,
			}
		}


class SupportedCurrenciesResponse(BaseModel):
	currencies: list[str] = Field(description='List of currency codes')

	class ConfigDict:
		json_schema_extra = {'examples': [{'currencies': ['USD', 'EUR', 'GBP', 'JPY']}]}


class SourceResponse(BaseModel):
	source: RateSource
	currency: Currency = Field(..., description='Base currency of the provider')
	quote_type: QuoteType
	default_frequency: RateFrequency
	supported_frequencies: list[RateFrequency]


class SourcesResponse(BaseModel):
	sources: list[SourceResponse]


class PrewarmResponse(BaseModel):
	success: bool = Field(..., description='False if any source failed to load')


class RefreshResponse(BaseModel):
	detail: str
