from .requests import PrewarmRequest
from .responses import (
	ExchangeRateResponse,
	PrewarmResponse,
	RefreshResponse,
	SourceResponse,
	SourcesResponse,
	SupportedCurrenciesResponse,
)

__all__ = [
	'ExchangeRateResponse',
	'PrewarmRequest',
	'PrewarmResponse',
	'RefreshResponse',
	'SourceResponse',
	'SourcesResponse',
	'SupportedCurrenciesResponse',
]
