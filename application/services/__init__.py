from .currency_service import CurrencyService, PeggedCurrencyTable, parse_currency
from .rate_service import RateService

__all__ = ['CurrencyService', 'PeggedCurrencyTable', 'RateService', 'parse_currency']
