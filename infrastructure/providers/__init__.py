from .base import ExchangeRateProvider
from .ecb import ECBProvider
from .fixerio import FixerIOProvider
from .openexchange import OpenExchangeProvider
from .registry import ProviderRegistry

__all__ = [
    'ExchangeRateProvider',
    'ECBProvider',
    'FixerIOProvider',
    'OpenExchangeProvider',
    'ProviderRegistry',
]
