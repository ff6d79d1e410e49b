class CurrencyException(Exception):
    pass


class UnknownCurrencyCodeError(CurrencyException, ValueError):
    pass


class ProviderError(CurrencyException):
    pass


class StoreError(CurrencyException):
    pass


class RateResolutionError(CurrencyException):
    """Internal outcome of a cache search; never raised past the engine."""


class UnsupportedCurrencyError(RateResolutionError):
    def __init__(self, currency):
        super().__init__(f"Not supported currency: {currency}")
        self.currency = currency


class NoRateFoundError(RateResolutionError):
    def __init__(self, currency=None):
        super().__init__(f"No fx rate found for {currency}" if currency else "No fx rate found")
        self.currency = currency


class UnsupportedSourceError(CurrencyException, ValueError):
    pass
