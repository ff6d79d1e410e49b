from collections.abc import Iterable

from domain.exceptions.currency import UnsupportedSourceError
from domain.models.currency import RateSource
from infrastructure.providers.base import ExchangeRateProvider


class ProviderRegistry:
    """Maps each rate source to the provider serving it."""

    def __init__(self, providers: Iterable[ExchangeRateProvider]):
        self._providers = {provider.source: provider for provider in providers}

    def get(self, source: RateSource) -> ExchangeRateProvider:
        try:
            return self._providers[source]
        except KeyError:
            raise UnsupportedSourceError(f"No provider registered for source {source.value}") from None

    def sources(self) -> list[RateSource]:
        return list(self._providers)

    def __iter__(self):
        return iter(self._providers.values())

    async def close(self) -> None:
        for provider in self._providers.values():
            await provider.close()
