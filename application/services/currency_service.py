import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from domain.exceptions.currency import UnknownCurrencyCodeError
from domain.models.currency import DEFAULT_PEGGED_CURRENCIES, Currency, PeggedCurrency
from infrastructure.persistence.repositories.currency import ExchangeRateRepository

logger = logging.getLogger(__name__)

CURRENCY_MAPPING: Mapping[str, Currency] = MappingProxyType({c.value: c for c in Currency})


def parse_currency(code: str | Currency) -> Currency:
	"""Case-insensitively maps a currency code to a Currency member."""
	if isinstance(code, Currency):
		return code

	if code is None or not str(code).strip():
		raise UnknownCurrencyCodeError('Null or empty currency code.')

	currency = CURRENCY_MAPPING.get(str(code).strip().upper())
	if currency is None:
		raise UnknownCurrencyCodeError(f'Not supported currency code: {code}')
	return currency


class PeggedCurrencyTable:
	"""Read-only snapshot of pegged currencies keyed by the pegged currency."""

	def __init__(self, pegged: Iterable[PeggedCurrency] = ()):
		self._pegged = MappingProxyType({p.currency: p for p in pegged})

	def get(self, currency: Currency) -> PeggedCurrency | None:
		return self._pegged.get(currency)

	def __contains__(self, currency: Currency) -> bool:
		return currency in self._pegged

	def __len__(self) -> int:
		return len(self._pegged)


class CurrencyService:
	def __init__(self, repository: ExchangeRateRepository):
		self.repository = repository

	async def initialize_pegged_currencies(self) -> None:
		logger.info('Initializing pegged currencies...')

		existing = await self.repository.load_pegged_currencies()
		if existing:
			logger.info(f'{len(existing)} pegged currencies already stored')
			return

		await self.repository.save_pegged_currencies(DEFAULT_PEGGED_CURRENCIES)
		logger.info(f'Seeded {len(DEFAULT_PEGGED_CURRENCIES)} pegged currencies.')

	async def load_pegged_table(self) -> PeggedCurrencyTable:
		pegged = await self.repository.load_pegged_currencies()
		logger.info(f'Loaded {len(pegged)} pegged currencies')
		return PeggedCurrencyTable(pegged)

	@staticmethod
	def get_supported_currencies() -> list[str]:
		return sorted(CURRENCY_MAPPING)

	@staticmethod
	def validate_currency(code: str) -> Currency:
		return parse_currency(code)
