import logging
from collections.abc import Iterable
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.future import select

from domain.exceptions.currency import StoreError
from domain.models.currency import (
	RATE_PRECISION,
	Currency,
	ExchangeRate,
	PeggedCurrency,
	RateFrequency,
	RateSource,
)
from infrastructure.persistence.database import Database
from infrastructure.persistence.models.currency import ExchangeRateDB, PeggedCurrencyDB

logger = logging.getLogger(__name__)


class ExchangeRateRepository:
	def __init__(self, db: Database):
		self.db = db

	async def load_rates(self, min_date: date, max_date: date) -> list[ExchangeRate]:
		if max_date < min_date:
			raise ValueError('max_date must be later than or equal to min_date')

		stmt = select(ExchangeRateDB).filter(
			ExchangeRateDB.rate_date >= min_date,
			ExchangeRateDB.rate_date <= max_date,
		)
		try:
			async with self.db.session() as session:
				result = await session.execute(stmt)
				db_rates = result.scalars().all()
		except SQLAlchemyError as e:
			raise StoreError(f'Failed to load rates between {min_date} and {max_date}: {e}') from e

		return [self._to_domain(r) for r in db_rates]

	async def save_rates(self, rates: Iterable[ExchangeRate]) -> int:
		"""Inserts missing rates and updates stored ones whose value differs."""
		rates = list(rates)
		if not rates:
			return 0

		stmt = select(ExchangeRateDB).filter(
			ExchangeRateDB.source.in_({r.source.value for r in rates}),
			ExchangeRateDB.rate_date >= min(r.date for r in rates),
			ExchangeRateDB.rate_date <= max(r.date for r in rates),
		)
		written = 0
		try:
			async with self.db.session() as session:
				existing = {
					(row.source, row.frequency, row.currency, row.rate_date): row
					for row in (await session.execute(stmt)).scalars().all()
				}
				for rate in rates:
					key = (rate.source.value, rate.frequency.value, rate.currency.value, rate.date)
					row = existing.get(key)
					if row is None:
						row = ExchangeRateDB(
							source=key[0],
							frequency=key[1],
							currency=key[2],
							rate_date=rate.date,
							rate=rate.rate,
						)
						session.add(row)
						existing[key] = row
						written += 1
					elif round(row.rate, RATE_PRECISION) != round(rate.rate, RATE_PRECISION):
						row.rate = rate.rate
						written += 1
		except SQLAlchemyError as e:
			raise StoreError(f'Failed to save {len(rates)} rates: {e}') from e

		logger.info(f'Saved {written} of {len(rates)} exchange rates')
		return written

	async def load_pegged_currencies(self) -> list[PeggedCurrency]:
		try:
			async with self.db.session() as session:
				result = await session.execute(select(PeggedCurrencyDB))
				rows = result.scalars().all()
		except SQLAlchemyError as e:
			raise StoreError(f'Failed to load pegged currencies: {e}') from e

		return [
			PeggedCurrency(
				currency=Currency(row.currency),
				pegged_to=Currency(row.pegged_to),
				rate=row.rate,
			)
			for row in rows
		]

	async def save_pegged_currencies(self, pegged: Iterable[PeggedCurrency]) -> None:
		try:
			async with self.db.session() as session:
				existing_codes = (
					(await session.execute(select(PeggedCurrencyDB.currency))).scalars().all()
				)
				session.add_all(
					[
						PeggedCurrencyDB(
							currency=p.currency.value, pegged_to=p.pegged_to.value, rate=p.rate
						)
						for p in pegged
						if p.currency.value not in existing_codes
					]
				)
		except SQLAlchemyError as e:
			raise StoreError(f'Failed to save pegged currencies: {e}') from e

	@staticmethod
	def _to_domain(row: ExchangeRateDB) -> ExchangeRate:
		return ExchangeRate(
			source=RateSource(row.source),
			frequency=RateFrequency(row.frequency),
			currency=Currency(row.currency),
			date=row.rate_date,
			rate=row.rate,
		)
