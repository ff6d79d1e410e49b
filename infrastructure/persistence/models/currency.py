from datetime import date
from decimal import Decimal

from sqlalchemy import DECIMAL, Date, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
	pass


class ExchangeRateDB(Base):
	__tablename__ = 'exchange_rates'

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	source: Mapped[str] = mapped_column(String(20), nullable=False)
	frequency: Mapped[str] = mapped_column(String(10), nullable=False)
	currency: Mapped[str] = mapped_column(String(5), nullable=False)
	rate_date: Mapped[date] = mapped_column('date', Date, nullable=False)
	rate: Mapped[Decimal] = mapped_column(DECIMAL(precision=18, scale=6), nullable=False)

	__table_args__ = (
		Index('idx_exchange_rates_date', 'date'),
		UniqueConstraint(
			'source', 'frequency', 'currency', 'date', name='uq_source_frequency_currency_date'
		),
	)


class PeggedCurrencyDB(Base):
	__tablename__ = 'pegged_currencies'

	currency: Mapped[str] = mapped_column(String(5), primary_key=True)
	pegged_to: Mapped[str] = mapped_column(String(5), nullable=False)
	rate: Mapped[Decimal] = mapped_column(DECIMAL(precision=24, scale=12), nullable=False)
