# nosec B101


from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from application.services.currency_service import (
    CurrencyService,
    PeggedCurrencyTable,
    parse_currency,
)
from domain.exceptions.currency import UnknownCurrencyCodeError
from domain.models.currency import DEFAULT_PEGGED_CURRENCIES, Currency, PeggedCurrency


@pytest.fixture
def mock_repository():
    repository = AsyncMock()
    repository.load_pegged_currencies.return_value = []
    return repository


# ============================================================================
# TEST: parse_currency()
# ============================================================================

@pytest.mark.parametrize('code', ['USD', 'usd', ' Usd ', Currency.USD])
def test_parse_currency_accepts_any_case(code):
    assert parse_currency(code) == Currency.USD


@pytest.mark.parametrize('code', ['', '   ', None])
def test_parse_currency_rejects_empty_code(code):
    with pytest.raises(UnknownCurrencyCodeError) as exc_info:
        parse_currency(code)

    assert 'empty' in str(exc_info.value)


def test_parse_currency_rejects_unknown_code():
    with pytest.raises(UnknownCurrencyCodeError) as exc_info:
        parse_currency('XYZ')

    assert 'XYZ' in str(exc_info.value)


# ============================================================================
# TEST: PeggedCurrencyTable
# ============================================================================

def test_pegged_table_lookup():
    table = PeggedCurrencyTable(DEFAULT_PEGGED_CURRENCIES)

    assert len(table) == len(DEFAULT_PEGGED_CURRENCIES)
    assert Currency.AED in table
    assert Currency.USD not in table
    assert table.get(Currency.BAM).pegged_to == Currency.EUR
    assert table.get(Currency.GBP) is None


def test_default_pegs_are_expressed_as_target_units_per_pegged_unit():
    table = PeggedCurrencyTable(DEFAULT_PEGGED_CURRENCIES)

    assert round(1 / table.get(Currency.SAR).rate, 6) == Decimal('3.75')
    assert round(1 / table.get(Currency.BAM).rate, 5) == Decimal('1.95583')


# ============================================================================
# TEST: CurrencyService
# ============================================================================

@pytest.mark.asyncio
async def test_initialize_pegged_currencies_seeds_empty_store(mock_repository):
    service = CurrencyService(repository=mock_repository)

    await service.initialize_pegged_currencies()

    mock_repository.save_pegged_currencies.assert_awaited_once_with(DEFAULT_PEGGED_CURRENCIES)


@pytest.mark.asyncio
async def test_initialize_pegged_currencies_keeps_existing(mock_repository):
    mock_repository.load_pegged_currencies.return_value = [
        PeggedCurrency(Currency.AED, Currency.USD, Decimal('0.272294')),
    ]
    service = CurrencyService(repository=mock_repository)

    await service.initialize_pegged_currencies()

    mock_repository.save_pegged_currencies.assert_not_called()


@pytest.mark.asyncio
async def test_load_pegged_table(mock_repository):
    mock_repository.load_pegged_currencies.return_value = [
        PeggedCurrency(Currency.XOF, Currency.EUR, Decimal('0.001524')),
    ]
    service = CurrencyService(repository=mock_repository)

    table = await service.load_pegged_table()

    assert Currency.XOF in table
    assert len(table) == 1


def test_supported_currencies_sorted():
    currencies = CurrencyService.get_supported_currencies()

    assert currencies == sorted(currencies)
    assert len(currencies) == len(Currency)
