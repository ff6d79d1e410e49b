# nosec B101


import logging
from datetime import date
from decimal import Decimal

from domain.models.currency import Currency, ExchangeRate, RateFrequency, RateSource
from infrastructure.cache.rate_cache import RateCache


def make_rate(currency=Currency.USD, day=date(2025, 3, 10), rate='1.10',
              source=RateSource.ECB, frequency=RateFrequency.DAILY):
    return ExchangeRate(
        source=source, frequency=frequency, currency=currency, date=day, rate=Decimal(rate)
    )


# ============================================================================
# TEST: upsert()
# ============================================================================

def test_upsert_new_rate_reports_changed():
    cache = RateCache()

    assert cache.upsert(make_rate()) is True
    assert cache.lookup(RateSource.ECB, RateFrequency.DAILY, Currency.USD, date(2025, 3, 10)) == Decimal('1.10')


def test_upsert_identical_value_twice_is_noop():
    cache = RateCache()

    assert cache.upsert(make_rate(rate='1.10')) is True
    assert cache.upsert(make_rate(rate='1.10')) is False


def test_upsert_ignores_differences_below_precision():
    cache = RateCache(precision=6)

    cache.upsert(make_rate(rate='1.1000001'))

    assert cache.upsert(make_rate(rate='1.1000002')) is False
    assert cache.lookup(RateSource.ECB, RateFrequency.DAILY, Currency.USD, date(2025, 3, 10)) == Decimal('1.1000001')


def test_upsert_differing_value_overwrites_and_warns(caplog):
    cache = RateCache()
    cache.upsert(make_rate(rate='1.10'))

    with caplog.at_level(logging.WARNING):
        changed = cache.upsert(make_rate(rate='1.12'))

    assert changed is True
    assert cache.lookup(RateSource.ECB, RateFrequency.DAILY, Currency.USD, date(2025, 3, 10)) == Decimal('1.12')
    assert 'Overwriting exchange rate' in caplog.text
    assert 'USD' in caplog.text


def test_load_returns_only_changed_rates():
    cache = RateCache()
    cache.upsert(make_rate(currency=Currency.USD, rate='1.10'))

    changed = cache.load([
        make_rate(currency=Currency.USD, rate='1.10'),
        make_rate(currency=Currency.GBP, rate='0.85'),
        make_rate(currency=Currency.JPY, rate='160.5'),
    ])

    assert [r.currency for r in changed] == [Currency.GBP, Currency.JPY]


# ============================================================================
# TEST: lookup() / find_latest_on_or_before()
# ============================================================================

def test_lookup_missing_key_returns_none():
    cache = RateCache()
    cache.upsert(make_rate())

    assert cache.lookup(RateSource.ECB, RateFrequency.DAILY, Currency.USD, date(2025, 3, 11)) is None
    assert cache.lookup(RateSource.ECB, RateFrequency.MONTHLY, Currency.USD, date(2025, 3, 10)) is None
    assert cache.lookup(RateSource.FIXERIO, RateFrequency.DAILY, Currency.USD, date(2025, 3, 10)) is None


def test_find_latest_on_or_before_picks_closest_earlier_date():
    cache = RateCache()
    target = date(2025, 3, 10)
    cache.load([
        make_rate(day=date(2025, 3, 7), rate='1.01'),
        make_rate(day=date(2025, 3, 9), rate='1.02'),
        make_rate(day=date(2025, 3, 12), rate='1.03'),
    ])

    assert cache.find_latest_on_or_before(
        RateSource.ECB, RateFrequency.DAILY, Currency.USD, target
    ) == (date(2025, 3, 9), Decimal('1.02'))


def test_find_latest_on_or_before_exact_date_wins():
    cache = RateCache()
    cache.load([make_rate(day=date(2025, 3, 9), rate='1.02'), make_rate(day=date(2025, 3, 10), rate='1.05')])

    found = cache.find_latest_on_or_before(RateSource.ECB, RateFrequency.DAILY, Currency.USD, date(2025, 3, 10))

    assert found == (date(2025, 3, 10), Decimal('1.05'))


def test_find_latest_on_or_before_no_earlier_date_returns_none():
    cache = RateCache()
    cache.upsert(make_rate(day=date(2025, 3, 12)))

    assert cache.find_latest_on_or_before(
        RateSource.ECB, RateFrequency.DAILY, Currency.USD, date(2025, 3, 10)
    ) is None


def test_find_latest_on_or_before_unknown_currency_returns_none():
    cache = RateCache()
    cache.upsert(make_rate())

    assert cache.find_latest_on_or_before(
        RateSource.ECB, RateFrequency.DAILY, Currency.GBP, date(2025, 3, 10)
    ) is None


# ============================================================================
# TEST: structural checks
# ============================================================================

def test_has_source_and_has_currency():
    cache = RateCache()
    assert cache.has_source(RateSource.ECB, RateFrequency.DAILY) is False

    cache.upsert(make_rate())

    assert cache.has_source(RateSource.ECB, RateFrequency.DAILY) is True
    assert cache.has_source(RateSource.ECB, RateFrequency.MONTHLY) is False
    assert cache.has_currency(RateSource.ECB, RateFrequency.DAILY, Currency.USD) is True
    assert cache.has_currency(RateSource.ECB, RateFrequency.DAILY, Currency.GBP) is False
