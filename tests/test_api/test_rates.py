from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_currency_service, get_rate_service
from api.main import app
from application.services import CurrencyService
from domain.exceptions.currency import ProviderError
from domain.models.currency import Currency, RateFrequency, RateSource
from infrastructure.providers import ECBProvider, FixerIOProvider, ProviderRegistry


@pytest.fixture
def mock_rate_service():
    mock_service = MagicMock()
    mock_service.today.return_value = date(2025, 3, 18)
    mock_service.providers = ProviderRegistry([
        ECBProvider(client=AsyncMock(spec=httpx.AsyncClient)),
        FixerIOProvider(api_key='test_key', client=AsyncMock(spec=httpx.AsyncClient)),
    ])
    mock_service.get_rate = AsyncMock(return_value=Decimal('1.0890'))
    mock_service.update_rates = AsyncMock()
    mock_service.ensure_minimum_date_range = AsyncMock(return_value=True)
    return mock_service


@pytest.fixture
def client(mock_rate_service):
    app.dependency_overrides[get_rate_service] = lambda: mock_rate_service
    app.dependency_overrides[get_currency_service] = lambda: CurrencyService(repository=MagicMock())
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def test_get_rate_success(client, mock_rate_service):
    response = client.get('/api/rate/EUR/USD', params={'date': '2025-03-17', 'source': 'ECB'})

    assert response.status_code == 200
    data = response.json()

    assert data['from_currency'] == 'EUR'
    assert data['to_currency'] == 'USD'
    assert data['rate_date'] == '2025-03-17'
    assert data['source'] == 'ECB'
    assert data['frequency'] == 'daily'
    assert Decimal(data['rate']) == Decimal('1.0890')
    mock_rate_service.get_rate.assert_awaited_once_with(
        Currency.EUR, Currency.USD, date(2025, 3, 17), RateSource.ECB, RateFrequency.DAILY
    )


def test_get_rate_defaults_to_today_and_default_source(client, mock_rate_service):
    response = client.get('/api/rate/usd/gbp')

    assert response.status_code == 200
    data = response.json()
    assert data['from_currency'] == 'USD'
    assert data['to_currency'] == 'GBP'
    assert data['rate_date'] == '2025-03-18'
    mock_rate_service.get_rate.assert_awaited_once_with(
        Currency.USD, Currency.GBP, date(2025, 3, 18), RateSource.ECB, RateFrequency.DAILY
    )


def test_get_rate_not_found(client, mock_rate_service):
    mock_rate_service.get_rate.return_value = None

    response = client.get('/api/rate/EUR/TWD', params={'date': '2025-03-17'})

    assert response.status_code == 404
    assert 'EUR/TWD' in response.json()['detail']


def test_get_rate_unknown_currency(client, mock_rate_service):
    response = client.get('/api/rate/EUR/ZZZ')

    assert response.status_code == 400
    assert 'ZZZ' in response.json()['detail']
    mock_rate_service.get_rate.assert_not_called()


def test_get_rate_currency_code_too_short(client):
    response = client.get('/api/rate/EU/USD')

    assert response.status_code == 422


def test_get_rate_unregistered_source(client, mock_rate_service):
    response = client.get('/api/rate/EUR/USD', params={'source': 'OPENEXCHANGE'})

    assert response.status_code == 400
    mock_rate_service.get_rate.assert_not_called()


def test_get_rate_invalid_date(client):
    response = client.get('/api/rate/EUR/USD', params={'date': '17-03-2025'})

    assert response.status_code == 422


def test_get_rate_provider_error_maps_to_503(client, mock_rate_service):
    mock_rate_service.get_rate.side_effect = ProviderError('ECB HTTP error 503')

    response = client.get('/api/rate/EUR/USD')

    assert response.status_code == 503


def test_refresh_rates(client, mock_rate_service):
    response = client.post('/api/rates/refresh')

    assert response.status_code == 202
    mock_rate_service.update_rates.assert_awaited_once()


def test_prewarm_rates(client, mock_rate_service):
    response = client.post('/api/rates/prewarm', json={'min_date': '2025-01-01', 'sources': ['ECB']})

    assert response.status_code == 200
    assert response.json() == {'success': True}
    mock_rate_service.ensure_minimum_date_range.assert_awaited_once_with(
        date(2025, 1, 1), [RateSource.ECB]
    )


def test_prewarm_rates_future_date_rejected(client, mock_rate_service):
    mock_rate_service.ensure_minimum_date_range.side_effect = ValueError('min_date must not be in the future')

    response = client.post('/api/rates/prewarm', json={'min_date': '2030-01-01'})

    assert response.status_code == 400


def test_supported_currencies(client):
    response = client.get('/api/currencies')

    assert response.status_code == 200
    currencies = response.json()['currencies']
    assert 'EUR' in currencies
    assert 'USD' in currencies
    assert currencies == sorted(currencies)


def test_sources(client):
    response = client.get('/api/sources')

    assert response.status_code == 200
    sources = {s['source']: s for s in response.json()['sources']}
    assert set(sources) == {'ECB', 'FIXERIO'}
    assert sources['ECB']['currency'] == 'EUR'
    assert sources['ECB']['quote_type'] == 'indirect'
    assert sources['ECB']['supported_frequencies'] == ['daily', 'monthly']
    assert sources['FIXERIO']['supported_frequencies'] == ['daily']
