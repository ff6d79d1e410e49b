from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from api.dependencies import get_currency_service, get_rate_service
from api.schemas import (
	ExchangeRateResponse,
	PrewarmRequest,
	PrewarmResponse,
	RefreshResponse,
	SourceResponse,
	SourcesResponse,
	SupportedCurrenciesResponse,
)
from application.services import CurrencyService, RateService, parse_currency
from config.settings import get_settings
from domain.models.currency import RateFrequency, RateSource

router = APIRouter(prefix='/api', tags=['currency'])


@router.get(
	'/rate/{from_currency}/{to_currency}',
	response_model=ExchangeRateResponse,
	status_code=status.HTTP_200_OK,
	summary='Get exchange rate for a date',
)
async def get_exchange_rate(
	from_currency: Annotated[str, Path(min_length=3, max_length=5)],
	to_currency: Annotated[str, Path(min_length=3, max_length=5)],
	service: Annotated[RateService, Depends(get_rate_service)],
	rate_date: Annotated[date | None, Query(alias='date')] = None,
	source: RateSource | None = None,
	frequency: RateFrequency | None = None,
) -> ExchangeRateResponse:
	from_code = parse_currency(from_currency)
	to_code = parse_currency(to_currency)
	source = source or get_settings().DEFAULT_SOURCE
	rate_date = rate_date or service.today()
	frequency = frequency or service.providers.get(source).default_frequency

	rate = await service.get_rate(from_code, to_code, rate_date, source, frequency)
	if rate is None:
		raise HTTPException(
			status_code=status.HTTP_404_NOT_FOUND,
			detail=f'No {source.value} {frequency.value} rate found for '
			f'{from_code.value}/{to_code.value} on {rate_date}',
		)

	return ExchangeRateResponse(
		from_currency=from_code,
		to_currency=to_code,
		rate_date=rate_date,
		source=source,
		frequency=frequency,
		rate=rate,
	)


@router.post(
	'/rates/refresh',
	response_model=RefreshResponse,
	status_code=status.HTTP_202_ACCEPTED,
	summary='Refresh the latest rates of every source',
)
async def refresh_rates(
	service: Annotated[RateService, Depends(get_rate_service)],
) -> RefreshResponse:
	await service.update_rates()
	return RefreshResponse(detail='Rates refreshed')


@router.post(
	'/rates/prewarm',
	response_model=PrewarmResponse,
	status_code=status.HTTP_200_OK,
	summary='Load every rate since a date into cache and store',
)
async def prewarm_rates(
	request: PrewarmRequest,
	service: Annotated[RateService, Depends(get_rate_service)],
) -> PrewarmResponse:
	try:
		success = await service.ensure_minimum_date_range(request.min_date, request.sources)
	except ValueError as e:
		raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
	return PrewarmResponse(success=success)


@router.get(
	'/currencies',
	response_model=SupportedCurrenciesResponse,
	status_code=status.HTTP_200_OK,
	summary='List supported currencies',
)
async def get_supported_currencies(
	service: Annotated[CurrencyService, Depends(get_currency_service)],
) -> SupportedCurrenciesResponse:
	return SupportedCurrenciesResponse(currencies=service.get_supported_currencies())


@router.get(
	'/sources',
	response_model=SourcesResponse,
	status_code=status.HTTP_200_OK,
	summary='List registered rate sources',
)
async def get_sources(
	service: Annotated[RateService, Depends(get_rate_service)],
) -> SourcesResponse:
	return SourcesResponse(
		sources=[
			SourceResponse(
				source=d.source,
				currency=d.currency,
				quote_type=d.quote_type,
				default_frequency=d.default_frequency,
				supported_frequencies=sorted(d.supported_frequencies),
			)
			for d in (provider.descriptor for provider in service.providers)
		]
	)
