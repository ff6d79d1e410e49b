import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from domain.exceptions.currency import (
	ProviderError,
	StoreError,
	UnknownCurrencyCodeError,
	UnsupportedSourceError,
)

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(UnknownCurrencyCodeError)
	async def unknown_currency_handler(request: Request, exc: UnknownCurrencyCodeError):
		return JSONResponse(status_code=400, content={'detail': str(exc)})

	@app.exception_handler(UnsupportedSourceError)
	async def unsupported_source_handler(request: Request, exc: UnsupportedSourceError):
		return JSONResponse(status_code=400, content={'detail': str(exc)})

	@app.exception_handler(ProviderError)
	async def provider_error_handler(request: Request, exc: ProviderError):
		logger.error(f'Provider error: {exc}')
		return JSONResponse(
			status_code=503, content={'detail': 'Exchange rate service unavailable'}
		)

	@app.exception_handler(StoreError)
	async def store_error_handler(request: Request, exc: StoreError):
		logger.error(f'Store error: {exc}')
		return JSONResponse(
			status_code=503, content={'detail': 'Exchange rate store unavailable'}
		)
