from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.models.currency import RateSource


class Settings(BaseSettings):
	DATABASE_URL: str = 'sqlite+aiosqlite:///./exchange_rates.db'

	ECB_BASE_URL: str = 'https://data-api.ecb.europa.eu/service/data/EXR'
	FIXERIO_API_KEY: str = ''
	OPENEXCHANGE_APP_ID: str = ''

	# Providers
	PROVIDER_TIMEOUT: int = 10
	PROVIDER_RETRY_ATTEMPTS: int = 3
	DEFAULT_SOURCE: RateSource = RateSource.ECB

	# Refresh
	DAILY_REFRESH_WINDOW_DAYS: int = 4
	REFRESH_INTERVAL_SECONDS: int = 3600  # 0 disables the background refresher

	# Application
	APP_NAME: str = 'Exchange Rate Service'
	LOG_LEVEL: str = 'INFO'
	DEBUG: bool = True

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

	@field_validator('DEFAULT_SOURCE', mode='before')
	@classmethod
	def normalize_source(cls, value):
		return value.strip().upper() if isinstance(value, str) else value


@lru_cache
def get_settings() -> Settings:
	return Settings()
