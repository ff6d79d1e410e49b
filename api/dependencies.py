import logging

from application.services import CurrencyService, RateService
from application.workers.rate_refresher import RateRefresherWorker
from config.settings import get_settings
from infrastructure.persistence.database import Database
from infrastructure.persistence.repositories.currency import ExchangeRateRepository
from infrastructure.providers import (
	ECBProvider,
	ExchangeRateProvider,
	FixerIOProvider,
	OpenExchangeProvider,
	ProviderRegistry,
)

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	db: Database | None = None
	repository: ExchangeRateRepository | None = None
	providers: ProviderRegistry | None = None
	rate_service: RateService | None = None
	refresher: RateRefresherWorker | None = None


deps = AppDependencies()


def build_providers() -> list[ExchangeRateProvider]:
	settings = get_settings()
	options = {
		'timeout': settings.PROVIDER_TIMEOUT,
		'retry_attempts': settings.PROVIDER_RETRY_ATTEMPTS,
	}

	providers: list[ExchangeRateProvider] = [ECBProvider(base_url=settings.ECB_BASE_URL, **options)]
	if settings.FIXERIO_API_KEY:
		providers.append(FixerIOProvider(settings.FIXERIO_API_KEY, **options))
	if settings.OPENEXCHANGE_APP_ID:
		providers.append(OpenExchangeProvider(settings.OPENEXCHANGE_APP_ID, **options))
	return providers


def init_dependencies() -> None:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = get_settings()

	deps.db = Database(settings.DATABASE_URL)
	deps.repository = ExchangeRateRepository(deps.db)
	deps.providers = ProviderRegistry(build_providers())
	deps.rate_service = RateService(
		providers=deps.providers,
		store=deps.repository,
		daily_refresh_window_days=settings.DAILY_REFRESH_WINDOW_DAYS,
	)
	if settings.REFRESH_INTERVAL_SECONDS > 0:
		deps.refresher = RateRefresherWorker(deps.rate_service, settings.REFRESH_INTERVAL_SECONDS)

	logger.info(f'Dependencies initialized, sources: {[s.value for s in deps.providers.sources()]}')


async def bootstrap() -> None:
	"""Bootstrap application data. Called after init_dependencies() at startup."""
	logger.info('Bootstrapping application...')

	if deps.db is None or deps.repository is None or deps.rate_service is None:
		raise RuntimeError('Dependencies not initialized. Call init_dependencies() first.')

	await deps.db.create_tables()
	await CurrencyService(repository=deps.repository).initialize_pegged_currencies()
	await deps.rate_service.start()

	if deps.refresher is not None:
		deps.refresher.start()

	logger.info('Bootstrap complete')


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.refresher:
		await deps.refresher.stop()
	if deps.providers:
		await deps.providers.close()
	if deps.db:
		await deps.db.close()

	logger.info('Cleanup complete')


def get_rate_service() -> RateService:
	if deps.rate_service is None:
		raise RuntimeError('Rate service not initialized')
	return deps.rate_service


def get_currency_service() -> CurrencyService:
	if deps.repository is None:
		raise RuntimeError('Repository not initialized')
	return CurrencyService(repository=deps.repository)
