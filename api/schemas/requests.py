from datetime import date

from pydantic import BaseModel, Field

from domain.models.currency import RateSource


class PrewarmRequest(BaseModel):
	min_date: date = Field(..., description='Earliest date to load rates from')
	sources: list[RateSource] | None = Field(
		default=None, description='Sources to load; all registered sources when omitted'
	)

	class ConfigDict:
		json_schema_extra = {'example': {'min_date': '2025-01-01', 'sources': ['ECB']}}
