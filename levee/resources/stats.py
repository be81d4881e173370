from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from levee.resources._base import dump_input
from levee.schemas.resources import ContactStats, EmailStats, RevenueStats, StatsOptions, StatsOverview

StatsT = TypeVar("StatsT", bound=BaseModel)

StatsOptionsLike = Union[StatsOptions, Mapping[str, Any], None]


class Stats:
    """Aggregate reporting. Options: start_date, end_date, group_by (day | week | month)."""

    def __init__(self, client):
        self._client = client

    @staticmethod
    def _params(options: StatsOptionsLike) -> Optional[Dict[str, Any]]:
        if options is None:
            return None
        return dump_input(StatsOptions, options) or None

    async def _get(self, path: str, model_cls: Type[StatsT], options: StatsOptionsLike) -> StatsT:
        body = await self._client.request("GET", path, params=self._params(options))
        return model_cls.model_validate(body)

    async def get_overview(self, options: StatsOptionsLike = None) -> StatsOverview:
        return await self._get("/stats/overview", StatsOverview, options)

    async def get_email_stats(self, options: StatsOptionsLike = None) -> EmailStats:
        return await self._get("/stats/emails", EmailStats, options)

    async def get_revenue_stats(self, options: StatsOptionsLike = None) -> RevenueStats:
        return await self._get("/stats/revenue", RevenueStats, options)

    async def get_contact_stats(self, options: StatsOptionsLike = None) -> ContactStats:
        return await self._get("/stats/contacts", ContactStats, options)
