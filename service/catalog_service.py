# service/catalog_service.py
import logging
from typing import List
from model.api import AssetStats, Category
from repository.catalog_repository import AssetStatsRepository, CategoryRepository
from repository.namespaces import CATEGORIES, stats_key
from service.cache_service import AGGREGATE, REFERENCE_DATA, TieredCache

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Cache-fronted reads of reference data (categories) and per-asset aggregates
    (view counts). View recording is a best-effort side effect with no coupling to
    progress writes.
    """

    def __init__(
        self,
        categories: CategoryRepository,
        stats: AssetStatsRepository,
        cache: TieredCache,
    ) -> None:
        self._categories = categories
        self._stats = stats
        self._cache = cache

    async def list_categories(self) -> List[dict]:
        async def compute() -> List[dict]:
            rows = await self._categories.all()
            return [
                Category(id=r.id, name=r.name, slug=r.slug).model_dump() for r in rows
            ]

        return await self._cache.get_or_compute(f"{CATEGORIES}:all", compute, REFERENCE_DATA)

    async def record_view(self, asset_id: str) -> None:
        await self._stats.increment_views(asset_id)
        logger.info("stats.view asset=%s", asset_id)
        await self._cache.invalidate_key(stats_key(asset_id))

    async def get_stats(self, asset_id: str) -> dict:
        async def compute() -> dict:
            row = await self._stats.get(asset_id)
            return AssetStats(assetId=asset_id, views=row.views if row else 0).model_dump()

        return await self._cache.get_or_compute(stats_key(asset_id), compute, AGGREGATE)
