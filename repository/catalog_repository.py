# repository/catalog_repository.py
from typing import List, Optional
from sqlalchemy import select
from config.database import Database
from model.db import AssetStatsRow, CategoryRow, utcnow


class AssetStatsRepository:
    """
    Per-asset aggregates (view counts). Increments are atomic upserts.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    async def increment_views(self, asset_id: str) -> None:
        now = utcnow()
        stmt = self._db.upsert(AssetStatsRow).values(asset_id=asset_id, views=1, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[AssetStatsRow.asset_id],
            set_={"views": AssetStatsRow.views + 1, "updated_at": now},
        )
        async with self._db.session() as s:
            await s.execute(stmt)
            await s.commit()

    async def get(self, asset_id: str) -> Optional[AssetStatsRow]:
        async with self._db.session() as s:
            return await s.get(AssetStatsRow, asset_id)


class CategoryRepository:
    def __init__(self, db: Database) -> None:
        self._db = db

    async def all(self) -> List[CategoryRow]:
        async with self._db.session() as s:
            return list(await s.scalars(select(CategoryRow).order_by(CategoryRow.name)))
