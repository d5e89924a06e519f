# repository/progress_repository.py
from datetime import datetime
from typing import List, Optional
from sqlalchemy import select
from config.database import Database
from model.db import ProgressRow


class ProgressRepository:
    """
    One row per (subject_id, asset_id). Writes are single-statement upserts, so the
    store serializes concurrent writers and the last arrival wins.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    async def upsert(
        self, subject_id: str, asset_id: str, percent: int, at: datetime
    ) -> ProgressRow:
        stmt = self._db.upsert(ProgressRow).values(
            subject_id=subject_id, asset_id=asset_id, percent=percent, updated_at=at
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[ProgressRow.subject_id, ProgressRow.asset_id],
            set_={"percent": stmt.excluded.percent, "updated_at": stmt.excluded.updated_at},
        )
        async with self._db.session() as s:
            await s.execute(stmt)
            await s.commit()
            row = await s.scalar(
                select(ProgressRow).where(
                    ProgressRow.subject_id == subject_id,
                    ProgressRow.asset_id == asset_id,
                )
            )
        return row

    async def get(self, subject_id: str, asset_id: str) -> Optional[ProgressRow]:
        async with self._db.session() as s:
            return await s.scalar(
                select(ProgressRow).where(
                    ProgressRow.subject_id == subject_id,
                    ProgressRow.asset_id == asset_id,
                )
            )

    async def list_for_subject(self, subject_id: str, limit: int = 50) -> List[ProgressRow]:
        async with self._db.session() as s:
            rows = await s.scalars(
                select(ProgressRow)
                .where(ProgressRow.subject_id == subject_id)
                .order_by(ProgressRow.updated_at.desc(), ProgressRow.id.desc())
                .limit(limit)
            )
            return list(rows)

