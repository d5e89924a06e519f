# service/progress_service.py
import logging
from datetime import datetime, timezone
from typing import Callable, List
from model.api import ProgressRecord
from model.db import ProgressRow
from repository.namespaces import progress_pattern, progress_prefix
from repository.progress_repository import ProgressRepository
from service.cache_service import SUBJECT_PRIVATE, TieredCache

logger = logging.getLogger(__name__)


def _to_record(row: ProgressRow) -> ProgressRecord:
    return ProgressRecord(
        subjectId=row.subject_id,
        assetId=row.asset_id,
        percent=row.percent,
        updatedAt=row.updated_at,
    )


class ProgressService:
    def __init__(
        self,
        progress: ProgressRepository,
        cache: TieredCache,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._progress = progress
        self._cache = cache
        self._clock = clock

    async def upsert(self, subject_id: str, asset_id: str, percent: int) -> ProgressRecord:
        """
        Record the latest observed progress for (subject, asset).
        Equal or lower percents overwrite too: arrival order wins, since debounced
        flushes from one player may land out of order.
        """
        row = await self._progress.upsert(subject_id, asset_id, percent, self._clock())
        logger.info("progress.upsert subject=%s asset=%s pct=%d", subject_id, asset_id, percent)

        # Stale reads are tolerated, a failed invalidation must not fail the write
        await self._cache.invalidate(progress_pattern(subject_id))
        return _to_record(row)

    async def list_for_subject(self, subject_id: str) -> List[dict]:
        async def compute() -> List[dict]:
            rows = await self._progress.list_for_subject(subject_id)
            return [_to_record(r).model_dump(mode="json") for r in rows]

        return await self._cache.get_or_compute(
            f"{progress_prefix(subject_id)}:list", compute, SUBJECT_PRIVATE
        )
