"""
Trend Analysis Service

Runs the problem analyzer over a range's survey corpus and stores the
result as that range's trend snapshot.

Persistence follows replace-not-append: every row for the range is
deleted, then one new row is inserted, all inside the caller's session
transaction. Nothing is committed until both steps finished, so a failed or
cancelled run leaves the previous snapshot in place.

Runs for the same range are serialized per process with an asyncio.Lock.
Writers in other processes can still interleave their delete/insert steps;
the last insert wins.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from umrah_feedback.exceptions import SnapshotDeleteError, SnapshotInsertError
from umrah_feedback.models.trend_history import TrendHistory
from umrah_feedback.services.problem_analyzer import (
    FALLBACK_COUNTS,
    ProblemAnalysis,
    RankedProblem,
    analyse_texts,
)
from umrah_feedback.services.text_corpus import fetch_corpus, normalize_range

logger = logging.getLogger(__name__)


class RangeLocks:
    """One asyncio.Lock per range token, created on first use."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, range_value: str) -> asyncio.Lock:
        lock = self._locks.get(range_value)
        if lock is None:
            lock = self._locks[range_value] = asyncio.Lock()
        return lock


range_locks = RangeLocks()


@dataclass
class TrendAnalysisResult:
    """Outcome of one persisted analysis run."""

    range: str
    analysis: ProblemAnalysis
    total_surveys_analyzed: int
    analysed_at: datetime
    snapshot_id: Optional[int] = None
    # Set when clearing old rows failed; stale rows may coexist with the new one
    delete_error: Optional[SnapshotDeleteError] = None

    def to_response(self) -> dict:
        return {
            "top_problems": self.analysis.top_problems,
            "problem_counts": [item.to_dict() for item in self.analysis.counts],
            "range": self.range,
            "total_surveys_analyzed": self.total_surveys_analyzed,
        }


async def _delete_range_rows(db: AsyncSession, range_value: str) -> None:
    await db.execute(delete(TrendHistory).where(TrendHistory.range == range_value))


async def replace_snapshot(
    db: AsyncSession,
    range_value: str,
    analysis: ProblemAnalysis,
    analysed_at: datetime,
) -> tuple[TrendHistory, Optional[SnapshotDeleteError]]:
    """
    Delete the range's existing rows, then insert one new snapshot row.

    The delete runs in a SAVEPOINT: if it fails only the delete is rolled
    back, the failure is logged and returned, and the insert still happens.
    Does not commit.

    Raises:
        SnapshotInsertError: the insert (flush) failed.
    """
    delete_error = None
    try:
        async with db.begin_nested():
            await _delete_range_rows(db, range_value)
    except SQLAlchemyError as e:
        delete_error = SnapshotDeleteError(e)
        logger.error("Error clearing previous trend history for range %s: %s", range_value, e)

    snapshot = TrendHistory(
        range=range_value,
        problems=analysis.to_snapshot_payload(),
        analysed_at=analysed_at,
    )
    try:
        db.add(snapshot)
        await db.flush()
    except SQLAlchemyError as e:
        logger.error("Error saving trend history for range %s: %s", range_value, e)
        raise SnapshotInsertError(e) from e

    return snapshot, delete_error


async def run_trend_analysis(
    db: AsyncSession,
    range_token: Optional[str] = None,
    now: Optional[datetime] = None,
    locks: Optional[RangeLocks] = None,
) -> TrendAnalysisResult:
    """
    Fetch the corpus for ``range_token``, analyse it and persist the snapshot.

    Unknown range tokens are treated as "1m". Commits on success, rolls back
    on any failure.

    Raises:
        CorpusFetchError: surveys could not be read; nothing written.
        SnapshotInsertError: the snapshot could not be stored.
    """
    range_value = normalize_range(range_token)
    locks = locks or range_locks

    async with locks.get(range_value):
        try:
            corpus = await fetch_corpus(db, range_value, now)
            analysis = analyse_texts(corpus.texts)
            logger.debug("Generated top problems for %s: %s", range_value, analysis.top_problems)

            analysed_at = datetime.utcnow()
            snapshot, delete_error = await replace_snapshot(db, range_value, analysis, analysed_at)
            try:
                await db.commit()
            except SQLAlchemyError as e:
                logger.error("Error committing trend history for range %s: %s", range_value, e)
                raise SnapshotInsertError(e) from e
        except BaseException:
            # CancelledError included: a cancelled run must not leave pending writes
            await db.rollback()
            raise

    logger.info(
        "Trend analysis complete (range=%s, surveys=%d, texts=%d, phrases=%d)",
        range_value,
        corpus.total_surveys,
        analysis.texts_analyzed,
        analysis.phrases_extracted,
    )

    return TrendAnalysisResult(
        range=range_value,
        analysis=analysis,
        total_surveys_analyzed=corpus.total_surveys,
        analysed_at=analysed_at,
        snapshot_id=snapshot.id,
        delete_error=delete_error,
    )


async def get_latest_snapshot(db: AsyncSession, range_token: Optional[str] = None) -> Optional[TrendHistory]:
    """Most recent snapshot overall, or for one range when given."""
    query = select(TrendHistory).order_by(TrendHistory.analysed_at.desc(), TrendHistory.id.desc()).limit(1)
    if range_token:
        query = query.where(TrendHistory.range == normalize_range(range_token))
    result = await db.execute(query)
    return result.scalar_one_or_none()


def _legacy_counts(phrases: list) -> list[RankedProblem]:
    return [
        RankedProblem(problem=str(p), count=FALLBACK_COUNTS[0] - index * 5, rank=index + 1)
        for index, p in enumerate(phrases)
    ]


def snapshot_problem_counts(snapshot: TrendHistory) -> list[RankedProblem]:
    """
    Ranked problems stored on a snapshot.

    Understands both the ``{"list", "counts"}`` object and the older bare
    list of strings, which gets the fallback count progression.
    """
    problems = snapshot.problems
    if isinstance(problems, list):
        return _legacy_counts(problems)
    if not isinstance(problems, dict):
        return []

    counts = problems.get("counts")
    if isinstance(counts, list):
        return [
            RankedProblem(
                problem=str(item.get("problem", "")),
                count=int(item.get("count", 0)),
                rank=int(item.get("rank") or index + 1),
            )
            for index, item in enumerate(counts)
            if isinstance(item, dict)
        ]

    listed = problems.get("list")
    if isinstance(listed, list):
        return _legacy_counts(listed)
    return []
