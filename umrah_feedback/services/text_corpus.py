"""
Text Corpus Extractor

Resolves a reporting range ("1m", "6m", "1y") to a cutoff and flattens the
free-text answers of every survey submitted since then.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional
import logging

from dateutil.relativedelta import relativedelta
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from umrah_feedback.exceptions import CorpusFetchError
from umrah_feedback.models.survey import Survey

logger = logging.getLogger(__name__)

DEFAULT_RANGE = "1m"

# Calendar offsets; days past the end of the target month clamp to its last day
RANGE_OFFSETS: dict[str, relativedelta] = {
    "1m": relativedelta(months=1),
    "6m": relativedelta(months=6),
    "1y": relativedelta(years=1),
}

TEXT_RESPONSE_TYPE = "text"


@dataclass
class CorpusResult:
    """Text answers gathered for one analysis run."""

    range: str
    cutoff: datetime
    texts: list[str] = field(default_factory=list)
    total_surveys: int = 0


def normalize_range(token: Optional[str]) -> str:
    """Map any unknown or missing range token to the one-month default."""
    if token in RANGE_OFFSETS:
        return token
    return DEFAULT_RANGE


def resolve_cutoff(range_token: Optional[str], now: Optional[datetime] = None) -> datetime:
    """Earliest ``created_at`` included for a range."""
    now = now or datetime.utcnow()
    return now - RANGE_OFFSETS[normalize_range(range_token)]


def _responses_of(answers: Any) -> list:
    # answers is free-form JSON written by clients; tolerate anything
    if not isinstance(answers, dict):
        return []
    responses = answers.get("responses")
    if not isinstance(responses, list):
        return []
    return responses


def extract_text_responses(answer_sets: Iterable[Any]) -> list[str]:
    """
    Trimmed, non-blank text answers in survey order, then response order.

    ``answer_sets`` are the ``answers`` payloads of the surveys. Items of any
    other type, and text items without a string value, are skipped.
    """
    texts: list[str] = []
    for answers in answer_sets:
        for item in _responses_of(answers):
            if not isinstance(item, dict) or item.get("type") != TEXT_RESPONSE_TYPE:
                continue
            value = item.get("value")
            if not isinstance(value, str):
                continue
            value = value.strip()
            if value:
                texts.append(value)
    return texts


async def fetch_corpus(
    db: AsyncSession,
    range_token: Optional[str],
    now: Optional[datetime] = None,
) -> CorpusResult:
    """
    Load every survey submitted on or after the range cutoff and extract its
    text answers.

    Raises:
        CorpusFetchError: the survey query failed. No partial corpus is
            returned.
    """
    range_value = normalize_range(range_token)
    cutoff = resolve_cutoff(range_value, now)

    query = (
        select(Survey.title, Survey.answers)
        .where(Survey.created_at >= cutoff)
        .order_by(Survey.created_at, Survey.id)
    )
    try:
        result = await db.execute(query)
        rows = result.all()
    except SQLAlchemyError as e:
        logger.error("Error fetching surveys since %s: %s", cutoff.isoformat(), e)
        raise CorpusFetchError(e) from e

    logger.info("Found %d surveys for analysis (range=%s)", len(rows), range_value)

    return CorpusResult(
        range=range_value,
        cutoff=cutoff,
        texts=extract_text_responses(row.answers for row in rows),
        total_surveys=len(rows),
    )
