"""
Problem Phrase Analyzer

Turns free-text survey answers into a ranked list of exactly five
"top problems":

1. Find the first word in each answer that contains a problem indicator
   (on its own, or joined with the following word).
2. Take up to 5 words either side of it as the candidate phrase.
3. Normalize and count identical phrases.
4. Pad with fixed fallback problems until five distinct phrases exist.
5. Rank by count, ties keeping first-seen order.

Pure computation: no I/O, safe to call from any coroutine.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

# Lowercase substrings, matched anywhere inside a word or word pair.
# English only.
PROBLEM_INDICATORS: tuple[str, ...] = (
    "problem",
    "issue",
    "concern",
    "difficult",
    "challenging",
    "bad",
    "poor",
    "slow",
    "delay",
    "wait",
    "queue",
    "long line",
    "crowded",
    "confusing",
    "unclear",
    "missing",
    "lack of",
    "insufficient",
    "inadequate",
    "not enough",
)

FALLBACK_PROBLEMS: tuple[str, ...] = (
    "Long wait times at immigration counters",
    "Insufficient signage in multiple languages",
    "Limited availability of water stations",
    "Crowding at key ritual sites",
    "Transportation delays between locations",
)

# Synthetic counts, indexed by how many fallbacks have been inserted so far
FALLBACK_COUNTS: tuple[int, ...] = (50, 45, 40, 35, 30)

TOP_N = 5
CONTEXT_WINDOW = 5
MAX_PHRASE_LENGTH = 60
TRUNCATED_LENGTH = MAX_PHRASE_LENGTH - 3


@dataclass(frozen=True)
class RankedProblem:
    """One entry of the top-problems list."""

    problem: str
    count: int
    rank: int

    def to_dict(self) -> dict:
        return {"problem": self.problem, "count": self.count, "rank": self.rank}


@dataclass
class ProblemAnalysis:
    """Result of analysing one text corpus. Always holds TOP_N entries."""

    counts: list[RankedProblem] = field(default_factory=list)
    texts_analyzed: int = 0
    phrases_extracted: int = 0

    @property
    def top_problems(self) -> list[str]:
        return [item.problem for item in self.counts]

    def to_snapshot_payload(self) -> dict:
        """JSON stored in ``trend_history.problems``."""
        return {
            "list": self.top_problems,
            "counts": [item.to_dict() for item in self.counts],
        }


def clean_problem_phrase(phrase: str) -> str:
    """Collapse whitespace, capitalize the first letter, cap the length at 60."""
    cleaned = " ".join(phrase.split())
    cleaned = cleaned[:1].upper() + cleaned[1:]
    if len(cleaned) > MAX_PHRASE_LENGTH:
        cleaned = cleaned[:TRUNCATED_LENGTH] + "..."
    return cleaned


def _contains_indicator(candidate: str) -> bool:
    return any(indicator in candidate for indicator in PROBLEM_INDICATORS)


def find_indicator_position(words: list[str]) -> Optional[int]:
    """
    Index of the first lowercase word that flags a problem, or None.

    Multi-word indicators ("long line", "lack of") are caught by also
    testing each word joined to its successor.
    """
    for i, word in enumerate(words):
        following = words[i + 1] if i + 1 < len(words) else ""
        if _contains_indicator(word) or _contains_indicator(f"{word} {following}"):
            return i
    return None


def extract_problem_phrase(text: str) -> Optional[str]:
    """
    Normalized context window around the first indicator in ``text``.

    Only one phrase is taken per answer even when several indicators occur.
    """
    words = text.lower().split()
    position = find_indicator_position(words)
    if position is None:
        return None

    start = max(0, position - CONTEXT_WINDOW)
    end = min(len(words), position + CONTEXT_WINDOW + 1)
    return clean_problem_phrase(" ".join(words[start:end]))


def count_problem_phrases(texts: Iterable[str]) -> dict[str, int]:
    """Occurrences of each extracted phrase, in first-seen order."""
    counts: dict[str, int] = {}
    for text in texts:
        phrase = extract_problem_phrase(text)
        if phrase is None:
            continue
        counts[phrase] = counts.get(phrase, 0) + 1
    return counts


def pad_with_fallbacks(counts: dict[str, int]) -> dict[str, int]:
    """
    Top up ``counts`` with fallback problems until TOP_N distinct phrases exist.

    Fallbacks already present are skipped. The k-th fallback actually
    inserted gets FALLBACK_COUNTS[k], whatever its position in
    FALLBACK_PROBLEMS.
    """
    padded = dict(counts)
    inserted = 0
    for fallback in FALLBACK_PROBLEMS:
        if len(padded) >= TOP_N:
            break
        if fallback in padded:
            continue
        padded[fallback] = FALLBACK_COUNTS[inserted]
        inserted += 1
    return padded


def rank_problems(counts: dict[str, int]) -> list[RankedProblem]:
    """Highest counts first; equal counts keep insertion order."""
    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [
        RankedProblem(problem=problem, count=count, rank=index + 1)
        for index, (problem, count) in enumerate(ordered[:TOP_N])
    ]


def analyse_texts(texts: Iterable[str]) -> ProblemAnalysis:
    """Run the full extraction pipeline over a text corpus."""
    texts = list(texts)
    extracted = count_problem_phrases(texts)
    ranked = rank_problems(pad_with_fallbacks(extracted))

    return ProblemAnalysis(
        counts=ranked,
        texts_analyzed=len(texts),
        phrases_extracted=sum(extracted.values()),
    )
