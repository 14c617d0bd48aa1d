"""
Classification of answer submission responses.

The puzzle service replies to a submission with a full HTML page. The useful
part is the text of the ``<article>`` inside ``<main>``; everything else is
site chrome. The phrases we look for live in a ``Vocabulary`` so a change on
the remote side is a data update here, not a logic change.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Union

from bs4 import BeautifulSoup

from .errors import ClassificationError


class Direction(str, Enum):
    TOO_HIGH = "too_high"
    TOO_LOW = "too_low"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class Accepted:
    pass


@dataclass(frozen=True)
class WrongAnswer:
    direction: Direction = Direction.UNSPECIFIED


@dataclass(frozen=True)
class RateLimited:
    wait: str


@dataclass(frozen=True)
class WrongLevel:
    pass


@dataclass(frozen=True)
class Unrecognized:
    raw_text: str


Classification = Union[Accepted, WrongAnswer, RateLimited, WrongLevel, Unrecognized]


@dataclass(frozen=True)
class Vocabulary:
    """Phrases and selector the classifier matches against."""
    container: str = "main > article"
    accepted: str = "That's the right answer"
    wrong_answer: str = "That's not the right answer"
    too_high: str = "too high"
    too_low: str = "too low"
    rate_limited: str = "You gave an answer too recently"
    wait_prefix: str = "You have "
    wait_suffix: str = " left to wait."
    wrong_level: str = "You don't seem to be solving the right level"


DEFAULT_VOCABULARY = Vocabulary()


@dataclass(frozen=True)
class SubmissionRecord:
    """One actual submission to the service. Never mutated once logged."""
    timestamp: datetime
    answer: str
    classification: Classification


def extract_message(html: str, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> str:
    """
    Pull the primary message text out of a response page.

    Raises:
        ClassificationError: If the message container is missing
    """
    soup = BeautifulSoup(html, "html.parser")
    node = soup.select_one(vocabulary.container)
    if node is None:
        raise ClassificationError(
            f"No '{vocabulary.container}' element in submission response: {html[:200]!r}"
        )
    return node.get_text()


def _extract_wait(text: str, vocabulary: Vocabulary) -> str:
    _, found, rest = text.partition(vocabulary.wait_prefix)
    if not found:
        raise ClassificationError(f"Rate limit message without a wait time: {text[:200]!r}")
    wait, found, _ = rest.partition(vocabulary.wait_suffix)
    if not found:
        raise ClassificationError(f"Rate limit message without a wait time: {text[:200]!r}")
    return wait


def classify_text(text: str, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> Classification:
    """Classify already-extracted message text. Checks run in priority order."""
    if vocabulary.accepted in text:
        return Accepted()

    if vocabulary.wrong_answer in text:
        if vocabulary.too_high in text:
            return WrongAnswer(Direction.TOO_HIGH)
        if vocabulary.too_low in text:
            return WrongAnswer(Direction.TOO_LOW)
        return WrongAnswer(Direction.UNSPECIFIED)

    if vocabulary.rate_limited in text:
        return RateLimited(_extract_wait(text, vocabulary))

    if vocabulary.wrong_level in text:
        return WrongLevel()

    return Unrecognized(text)


def classify_response(html: str, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> Classification:
    """Classify a raw submission response page."""
    return classify_text(extract_message(html, vocabulary), vocabulary)


def classify_submission(
    html: str,
    answer: str,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    now: datetime | None = None,
) -> SubmissionRecord:
    """Classify a response and stamp it as a submission record."""
    return SubmissionRecord(
        timestamp=now or datetime.now(timezone.utc),
        answer=answer,
        classification=classify_response(html, vocabulary),
    )


def describe(classification: Classification) -> str:
    """Short human-readable label."""
    if isinstance(classification, Accepted):
        return "accepted"
    if isinstance(classification, WrongAnswer):
        if classification.direction is Direction.UNSPECIFIED:
            return "wrong answer"
        return f"wrong answer, {classification.direction.value.replace('_', ' ')}"
    if isinstance(classification, RateLimited):
        return f"rate limited, {classification.wait} left to wait"
    if isinstance(classification, WrongLevel):
        return "wrong level"
    return "unrecognized response"


# Serialization used by the config file

def classification_to_dict(classification: Classification) -> Dict[str, Any]:
    if isinstance(classification, Accepted):
        return {"kind": "accepted"}
    if isinstance(classification, WrongAnswer):
        return {"kind": "wrong_answer", "direction": classification.direction.value}
    if isinstance(classification, RateLimited):
        return {"kind": "rate_limited", "wait": classification.wait}
    if isinstance(classification, WrongLevel):
        return {"kind": "wrong_level"}
    return {"kind": "unrecognized", "raw_text": classification.raw_text}


def classification_from_dict(data: Dict[str, Any]) -> Classification:
    kind = data.get("kind")
    if kind == "accepted":
        return Accepted()
    if kind == "wrong_answer":
        return WrongAnswer(Direction(data.get("direction", Direction.UNSPECIFIED.value)))
    if kind == "rate_limited":
        return RateLimited(data["wait"])
    if kind == "wrong_level":
        return WrongLevel()
    if kind == "unrecognized":
        return Unrecognized(data.get("raw_text", ""))
    raise ValueError(f"Unknown classification kind: {kind!r}")


def record_to_dict(record: SubmissionRecord) -> Dict[str, Any]:
    return {
        "timestamp": record.timestamp.isoformat(),
        "answer": record.answer,
        "result": classification_to_dict(record.classification),
    }


def record_from_dict(data: Dict[str, Any]) -> SubmissionRecord:
    return SubmissionRecord(
        timestamp=datetime.fromisoformat(data["timestamp"]),
        answer=data["answer"],
        classification=classification_from_dict(data["result"]),
    )
