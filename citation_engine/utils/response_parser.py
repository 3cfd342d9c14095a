"""Defensive parsing of AI search responses.

The AI search collaborator is untrusted: it may wrap JSON in markdown
fences, surround it with prose, or return entries with missing or invalid
fields. Each entry is validated into either a ``ParsedCitationCandidate``
or a ``ParseFailure`` carrying the reason it was discarded.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from ..core.exceptions import CandidateParseError
from .url_utils import is_http_url

_DECODER = json.JSONDecoder()
_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


class ParsedCitationCandidate(BaseModel):
    """A citation candidate that passed schema validation."""

    url: str
    source_name: str = Field(
        default="", validation_alias=AliasChoices("sourceName", "source_name", "source")
    )
    description: str = ""
    relevance: str = ""
    language: str | None = None
    supports_sentence: str | None = Field(
        default=None, validation_alias=AliasChoices("supportsSentence", "supports_sentence")
    )
    suggested_anchor: str | None = Field(
        default=None, validation_alias=AliasChoices("suggestedAnchor", "suggested_anchor")
    )
    confidence_score: float | None = Field(
        default=None, validation_alias=AliasChoices("confidenceScore", "confidence_score")
    )

    model_config = {"frozen": True}

    @field_validator("url")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        value = value.strip()
        if not is_http_url(value):
            raise ValueError("url must be an absolute http(s) URL")
        return value

    @field_validator("source_name", "description", "relevance", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _normalize_confidence(cls, value: Any) -> float | None:
        # Optional hint: unusable values are dropped, 0-100 scale accepted
        try:
            score = float(value)
        except (TypeError, ValueError):
            return None
        if score > 1.0:
            score = score / 100.0
        return min(1.0, max(0.0, score))


class ParseFailure(BaseModel):
    """An entry discarded during parsing, with the reason."""

    index: int
    reason: str
    raw: Any = None

    model_config = {"frozen": True}


ParsedEntry = ParsedCitationCandidate | ParseFailure


def extract_json_array(text: str) -> list[Any]:
    """Find and decode the JSON array embedded in ``text``.

    Every ``[`` is tried in turn. The first array holding an object wins, so
    footnote markers such as ``[1][2]`` or echoed ``[s0]`` ids around the
    payload are ignored; failing that, the first decodable array is used.

    Raises:
        CandidateParseError: If no decodable JSON array is present
    """
    cleaned = _FENCE.sub("", text or "")
    fallback: list[Any] | None = None
    last_error: json.JSONDecodeError | None = None

    index = cleaned.find("[")
    while index != -1:
        try:
            data, _ = _DECODER.raw_decode(cleaned, index)
        except json.JSONDecodeError as e:
            last_error = e
        else:
            if isinstance(data, list):
                if any(isinstance(item, dict) for item in data):
                    return data
                if fallback is None:
                    fallback = data
        index = cleaned.find("[", index + 1)

    if fallback is not None:
        return fallback
    if last_error is not None:
        raise CandidateParseError(f"Malformed JSON array: {last_error.msg}") from last_error
    raise CandidateParseError("No JSON array found in AI search response")


def parse_candidates(text: str) -> list[ParsedEntry]:
    """Validate every entry of the response's JSON array.

    Raises:
        CandidateParseError: If the response holds no JSON array at all
    """
    entries: list[ParsedEntry] = []
    for index, raw in enumerate(extract_json_array(text)):
        if not isinstance(raw, dict):
            entries.append(ParseFailure(index=index, reason="entry is not an object", raw=raw))
            continue
        try:
            entries.append(ParsedCitationCandidate.model_validate(raw))
        except ValidationError as e:
            reason = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'entry'}: {err['msg']}"
                for err in e.errors()
            )
            entries.append(ParseFailure(index=index, reason=reason, raw=raw))
    return entries
