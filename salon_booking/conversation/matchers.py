"""
Ordered matcher strategies for free-text selection.

Each strategy takes the customer's text and the options currently on
offer, and returns ``Matched(value)`` or ``Unmatched()``. Strategies are
composed left to right and the first match wins.

Usage:
    result = select_option("2", offerings, name_of=lambda o: o.name)
    if isinstance(result, Matched):
        offering = result.value
"""

import re
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Optional, Sequence, TypeVar, Union

T = TypeVar("T")

# Substring matches on very short input ("a", "ha") would hit almost any name.
MIN_SUBSTRING_LENGTH = 3


@dataclass(frozen=True)
class Matched(Generic[T]):
    value: T


@dataclass(frozen=True)
class Unmatched:
    reason: str = ""


MatchResult = Union[Matched[T], Unmatched]
Strategy = Callable[[str, Sequence[T]], "MatchResult[T]"]


def normalize_text(text: str) -> str:
    """Lowercase and collapse whitespace."""
    return " ".join(text.strip().lower().split())


def match_index(text: str, options: Sequence[T]) -> "MatchResult[T]":
    """1-based list position, e.g. "2" or "2." or "#2"."""
    match = re.fullmatch(r"#?\s*(\d{1,3})\s*[.)]?", normalize_text(text))
    if not match:
        return Unmatched("not a number")
    position = int(match.group(1))
    if 1 <= position <= len(options):
        return Matched(options[position - 1])
    return Unmatched(f"no option {position}")


def exact_name(name_of: Callable[[T], str]) -> Strategy:
    """Case-insensitive whole-name equality."""

    def strategy(text: str, options: Sequence[T]) -> "MatchResult[T]":
        wanted = normalize_text(text)
        for option in options:
            if normalize_text(name_of(option)) == wanted:
                return Matched(option)
        return Unmatched("no exact name")

    return strategy


def substring_name(name_of: Callable[[T], str]) -> Strategy:
    """Case-insensitive containment in either direction."""

    def strategy(text: str, options: Sequence[T]) -> "MatchResult[T]":
        wanted = normalize_text(text)
        if not wanted:
            return Unmatched("empty")
        for option in options:
            name = normalize_text(name_of(option))
            if len(wanted) >= MIN_SUBSTRING_LENGTH and wanted in name:
                return Matched(option)
            if name and name in wanted:
                return Matched(option)
        return Unmatched("no partial name")

    return strategy


def first_match(
    text: str, options: Sequence[T], strategies: Iterable[Strategy]
) -> "MatchResult[T]":
    """Run strategies in order and return the first ``Matched``."""
    for strategy in strategies:
        result = strategy(text, options)
        if isinstance(result, Matched):
            return result
    return Unmatched("no strategy matched")


def select_option(
    text: str, options: Sequence[T], name_of: Callable[[T], str]
) -> "MatchResult[T]":
    """Index, then exact name, then substring."""
    return first_match(
        text,
        options,
        [match_index, exact_name(name_of), substring_name(name_of)],
    )


def contains_keyword(text: str, keywords: Iterable[str]) -> Optional[str]:
    """Return the first keyword present as a whole word or phrase, if any."""
    cleaned = normalize_text(text)
    for keyword in keywords:
        if re.search(rf"\b{re.escape(keyword)}\b", cleaned):
            return keyword
    return None


def is_exact_keyword(text: str, keywords: Iterable[str]) -> bool:
    """Whether the whole message is one of the keywords, ignoring punctuation."""
    cleaned = re.sub(r"[^\w\s]", "", normalize_text(text)).strip()
    return cleaned in set(keywords)
