"""Shared utilities used across the booking engine."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware current time, the default clock for all components."""
    return datetime.now(timezone.utc)


def normalize_tag(value: str) -> str:
    """Lower-case and trim a skill/language tag or answer fragment.

    Examples:
        >>> normalize_tag("  Spanish ")
        'spanish'
    """
    return value.strip().lower()


def tokenize(text: str) -> list[str]:
    """Split free text into lower-cased whitespace-separated tokens.

    Examples:
        >>> tokenize("Need  help with\\tTAXES")
        ['need', 'help', 'with', 'taxes']
    """
    return text.lower().split()


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Half-open interval overlap: ``[a_start, a_end)`` vs ``[b_start, b_end)``.

    Covers a starting inside b, a ending inside b, a containing b and
    exact matches. Back-to-back intervals do not overlap.
    """
    return a_start < b_end and b_start < a_end
