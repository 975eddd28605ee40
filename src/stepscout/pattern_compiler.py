"""Compile raw step-definition text into anchored, case-insensitive matchers.

Step text comes in two flavours:

* **regex-like**: ``^I have (\\d+) cukes$``. Kept as written; only the
  ``^``/``$`` anchors are added when missing.
* **templated**: ``User: I log in with {string}``. Every ``{...}``
  placeholder becomes a ``.*`` wildcard and the literal segments between
  placeholders are escaped so they match exactly.

Detection is heuristic (not a cucumber-expression grammar): text that starts
with ``^``, ends with ``$``, contains a backslash, or contains both ``(`` and
``)`` is treated as regex-like.

Public API:

* ``compile_pattern(raw)``: raw text to ``CompiledPattern``.
* ``looks_like_regex(raw)`` / ``to_regex_source(raw)``: the two steps above.
* ``extract_screen_tag(raw)``: leading ``Label:`` prefix, if any.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PLACEHOLDER_RE = re.compile(r"\{[^}]+\}")
WILDCARD = ".*"
DISPLAY_PLACEHOLDER = "{string}"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class PatternCompileError(ValueError):
    """Raised when raw step text does not compile to a valid regex."""

    def __init__(self, raw: str, message: str) -> None:
        super().__init__(f"Cannot compile step pattern {raw!r}: {message}")
        self.raw = raw
        self.message = message


# ---------------------------------------------------------------------------
# Compiled pattern
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """An anchored, case-insensitive matcher plus the text it came from."""

    raw: str
    source: str
    regex: re.Pattern[str]
    segments: tuple[str, ...] = ()  # literal segments; empty for regex-like

    @property
    def templated(self) -> bool:
        return bool(self.segments)

    def matches(self, text: str) -> bool:
        """True when the whole of *text* matches (never a prefix match)."""
        return self.regex.fullmatch(text) is not None

    @property
    def display(self) -> str:
        """Human-readable form of the pattern.

        Anchors are stripped. Templated patterns drop their escaping and show
        each wildcard as ``{string}``, which approximates the authored text
        (``{int}`` and friends all come back as ``{string}``). A literal ``.*``
        in templated text is shown as ``{string}`` too.
        """
        if self.templated:
            joined = DISPLAY_PLACEHOLDER.join(self.segments)
            return joined.replace(WILDCARD, DISPLAY_PLACEHOLDER)
        text = self.source
        if text.startswith("^"):
            text = text[1:]
        if text.endswith("$"):
            text = text[:-1]
        return text


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------

def looks_like_regex(raw: str) -> bool:
    """Heuristic check for text already written in regex syntax."""
    has_groups = "(" in raw and ")" in raw
    return (
        raw.startswith("^")
        or raw.endswith("$")
        or "\\" in raw
        or has_groups
    )


def _anchor(source: str) -> str:
    if not source.startswith("^"):
        source = "^" + source
    if not source.endswith("$"):
        source += "$"
    return source


def split_template(raw: str) -> tuple[str, ...]:
    """Split templated text into the literal segments around placeholders.

    ``"a {x} b"`` -> ``("a ", " b")``. A placeholder at either end yields an
    empty leading/trailing segment, so ``len(segments) - 1`` is always the
    number of placeholders.
    """
    return tuple(PLACEHOLDER_RE.split(raw))


def to_regex_source(raw: str) -> str:
    """Translate raw step text into anchored regex source (not compiled)."""
    if looks_like_regex(raw):
        return _anchor(raw)
    escaped = WILDCARD.join(re.escape(seg) for seg in split_template(raw))
    return _anchor(escaped)


def compile_pattern(raw: str) -> CompiledPattern:
    """Compile raw step-definition text into a ``CompiledPattern``.

    Raises:
        PatternCompileError: regex-like text with malformed syntax.
    """
    source = to_regex_source(raw)
    try:
        regex = re.compile(source, re.IGNORECASE)
    except re.error as exc:
        raise PatternCompileError(raw, str(exc)) from exc
    segments = () if looks_like_regex(raw) else split_template(raw)
    return CompiledPattern(raw=raw, source=source, regex=regex, segments=segments)


def extract_screen_tag(raw: str) -> str:
    """Return the ``Label`` of a leading ``Label:`` prefix, or ``""``.

    The colon must come before the first space so clock times such as
    ``"Wait 12:00 for response"`` are not read as a tag.
    """
    colon = raw.find(":")
    if colon <= 0:
        return ""
    first_space = raw.find(" ")
    if first_space != -1 and colon > first_space:
        return ""
    return raw[:colon].strip()
