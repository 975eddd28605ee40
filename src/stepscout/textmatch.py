"""Fuzzy scoring primitives for interactive step search.

Pure text operations with zero domain dependencies. A candidate is scored in
three bands so that, for one query, a direct substring hit always outranks a
punctuation-insensitive hit, which always outranks a loose subsequence hit:

* ``300 - index``: query is a substring of the lowercased text.
* ``200 - index``: substring after stripping non-alphanumerics from both.
* ``100 - gap``  : query is a subsequence of a short window of the text.

``None`` (``NO_MATCH``) means the candidate is rejected.
"""
from __future__ import annotations

import re

NO_MATCH = None

EXACT_BASE = 300
CLEAN_BASE = 200
SUBSEQUENCE_BASE = 100

_WHITESPACE_RE = re.compile(r"\s+")
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z])(?=[A-Z])")
_WORD_SPLIT_RE = re.compile(r"[^a-z0-9]+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")

_USER_PREFIX = "user"


def tokenize_query(query: str) -> list[str]:
    """Split a query into lowercase search tokens.

    The query is lowercased first, then split on whitespace and at
    camel-case boundaries. The boundary split runs on lowercased text, so
    ``logIn`` stays one token (``login``). A lone token that
    glues ``user`` onto something else (``userlogin``) is split in two, since
    step text usually reads ``User: ...``.

    Args:
        query: Raw query text as typed.

    Returns:
        Non-empty lowercase tokens in query order.
    """
    trimmed = query.strip().lower()
    if not trimmed:
        return []
    tokens = [
        part
        for piece in _WHITESPACE_RE.split(trimmed)
        for part in _CAMEL_BOUNDARY_RE.split(piece)
        if part.strip()
    ]
    if (
        len(tokens) == 1
        and tokens[0].startswith(_USER_PREFIX)
        and len(tokens[0]) > len(_USER_PREFIX)
    ):
        return [_USER_PREFIX, tokens[0][len(_USER_PREFIX):]]
    return tokens


def tokens_present(text: str, tokens: list[str]) -> bool:
    """True when every token is contained in some word of *text*.

    Words are the runs of ``[a-z0-9]`` in the lowercased text. Containment,
    not equality: ``"log"`` is present in ``"I login"``.
    """
    if not tokens:
        return True
    words = _WORD_SPLIT_RE.split(text.lower())
    return all(any(token in word for word in words) for token in tokens)


def strip_non_alnum(text: str) -> str:
    """Drop everything except ``[a-z0-9]`` from already-lowercased text."""
    return _NON_ALNUM_RE.sub("", text)


def subsequence_gap(text: str, query: str) -> int | None:
    """Extra characters in the first window holding *query* as a subsequence.

    Scans once, left to right, matching query characters greedily from the
    first character that starts a partial match, and stops at the first
    completed match. This is not a global minimum-window search; ranking
    depends on this exact greedy behaviour.

    Returns:
        ``window_length - len(query)``, or ``None`` if *query* is not a
        subsequence of *text*.
    """
    matched = 0
    first = -1
    for index, char in enumerate(text):
        if matched < len(query) and char == query[matched]:
            if first == -1:
                first = index
            matched += 1
            if matched == len(query):
                window = index - first + 1
                return window - len(query)
    return None


def match_score(text: str, query: str) -> int | None:
    """Score *text* against *query*; higher is better.

    Args:
        text: Candidate display text.
        query: Raw query text. A blank query scores 0 for every candidate.

    Returns:
        Integer score in one of the three bands, or ``NO_MATCH``.
    """
    if not query.strip():
        return 0

    if not tokens_present(text, tokenize_query(query)):
        return NO_MATCH

    lower_text = text.lower()
    lower_query = query.lower()

    direct = lower_text.find(lower_query)
    if direct != -1:
        return EXACT_BASE - direct

    clean_text = strip_non_alnum(lower_text)
    clean_query = strip_non_alnum(lower_query)

    clean = clean_text.find(clean_query)
    if clean != -1:
        return CLEAN_BASE - clean

    gap = subsequence_gap(clean_text, clean_query)
    if gap is not None and gap <= len(clean_query):
        return SUBSEQUENCE_BASE - gap

    return NO_MATCH
