"""
Turn raw LLM replies into Python values.

Models are told to answer with bare JSON, but in practice the reply may be
wrapped in markdown fences, carry stray control characters, have prose around
it, or be cut off when the token budget runs out. The helpers here peel those
layers off in order:

1. clean_llm_text       - strip fences and non-printable characters
2. extract_json_span    - first "{"/"[" up to the last "}"/"]"
3. json.loads           - non-strict, raw newlines inside strings are fine
4. repair_truncated_json - close whatever the cut left open
5. schema validation    - pydantic, so right-syntax/wrong-shape payloads fail too

safe_parse_json never raises; it logs an excerpt and returns the caller's
fallback instead.
"""
from __future__ import annotations

import json
import re
from functools import lru_cache
from typing import Any, List, Optional, Tuple, TypeVar

from loguru import logger
from pydantic import TypeAdapter, ValidationError

T = TypeVar("T")

_FENCE_OPEN_RE = re.compile(r"^\s*```[A-Za-z]*[ \t]*\r?\n?")
_FENCE_CLOSE_RE = re.compile(r"\r?\n?[ \t]*```\s*$")
# C0 controls except \t \n \r, plus DEL.
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_JSON_SPAN_RE = re.compile(r"[\[{][\s\S]*[\]}]")
_JSON_START_RE = re.compile(r"[\[{]")
_BARE_TOKEN_RE = re.compile(r"[A-Za-z0-9+\-.]+")
_NUMBER_RE = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_LITERALS = ("true", "false", "null")
_CLOSERS = {"{": "}", "[": "]"}

EXCERPT_CHARS = 300

_UNPARSEABLE = object()


def clean_llm_text(text: Optional[str]) -> str:
    """Remove a leading/trailing markdown fence and non-printable control characters."""
    if not text:
        return ""
    cleaned = _CONTROL_RE.sub("", text)
    cleaned = _FENCE_OPEN_RE.sub("", cleaned, count=1)
    cleaned = _FENCE_CLOSE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def extract_json_span(text: str) -> Optional[str]:
    """Greedy match from the first opening bracket to the last closing one."""
    match = _JSON_SPAN_RE.search(text)
    return match.group(0) if match else None


class _PrefixScanner:
    """
    Character-level walk over a possibly truncated JSON document.

    Tracks string/escape state, the stack of open containers and what each
    container expects next. Every time the document could be closed validly
    (right after a complete value, or right after an opening bracket) the
    position and the open stack are remembered, so a cut anywhere falls back
    to the last closable prefix.

    Container states:
      objects: key_or_end -> colon -> value -> comma -> key -> colon ...
      arrays:  value_or_end -> comma -> value -> comma ...
    """

    def __init__(self, doc: str) -> None:
        self.doc = doc
        self.stack: List[str] = []
        self.expect: List[str] = []
        self.safe_end = 0
        self.safe_stack: List[str] = []
        # Index where scanning stopped; len(doc) when the text simply ran out.
        self.stopped_at = len(doc)

    def repair(self) -> str:
        doc = self.doc
        n = len(doc)
        i = 0

        while i < n:
            ch = doc[i]
            if ch in " \t\r\n":
                i += 1
                continue

            state = self.expect[-1] if self.expect else "value"

            if ch in "{[":
                if state not in ("value", "value_or_end"):
                    break
                self.stack.append(ch)
                self.expect.append("key_or_end" if ch == "{" else "value_or_end")
                i += 1
                self._mark_safe(i)
                continue

            if ch in "}]":
                if _CLOSERS[self.stack[-1]] != ch or state not in ("key_or_end", "value_or_end", "comma"):
                    break
                self.stack.pop()
                self.expect.pop()
                i += 1
                if not self.stack:
                    # Root closed; anything after it is not ours.
                    self.stopped_at = i
                    return doc[:i]
                self._value_done(i)
                continue

            if ch == '"':
                end, closed, cut = self._scan_string(i)
                if state in ("key_or_end", "key"):
                    if not closed:
                        i = end
                        break
                    self.expect[-1] = "colon"
                    i = end
                    continue
                if state not in ("value", "value_or_end"):
                    i = end
                    break
                if not closed:
                    return doc[:cut] + '"' + _closers_for(self.stack)
                i = end
                self._value_done(i)
                continue

            if ch == ":":
                if state != "colon":
                    break
                self.expect[-1] = "value"
                i += 1
                continue

            if ch == ",":
                if state != "comma":
                    break
                self.expect[-1] = "key" if self.stack[-1] == "{" else "value"
                i += 1
                continue

            if state not in ("value", "value_or_end"):
                break
            match = _BARE_TOKEN_RE.match(doc, i)
            token = match.group(0) if match else ""
            if not token or not (token in _LITERALS or _NUMBER_RE.fullmatch(token)):
                break
            i += len(token)
            self._value_done(i)

        self.stopped_at = i
        return doc[: self.safe_end].rstrip() + _closers_for(self.safe_stack)

    def _mark_safe(self, end: int) -> None:
        self.safe_end = end
        self.safe_stack = list(self.stack)

    def _value_done(self, end: int) -> None:
        self.expect[-1] = "comma"
        self._mark_safe(end)

    def _scan_string(self, start: int) -> Tuple[int, bool, int]:
        """
        Scan the string literal opening at `start`.

        Returns (end, closed, cut): `end` is the index after the closing quote,
        `cut` is where a truncated literal can be safely closed (before any
        incomplete escape sequence).
        """
        doc = self.doc
        n = len(doc)
        j = start + 1
        while j < n:
            c = doc[j]
            if c == "\\":
                width = 6 if j + 1 < n and doc[j + 1] == "u" else 2
                if j + width > n:
                    return n, False, j
                j += width
                continue
            if c == '"':
                return j + 1, True, j + 1
            j += 1
        return n, False, n


def _closers_for(stack: List[str]) -> str:
    return "".join(_CLOSERS[opener] for opener in reversed(stack))


def repair_truncated_json(text: str) -> Optional[str]:
    """
    Close a JSON object/array that was cut off mid-stream.

    Starts at the first "{" or "[" and returns the longest prefix that can be
    closed validly, with the exact closing brackets appended innermost first.
    A cut inside a string value keeps the partial text and closes the quote;
    dangling keys, colons, commas and half-written literals are dropped.
    Braces and brackets inside string literals are never counted. Content
    after the root container closes is discarded. When a root closes (or hits
    a syntax error) before the text ends, scanning resumes at the next "{" or
    "[" and the longest repaired candidate wins, so a stray "[1]" in leading
    prose does not shadow the real payload. Returns None when the text holds
    no opening bracket at all.
    """
    best: Optional[str] = None
    pos = 0
    while True:
        start = _JSON_START_RE.search(text, pos)
        if start is None:
            break
        doc = text[start.start():]
        scanner = _PrefixScanner(doc)
        candidate = scanner.repair()
        if best is None or len(candidate) > len(best):
            best = candidate
        if scanner.stopped_at >= len(doc):
            break
        pos = start.start() + max(scanner.stopped_at, 1)
    return best


def _loads(candidate: str) -> Any:
    try:
        return json.loads(candidate, strict=False)
    except (ValueError, RecursionError):
        return _UNPARSEABLE


def parse_llm_json(text: Optional[str]) -> Any:
    """Best-effort decode; returns None when nothing usable is found."""
    cleaned = clean_llm_text(text)

    span = extract_json_span(cleaned)
    if span is not None:
        value = _loads(span)
        if value is not _UNPARSEABLE:
            return value

    repaired = repair_truncated_json(cleaned)
    if repaired is None:
        return None
    value = _loads(repaired)
    if value is _UNPARSEABLE:
        return None
    logger.debug("Repaired truncated LLM JSON ({} -> {} chars)", len(cleaned), len(repaired))
    return value


@lru_cache(maxsize=None)
def _adapter_for(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def excerpt(text: Optional[str], limit: int = EXCERPT_CHARS) -> str:
    return (text or "")[:limit]


def safe_parse_json(text: Optional[str], fallback: T, schema: Any = None) -> Any:
    """
    Parse LLM output, optionally validating it against `schema`
    (a pydantic model or a typing construct such as List[ServiceItem]).

    Never raises. On unparseable text or a schema violation the failure is
    logged with an excerpt of the offending text and `fallback` itself is
    returned.
    """
    value = parse_llm_json(text)
    if value is None:
        logger.error("Could not parse JSON from LLM output: {!r}", excerpt(text))
        return fallback

    if schema is None:
        return value

    try:
        return _adapter_for(schema).validate_python(value)
    except ValidationError as exc:
        logger.error(
            "LLM JSON does not match {}: {} error(s); output: {!r}",
            getattr(schema, "__name__", schema),
            exc.error_count(),
            excerpt(text),
        )
        return fallback
