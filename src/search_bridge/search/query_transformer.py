"""Translate user search syntax into the index's mangled field convention.

Users write ``field:value`` pairs, quoted phrases (``field:"a b"``) and
ranges (``field:[lo TO hi]``). The index stores every field inside the single
``content`` field, so each pair is rewritten to
``content:field__=__value``.

The query is scanned once, left to right, into a flat list of nodes. Quoted
phrases and ranges become their own nodes, so the plain ``field:value``
rewrite can never reach inside them; each node then renders independently.
Everything the scanner does not recognise is carried through verbatim, so
the transform is total over any input string.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re

from search_bridge.search.fields import CONTENT_FIELD, MATCH_ALL, RANGE_MAX_SENTINEL, mangle


logger = logging.getLogger(__name__)


# A field name runs until whitespace, a backslash, '+' or a paren; an escaped
# quote is allowed inside it as a unit.
_KEY = r'(?:\\"|[^ \\+()])+'
# Range fields may also carry a backslash.
_RANGE_KEY = r"[^ +()]+"
_OPEN = r"[\[{]"
_CLOSE = r"[\]}]"
_TO = r"[+ ]TO[+ ]"
# Phrase body: escaped quotes are consumed whole, a lone backslash only when
# it does not start an escaped quote.
_PHRASE = r'(?:\\"|[^"\\]|\\(?!"))+'

_QUOTED = rf'(?P<q_key>{_KEY}):"(?P<q_phrase>{_PHRASE})"'
_EXISTS = rf"(?P<e_key>{_KEY}):{_OPEN}\*{_TO}\*{_CLOSE}"
_RANGE = (
    rf"(?P<r_key>{_RANGE_KEY}):(?P<r_open>{_OPEN})(?P<r_low>[^\]}}]+){_TO}(?P<r_high>[^\]}}]+)(?P<r_close>{_CLOSE})"
)
_PLAIN = rf"(?P<p_key>{_KEY}):(?P<p_value>[^ +]+)"
_WILDCARD_RANGE = rf"{_OPEN}\*{_TO}\*{_CLOSE}"

# Alternatives are tried in order at each position; the unbounded range
# must win over the general range, and both over a plain pair.
_TOKEN = re.compile(
    rf"(?P<quoted>{_QUOTED})"
    rf"|(?P<exists>{_EXISTS})"
    rf"|(?P<range>{_RANGE})"
    rf"|(?P<plain>{_PLAIN})"
    rf"|(?P<wildcard>{_WILDCARD_RANGE})"
)


@dataclass(frozen=True, slots=True)
class PlainPair:
    field: str
    value: str

    def render(self) -> str:
        return f"{CONTENT_FIELD}:{mangle(self.field, self.value)}"


@dataclass(frozen=True, slots=True)
class QuotedPair:
    field: str
    phrase: str

    def render(self) -> str:
        return f'{CONTENT_FIELD}:"{mangle(self.field, self.phrase)}"'


@dataclass(frozen=True, slots=True)
class RangePair:
    """``field:[low TO high]``; either bracket may be inclusive or exclusive."""

    field: str
    open_bracket: str
    low: str
    high: str
    close_bracket: str

    def render(self) -> str:
        # an open lower bound becomes the bare field prefix, the smallest value under it
        low = "" if self.low == "*" else self.low
        high = RANGE_MAX_SENTINEL if self.low != "*" and self.high == "*" else self.high
        return (
            f"{CONTENT_FIELD}:{self.open_bracket}"
            f"{mangle(self.field, low)} TO {mangle(self.field, high)}"
            f"{self.close_bracket}"
        )


@dataclass(frozen=True, slots=True)
class Wildcard:
    def render(self) -> str:
        return "*"


@dataclass(frozen=True, slots=True)
class Verbatim:
    text: str

    def render(self) -> str:
        return self.text


QueryNode = PlainPair | QuotedPair | RangePair | Wildcard | Verbatim


def _node_from_match(match: re.Match[str]) -> QueryNode:
    kind = match.lastgroup
    if kind == "quoted":
        return QuotedPair(match["q_key"], match["q_phrase"])
    if kind == "exists":
        # field:[* TO *] only asks that the field exists
        return PlainPair(match["e_key"], "*")
    if kind == "range":
        return RangePair(
            field=match["r_key"],
            open_bracket=match["r_open"],
            low=match["r_low"],
            high=match["r_high"],
            close_bracket=match["r_close"],
        )
    if kind == "plain":
        return PlainPair(match["p_key"], match["p_value"])
    return Wildcard()


def tokenize(raw: str) -> list[QueryNode]:
    """Scan ``raw`` into nodes; unrecognised text is kept as ``Verbatim``."""
    nodes: list[QueryNode] = []
    pending: list[str] = []
    pos = 0
    length = len(raw)

    while pos < length:
        match = _TOKEN.match(raw, pos)
        if match is None:
            pending.append(raw[pos])
            pos += 1
            continue
        if pending:
            nodes.append(Verbatim("".join(pending)))
            pending = []
        nodes.append(_node_from_match(match))
        pos = match.end()

    if pending:
        nodes.append(Verbatim("".join(pending)))
    return nodes


def render(nodes: list[QueryNode]) -> str:
    return "".join(node.render() for node in nodes)


def transform_search_query(raw: str) -> str:
    """Rewrite a user query into the index-native form.

    >>> transform_search_query("role:web")
    'content:role__=__web'
    >>> transform_search_query("age:[18 TO 30]")
    'content:[age__=__18 TO age__=__30]'
    """
    if raw == MATCH_ALL:
        return raw
    transformed = render(tokenize(raw))
    logger.debug("Transformed query %r -> %r", raw, transformed)
    return transformed
