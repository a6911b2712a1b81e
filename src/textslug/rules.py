"""Lenient reader for ICU/CLDR transliteration rule files.

Rule files are large and heterogeneous, so reading is forgiving: a
statement ends at an unquoted ``;`` and may continue over several lines,
``#`` starts a comment running to the end of the line, and any statement
that cannot be understood is skipped (logged at DEBUG) instead of failing
the file.

Supported statements::

    :: Any-NFD ;                 # transform directive, skipped
    $vowel = [aeiou] ;           # variable, substituted into later rules
    ж → zh ;                     # forward rule
    ο ↔ o ;                      # bidirectional rule (forward half kept)
    [а-я] → x ;                  # bracket expression, see ``expand_record``
    x ← y ;                      # backward-only rule, skipped

Public API:

* ``parse_rules(text)`` -- parse rule text into ``RuleRecord`` objects.
* ``expand_record(record)`` -- expand a bracket-expression source into
  elementary single-source records.
"""
from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Iterator
from dataclasses import dataclass

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RuleRecord:
    """One forward mapping read from a rule file.

    ``sources`` holds a single raw source (possibly a bracket expression)
    as produced by the parser, or one elementary source after expansion.
    """

    sources: tuple[str, ...]
    target: str
    bidirectional: bool = False
    line: int = 0


# ---------------------------------------------------------------------------
# Lexical patterns
# ---------------------------------------------------------------------------

FORWARD_OPS = frozenset({"→", ">"})
BIDIRECTIONAL_OPS = frozenset({"↔", "<>"})
BACKWARD_OPS = frozenset({"←", "<"})

# Longest operators first so "<>" is not read as "<".
_OPERATOR_RE = re.compile(r"<>|[↔→←<>]")

_ASSIGNMENT_RE = re.compile(r"^\$([A-Za-z_][A-Za-z0-9_]*)\s*=(.*)$", re.DOTALL)
_VARIABLE_RE = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")

# One lexical unit of a rule side; order matters (first alternative wins).
_SIDE_TOKEN_RE = re.compile(
    r"'(?:[^']|'')*'"            # quoted literal ('' inside = apostrophe)
    r"|\\u[0-9A-Fa-f]{4}"
    r"|\\U[0-9A-Fa-f]{8}"
    r"|\\x\{[0-9A-Fa-f]{1,6}\}"
    r"|\\."                      # escaped character
    r"|\s+"
    r"|.",
    re.DOTALL,
)

# Unquoted characters that make a source unusable (anchors, cursor, functions).
_SOURCE_UNSUPPORTED = frozenset("^|@&")
# Unquoted characters that make a target unusable (backrefs, functions, sets).
_TARGET_UNSUPPORTED = frozenset("$()[]{}&^*+?")
# Unquoted cursor markers, dropped from targets.
_TARGET_CURSOR = frozenset("|@")


@dataclass(frozen=True, slots=True)
class _Statement:
    text: str
    line: int


def _iter_statements(text: str) -> Iterator[_Statement]:
    """Split rule text into ``;``-terminated statements, dropping comments.

    A statement may continue over several lines; it is reported at the
    line where it starts. Quotes do not continue past the end of a line.
    """
    buf: list[str] = []
    start_line = 0
    started = False
    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        in_quote = False
        i = 0
        while i < len(raw_line):
            ch = raw_line[i]
            if ch == "\\" and i + 1 < len(raw_line):
                piece = raw_line[i:i + 2]
                i += 2
            elif ch == "'":
                in_quote = not in_quote
                piece = ch
                i += 1
            elif not in_quote and ch == "#":
                break
            elif not in_quote and ch == ";":
                stmt = "".join(buf).strip()
                if stmt:
                    yield _Statement(stmt, start_line)
                buf = []
                started = False
                i += 1
                continue
            else:
                piece = ch
                i += 1
            if not started and not piece.isspace():
                start_line = line_no
                started = True
            buf.append(piece)
        buf.append("\n")
    stmt = "".join(buf).strip()
    if stmt:
        yield _Statement(stmt, start_line)


def _find_operator(stmt: str) -> re.Match[str] | None:
    """Locate the first unquoted, unescaped rule operator."""
    in_quote = False
    i = 0
    while i < len(stmt):
        ch = stmt[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "'":
            in_quote = not in_quote
        elif not in_quote:
            m = _OPERATOR_RE.match(stmt, i)
            if m:
                return m
        i += 1
    return None


def _decode_token(token: str) -> str:
    if token == "''":
        return "'"
    if token.startswith("'"):
        return token[1:-1].replace("''", "'")
    if token.startswith(("\\u", "\\U")):
        return chr(int(token[2:], 16))
    if token.startswith("\\x{"):
        return chr(int(token[3:-1], 16))
    return token[1]


def _decode_side(
    side: str,
    *,
    unsupported: frozenset[str],
    dropped: frozenset[str] = frozenset(),
) -> str | None:
    """Decode one side of a rule to literal text.

    Returns ``None`` if an unquoted character from ``unsupported`` occurs.
    """
    out: list[str] = []
    for m in _SIDE_TOKEN_RE.finditer(side):
        token = m.group()
        if token.isspace():
            continue
        if token.startswith("'") or (token.startswith("\\") and len(token) > 1):
            out.append(_decode_token(token))
            continue
        if token in unsupported:
            return None
        if token in dropped:
            continue
        out.append(token)
    return "".join(out)


def _substitute(text: str, variables: dict[str, str]) -> str:
    return _VARIABLE_RE.sub(lambda m: variables.get(m.group(1), m.group()), text)


def _is_bracket_expression(side: str) -> bool:
    return side.startswith("[") and side.endswith("]")


def parse_rules(text: str) -> list[RuleRecord]:
    """Parse rule-file text into forward ``RuleRecord`` objects.

    Never raises for malformed content: statements that cannot be read are
    skipped.
    """
    variables: dict[str, str] = {}
    records: list[RuleRecord] = []
    skipped = 0

    for stmt in _iter_statements(text):
        if stmt.text.startswith("::"):
            continue

        assignment = _ASSIGNMENT_RE.match(stmt.text)
        if assignment and _find_operator(stmt.text) is None:
            name, value = assignment.group(1), assignment.group(2).strip()
            variables[name] = _substitute(value, variables)
            continue

        op = _find_operator(stmt.text)
        if op is None:
            log.debug("line %d: no rule operator, skipped: %r", stmt.line, stmt.text)
            skipped += 1
            continue
        if op.group() in BACKWARD_OPS:
            continue

        lhs = _substitute(stmt.text[:op.start()].strip(), variables)
        rhs = _substitute(stmt.text[op.end():].strip(), variables)

        if _is_bracket_expression(lhs):
            source: str | None = lhs
        else:
            source = _decode_side(lhs, unsupported=_SOURCE_UNSUPPORTED)
        target = _decode_side(
            rhs, unsupported=_TARGET_UNSUPPORTED, dropped=_TARGET_CURSOR,
        )

        if not source or not target:
            log.debug("line %d: unsupported rule, skipped: %r", stmt.line, stmt.text)
            skipped += 1
            continue

        records.append(RuleRecord(
            sources=(source,),
            target=target,
            bidirectional=op.group() in BIDIRECTIONAL_OPS,
            line=stmt.line,
        ))

    if skipped:
        log.debug("skipped %d unreadable rule statements", skipped)
    return records


# ---------------------------------------------------------------------------
# Bracket expansion
# ---------------------------------------------------------------------------

_SET_TOKEN_RE = re.compile(
    r"\\u[0-9A-Fa-f]{4}"
    r"|\\U[0-9A-Fa-f]{8}"
    r"|\\x\{[0-9A-Fa-f]{1,6}\}"
    r"|\\."
    r"|'(?:[^']|'')*'"
    r"|\{[^{}]*\}"               # multi-character string member
    r"|\s+"
    r"|.",
    re.DOTALL,
)

_WORD_CATEGORIES = ("L", "M", "N")


def _is_word_char(ch: str) -> bool:
    return unicodedata.category(ch)[0] in _WORD_CATEGORIES


def _set_members(body: str) -> list[tuple[str, bool]] | None:
    """Tokenize a set body into ``(member, is_range_operator)`` pairs."""
    if body.startswith(("^", ":")) or "[" in body or "\\p" in body or "\\P" in body:
        return None
    members: list[tuple[str, bool]] = []
    for m in _SET_TOKEN_RE.finditer(body):
        token = m.group()
        if token.isspace():
            continue
        if token == "-":
            members.append(("-", True))
        elif token.startswith("{") and len(token) > 1:
            members.append((token[1:-1], False))
        elif token.startswith("'") and token != "'":
            members.extend((ch, False) for ch in _decode_token(token))
        elif token.startswith("\\") and len(token) > 1:
            members.append((_decode_token(token), False))
        else:
            members.append((token, False))
    return members


def _expand_set(expr: str) -> list[str] | None:
    members = _set_members(expr[1:-1])
    if members is None:
        return None

    out: list[str] = []
    i = 0
    while i < len(members):
        value, is_op = members[i]
        is_range = (
            i + 2 < len(members)
            and members[i + 1][1]
            and len(value) == 1
            and len(members[i + 2][0]) == 1
            and not is_op
        )
        if is_range:
            lo, hi = ord(value), ord(members[i + 2][0])
            out.extend(chr(cp) for cp in range(lo, hi + 1) if _is_word_char(chr(cp)))
            i += 3
            continue
        if is_op:
            # Leading/trailing hyphen is a literal member.
            out.append("-")
        else:
            out.append(value)
        i += 1
    return out


def expand_record(record: RuleRecord) -> list[RuleRecord]:
    """Expand bracket-expression sources into elementary records.

    ``[ab]`` yields one record per member and ``[a-z]`` one record per code
    point in the inclusive range that is a letter, mark or number.
    Property classes, nested sets and negated sets are not expandable and
    yield nothing. Other sources pass through as single-source records.
    """
    out: list[RuleRecord] = []
    for source in record.sources:
        if not _is_bracket_expression(source):
            out.append(RuleRecord((source,), record.target, record.bidirectional, record.line))
            continue
        members = _expand_set(source)
        if members is None:
            log.debug("line %d: set not expandable: %r", record.line, source)
            continue
        out.extend(
            RuleRecord((member,), record.target, record.bidirectional, record.line)
            for member in members
            if member
        )
    return out
