"""
Text grammar format.

One rule per line, alternatives separated by '|':

    S -> a B | A B
    A -> d | d S | a A a A b | ε
    B -> a | aS | A

Conventions:
- Arrow: '->' or '→'
- Empty alternative: 'ε', 'eps' or 'epsilon'
- Left sides are the non-terminals; the first one is the start symbol
- Bodies are split on whitespace; a body without whitespace is split by the
  longest known symbol, unknown characters becoming single-character
  terminals ("aS" -> a S)
- When every body is written without whitespace, a left side that splits
  into other left sides or terminals ("SA" next to S and A) is rejected
- Lines starting with '#' are comments
- Optional directives fix the construction inputs explicitly:
      %start S
      %nonterminals S A B
      %terminals a b d
"""

from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .errors import MalformedGrammar, UnsupportedShape
from .grammar import EPS_SPELLINGS, Grammar, Production, split_symbols

logger = logging.getLogger("cnf_normalizer.parser")

# LHS -> RHS1 | RHS2 | ...
LINE_RE = re.compile(r"^\s*(\S(?:.*?\S)?)\s*(?:->|→)\s*(.*?)\s*$")
DIRECTIVE_RE = re.compile(r"^\s*%(start|nonterminals|terminals)\b\s*(.*?)\s*$")


def parse_grammar(text: str, start: Optional[str] = None) -> Grammar:
    """
    Parse grammar text into a validated Grammar.

    Raises MalformedGrammar for lines that are not rules or directives and
    UnsupportedShape for a left side made of several symbols.
    """
    directives: Dict[str, List[str]] = {}
    raw_rules: List[Tuple[int, str, List[str]]] = []

    for i, line in enumerate(text.splitlines(), start=1):
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        d = DIRECTIVE_RE.match(line)
        if d:
            directives[d.group(1)] = d.group(2).split()
            continue
        m = LINE_RE.match(line)
        if not m:
            raise MalformedGrammar(f"line {i}: invalid rule {line!r}")
        lhs, rest = m.group(1), m.group(2)
        if len(lhs.split()) > 1:
            raise UnsupportedShape(f"line {i}: left side {lhs!r} is not a single non-terminal")
        alts = [p.strip() for p in rest.split("|")]
        if any(not p for p in alts):
            raise MalformedGrammar(f"line {i}: empty alternative (write 'ε' for the empty production)")
        raw_rules.append((i, lhs, alts))

    if not raw_rules:
        raise MalformedGrammar("no productions found")

    declared_nts = "nonterminals" in directives
    declared_ts = "terminals" in directives
    terminals = list(directives.get("terminals", []))
    if not declared_nts and _is_compact(raw_rules):
        _reject_compound_lhs(raw_rules, terminals)
    nonterminals = directives["nonterminals"] if declared_nts else [lhs for _, lhs, _ in raw_rules]

    if start is None:
        start = directives["start"][0] if directives.get("start") else raw_rules[0][1]

    known = list(dict.fromkeys(nonterminals)) + terminals
    rules: Dict[str, List[Production]] = {}
    for i, lhs, alts in raw_rules:
        bodies = rules.setdefault(lhs, [])
        for part in alts:
            bodies.append(_split_body(part, known, allow_unknown=not declared_ts, line=i))

    if not declared_ts:
        # every body symbol that is not a left side is a terminal
        nt_set = set(nonterminals)
        for bodies in rules.values():
            for rhs in bodies:
                terminals.extend(s for s in rhs if s not in nt_set)

    g = Grammar.create(nonterminals, terminals, rules, start)
    logger.info(f"Parsed grammar with {len(g.nonterminals)} non-terminals and {g.production_count} productions")
    return g


def _is_compact(raw_rules: List[Tuple[int, str, List[str]]]) -> bool:
    """True when no body separates its symbols with whitespace."""
    return not any(" " in p or "\t" in p for _, _, alts in raw_rules for p in alts)


def _reject_compound_lhs(raw_rules: List[Tuple[int, str, List[str]]], terminals: List[str]) -> None:
    # in compact notation "SA" next to left sides S and A means S A, not a new symbol
    lhss = list(dict.fromkeys(lhs for _, lhs, _ in raw_rules))
    for i, lhs, _ in raw_rules:
        others = [s for s in lhss if s != lhs] + terminals
        try:
            parts = split_symbols(lhs, others)
        except MalformedGrammar:
            continue
        if len(parts) > 1:
            raise UnsupportedShape(f"line {i}: left side {lhs!r} is not a single non-terminal ({' '.join(parts)})")


def _split_body(part: str, known: List[str], allow_unknown: bool, line: int) -> Production:
    if part in EPS_SPELLINGS:
        return ()
    if " " in part or "\t" in part:
        return tuple(part.split())
    try:
        return split_symbols(part, known, allow_unknown=allow_unknown)
    except MalformedGrammar as e:
        raise MalformedGrammar(f"line {line}: {e}") from e


def from_file(path: Path, start: Optional[str] = None) -> Grammar:
    txt = Path(path).read_text(encoding="utf-8")
    return parse_grammar(txt, start=start)
