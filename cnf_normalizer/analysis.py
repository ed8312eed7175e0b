"""
Read-only analyses of a grammar: Chomsky-hierarchy classification and
bounded enumeration of the generated language.
"""

from __future__ import annotations
import logging
from enum import IntEnum
from typing import Dict, Set, Tuple

from .grammar import Grammar, Production

logger = logging.getLogger("cnf_normalizer.analysis")

Word = Tuple[str, ...]


class GrammarType(IntEnum):
    CONTEXT_FREE = 2
    REGULAR = 3

    @property
    def label(self) -> str:
        return {
            GrammarType.CONTEXT_FREE: "Type-2 (Context-Free Grammar)",
            GrammarType.REGULAR: "Type-3 (Regular Grammar)",
        }[self]


def _nt_positions(g: Grammar, rhs: Production):
    return [i for i, s in enumerate(rhs) if g.is_nonterminal(s)]


def is_right_linear(g: Grammar) -> bool:
    """Every body is terminals followed by at most one trailing non-terminal."""
    for _, rhs in g.iter_productions():
        pos = _nt_positions(g, rhs)
        if len(pos) > 1 or (pos and pos[0] != len(rhs) - 1):
            return False
    return True


def is_left_linear(g: Grammar) -> bool:
    """Every body is at most one leading non-terminal followed by terminals."""
    for _, rhs in g.iter_productions():
        pos = _nt_positions(g, rhs)
        if len(pos) > 1 or (pos and pos[0] != 0):
            return False
    return True


def classify(g: Grammar) -> GrammarType:
    # left sides are single non-terminals by construction, so Type-2 at worst
    if is_right_linear(g) or is_left_linear(g):
        return GrammarType.REGULAR
    return GrammarType.CONTEXT_FREE


def enumerate_strings(g: Grammar, max_length: int) -> Set[Word]:
    """
    All terminal strings of length <= max_length derivable from the start symbol.

    Computed as a least fixpoint of per-non-terminal string sets truncated at
    max_length, so ε-productions, unit cycles and left recursion are fine.
    """
    if max_length < 0:
        raise ValueError("max_length must be >= 0")

    lang: Dict[str, Set[Word]] = {A: set() for A in g.nonterminals}

    def derive(rhs: Production) -> Set[Word]:
        acc: Set[Word] = {()}
        for s in rhs:
            options = {(s,)} if g.is_terminal(s) else lang[s]
            acc = {u + v for u in acc for v in options if len(u) + len(v) <= max_length}
            if not acc:
                break
        return acc

    changed = True
    while changed:
        changed = False
        for A, rhs in g.iter_productions():
            new = derive(rhs) - lang[A]
            if new:
                lang[A] |= new
                changed = True

    logger.debug(f"{len(lang[g.start])} strings of length <= {max_length}")
    return lang[g.start]
