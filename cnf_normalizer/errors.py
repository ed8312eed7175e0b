"""
Errors raised while building or normalizing a grammar.

Every error aborts the conversion of the grammar it concerns; no stage
returns a partially transformed grammar.
"""

from __future__ import annotations


class GrammarError(Exception):
    """Base class for every grammar error."""


class MalformedGrammar(GrammarError, ValueError):
    """Grammar definition violates a structural invariant (undeclared symbol, bad start, ...)."""


class UnsupportedShape(GrammarError, ValueError):
    """Rule whose left side is not a single non-terminal."""


class NonTerminationError(GrammarError, RuntimeError):
    """A fixpoint loop ran past its iteration bound."""

    def __init__(self, stage: str, limit: int):
        super().__init__(f"{stage}: no fixpoint after {limit} rounds")
        self.stage = stage
        self.limit = limit
