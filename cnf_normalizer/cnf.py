"""
Chomsky Normal Form: validator, reshaper and the full conversion pipeline.

    to_cnf:  validate -> (already CNF? stop) -> ε -> unit -> unreachable
             -> unproductive -> reshape -> unreachable -> unproductive
             -> unreachable
"""

from __future__ import annotations
import logging
from typing import Callable, Dict, List, Optional, Set, Tuple

from .allocator import SymbolAllocator
from .config import NormalizerConfig
from .errors import GrammarError
from .grammar import Grammar, Production
from .simplify import (
    nullable_symbols,
    remove_epsilon,
    remove_unit,
    remove_unproductive,
    remove_unreachable,
)

logger = logging.getLogger("cnf_normalizer.cnf")

StepCallback = Callable[[str, Grammar], None]


# ---------- Validator ----------

def is_cnf_production(g: Grammar, rhs: Production) -> bool:
    if len(rhs) == 1:
        return g.is_terminal(rhs[0])
    if len(rhs) == 2:
        return g.is_nonterminal(rhs[0]) and g.is_nonterminal(rhs[1])
    return False


def is_cnf(g: Grammar, allow_start_epsilon: bool = False) -> bool:
    """
    True iff every production is A -> a or A -> BC.

    With ``allow_start_epsilon`` the production start -> ε is accepted as long
    as the start symbol does not occur in any body.
    """
    for A, rhs in g.iter_productions():
        if is_cnf_production(g, rhs):
            continue
        if not rhs and allow_start_epsilon and A == g.start and g.start not in g.body_symbols():
            continue
        return False
    return True


# ---------- Reshaper ----------

def reshape(g: Grammar, allocator: Optional[SymbolAllocator] = None) -> Grammar:
    """
    Bring an ε-free, unit-free grammar to CNF shape.

    Binarization replaces the leftmost pair of a long body by a helper X -> pair
    until the body has two symbols; terminal lifting then replaces each terminal
    of a two-symbol body by a helper T -> a. Helpers are cached by their exact
    body, so the same pair or terminal always maps to the same helper.
    """
    if allocator is None:
        allocator = SymbolAllocator.for_grammar(g)

    order: List[str] = list(g.nonterminals)
    new_rules: Dict[str, Set[Production]] = {A: set() for A in g.rules}
    pair_helpers: Dict[Tuple[str, str], str] = {}
    terminal_helpers: Dict[str, str] = {}

    def helper(cache: Dict, key, body: Production) -> str:
        if key not in cache:
            X = allocator.allocate()
            cache[key] = X
            order.append(X)
            new_rules[X] = {body}
            logger.debug(f"Helper {X} -> {' '.join(body)}")
        return cache[key]

    # binarize
    for A, rhs in g.iter_productions():
        while len(rhs) > 2:
            pair = rhs[:2]
            rhs = (helper(pair_helpers, pair, pair),) + rhs[2:]
        new_rules[A].add(rhs)

    # lift terminals out of two-symbol bodies; terminal helpers appended here
    # only carry one-symbol bodies, so the snapshot of `order` is enough
    for A in list(order):
        if A not in new_rules:
            continue
        lifted: Set[Production] = set()
        for rhs in sorted(new_rules[A]):
            if len(rhs) == 2:
                rhs = tuple(
                    helper(terminal_helpers, s, (s,)) if g.is_terminal(s) else s
                    for s in rhs
                )
            lifted.add(rhs)
        new_rules[A] = lifted

    logger.info(
        f"Reshape: {len(pair_helpers)} pair helpers, {len(terminal_helpers)} terminal helpers"
    )
    return g.replace(nonterminals=order, rules=new_rules)


def add_start_epsilon(g: Grammar, allocator: SymbolAllocator) -> Grammar:
    """
    Add start -> ε. If the start symbol occurs in some body a fresh start
    symbol S0 -> (old start's bodies) | ε takes its place.
    """
    if g.start not in g.body_symbols():
        rules = dict(g.rules)
        rules[g.start] = g.productions(g.start) | {()}
        return g.replace(rules=rules)

    new_start = allocator.allocate()
    logger.info(f"Start symbol {g.start} occurs in a body; new start {new_start}")
    rules = {new_start: g.productions(g.start) | {()}}
    rules.update(g.rules)
    return g.replace(nonterminals=(new_start,) + g.nonterminals, rules=rules, start=new_start)


# ---------- Pipeline ----------

def to_cnf(
    g: Grammar,
    config: Optional[NormalizerConfig] = None,
    on_step: Optional[StepCallback] = None,
) -> Grammar:
    """
    Convert ``g`` to an equivalent grammar in Chomsky Normal Form.

    ``on_step(title, grammar)`` is called after every stage. The input grammar
    is not modified. Raises a GrammarError subclass on malformed input or if a
    stage fails to reach its fixpoint.
    """
    config = config or NormalizerConfig()
    factor = config.iteration_factor

    def step(title: str, grammar: Grammar) -> Grammar:
        logger.debug(f"{title}:\n{grammar.dump()}")
        if on_step is not None:
            on_step(title, grammar)
        return grammar

    g.validate()
    if is_cnf(g, allow_start_epsilon=config.keep_start_epsilon):
        logger.info("Grammar already in CNF")
        return g.replace()

    allocator = SymbolAllocator.for_grammar(g)
    nulls = nullable_symbols(g, factor)
    start_nullable = g.start in nulls

    g1 = step(f"Step 1: ε-productions removed (nullable: {', '.join(sorted(nulls)) or '∅'})",
              remove_epsilon(g, nulls, factor))
    g2 = step("Step 2: unit productions removed", remove_unit(g1, factor))
    g3 = step("Step 3: unreachable symbols removed", remove_unreachable(g2))
    g4 = step("Step 4: unproductive symbols removed", remove_unproductive(g3, factor))
    g5 = step("Step 5: binarized, terminals lifted", reshape(g4, allocator))
    # dropping unproductive bodies can orphan symbols, hence the second reachability pass
    out = remove_unreachable(remove_unproductive(remove_unreachable(g5), factor))

    if start_nullable:
        if config.keep_start_epsilon:
            out = add_start_epsilon(out, allocator)
        else:
            logger.info(f"Start symbol {g.start} is nullable; the empty string is dropped")

    if not is_cnf(out, allow_start_epsilon=config.keep_start_epsilon):
        raise GrammarError("internal error: conversion result is not in CNF")
    logger.info(f"CNF grammar: {len(out.nonterminals)} non-terminals, {out.production_count} productions")
    return out
