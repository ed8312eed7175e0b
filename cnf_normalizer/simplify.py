"""
Simplification stages that run before CNF reshaping:

- ε-production elimination (nullable analysis + keep/omit expansion)
- unit-production elimination (A -> B)
- reachability pruning (symbols not derivable from the start symbol)
- productivity pruning (symbols that never derive a terminal string)

Every stage takes a Grammar and returns a new one.
"""

from __future__ import annotations
import logging
from collections import deque
from typing import Dict, Iterator, List, Optional, Set

from .config import DEFAULT_ITERATION_FACTOR
from .errors import NonTerminationError
from .grammar import Grammar, Production

logger = logging.getLogger("cnf_normalizer.simplify")


def fixpoint_rounds(g: Grammar, stage: str, factor: int = DEFAULT_ITERATION_FACTOR) -> Iterator[int]:
    """
    Round counter for a fixpoint loop; raises NonTerminationError once the
    bound (proportional to the size of ``g``) is used up.
    """
    limit = factor * (len(g.nonterminals) + len(g.terminals) + g.production_count + 1)
    for n in range(limit):
        yield n
    logger.error(f"{stage}: fixpoint bound {limit} exceeded")
    raise NonTerminationError(stage, limit)


# ---------- 1) ε-production elimination ----------

def nullable_symbols(g: Grammar, iteration_factor: int = DEFAULT_ITERATION_FACTOR) -> Set[str]:
    """
    A is nullable if A =>* ε:
      - A -> ε, or
      - A -> X1 ... Xk with every Xi nullable.
    """
    nulls: Set[str] = set()
    for _ in fixpoint_rounds(g, "nullable", iteration_factor):
        changed = False
        for A in g.nonterminals:
            if A in nulls:
                continue
            # all() of an empty body is True, so A -> ε is covered too
            if any(all(X in nulls for X in rhs) for rhs in g.productions(A)):
                nulls.add(A)
                changed = True
        if not changed:
            break
    return nulls


def expand_nullable(rhs: Production, nulls: Set[str]) -> Set[Production]:
    """Every variant of ``rhs`` with each nullable occurrence kept or omitted, minus the empty one."""
    expansions: List[Production] = [()]
    for X in rhs:
        nxt = []
        for partial in expansions:
            nxt.append(partial + (X,))
            if X in nulls:
                nxt.append(partial)
        expansions = nxt
    return {p for p in expansions if p}


def remove_epsilon(
    g: Grammar,
    nulls: Optional[Set[str]] = None,
    iteration_factor: int = DEFAULT_ITERATION_FACTOR,
) -> Grammar:
    """
    Drop every A -> ε and add, for each remaining production, the variants
    that omit nullable symbols. The empty variant is always dropped; keeping
    start -> ε is decided by the caller (see ``cnf.to_cnf``).
    """
    if nulls is None:
        nulls = nullable_symbols(g, iteration_factor)
    logger.debug(f"Nullable symbols: {sorted(nulls)}")

    new_rules: Dict[str, Set[Production]] = {}
    for A in g.nonterminals:
        if A not in g.rules:
            continue
        bodies: Set[Production] = set()
        for rhs in g.productions(A):
            if rhs:
                bodies |= expand_nullable(rhs, nulls)
        new_rules[A] = bodies

    out = g.replace(rules=new_rules)
    logger.info(f"ε-elimination: {g.production_count} -> {out.production_count} productions")
    return out


# ---------- 2) Unit-production elimination ----------

def is_unit(g: Grammar, rhs: Production) -> bool:
    return len(rhs) == 1 and g.is_nonterminal(rhs[0])


def unit_closure(g: Grammar, iteration_factor: int = DEFAULT_ITERATION_FACTOR) -> Dict[str, Set[str]]:
    """For each A, every B with A =>* B through unit productions only (A included)."""
    closure: Dict[str, Set[str]] = {A: {A} for A in g.nonterminals}
    for _ in fixpoint_rounds(g, "unit closure", iteration_factor):
        changed = False
        for A in g.nonterminals:
            for B in list(closure[A]):
                for rhs in g.productions(B):
                    if is_unit(g, rhs) and rhs[0] not in closure[A]:
                        closure[A].add(rhs[0])
                        changed = True
        if not changed:
            break
    return closure


def remove_unit(g: Grammar, iteration_factor: int = DEFAULT_ITERATION_FACTOR) -> Grammar:
    """
    Replace A -> B by B's non-unit productions, transitively. Members of a
    unit cycle end up with the same production set.
    """
    closure = unit_closure(g, iteration_factor)

    new_rules: Dict[str, Set[Production]] = {}
    for A in g.nonterminals:
        if A not in g.rules:
            continue
        new_rules[A] = {
            rhs
            for B in closure[A]
            for rhs in g.productions(B)
            if not is_unit(g, rhs)
        }
        if len(closure[A]) > 1:
            logger.debug(f"Unit closure({A}) = {sorted(closure[A])}")

    out = g.replace(rules=new_rules)
    logger.info(f"Unit elimination: {g.production_count} -> {out.production_count} productions")
    return out


# ---------- 3) Useless symbols ----------

def reachable_symbols(g: Grammar) -> Set[str]:
    """Non-terminals reachable from the start symbol."""
    reach: Set[str] = {g.start}
    q = deque([g.start])
    while q:
        A = q.popleft()
        for rhs in g.productions(A):
            for s in rhs:
                if g.is_nonterminal(s) and s not in reach:
                    reach.add(s)
                    q.append(s)
    return reach


def remove_unreachable(g: Grammar) -> Grammar:
    reach = reachable_symbols(g)
    dropped = [A for A in g.nonterminals if A not in reach]
    if dropped:
        logger.info(f"Removing unreachable non-terminals: {dropped}")
    return g.replace(
        nonterminals=[A for A in g.nonterminals if A in reach],
        rules={A: rhss for A, rhss in g.rules.items() if A in reach},
    )


def productive_symbols(g: Grammar, iteration_factor: int = DEFAULT_ITERATION_FACTOR) -> Set[str]:
    """A is productive if A =>* w with w made of terminals only."""
    gen: Set[str] = set()
    for _ in fixpoint_rounds(g, "productive", iteration_factor):
        changed = False
        for A in g.nonterminals:
            if A in gen:
                continue
            for rhs in g.productions(A):
                if all(g.is_terminal(s) or s in gen for s in rhs):
                    gen.add(A)
                    changed = True
                    break
        if not changed:
            break
    return gen


def remove_unproductive(g: Grammar, iteration_factor: int = DEFAULT_ITERATION_FACTOR) -> Grammar:
    """
    Keep productive non-terminals and the productions made only of terminals
    and productive non-terminals. The start symbol always stays; if it is not
    productive the language is empty and it keeps no productions.
    """
    gen = productive_symbols(g, iteration_factor)
    if g.start not in gen:
        logger.warning(f"Start symbol {g.start} is not productive; the language is empty")

    keep = gen | {g.start}
    dropped = [A for A in g.nonterminals if A not in keep]
    if dropped:
        logger.info(f"Removing unproductive non-terminals: {dropped}")

    new_rules: Dict[str, Set[Production]] = {}
    for A, rhss in g.rules.items():
        if A not in keep:
            continue
        new_rules[A] = {rhs for rhs in rhss if all(g.is_terminal(s) or s in gen for s in rhs)}
    return g.replace(nonterminals=[A for A in g.nonterminals if A in keep], rules=new_rules)
