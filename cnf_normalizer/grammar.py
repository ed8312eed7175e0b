"""
Grammar value shared by every normalization stage.

A grammar is built once through ``Grammar.create`` (which validates and
copies its inputs) and then threaded through the pipeline; stages build new
values with ``Grammar.replace`` instead of mutating the one they receive.

Productions are tuples of symbols; the empty tuple is ε.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace as dc_replace
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import MalformedGrammar, UnsupportedShape

EPS = "ε"
EPS_SPELLINGS = frozenset({"ε", "ϵ", "eps", "epsilon"})

Production = Tuple[str, ...]
Rules = Dict[str, FrozenSet[Production]]
RawBody = Union[str, Sequence[str]]


def _ordered(symbols: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(symbols))


def split_symbols(text: str, symbols: Iterable[str], allow_unknown: bool = False) -> Production:
    """
    Split a body written without separators into declared symbols, preferring
    the longest symbol at each position ("aAaAb" -> a A a A b, "NPVP" -> NP VP).
    A shorter symbol is taken when the longest one leaves a remainder that
    cannot be split ("abcd" over {ab, abc, cd} -> ab cd).

    With ``allow_unknown`` an unmatched character becomes a symbol of its own;
    otherwise a body with no complete split raises MalformedGrammar.
    """
    by_length = sorted(set(symbols), key=lambda s: (-len(s), s))
    n = len(text)
    # splits[i]: split of text[i:], or None if there is none
    splits: List[Optional[Production]] = [None] * (n + 1)
    splits[n] = ()
    for i in range(n - 1, -1, -1):
        for sym in by_length:
            if sym and text.startswith(sym, i) and splits[i + len(sym)] is not None:
                splits[i] = (sym,) + splits[i + len(sym)]
                break
        else:
            if allow_unknown:
                splits[i] = (text[i],) + splits[i + 1]
    if splits[0] is None:
        raise MalformedGrammar(f"cannot split body {text!r} into declared symbols")
    return splits[0]


def to_production(body: RawBody, symbols: Iterable[str]) -> Production:
    """Normalize one caller-supplied body (string or token sequence) into a production."""
    if isinstance(body, str):
        text = body.strip()
        if not text or text in EPS_SPELLINGS:
            return ()
        if any(ch.isspace() for ch in text):
            return tuple(text.split())
        return split_symbols(text, symbols)
    tokens = tuple(body)
    if len(tokens) == 1 and tokens[0] in EPS_SPELLINGS:
        return ()
    return tokens


@dataclass
class Grammar:
    nonterminals: Tuple[str, ...]
    terminals: Tuple[str, ...]
    rules: Rules
    start: str
    _nt_set: FrozenSet[str] = field(init=False, repr=False, compare=False)
    _t_set: FrozenSet[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._nt_set = frozenset(self.nonterminals)
        self._t_set = frozenset(self.terminals)

    @classmethod
    def create(
        cls,
        nonterminals: Iterable[str],
        terminals: Iterable[str],
        rules: Mapping[str, Union[RawBody, Iterable[RawBody]]],
        start: str,
    ) -> "Grammar":
        """
        Build a validated grammar from the four construction inputs.

        ``rules`` maps each non-terminal to its alternatives; an alternative is
        a string (split on whitespace, or by longest declared symbol when it has
        none) or a sequence of symbols. ``""`` and ``"ε"`` denote the empty
        production. The mapping is copied, so later changes to the caller's
        data do not reach the grammar.
        """
        nts = _ordered(nonterminals)
        ts = _ordered(terminals)
        symbols = nts + ts

        copied: Rules = {}
        for lhs, bodies in rules.items():
            if lhs not in nts:
                cls._reject_lhs(lhs, nts, ts)
            if isinstance(bodies, str):
                bodies = [bodies]
            prods = frozenset(to_production(b, symbols) for b in bodies)
            copied[lhs] = copied.get(lhs, frozenset()) | prods

        g = cls(nts, ts, copied, start)
        g.validate()
        return g

    @staticmethod
    def _reject_lhs(lhs: str, nts: Tuple[str, ...], ts: Tuple[str, ...]) -> None:
        if lhs in ts:
            raise UnsupportedShape(f"left side {lhs!r} is a terminal")
        parts = lhs.split()
        if len(parts) == 1:
            try:
                parts = list(split_symbols(lhs, nts + ts))
            except MalformedGrammar:
                parts = [lhs]
        if len(parts) > 1:
            raise UnsupportedShape(f"left side {lhs!r} is not a single non-terminal")
        raise MalformedGrammar(f"rule for undeclared non-terminal {lhs!r}")

    def validate(self) -> None:
        """Raise MalformedGrammar if any structural invariant is broken."""
        overlap = self._nt_set & self._t_set
        if overlap:
            raise MalformedGrammar(f"symbols declared both terminal and non-terminal: {sorted(overlap)}")
        if self.start not in self._nt_set:
            raise MalformedGrammar(f"start symbol {self.start!r} is not a non-terminal")
        for lhs, bodies in self.rules.items():
            if lhs not in self._nt_set:
                raise MalformedGrammar(f"rule for undeclared non-terminal {lhs!r}")
            for rhs in bodies:
                for sym in rhs:
                    if sym not in self._nt_set and sym not in self._t_set:
                        raise MalformedGrammar(f"{lhs} -> {' '.join(rhs)}: undeclared symbol {sym!r}")

    # ---------- Queries ----------

    def is_terminal(self, sym: str) -> bool:
        return sym in self._t_set

    def is_nonterminal(self, sym: str) -> bool:
        return sym in self._nt_set

    def productions(self, nt: str) -> FrozenSet[Production]:
        return self.rules.get(nt, frozenset())

    def iter_productions(self) -> Iterator[Tuple[str, Production]]:
        """Yield (lhs, body) pairs in declaration order, bodies sorted."""
        for nt in self.nonterminals:
            for rhs in sorted(self.productions(nt)):
                yield nt, rhs

    @property
    def production_count(self) -> int:
        return sum(len(bodies) for bodies in self.rules.values())

    def body_symbols(self) -> FrozenSet[str]:
        return frozenset(sym for bodies in self.rules.values() for rhs in bodies for sym in rhs)

    def replace(
        self,
        nonterminals: Optional[Iterable[str]] = None,
        rules: Optional[Mapping[str, Iterable[Production]]] = None,
        start: Optional[str] = None,
    ) -> "Grammar":
        """Return a new grammar with the given parts swapped in."""
        changes = {}
        if nonterminals is not None:
            changes["nonterminals"] = _ordered(nonterminals)
        changes["rules"] = {
            nt: frozenset(bodies) for nt, bodies in (self.rules if rules is None else rules).items()
        }
        if start is not None:
            changes["start"] = start
        return dc_replace(self, **changes)

    # ---------- Printing ----------

    def format_production(self, rhs: Production) -> str:
        if not rhs:
            return EPS
        sep = "" if all(len(s) == 1 for s in self._nt_set | self._t_set) else " "
        return sep.join(rhs)

    def dump(self) -> str:
        """Render one ``A → alt1 | alt2`` line per non-terminal; diagnostics only."""
        lines = []
        for nt in self.nonterminals:
            if nt not in self.rules:
                continue
            # ε goes last
            rhss = sorted(self.rules[nt], key=lambda rhs: (not rhs, rhs))
            alts = " | ".join(self.format_production(rhs) for rhs in rhss) if rhss else "∅"
            lines.append(f"{nt} → {alts}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.dump()
