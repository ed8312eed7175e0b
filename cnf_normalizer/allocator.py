"""Fresh non-terminal names for one normalization run."""

from __future__ import annotations
import logging
import string
from itertools import count
from typing import Iterable, Iterator, List, Tuple

logger = logging.getLogger("cnf_normalizer.allocator")

# no ε: it renders the empty production
DEFAULT_ALPHABET: Tuple[str, ...] = tuple(string.ascii_uppercase) + tuple("αβγδζηθικλμνξπρστυφχψω")


class SymbolAllocator:
    """
    Hands out non-terminal names that collide with nothing already registered.

    Single readable letters are tried first; once the alphabet is used up the
    allocator moves on to ``N0``, ``N1``, ... so allocation never fails. The
    sequence only depends on the registered names and the number of calls.
    """

    def __init__(self, taken: Iterable[str] = (), alphabet: Iterable[str] = DEFAULT_ALPHABET, prefix: str = "N"):
        self._taken = dict.fromkeys(taken)
        self._names = self._candidates(tuple(alphabet), prefix)
        self.allocated: List[str] = []

    @classmethod
    def for_grammar(cls, grammar, **kwargs) -> "SymbolAllocator":
        return cls(grammar.nonterminals + grammar.terminals, **kwargs)

    @staticmethod
    def _candidates(alphabet: Tuple[str, ...], prefix: str) -> Iterator[str]:
        yield from alphabet
        for i in count():
            yield f"{prefix}{i}"

    def allocate(self) -> str:
        name = next(self._names)
        while name in self._taken:
            name = next(self._names)
        self._taken[name] = None
        self.allocated.append(name)
        logger.debug(f"Allocated non-terminal {name}")
        return name

    def register(self, name: str) -> None:
        self._taken[name] = None

    @property
    def registered(self) -> Tuple[str, ...]:
        return tuple(self._taken)

    def __contains__(self, name: str) -> bool:
        return name in self._taken
