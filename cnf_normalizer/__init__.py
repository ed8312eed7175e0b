"""
cnf-normalizer

Converts arbitrary context-free grammars to Chomsky Normal Form while
preserving the generated language.

Features:
- ε-production, unit-production and useless-symbol elimination
- Binarization and terminal lifting with deterministic helper names
- CNF validation
- Text grammar format (single-character or whitespace-separated tokens)
- Chomsky-hierarchy classification and bounded language enumeration
"""

from .allocator import SymbolAllocator
from .analysis import GrammarType, classify, enumerate_strings, is_left_linear, is_right_linear
from .cnf import is_cnf, reshape, to_cnf
from .config import NormalizerConfig, NormalizerConfigError
from .errors import GrammarError, MalformedGrammar, NonTerminationError, UnsupportedShape
from .grammar import EPS, Grammar
from .parser import from_file, parse_grammar
from .simplify import (
    nullable_symbols,
    productive_symbols,
    reachable_symbols,
    remove_epsilon,
    remove_unit,
    remove_unproductive,
    remove_unreachable,
)

__version__ = "0.1.0"

__all__ = [
    'EPS', 'Grammar', 'SymbolAllocator', 'NormalizerConfig', 'NormalizerConfigError',
    'GrammarError', 'MalformedGrammar', 'UnsupportedShape', 'NonTerminationError',
    'nullable_symbols', 'remove_epsilon', 'remove_unit', 'reachable_symbols', 'remove_unreachable',
    'productive_symbols', 'remove_unproductive', 'is_cnf', 'reshape', 'to_cnf',
    'parse_grammar', 'from_file', 'GrammarType', 'classify', 'enumerate_strings',
    'is_right_linear', 'is_left_linear',
]
