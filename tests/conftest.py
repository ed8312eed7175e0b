"""
Pytest configuration and fixtures for cnf_normalizer tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for all imports
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from cnf_normalizer.grammar import Grammar


@pytest.fixture
def variant10():
    """S -> aB | AB, A -> d | dS | aAaAb | ε, B -> a | aS | A, plus unreachable D."""
    return Grammar.create(
        nonterminals=["S", "A", "B", "D"],
        terminals=["a", "b", "d"],
        rules={
            "S": ["aB", "AB"],
            "A": ["d", "dS", "aAaAb", "ε"],
            "B": ["a", "aS", "A"],
            "D": ["Aba"],
        },
        start="S",
    )


@pytest.fixture
def unit_cycle():
    """A -> B | a, B -> A."""
    return Grammar.create(["A", "B"], ["a"], {"A": ["B", "a"], "B": ["A"]}, "A")


@pytest.fixture
def anbn():
    """S -> aSb | ab, plus C -> c that nothing references."""
    return Grammar.create(["S", "C"], ["a", "b", "c"], {"S": ["aSb", "ab"], "C": ["c"]}, "S")


@pytest.fixture
def cnf_grammar():
    """Already in CNF: S -> AB, A -> a, B -> b."""
    return Grammar.create(["S", "A", "B"], ["a", "b"], {"S": ["AB"], "A": ["a"], "B": ["b"]}, "S")


@pytest.fixture
def grammar_file(tmp_path):
    """Write grammar text to a temporary file and return its path."""
    def _write(text, name="grammar.txt"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write
