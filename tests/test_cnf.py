"""
Tests for cnf_normalizer/cnf.py - CNF validator, reshaper and full pipeline.
"""

import pytest

from cnf_normalizer.allocator import SymbolAllocator
from cnf_normalizer.analysis import enumerate_strings
from cnf_normalizer.cnf import add_start_epsilon, is_cnf, reshape, to_cnf
from cnf_normalizer.config import NormalizerConfig
from cnf_normalizer.errors import MalformedGrammar
from cnf_normalizer.grammar import Grammar
from cnf_normalizer.simplify import productive_symbols, reachable_symbols


GRAMMARS = {
    "variant10": (["S", "A", "B", "D"], ["a", "b", "d"], {
        "S": ["aB", "AB"], "A": ["d", "dS", "aAaAb", "ε"], "B": ["a", "aS", "A"], "D": ["Aba"],
    }),
    "nullable_start": (["S", "A", "B", "C"], ["0", "1"], {
        "S": ["0A0", "1B1", "BB"], "A": ["C"], "B": ["S", "A"], "C": ["S", "ε"],
    }),
    "balanced": (["S"], ["(", ")"], {"S": ["(S)", "SS", "ε"]}),
    "anbn": (["S", "C"], ["a", "b", "c"], {"S": ["aSb", "ab"], "C": ["c"]}),
    "unit_cycle": (["S", "A", "B"], ["a", "b"], {"S": ["A", "bSb"], "A": ["B", "a"], "B": ["A", "S"]}),
    "arith": (["E", "T", "F"], ["+", "*", "(", ")", "x"], {
        "E": ["E+T", "T"], "T": ["T*F", "F"], "F": ["(E)", "x"],
    }),
    "sentences": (["S", "NP", "VP", "PP", "Det", "N", "V", "P"],
                  ["she", "sleeps", "the", "a", "dog", "saw", "with"], {
        "S": ["NP VP"], "NP": ["Det N", "Det N PP", "she"], "VP": ["V NP", "VP PP", "sleeps"],
        "PP": ["P NP"], "Det": ["the", "a"], "N": ["dog"], "V": ["saw"], "P": ["with"],
    }),
}


def build(name):
    nts, ts, rules = GRAMMARS[name]
    return Grammar.create(nts, ts, rules, nts[0])


class TestIsCnf:
    """Tests for the CNF shape predicate."""

    def test_cnf(self, cnf_grammar):
        assert is_cnf(cnf_grammar)

    def test_terminal_in_pair(self):
        g = Grammar.create(["S", "B"], ["a", "b"], {"S": ["aB"], "B": ["b"]}, "S")
        assert not is_cnf(g)

    def test_unit_production(self):
        g = Grammar.create(["S", "A"], ["a"], {"S": ["A"], "A": ["a"]}, "S")
        assert not is_cnf(g)

    def test_long_body(self):
        g = Grammar.create(["S", "A"], ["a"], {"S": ["AAA"], "A": ["a"]}, "S")
        assert not is_cnf(g)

    def test_start_epsilon(self):
        """start -> ε only passes when allowed and the start symbol is in no body."""
        g = Grammar.create(["S", "A"], ["a"], {"S": ["AA", "ε"], "A": ["a"]}, "S")
        assert not is_cnf(g)
        assert is_cnf(g, allow_start_epsilon=True)

        g = Grammar.create(["S", "A"], ["a"], {"S": ["SA", "ε", "a"], "A": ["a"]}, "S")
        assert not is_cnf(g, allow_start_epsilon=True)

    def test_empty_grammar(self):
        g = Grammar.create(["S"], ["a"], {"S": []}, "S")
        assert is_cnf(g)


class TestReshape:
    """Tests for binarization and terminal lifting."""

    def test_binarize(self):
        g = Grammar.create(["S", "A", "B", "C"], ["a", "b", "c"],
                           {"S": ["ABC"], "A": ["a"], "B": ["b"], "C": ["c"]}, "S")
        out = reshape(g)
        assert out.nonterminals == ("S", "A", "B", "C", "D")
        assert out.productions("S") == frozenset({("D", "C")})
        assert out.productions("D") == frozenset({("A", "B")})
        assert is_cnf(out)

    def test_pair_helper_reused(self):
        g = Grammar.create(["S", "A", "B", "C", "D"], ["a", "b", "c", "d"],
                           {"S": ["ABC", "ABD"], "A": ["a"], "B": ["b"], "C": ["c"], "D": ["d"]}, "S")
        out = reshape(g)
        assert out.nonterminals == ("S", "A", "B", "C", "D", "E")
        assert out.productions("S") == frozenset({("E", "C"), ("E", "D")})

    def test_terminal_lifting(self):
        g = Grammar.create(["S", "B"], ["a", "b"], {"S": ["aB", "a"], "B": ["b"]}, "S")
        out = reshape(g)
        assert out.nonterminals == ("S", "B", "A")
        assert out.productions("S") == frozenset({("A", "B"), ("a",)})
        assert out.productions("A") == frozenset({("a",)})

    def test_terminal_helper_reused(self):
        g = Grammar.create(["S"], ["a"], {"S": ["aaS", "a"]}, "S")
        out = reshape(g)
        assert is_cnf(out)
        # one pair helper for (a, a), one terminal helper for a
        assert len(out.nonterminals) == 3

    def test_uses_given_allocator(self):
        g = Grammar.create(["S", "B"], ["a", "b"], {"S": ["aB"], "B": ["b"]}, "S")
        allocator = SymbolAllocator.for_grammar(g, alphabet=(), prefix="T")
        out = reshape(g, allocator)
        assert out.productions("S") == frozenset({("T0", "B")})
        assert allocator.allocated == ["T0"]

    def test_reshape_is_cnf(self):
        for name in ("anbn", "sentences"):
            assert is_cnf(reshape(build(name)))


class TestToCnf:
    """Tests for the full conversion pipeline."""

    @pytest.mark.parametrize("name", sorted(GRAMMARS))
    def test_shape(self, name):
        out = to_cnf(build(name))
        assert is_cnf(out)
        for A, rhs in out.iter_productions():
            assert (len(rhs) == 1 and out.is_terminal(rhs[0])) or (
                len(rhs) == 2 and out.is_nonterminal(rhs[0]) and out.is_nonterminal(rhs[1])
            )

    @pytest.mark.parametrize("name", sorted(GRAMMARS))
    def test_language_preserved(self, name):
        g = build(name)
        out = to_cnf(g)
        n = 4 if name == "sentences" else 6
        assert enumerate_strings(out, n) == enumerate_strings(g, n) - {()}

    @pytest.mark.parametrize("name", sorted(GRAMMARS))
    def test_reachable_and_productive(self, name):
        out = to_cnf(build(name))
        assert set(out.nonterminals) == reachable_symbols(out)
        assert set(out.nonterminals) == productive_symbols(out)

    @pytest.mark.parametrize("name", sorted(GRAMMARS))
    def test_idempotent(self, name):
        out = to_cnf(build(name))
        again = to_cnf(out)
        assert again == out
        assert again is not out

    def test_variant10_strings(self, variant10):
        out = to_cnf(variant10)
        words = enumerate_strings(out, 4)
        assert ("a", "a") in words
        assert ("d", "a", "a") in words
        assert "D" not in out.nonterminals

    def test_unreachable_dropped(self, anbn):
        assert "C" not in to_cnf(anbn).nonterminals

    def test_orphan_after_productivity(self):
        """A becomes unreachable once the unproductive body S -> AB is dropped."""
        g = Grammar.create(["S", "A", "B"], ["a", "b"], {"S": ["AB", "a"], "A": ["a"], "B": ["bB"]}, "S")
        out = to_cnf(g)
        assert out.nonterminals == ("S",)
        assert out.productions("S") == frozenset({("a",)})

    def test_empty_language(self):
        g = Grammar.create(["S"], ["a"], {"S": ["aS"]}, "S")
        out = to_cnf(g)
        assert out.nonterminals == ("S",)
        assert out.production_count == 0

    def test_already_cnf_short_circuit(self, cnf_grammar):
        steps = []
        out = to_cnf(cnf_grammar, on_step=lambda title, g: steps.append(title))
        assert out == cnf_grammar
        assert steps == []

    def test_step_callback(self, variant10):
        steps = []
        to_cnf(variant10, on_step=lambda title, g: steps.append((title, g)))
        assert len(steps) == 5
        assert steps[0][0].startswith("Step 1")
        assert all(isinstance(g, Grammar) for _, g in steps)
        assert all(rhs for _, rhs in steps[0][1].iter_productions())

    def test_input_not_modified(self, variant10):
        before = variant10.replace()
        to_cnf(variant10)
        assert variant10 == before

    def test_deterministic(self):
        """Alternative order in the input does not change the result."""
        a = Grammar.create(["S", "A", "B"], ["a", "b"],
                           {"S": ["aAB", "BBB", "ab"], "A": ["a", "bAA"], "B": ["b", "aBA"]}, "S")
        b = Grammar.create(["S", "A", "B"], ["a", "b"],
                           {"B": ["aBA", "b"], "S": ["ab", "BBB", "aAB"], "A": ["bAA", "a"]}, "S")
        assert to_cnf(a) == to_cnf(b)

    def test_malformed_rejected(self):
        g = Grammar(("S",), ("a",), {"S": frozenset({("X",)})}, "S")
        with pytest.raises(MalformedGrammar):
            to_cnf(g)


class TestStartEpsilon:
    """Tests for the keep_start_epsilon policy."""

    def test_dropped_by_default(self, variant10):
        assert () not in enumerate_strings(to_cnf(variant10), 3)

    def test_kept_with_fresh_start(self, variant10):
        config = NormalizerConfig(keep_start_epsilon=True)
        out = to_cnf(variant10, config)
        assert out.start != "S"
        assert out.start == out.nonterminals[0]
        assert () in out.productions(out.start)
        assert is_cnf(out, allow_start_epsilon=True)
        assert enumerate_strings(out, 6) == enumerate_strings(variant10, 6)

    def test_kept_on_unused_start(self):
        g = Grammar.create(["S", "A", "B"], ["a", "b"], {"S": ["AB"], "A": ["a", "ε"], "B": ["b", "ε"]}, "S")
        out = to_cnf(g, NormalizerConfig(keep_start_epsilon=True))
        assert out.start == "S"
        assert out.productions("S") == frozenset({("A", "B"), ("a",), ("b",), ()})
        assert enumerate_strings(out, 2) == {(), ("a",), ("b",), ("a", "b")}

    def test_idempotent_with_start_epsilon(self, variant10):
        config = NormalizerConfig(keep_start_epsilon=True)
        out = to_cnf(variant10, config)
        assert to_cnf(out, config) == out

    def test_add_start_epsilon_direct(self, cnf_grammar):
        out = add_start_epsilon(cnf_grammar, SymbolAllocator.for_grammar(cnf_grammar))
        assert out.start == "S"
        assert () in out.productions("S")
