"""
Tests for news_query.compiler
"""
import random

import pytest

from news_query.compiler import ExpressionCompiler
from news_query.config import MAX_DEPTH_CEILING, CategoryConfig, FilterConfig
from news_query.core.types import MalformedTreeError, OversizeTreeError, TreeLimits, UnknownCategoryError
from news_query.models import (
    EMPTY,
    Category,
    CompiledExpression,
    OperatorKind,
    OperatorPriority,
    OperatorStrategy,
    Token,
)
from news_query.normalizer import OperatorNormalizer
from news_query.serializer import FilterSerializer

AND, OR, NOT = OperatorKind.AND, OperatorKind.OR, OperatorKind.NOT
BOOLEAN, LEFT_TO_RIGHT = OperatorPriority.BOOLEAN, OperatorPriority.LEFT_TO_RIGHT


# ── Helpers ───────────────────────────────────────────────────────────────────

def org(id: str) -> Token:
    return Token.leaf(id, f"Org {id}", Category.ORGANISATION)


def inst(id: str) -> Token:
    return Token.leaf(id, f"Ric {id}", Category.INSTRUMENT)


def op(kind: OperatorKind, *children: Token) -> Token:
    return Token.operator_node(kind, children)


def m(kind: OperatorKind) -> Token:
    return Token.marker(kind)


def random_forest(rng: random.Random, size: int) -> list[Token]:
    """Arity-valid forest mixing leaves, operators and portfolios."""
    def node(depth: int) -> Token:
        roll = rng.random()
        if depth >= 4 or roll < 0.4:
            maker = rng.choice([org, inst])
            return maker(rng.choice("ABCDEFGH"))
        if roll < 0.55:
            return op(NOT, node(depth + 1))
        if roll < 0.7:
            children = [node(depth + 1) for _ in range(rng.randint(1, 3))]
            return Token(id=f"P{depth}{roll:.3f}", label="Portfolio", category=Category.PORTFOLIO, children=children)
        kind = rng.choice([AND, OR])
        return op(kind, *(node(depth + 1) for _ in range(rng.randint(2, 4))))

    return [node(0) for _ in range(size)]


@pytest.fixture
def compiler():
    return ExpressionCompiler(limits=TreeLimits(), categories=CategoryConfig())


# ── Binding ───────────────────────────────────────────────────────────────────

class TestBooleanPriority:
    def test_and_binds_tighter_than_or(self, compiler):
        forest = [org("A"), m(OR), org("B"), m(AND), org("C")]
        assert compiler.compile(forest, BOOLEAN) == op(OR, org("A"), op(AND, org("B"), org("C")))

    def test_and_first(self, compiler):
        forest = [org("A"), m(AND), org("B"), m(OR), org("C")]
        assert compiler.compile(forest, BOOLEAN) == op(OR, op(AND, org("A"), org("B")), org("C"))

    def test_not_binds_tightest(self, compiler):
        forest = [m(NOT), org("A"), m(AND), org("B")]
        assert compiler.compile(forest, BOOLEAN) == op(AND, op(NOT, org("A")), org("B"))

    def test_double_not_kept(self, compiler):
        forest = [m(NOT), m(NOT), org("A")]
        assert compiler.compile(forest) == op(NOT, op(NOT, org("A")))

    def test_implicit_or(self, compiler):
        forest = [org("A"), org("B"), m(AND), org("C")]
        assert compiler.compile(forest, BOOLEAN) == op(OR, org("A"), op(AND, org("B"), org("C")))

    def test_implicit_or_before_not(self, compiler):
        forest = [org("A"), m(NOT), org("B")]
        assert compiler.compile(forest, BOOLEAN) == op(OR, org("A"), op(NOT, org("B")))

    def test_chain_is_flat(self, compiler):
        forest = [org("A"), m(AND), org("B"), m(AND), org("C"), m(AND), org("D")]
        assert compiler.compile(forest) == op(AND, org("A"), org("B"), org("C"), org("D"))

    def test_forest_of_trees(self, compiler):
        forest = [op(AND, org("A"), org("B")), op(NOT, org("C"))]
        assert compiler.compile(forest) == op(OR, op(AND, org("A"), org("B")), op(NOT, org("C")))


class TestLeftToRightPriority:
    def test_left_association(self, compiler):
        forest = [org("A"), m(OR), org("B"), m(AND), org("C")]
        assert compiler.compile(forest, LEFT_TO_RIGHT) == op(AND, op(OR, org("A"), org("B")), org("C"))

    def test_implicit_and(self, compiler):
        forest = [org("A"), org("B"), m(OR), org("C")]
        assert compiler.compile(forest, LEFT_TO_RIGHT) == op(OR, op(AND, org("A"), org("B")), org("C"))

    def test_priority_as_string(self, compiler):
        forest = [org("A"), org("B")]
        assert compiler.compile(forest, "LeftToRight") == op(AND, org("A"), org("B"))


# ── Structure ─────────────────────────────────────────────────────────────────

class TestStructure:
    def test_empty_forest(self, compiler):
        assert compiler.compile([]) is EMPTY

    def test_empty_root(self, compiler):
        assert compiler.compile(EMPTY) is EMPTY

    def test_single_leaf(self, compiler):
        assert compiler.compile([org("A")]) == org("A")

    def test_nested_same_kind_flattened(self, compiler):
        tree = op(AND, org("A"), op(AND, org("B"), op(AND, org("C"), org("D"))))
        assert compiler.compile(tree) == op(AND, org("A"), org("B"), org("C"), org("D"))

    def test_no_dedup(self, compiler):
        assert compiler.compile([org("A"), org("A")]) == op(OR, org("A"), org("A"))

    def test_portfolio_contents_compiled(self, compiler):
        portfolio = Token(
            id="P",
            label="Tech",
            category=Category.PORTFOLIO,
            children=(op(OR, org("A"), op(OR, org("B"), org("C"))), inst("X")),
        )
        root = compiler.compile(portfolio)

        assert root.id == "P"
        assert root.label == "Tech"
        assert root.children == (op(OR, org("A"), org("B"), org("C")), inst("X"))

    def test_compile_expression_keeps_priority(self, compiler):
        expression = compiler.compile_expression([org("A"), org("B")], "LeftToRight")

        assert isinstance(expression, CompiledExpression)
        assert expression.priority == LEFT_TO_RIGHT
        assert expression.root == op(AND, org("A"), org("B"))


# ── Idempotence ───────────────────────────────────────────────────────────────

class TestIdempotence:
    @pytest.mark.parametrize("priority", [BOOLEAN, LEFT_TO_RIGHT])
    def test_fixed_forests(self, compiler, priority):
        forests = [
            [org("A"), m(AND), org("B"), m(OR), m(NOT), org("C")],
            [op(AND, org("A"), op(AND, org("B"), org("C"))), org("D")],
            [org("A")],
            [],
        ]
        for forest in forests:
            once = compiler.compile(forest, priority)
            assert compiler.compile(once, priority) == once

    @pytest.mark.parametrize("seed", range(25))
    def test_random_forests_after_normalization(self, compiler, seed):
        rng = random.Random(seed)
        forest = random_forest(rng, rng.randint(1, 5))

        once = compiler.compile(OperatorNormalizer().normalize(forest, OperatorStrategy.SMART), BOOLEAN)
        twice = compiler.compile(once, BOOLEAN)

        assert twice == once
        once.validate()


# ── Failures ──────────────────────────────────────────────────────────────────

class TestFailures:
    @pytest.mark.parametrize(
        "forest",
        [
            [m(AND), org("A")],
            [org("A"), m(OR)],
            [org("A"), m(AND), m(OR), org("B")],
            [m(NOT)],
            [org("A"), m(NOT)],
            [m(AND)],
        ],
        ids=["leading", "trailing", "adjacent", "lone-not", "dangling-not", "lone-marker"],
    )
    def test_unbindable_markers(self, compiler, forest):
        with pytest.raises(MalformedTreeError):
            compiler.compile(forest)

    def test_and_with_one_child_rejected(self, compiler):
        with pytest.raises(MalformedTreeError, match="at least 2"):
            compiler.compile(op(AND, org("A")))

    def test_malformed_operand_not_merged_away(self, compiler):
        """OR(A) next to an OR marker must still be rejected."""
        with pytest.raises(MalformedTreeError):
            compiler.compile([op(OR, org("A")), m(OR), org("B")])

    def test_not_with_two_children_rejected(self, compiler):
        with pytest.raises(MalformedTreeError, match="NOT"):
            compiler.compile([op(NOT, org("A"), org("B"))])

    def test_leaf_with_children_rejected(self, compiler):
        bad = Token(id="A", label="A", category=Category.INSTRUMENT, children=(org("B"),))
        with pytest.raises(MalformedTreeError):
            compiler.compile(bad)

    def test_unknown_category_string(self, compiler):
        with pytest.raises(UnknownCategoryError) as exc_info:
            compiler.compile([org("A"), Token.leaf("S", "Sector", "Sector")])
        assert exc_info.value.token_id == "S"

    def test_missing_category(self, compiler):
        with pytest.raises(UnknownCategoryError):
            compiler.compile(Token(id="X", label="X", category=None))

    def test_category_outside_configured_set(self):
        categories = CategoryConfig(
            enabled=frozenset({Category.ORGANISATION, Category.OPERATOR, Category.EMPTY}),
        )
        compiler = ExpressionCompiler(limits=TreeLimits(), categories=categories)

        assert compiler.compile([org("A"), org("B")]) == op(OR, org("A"), org("B"))
        with pytest.raises(UnknownCategoryError):
            compiler.compile([org("A"), inst("X")])

    def test_too_many_nodes(self):
        compiler = ExpressionCompiler(limits=TreeLimits(max_nodes=10), categories=CategoryConfig())
        with pytest.raises(OversizeTreeError):
            compiler.compile([org(str(i)) for i in range(11)])

    def test_not_chain_deeper_than_limit(self):
        compiler = ExpressionCompiler(limits=TreeLimits(max_nodes=100, max_depth=5), categories=CategoryConfig())
        with pytest.raises(OversizeTreeError, match="depth"):
            compiler.compile([m(NOT)] * 10 + [org("A")])

    def test_deep_input_rejected_before_recursion(self):
        tree = org("A")
        for _ in range(1500):
            tree = op(NOT, tree)
        with pytest.raises(OversizeTreeError):
            ExpressionCompiler(limits=TreeLimits(max_nodes=100_000, max_depth=200)).compile(tree)


# ── Depth ceiling ─────────────────────────────────────────────────────────────

def test_deepest_configurable_tree_runs_through_every_stage():
    limits = TreeLimits(max_nodes=10_000, max_depth=MAX_DEPTH_CEILING)
    chain = org("A")
    for _ in range(MAX_DEPTH_CEILING - 2):
        chain = op(NOT, chain)

    normalized = OperatorNormalizer(limits=limits).normalize([chain, org("B")])
    compiler = ExpressionCompiler(limits=limits, categories=CategoryConfig())
    compiled = compiler.compile(normalized)
    markup = FilterSerializer(config=FilterConfig(), compiler=compiler).compile_filter(compiled)

    assert compiled == op(OR, chain, org("B"))
    assert markup.count("<Operator") == MAX_DEPTH_CEILING - 1
