"""Tests for description text expressions."""

import pytest

from azoth.expression import ExpressionContext, ExpressionError, ExpressionSolver, solve_text


@pytest.fixture
def solver(db) -> ExpressionSolver:
    return ExpressionSolver(db)


def _solve(solver: ExpressionSolver, text: str, **kwargs) -> str:
    return solver.solve(ExpressionContext(text=text, **kwargs))


class TestSolve:
    """Test segment substitution."""

    def test_plain_arithmetic(self, solver) -> None:
        assert _solve(solver, "Deal ${1 + 2 * 3} damage") == "Deal 7 damage"
        assert _solve(solver, "${(1 + 2) / 4}") == "0.75"

    def test_text_without_segments(self, solver) -> None:
        assert _solve(solver, "Nothing to do") == "Nothing to do"
        assert _solve(solver, "") == ""

    def test_several_segments(self, solver) -> None:
        assert _solve(solver, "a ${1+1} b ${2*2}") == "a 2 b 4"

    def test_context_values_win(self, solver) -> None:
        """Caller values are looked up before anything else."""
        assert _solve(solver, "${x * 10}", values={"x": 2}) == "20"
        assert _solve(solver, "${perkMultiplier * 2}", values={"perkMultiplier": 3}) == "6"

    def test_resource_lookup(self, solver) -> None:
        """Resource.Id.Attr reads a row; id and attribute match case-insensitively."""
        assert _solve(solver, "${Affix.Stat_Str.MODStrength * 2}") == "20"
        assert _solve(solver, "${affix.stat_str.modstrength}") == "10"

    def test_key_value_pair(self, solver) -> None:
        """Category=value cells resolve to the value part."""
        assert _solve(solver, "${Affix.Gem_Fire.DMGVitalsCategory * 2}") == "0.1"

    def test_perk_multiplier(self, solver) -> None:
        text = "${perkMultiplier * 10}"
        assert _solve(solver, text, item_id="PerkID_Stat_Str", gear_score=600) == "15"

    def test_consumable_potency(self, solver) -> None:
        """PotencyPerLevel times the character level."""
        assert _solve(solver, "${ConsumablePotency}", item_id="Potion_Heal", char_level=60) == "120"

    def test_consumable_potency_fallback(self, solver) -> None:
        """An unknown effect id resolves to 1."""
        assert _solve(solver, "${ConsumablePotency * 5}", item_id="Nope") == "5"


class TestErrors:
    """Test failure modes."""

    def test_unknown_token(self, solver) -> None:
        with pytest.raises(ExpressionError) as info:
            _solve(solver, "${foo + 1}")
        assert info.value.token == "foo"
        assert info.value.text == "${foo + 1}"

    def test_unresolved_perk_multiplier(self, solver) -> None:
        with pytest.raises(ExpressionError):
            _solve(solver, "${perkMultiplier}", item_id="Nope")

    @pytest.mark.parametrize(
        "text",
        [
            "${Unknown.X.Y}",
            "${Affix.Nope.MODStrength}",
            "${Affix.Stat_Str.Nope}",
            "${Affix.Stat_Str}",
        ],
    )
    def test_bad_resources(self, solver, text) -> None:
        with pytest.raises(ExpressionError):
            _solve(solver, text)

    def test_non_numeric_value(self, solver) -> None:
        """Resolved values must be numbers."""
        with pytest.raises(ExpressionError):
            _solve(solver, "${x}", values={"x": "abc"})

    def test_unsafe_characters_rejected(self, solver) -> None:
        """Anything the tokenizer does not cover is refused before evaluation."""
        with pytest.raises(ExpressionError):
            _solve(solver, "${__import__('os')}")
        with pytest.raises(ExpressionError):
            _solve(solver, "${1; 2}")

    def test_division_by_zero(self, solver) -> None:
        with pytest.raises(ExpressionError):
            _solve(solver, "${1 / 0}")

    @pytest.mark.parametrize(
        "text",
        [
            "${(1)(2)}",
            "${()}",
            "${2 ** 3}",
            "${9 ** 9 ** 9}",
            "${2 (3)}",
            "${(2) 3}",
            "${1 2}",
            "${}",
        ],
    )
    def test_non_arithmetic_shapes(self, solver, text) -> None:
        """Power, calls, tuples and juxtaposed operands are not arithmetic."""
        with pytest.raises(ExpressionError):
            _solve(solver, text)

    def test_non_finite_result(self, solver) -> None:
        with pytest.raises(ExpressionError):
            _solve(solver, "${x * 10}", values={"x": "1e400"})


class TestSolveText:
    """Test the lenient wrapper."""

    def test_success(self, db) -> None:
        assert solve_text(db, "${2 * 3}") == "6"

    def test_error_returns_text(self, db) -> None:
        """Unresolved text comes back unchanged instead of raising."""
        assert solve_text(db, "Gain ${foo}%") == "Gain ${foo}%"

    @pytest.mark.parametrize("text", ["x ${(1)(2)} y", "x ${10**400} y", "x ${()} y"])
    def test_bad_shapes_return_text(self, db, text) -> None:
        assert solve_text(db, text) == text
