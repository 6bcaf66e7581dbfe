"""Tests for damage formulas and the damage sandbox."""

import pytest

from azoth.damage import (
    armor_rating_for_gs,
    damage_factor_for_attrs,
    damage_factor_for_gs,
    damage_factor_for_level,
    damage_for_weapon,
    damage_mitigation_percent,
    round_gear_score,
)
from azoth.sim import simulate_damage
from azoth.sim.dmg_sandbox import list_attacks


class TestGearScore:
    """Test gear score rounding and compounding."""

    def test_rounding(self) -> None:
        """Rounded up to the interval, never below the minimum."""
        assert round_gear_score(0) == 100
        assert round_gear_score(600) == 600
        assert round_gear_score(601) == 605

    def test_factor_at_minimum(self) -> None:
        assert damage_factor_for_gs(100) == 1

    def test_factor_compounds(self) -> None:
        """Full rate up to 500, reduced rate above."""
        assert damage_factor_for_gs(500) == pytest.approx(1.0112 ** 80)
        assert damage_factor_for_gs(600) == pytest.approx(1.0112 ** 80 * (1 + 0.0112 * 0.6667) ** 20)
        values = [damage_factor_for_gs(gs) for gs in range(100, 701, 50)]
        assert values == sorted(values)

    def test_armor_rating(self) -> None:
        assert armor_rating_for_gs(100, 100) == 100


class TestFactors:
    """Test level and attribute factors."""

    def test_level(self) -> None:
        assert damage_factor_for_level(1) == 0
        assert damage_factor_for_level(60) == pytest.approx(0.025 * 59)

    def test_attributes(self) -> None:
        """Weapon scaling times attribute modifier sums; missing attributes count as zero."""
        factor = damage_factor_for_attrs({"str": 0.9, "dex": 0.65}, {"str": 0.2, "dex": None})
        assert factor == pytest.approx(0.18)

    def test_plain_hit(self) -> None:
        """Minimum gear score at level 1 leaves base damage untouched."""
        assert damage_for_weapon(weapon_gear_score=100, base_damage=100, level=1) == pytest.approx(100)
        boosted = damage_for_weapon(weapon_gear_score=100, base_damage=100, level=1, base_mod=0.1, empower_mod=0.2)
        assert boosted == pytest.approx(100 * 1.1 * 1.2)


class TestMitigation:
    """Test armor mitigation."""

    def test_no_armor(self) -> None:
        assert damage_mitigation_percent(armor_rating=0) == 1

    def test_half_at_scale_factor(self) -> None:
        """Armor equal to the scale factor halves the damage."""
        assert damage_mitigation_percent(armor_rating=1850, gear_score=100) == pytest.approx(0.5)

    def test_penetration(self) -> None:
        """Full penetration ignores armor; values outside 0..1 are clamped."""
        assert damage_mitigation_percent(armor_rating=1850, armor_penetration=1) == 1
        assert damage_mitigation_percent(armor_rating=1850, armor_penetration=5) == 1
        partial = damage_mitigation_percent(armor_rating=1850, armor_penetration=0.5, gear_score=100)
        assert 0.5 < partial < 1


class TestSandbox:
    """Test simulate_damage."""

    def test_list_attacks(self, db) -> None:
        attacks = list_attacks(db.damage_table, "Sword")
        assert [a["id"] for a in attacks] == ["1hSword_Light1", "1hSword_Heavy1"]
        assert attacks[0]["label"] == "Light1"
        assert list_attacks(db.damage_table, None) == []

    def test_defaults(self, db) -> None:
        """First attack is used; without mods the tooltip equals the standard hit."""
        result = simulate_damage(weapon=db.weapons.get("1hSword_T5"), damage_rows=db.damage_table)
        assert result["weapon"]["tag"] == "Sword"
        assert result["attack"]["id"] == "1hSword_Light1"
        assert result["factors"]["crit"] == pytest.approx(0.25)
        dmg = result["damage"]
        assert dmg["tooltip"] == dmg["standard"]
        assert dmg["crit"] > dmg["standard"]
        assert dmg["standard_mitigated"] == dmg["standard"]

    def test_attack_and_overrides(self, db) -> None:
        weapon = db.weapons.get("1hSword_T5")
        light = simulate_damage(weapon=weapon, damage_rows=db.damage_table, weapon_gear_score=100, player_level=1)
        heavy = simulate_damage(
            weapon=weapon, damage_rows=db.damage_table, attack_id="1hSword_Heavy1", weapon_gear_score=100, player_level=1
        )
        assert light["damage"]["standard"] == pytest.approx(100)
        assert heavy["damage"]["standard"] == pytest.approx(150)
        custom = simulate_damage(weapon=weapon, base_damage=50, damage_coef=2, weapon_gear_score=100, player_level=1)
        assert custom["damage"]["standard"] == pytest.approx(100)

    def test_mitigated(self, db) -> None:
        result = simulate_damage(
            weapon=db.weapons.get("1hSword_T5"),
            damage_rows=db.damage_table,
            defender_armor_rating=1850,
            defender_gear_score=100,
        )
        assert result["factors"]["mitigation"] == pytest.approx(0.5)
        assert result["damage"]["standard_mitigated"] == pytest.approx(result["damage"]["standard"] * 0.5, rel=1e-5)

    def test_attributes_raise_damage(self, db) -> None:
        weapon = db.weapons.get("1hSword_T5")
        plain = simulate_damage(weapon=weapon, damage_rows=db.damage_table)
        strong = simulate_damage(weapon=weapon, damage_rows=db.damage_table, attr_sums={"str": 0.2})
        assert strong["factors"]["attributes"] == pytest.approx(0.18)
        assert strong["damage"]["standard"] > plain["damage"]["standard"]
