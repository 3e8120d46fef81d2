"""
Tests for the share assignment stage.

Tests verify:
1. Spouse shares depend on a surviving descendant
2. Daughters take 1/2 or 2/3 without a son and turn residuary with one
3. Father inherits as residuary without descendants
4. Reduction rules lower the mother's share
"""

from fractions import Fraction

import pytest

from calculator.stages import ExclusionStage, ShareAssignmentStage
from models.heir import HeirClassification, HeirStatus


@pytest.fixture
def assign(catalog, make_state):
    """Run exclusion then share assignment on ``{name: count}``."""
    def _assign(counts):
        state = ExclusionStage(catalog).apply(make_state(counts))
        return ShareAssignmentStage(catalog).apply(state)
    return _assign


class TestSpouseShares:
    """Tests for spouse shares."""

    @pytest.mark.parametrize("spouse,alone,with_child", [
        ("husband", Fraction(1, 2), Fraction(1, 4)),
        ("wife", Fraction(1, 4), Fraction(1, 8)),
    ])
    def test_spouse_share(self, assign, spouse, alone, with_child):
        assert assign({spouse: 1, "mother": 1}).record(spouse).share == alone
        assert assign({spouse: 1, "son": 1}).record(spouse).share == with_child
        assert assign({spouse: 1, "daughter": 1}).record(spouse).share == with_child

    def test_wives_share_collectively(self, assign):
        state = assign({"wife": 3, "son": 1})
        assert state.record("wife").share == Fraction(1, 8)
        assert state.record("wife").per_head_share == Fraction(1, 24)


class TestDaughters:
    """Tests for daughters' shares."""

    def test_single_daughter_half(self, assign):
        daughter = assign({"husband": 1, "daughter": 1}).record("daughter")
        assert daughter.share == Fraction(1, 2)
        assert daughter.status == HeirStatus.FIXED_SHARE

    def test_two_daughters_two_thirds(self, assign):
        assert assign({"mother": 1, "daughter": 2}).record("daughter").share == Fraction(2, 3)

    def test_daughters_residuary_with_son(self, assign):
        daughter = assign({"son": 1, "daughter": 2}).record("daughter")
        assert daughter.classification == HeirClassification.RESIDUARY
        assert daughter.status == HeirStatus.RESIDUARY
        assert daughter.share == 0
        assert "reclassified as residuary with son" in daughter.trace[-1]


class TestAscendants:
    """Tests for father and mother."""

    def test_father_residuary_without_descendants(self, assign):
        father = assign({"father": 1, "mother": 1}).record("father")
        assert father.is_residuary
        assert father.share == 0

    def test_father_fixed_with_descendant(self, assign):
        father = assign({"father": 1, "daughter": 1}).record("father")
        assert father.is_fixed_share
        assert father.share == Fraction(1, 6)

    def test_mother_third_without_descendants(self, assign):
        assert assign({"mother": 1, "father": 1}).record("mother").share == Fraction(1, 3)

    @pytest.mark.parametrize("condition", ["son", "daughter"])
    def test_mother_reduced_by_descendant(self, assign, condition):
        mother = assign({"mother": 1, condition: 1}).record("mother")
        assert mother.share == Fraction(1, 6)
        assert f"presence of {condition}" in mother.trace[-1]

    def test_mother_reduced_by_two_siblings(self, assign):
        assert assign({"mother": 1, "full_brother": 2}).record("mother").share == Fraction(1, 6)

    def test_mother_not_reduced_by_one_sibling(self, assign):
        assert assign({"mother": 1, "full_brother": 1}).record("mother").share == Fraction(1, 3)


class TestSiblings:
    """Tests for sibling shares."""

    def test_maternal_siblings_share_third(self, assign):
        assert assign({"husband": 1, "maternal_sibling": 3}).record("maternal_sibling").share == Fraction(1, 3)

    def test_full_sister_residuary_with_daughter(self, assign):
        sister = assign({"daughter": 1, "full_sister": 1}).record("full_sister")
        assert sister.is_residuary
        assert "with daughter" in sister.trace[-1]

    def test_full_sisters_two_thirds(self, assign):
        assert assign({"husband": 1, "full_sister": 2}).record("full_sister").share == Fraction(2, 3)


class TestTotals:
    """Tests for the fixed-share total."""

    def test_total_fixed_is_exact(self, assign):
        state = assign({"husband": 1, "daughter": 2, "mother": 1, "father": 1})
        assert state.total_fixed == Fraction(5, 4)
        assert state.has_descendant
        assert not state.has_son

    def test_excluded_heirs_ignored(self, assign):
        state = assign({"son": 1, "full_brother": 1, "wife": 1})
        assert state.record("full_brother").share == 0
        assert state.total_fixed == Fraction(1, 8)
        assert state.has_son
