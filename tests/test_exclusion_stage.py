"""
Tests for the Exclusion (Hajb) stage.

Tests verify:
1. Closer heirs block farther ones
2. Exclusion is decided on the original input, independent of order
3. Terminal states: single surviving heir, no surviving heir
"""

from fractions import Fraction

import pytest

from calculator.stages import DistributionState, ExclusionStage
from models.estate import ReconciliationStatus
from models.heir import HeirClassification, HeirRecord, HeirStatus
from rules import ConditionalRule, HeirTypeDefinition, RuleCatalog, RuleKind


class TestExclusionRules:
    """Tests for exclusion decisions."""

    def test_son_excludes_full_brother(self, catalog, make_state):
        state = ExclusionStage(catalog).apply(make_state({"son": 1, "full_brother": 2, "wife": 1}))

        brother = state.record("full_brother")
        assert brother.is_excluded
        assert brother.share == 0
        assert brother.status == HeirStatus.EXCLUDED
        assert brother.trace[-1] == "EXCLUDED: blocked by son"
        assert not state.is_terminal

    def test_all_blockers_listed(self, catalog, make_state):
        stage = ExclusionStage(catalog)
        blocked = stage.find_exclusions({"maternal_sibling": 1, "son": 1, "father": 1})
        assert blocked == {"maternal_sibling": ["son", "father"]}

    def test_excluded_heir_still_excludes(self, catalog, make_state):
        """Test grandfather, excluded by father, still blocks maternal siblings."""
        state = ExclusionStage(catalog).apply(make_state({
            "father": 1, "paternal_grandfather": 1, "maternal_sibling": 2, "mother": 1,
        }))

        assert state.record("paternal_grandfather").is_excluded
        assert "paternal_grandfather" in state.record("maternal_sibling").trace[-1]

    def test_input_order_does_not_matter(self, catalog, make_state):
        forward = ExclusionStage(catalog).apply(make_state({
            "mother": 1, "grandmother": 1, "son": 1, "full_sister": 1,
        }))
        backward = ExclusionStage(catalog).apply(make_state({
            "full_sister": 1, "son": 1, "grandmother": 1, "mother": 1,
        }))

        assert sorted(r.name for r in forward.excluded) == sorted(r.name for r in backward.excluded)
        assert sorted(forward.surviving_names) == sorted(backward.surviving_names)

    def test_no_exclusions(self, catalog, make_state):
        state = ExclusionStage(catalog).apply(make_state({"husband": 1, "daughter": 1}))
        assert state.excluded == []
        assert state.reconciliation_status is None

    def test_input_counts_unchanged(self, catalog, make_state):
        state = ExclusionStage(catalog).apply(make_state({"son": 1, "full_brother": 2, "wife": 1}))
        assert dict(state.input_counts) == {"son": 1, "full_brother": 2, "wife": 1}
        assert state.surviving_counts == {"son": 1, "wife": 1}


class TestTerminalStates:
    """Tests for the early-exit states."""

    def test_single_heir_inherits_everything(self, catalog, make_state):
        state = ExclusionStage(catalog).apply(make_state({"wife": 1}))

        wife = state.record("wife")
        assert wife.share == Fraction(1)
        assert wife.status == HeirStatus.SOLE_HEIR
        assert state.reconciliation_status == ReconciliationStatus.SINGLE_HEIR
        assert state.is_terminal

    def test_single_survivor_after_exclusion(self, catalog, make_state):
        state = ExclusionStage(catalog).apply(make_state({"son": 3, "full_brother": 1}))

        assert state.is_terminal
        assert state.record("son").share == 1
        assert state.record("son").per_head_share == Fraction(1, 3)
        assert state.record("full_brother").share == 0

    def test_everyone_excluded(self):
        """Test mutual exclusion leaves no heir and nothing allocated."""
        definitions = [
            HeirTypeDefinition("a", HeirClassification.FIXED_SHARE, Fraction(1, 2)),
            HeirTypeDefinition("b", HeirClassification.FIXED_SHARE, Fraction(1, 2)),
        ]
        rules = [
            ConditionalRule("a", "b", RuleKind.EXCLUSION),
            ConditionalRule("b", "a", RuleKind.EXCLUSION),
        ]
        catalog = RuleCatalog.build(definitions, rules)
        records = [
            HeirRecord("a", 1, HeirClassification.FIXED_SHARE),
            HeirRecord("b", 1, HeirClassification.FIXED_SHARE),
        ]

        state = ExclusionStage(catalog).apply(DistributionState.initial(records))

        assert state.is_terminal
        assert state.reconciliation_status == ReconciliationStatus.NO_HEIRS
        assert state.surviving == []
        assert all(record.share == 0 for record in state.records)


class TestStateImmutability:
    """Tests that stages never mutate their input."""

    def test_input_state_untouched(self, catalog, make_state):
        before = make_state({"son": 1, "full_brother": 1})
        ExclusionStage(catalog).apply(before)

        assert not before.record("full_brother").is_excluded
        assert before.record("full_brother").trace == ()

    def test_records_are_frozen(self, make_state):
        state = make_state({"son": 1})
        with pytest.raises(Exception):
            state.records[0].share = Fraction(1)
