"""Tests for compatibility scoring.

Tests enforce:
- Absent criteria are skipped, never counted as a zero or a match
- Multi-valued overlap divides by the larger set
- Weighted mean with the fixed weight table
"""
import pytest

from tribe_engine.domain.compatibility import (
    DEFAULT_CRITERION_WEIGHTS,
    CriteriaProfile,
    Criterion,
    CriterionKind,
    CriterionWeights,
    MatchResult,
    explain_compatibility,
    overlap_score,
    rank_candidates,
    score_compatibility,
)

pytestmark = pytest.mark.unit


def test_eleven_criteria_in_fixed_order():
    assert [c.value for c in Criterion] == [
        "age_range",
        "life_focus",
        "professional",
        "wealth",
        "execution",
        "personality",
        "health",
        "skills",
        "values",
        "social",
        "intent",
    ]


def test_criterion_kinds():
    multi = {c for c in Criterion if c.kind is CriterionKind.MULTI}
    assert multi == {Criterion.LIFE_FOCUS, Criterion.EXECUTION, Criterion.PERSONALITY, Criterion.SKILLS}


def test_default_weights():
    weights = DEFAULT_CRITERION_WEIGHTS
    assert weights.weight_of(Criterion.LIFE_FOCUS) == 1.5
    assert weights.weight_of(Criterion.EXECUTION) == 1.5
    assert weights.weight_of(Criterion.PERSONALITY) == 1.5
    assert weights.weight_of(Criterion.SKILLS) == 1.5
    assert weights.weight_of(Criterion.VALUES) == 2.0
    assert weights.weight_of(Criterion.INTENT) == 2.0
    assert weights.weight_of(Criterion.AGE_RANGE) == 1.0
    assert weights.weight_of(Criterion.SOCIAL) == 1.0


class TestOverlapScore:
    def test_subset_against_larger_set(self):
        """{"x","y"} vs {"x"} is 1/2."""
        assert overlap_score(frozenset({"x", "y"}), frozenset({"x"})) == 50.0

    def test_denominator_is_larger_set_not_union(self):
        """Jaccard would give 1/4 here; the larger set gives 1/3."""
        a = frozenset({"a", "b", "c"})
        b = frozenset({"a", "d"})
        assert overlap_score(a, b) == pytest.approx(100 / 3)

    def test_identical_sets(self):
        assert overlap_score(frozenset({"a", "b"}), frozenset({"b", "a"})) == 100.0

    def test_disjoint(self):
        assert overlap_score(frozenset({"a"}), frozenset({"b"})) == 0.0

    def test_large_sets_tolerated(self):
        a = frozenset(f"s{i}" for i in range(10))
        b = frozenset(f"s{i}" for i in range(5))
        assert overlap_score(a, b) == 50.0


class TestScoreCompatibility:
    """Test the weighted multi-criterion score."""

    def test_no_overlapping_criteria_scores_zero(self):
        """Profiles answering different questions have nothing to compare."""
        user = CriteriaProfile(age_range="26-35", skills=frozenset({"Product & Design"}))
        target = CriteriaProfile(wealth="Growing ($50K-$250K)", intent="Learning & Growth")
        assert score_compatibility(user, target) == 0

    def test_empty_profiles_score_zero(self):
        assert score_compatibility(CriteriaProfile(), CriteriaProfile()) == 0

    def test_identical_single_valued_profiles_score_hundred(self):
        profile = CriteriaProfile(
            age_range="36-45",
            professional="Founder/CEO",
            wealth="Established ($250K-$1M)",
            health="Active (3-4 workouts/week)",
            values="Integrity & Honesty",
            social="Privacy Focused",
            intent="Mastermind Collaboration",
        )
        assert score_compatibility(profile, profile) == 100

    def test_multi_valued_criterion_alone(self):
        user = CriteriaProfile(life_focus=frozenset({"x", "y"}))
        target = CriteriaProfile(life_focus=frozenset({"x"}))
        assert score_compatibility(user, target) == 50

    def test_single_valued_match_is_case_sensitive(self):
        user = CriteriaProfile(social="Other")
        target = CriteriaProfile(social="other")
        assert score_compatibility(user, target) == 0

    def test_criterion_absent_on_one_side_is_skipped(self):
        """A criterion only the user answered neither helps nor hurts."""
        user = CriteriaProfile(age_range="18-25", professional="Student")
        target = CriteriaProfile(age_range="18-25")
        assert score_compatibility(user, target) == 100

    def test_weighted_mean(self):
        """age match (100 x 1) + values mismatch (0 x 2) -> 100 / 3."""
        user = CriteriaProfile(age_range="26-35", values="Growth & Learning")
        target = CriteriaProfile(age_range="26-35", values="Stability & Security")
        assert score_compatibility(user, target) == 33

    def test_weighted_mean_with_multi_criterion(self):
        """life_focus 50 x 1.5 + intent 100 x 2 = 275 over 3.5 -> 78.57 -> 79."""
        user = CriteriaProfile(life_focus=frozenset({"a", "b"}), intent="Giving Back")
        target = CriteriaProfile(life_focus=frozenset({"a"}), intent="Giving Back")
        assert score_compatibility(user, target) == 79

    def test_half_rounds_up(self):
        """An exact .5 mean rounds up, unlike round()."""
        user = CriteriaProfile(personality=frozenset({"a", "b", "c", "d"}), skills=frozenset({"x"}))
        target = CriteriaProfile(personality=frozenset({"a"}), skills=frozenset({"y"}))
        # (25 x 1.5 + 0 x 1.5) / 3 = 12.5 -> 13
        assert score_compatibility(user, target) == 13

    def test_symmetric(self):
        user = CriteriaProfile(skills=frozenset({"a", "b", "c"}), values="Freedom & Independence")
        target = CriteriaProfile(skills=frozenset({"a"}), values="Freedom & Independence")
        assert score_compatibility(user, target) == score_compatibility(target, user)

    def test_custom_weights(self):
        user = CriteriaProfile(age_range="26-35", values="Growth & Learning")
        target = CriteriaProfile(age_range="26-35", values="Stability & Security")
        weights = CriterionWeights(weights={Criterion.AGE_RANGE: 3.0})
        # 100 x 3 over (3 + 1)
        assert score_compatibility(user, target, weights) == 75

    def test_score_within_bounds(self):
        user = CriteriaProfile(
            life_focus=frozenset({"a", "b", "c"}),
            execution=frozenset({"d"}),
            intent="Networking & Connections",
        )
        target = CriteriaProfile(
            life_focus=frozenset({"a"}),
            execution=frozenset({"d", "e"}),
            intent="Finding Mentors",
        )
        assert 0 <= score_compatibility(user, target) <= 100


class TestExplainCompatibility:
    def test_breakdown_lists_compared_criteria_in_order(self):
        user = CriteriaProfile(intent="Giving Back", age_range="18-25", skills=frozenset({"a"}))
        target = CriteriaProfile(intent="Giving Back", age_range="26-35")
        result = explain_compatibility(user, target)

        assert [item.criterion for item in result.breakdown] == [Criterion.AGE_RANGE, Criterion.INTENT]
        assert result.breakdown[0].raw_score == 0.0
        assert result.breakdown[1].raw_score == 100.0
        assert result.breakdown[1].weight == 2.0
        # 200 / 3 = 66.67
        assert result.score == 67

    def test_empty_breakdown_when_nothing_comparable(self):
        result = explain_compatibility(CriteriaProfile(age_range="18-25"), CriteriaProfile())
        assert result.score == 0
        assert result.breakdown == ()


class TestCriteriaProfileFromMapping:
    def test_lists_become_sets(self):
        profile = CriteriaProfile.from_mapping({"skills": ["a", "b", "a"], "age_range": "18-25"})
        assert profile.skills == frozenset({"a", "b"})
        assert profile.age_range == "18-25"

    def test_bare_string_for_multi_criterion(self):
        profile = CriteriaProfile.from_mapping({"personality": "Introverted"})
        assert profile.personality == frozenset({"Introverted"})

    def test_empty_values_are_absent(self):
        profile = CriteriaProfile.from_mapping({"values": "", "skills": [], "execution": [""]})
        assert profile.value_of(Criterion.VALUES) is None
        assert profile.value_of(Criterion.SKILLS) is None
        assert profile.value_of(Criterion.EXECUTION) is None

    def test_unknown_keys_ignored(self):
        profile = CriteriaProfile.from_mapping({"favourite_color": "blue", "intent": "Giving Back"})
        assert profile == CriteriaProfile(intent="Giving Back")


class TestRankCandidates:
    def test_sorted_best_first(self):
        user = CriteriaProfile(age_range="26-35", intent="Giving Back")
        results = rank_candidates(user, [
            ("tribe-a", CriteriaProfile(age_range="18-25", intent="Finding Mentors")),
            ("tribe-b", CriteriaProfile(age_range="26-35", intent="Giving Back")),
            ("tribe-c", CriteriaProfile(age_range="26-35", intent="Finding Mentors")),
        ])
        assert results == [
            MatchResult(candidate_id="tribe-b", score=100),
            MatchResult(candidate_id="tribe-c", score=33),
            MatchResult(candidate_id="tribe-a", score=0),
        ]

    def test_ties_keep_insertion_order(self):
        user = CriteriaProfile(age_range="26-35")
        results = rank_candidates(user, [
            ("first", CriteriaProfile(age_range="26-35")),
            ("no-data", CriteriaProfile()),
            ("second", CriteriaProfile(age_range="26-35")),
            ("third", CriteriaProfile(age_range="26-35")),
        ])
        assert [r.candidate_id for r in results] == ["first", "second", "third", "no-data"]

    def test_no_candidates(self):
        assert rank_candidates(CriteriaProfile(), []) == []
