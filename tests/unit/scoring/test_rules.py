"""Tests for deterministic category scoring."""

from __future__ import annotations

import pytest


class TestScoreCategory:
    """Test ScoringRules.score."""

    def test_all_sustainable_transport_answers_score_100(self):
        """Cycling, a short commute and one flight should score 100."""
        from ecocoach.scoring.rules import ScoringRules

        answers = {
            "transport_primary_mode": "cycling",
            "commute_distance": "5",
            "flights_per_year": "1",
        }

        assert ScoringRules().score("transportation", answers) == 100

    def test_no_relevant_answers_scores_neutral_50(self):
        """Categories without answered questions default to 50."""
        from ecocoach.scoring.rules import SUSTAINABILITY_CATEGORIES, ScoringRules

        rules = ScoringRules()
        unrelated = {"favourite_colour": "green"}

        for category in SUSTAINABILITY_CATEGORIES:
            assert rules.score(category, {}) == 50
            assert rules.score(category, unrelated) == 50

    def test_blank_answers_count_as_not_sustainable(self):
        """Empty strings and None still count toward the denominator."""
        from ecocoach.scoring.rules import ScoringRules

        answers = {"diet_type": "vegan", "local_food_percentage": "", "food_waste_frequency": None}

        assert ScoringRules().score("food_consumption", answers) == 33

    def test_single_sustainable_answer_scores_a_third(self):
        """The denominator is every question in the category."""
        from ecocoach.scoring.rules import ScoringRules

        assert ScoringRules().score("transportation", {"transport_primary_mode": "cycling"}) == 33
        assert ScoringRules().score("water_usage", {"shower_length": "4", "water_saving_devices": "yes"}) == 67

    def test_partial_sustainability_rounds_to_nearest(self):
        """One of three sustainable answers should round to 33."""
        from ecocoach.scoring.rules import ScoringRules

        answers = {
            "recycling_habits": "always",
            "composting": "no",
            "single_use_plastics": "often",
        }

        assert ScoringRules().score("waste_management", answers) == 33

    def test_two_of_three_rounds_up_to_67(self):
        from ecocoach.scoring.rules import ScoringRules

        answers = {
            "shower_length": "4",
            "water_saving_devices": "yes",
            "lawn_watering_frequency": "daily",
        }

        assert ScoringRules().score("water_usage", answers) == 67

    def test_numeric_answers_parse_leading_integer(self):
        """Numeric questions accept ints and strings with units."""
        from ecocoach.scoring.rules import ScoringRules

        rules = ScoringRules()

        assert rules.score("transportation", {"commute_distance": "9 km"}) == 33
        assert rules.score("transportation", {"commute_distance": 10}) == 0
        assert rules.score("food_consumption", {"local_food_percentage": "50"}) == 33

    def test_unparsable_numeric_answer_counts_as_not_sustainable(self):
        from ecocoach.scoring.rules import ScoringRules

        assert ScoringRules().score("water_usage", {"shower_length": "short"}) == 0

    def test_choice_answers_match_exactly(self):
        from ecocoach.scoring.rules import ScoringRules

        rules = ScoringRules()

        assert rules.score("energy_usage", {"home_energy_source": "solar"}) == 33
        assert rules.score("energy_usage", {"home_energy_source": "Solar"}) == 0
        assert rules.score("energy_usage", {"home_energy_source": " solar"}) == 0

    def test_unknown_category_raises(self):
        """Unknown categories should raise CategoryNotFoundError."""
        from ecocoach.errors import CategoryNotFoundError
        from ecocoach.scoring.rules import ScoringRules

        with pytest.raises(CategoryNotFoundError) as exc_info:
            ScoringRules().score("space_travel", {})

        assert exc_info.value.category == "space_travel"


class TestScoreAll:
    """Test scoring every category at once."""

    def test_scores_every_category(self, sample_answers):
        from ecocoach.scoring.rules import SUSTAINABILITY_CATEGORIES, ScoringRules

        scores = ScoringRules().score_all(sample_answers)

        assert set(scores) == set(SUSTAINABILITY_CATEGORIES)
        assert scores == {
            "transportation": 100,
            "energy_usage": 33,
            "food_consumption": 33,
            "waste_management": 0,
            "water_usage": 33,
            "purchasing_habits": 50,
        }

    def test_questions_for_lists_category_keys(self):
        from ecocoach.scoring.rules import ScoringRules

        assert ScoringRules().questions_for("transportation") == (
            "transport_primary_mode",
            "commute_distance",
            "flights_per_year",
        )


class TestOverallScore:
    """Test compute_overall_score."""

    def test_mean_of_scores_rounded(self):
        from ecocoach.scoring.rules import compute_overall_score

        assert compute_overall_score([100, 33, 33, 0, 33, 50]) == 42

    def test_half_rounds_up(self):
        from ecocoach.scoring.rules import compute_overall_score

        assert compute_overall_score([50, 51]) == 51
        assert compute_overall_score([0, 1]) == 1

    def test_no_categories_scores_zero(self):
        from ecocoach.scoring.rules import compute_overall_score

        assert compute_overall_score([]) == 0
