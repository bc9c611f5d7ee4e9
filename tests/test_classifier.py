"""
Tests for threshold classification - Green Scale, ecosystem badges, tiers.
"""

import pytest

from habitat_app.core.exceptions import InvalidConfigurationError
from habitat_app.modules.gamification.config import ECOSYSTEMS
from habitat_app.modules.gamification.logics.classifier import (
    Threshold,
    ThresholdTable,
    assessment_tier_table,
    classify,
    ecosystem_badge_table,
    green_scale_table,
    next_threshold,
    progress_to_next,
    rank,
    xp_level,
)


class TestGreenScale:
    """Units completed -> level."""

    @pytest.mark.parametrize('units, level', [
        (0, 'New Recruit'),
        (4, 'New Recruit'),
        (5, 'Nature Friend'),
        (10, 'Eco Explorer'),
        (24, 'Eco Explorer'),
        (25, 'Green Warrior'),
        (30, 'Environmental Hero'),
        (49, 'Environmental Hero'),
        (50, 'Eco Champion'),
        (500, 'Eco Champion'),
    ])
    def test_levels(self, units, level):
        assert classify(units, green_scale_table()) == level

    def test_next_level_and_progress(self):
        table = green_scale_table()
        assert next_threshold(12, table).label == 'Green Warrior'
        assert progress_to_next(7, table) == 40
        assert next_threshold(50, table) is None
        assert progress_to_next(60, table) == 100


class TestEcosystemBadges:
    """Units per ecosystem -> badge."""

    def test_no_badge_before_first_unit(self):
        assert classify(0, ecosystem_badge_table('marine')) is None

    @pytest.mark.parametrize('units, badge', [
        (1, 'Tide Pool Explorer 🐚'),
        (2, 'Tide Pool Explorer 🐚'),
        (3, 'Coral Protector 🪸'),
        (6, 'Deep Sea Guardian 🐋'),
        (10, 'Marine Master 🌊'),
    ])
    def test_marine_badges(self, units, badge):
        assert classify(units, ecosystem_badge_table('marine')) == badge

    def test_every_ecosystem_has_four_levels(self):
        for ecosystem in ECOSYSTEMS:
            assert len(ecosystem_badge_table(ecosystem)) == 4

    def test_unknown_ecosystem(self):
        with pytest.raises(InvalidConfigurationError):
            ecosystem_badge_table('desert')

    def test_progress_from_zero(self):
        assert progress_to_next(0, ecosystem_badge_table('forest')) == 0


class TestAssessmentTiers:
    """Overall score -> tier."""

    @pytest.mark.parametrize('score, tier', [
        (30, 'explorer'), (64, 'explorer'), (65, 'pro'), (79, 'pro'), (80, 'premium'), (100, 'premium'),
    ])
    def test_default_bands(self, score, tier):
        assert classify(score, assessment_tier_table()) == tier

    def test_inverted_bands_are_invalid(self):
        with pytest.raises(InvalidConfigurationError):
            assessment_tier_table(80, 65)


class TestClassifierProperties:
    """Table validation and monotonicity."""

    @pytest.mark.parametrize('table_factory', [
        green_scale_table,
        assessment_tier_table,
        lambda: ecosystem_badge_table('polar'),
    ])
    def test_classification_is_monotonic(self, table_factory):
        table = table_factory()
        ranks = [rank(metric, table) for metric in range(0, 120)]
        assert ranks == sorted(ranks)

    def test_table_order_does_not_matter(self):
        table = ThresholdTable([Threshold(10, 'b'), Threshold(0, 'a')])
        assert classify(5, table) == 'a'
        assert classify(10, table) == 'b'

    def test_negative_threshold(self):
        with pytest.raises(InvalidConfigurationError):
            ThresholdTable([Threshold(-1, 'a')])

    def test_duplicated_threshold(self):
        with pytest.raises(InvalidConfigurationError):
            ThresholdTable([Threshold(5, 'a'), Threshold(5, 'b')])

    def test_empty_table(self):
        with pytest.raises(InvalidConfigurationError):
            ThresholdTable([])


class TestXpLevel:

    def test_level_per_hundred_xp(self):
        assert xp_level(0) == 0
        assert xp_level(99) == 0
        assert xp_level(100) == 1
        assert xp_level(250) == 2

    def test_invalid_step(self):
        with pytest.raises(InvalidConfigurationError):
            xp_level(100, 0)
