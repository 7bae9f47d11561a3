"""Tests for settings."""

import pydantic
import pytest

from kintree.config import Direction, LayoutSettings, Orientation, Settings, SuggestionSettings


class TestLayoutSettings:
    def test_defaults(self):
        layout = LayoutSettings()
        assert layout.orientation is Orientation.VERTICAL
        assert layout.direction is Direction.TOP_TO_BOTTOM
        assert layout.sibling_separation == 200
        assert layout.descent == (0, 1)

    def test_horizontal_uses_card_height_across(self):
        layout = LayoutSettings(orientation="horizontal", direction="right-to-left")
        assert layout.breadth == 90
        assert layout.depth == 160
        assert layout.descent == (-1, 0)

    def test_direction_must_match_orientation(self):
        with pytest.raises(pydantic.ValidationError):
            LayoutSettings(orientation="vertical", direction="left-to-right")

    def test_spacing_cannot_overlap_cards(self):
        with pytest.raises(pydantic.ValidationError):
            LayoutSettings(horizontal_spacing=0.5)

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("KINTREE_LAYOUT_CARD_WIDTH", "200")
        assert LayoutSettings().card_width == 200

    def test_frozen(self):
        layout = LayoutSettings()
        with pytest.raises(pydantic.ValidationError):
            layout.card_width = 10


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.history_limit == 50
        assert settings.suggestions == SuggestionSettings()

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("KINTREE_HISTORY_LIMIT", "5")
        monkeypatch.setenv("KINTREE_SUGGEST_MIN_PARENT_AGE", "14")
        assert Settings().history_limit == 5
        assert SuggestionSettings().min_parent_age == 14


class TestSuggestionSettings:
    def test_connection_gap_defaults(self):
        thresholds = SuggestionSettings()
        assert (thresholds.min_parent_gap, thresholds.max_parent_gap) == (15, 70)
        assert thresholds.max_spouse_age_gap == 20

    def test_parent_gap_must_be_ordered(self):
        with pytest.raises(pydantic.ValidationError):
            SuggestionSettings(min_parent_gap=40, max_parent_gap=30)
