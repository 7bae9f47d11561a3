"""Layout and suggestion settings using Pydantic Settings."""

from enum import Enum

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Orientation(str, Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class Direction(str, Enum):
    """Which way generations advance on screen."""

    TOP_TO_BOTTOM = "top-to-bottom"
    BOTTOM_TO_TOP = "bottom-to-top"
    LEFT_TO_RIGHT = "left-to-right"
    RIGHT_TO_LEFT = "right-to-left"


_DIRECTIONS = {
    Orientation.VERTICAL: (Direction.TOP_TO_BOTTOM, Direction.BOTTOM_TO_TOP),
    Orientation.HORIZONTAL: (Direction.LEFT_TO_RIGHT, Direction.RIGHT_TO_LEFT),
}


class LayoutSettings(BaseSettings):
    """Card geometry and spacing for the tree layout.

    Spacing values are multipliers of the card size, so a ``horizontal_spacing``
    of 1.25 puts sibling centres one and a quarter card widths apart.
    """

    model_config = SettingsConfigDict(env_prefix="KINTREE_LAYOUT_", frozen=True)

    orientation: Orientation = Orientation.VERTICAL
    direction: Direction = Direction.TOP_TO_BOTTOM
    card_width: float = Field(160.0, gt=0)
    card_height: float = Field(90.0, gt=0)
    horizontal_spacing: float = Field(1.25, ge=1.0)
    vertical_spacing: float = Field(1.8, ge=1.0)
    margin: float = Field(40.0, ge=0)

    @model_validator(mode="after")
    def _check_direction(self) -> "LayoutSettings":
        if self.direction not in _DIRECTIONS[self.orientation]:
            raise ValueError(
                f"direction {self.direction.value!r} does not apply to "
                f"{self.orientation.value} orientation"
            )
        return self

    @property
    def vertical(self) -> bool:
        return self.orientation is Orientation.VERTICAL

    @property
    def breadth(self) -> float:
        """Card extent across the generation axis."""
        return self.card_width if self.vertical else self.card_height

    @property
    def depth(self) -> float:
        """Card extent along the generation axis."""
        return self.card_height if self.vertical else self.card_width

    @property
    def sibling_separation(self) -> float:
        return self.horizontal_spacing * self.breadth

    @property
    def cousin_separation(self) -> float:
        # the wider of the two spacing rules wins
        return max(self.horizontal_spacing, self.vertical_spacing) * self.breadth

    @property
    def level_step(self) -> float:
        return self.vertical_spacing * self.depth

    @property
    def descent(self) -> tuple[int, int]:
        """Unit vector pointing from a parent towards its children."""
        return {
            Direction.TOP_TO_BOTTOM: (0, 1),
            Direction.BOTTOM_TO_TOP: (0, -1),
            Direction.LEFT_TO_RIGHT: (1, 0),
            Direction.RIGHT_TO_LEFT: (-1, 0),
        }[self.direction]


class SuggestionSettings(BaseSettings):
    """Thresholds for age plausibility checks and connection proposals.

    ``max_spouse_age_gap`` is used both ways: a recorded couple further apart
    is flagged, and unconnected people within it may be proposed as spouses.
    """

    model_config = SettingsConfigDict(env_prefix="KINTREE_SUGGEST_", frozen=True)

    min_parent_age: int = Field(12, ge=0)
    max_spouse_age_gap: int = Field(20, ge=0)
    # birth-year gap for proposing an existing person as someone's parent
    min_parent_gap: int = Field(15, ge=0)
    max_parent_gap: int = Field(70, ge=0)

    @model_validator(mode="after")
    def _check_parent_gap(self) -> "SuggestionSettings":
        if self.min_parent_gap > self.max_parent_gap:
            raise ValueError("min_parent_gap must not exceed max_parent_gap")
        return self


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(env_prefix="KINTREE_", extra="ignore")

    log_level: str = "INFO"
    history_limit: int = Field(50, ge=1)

    layout: LayoutSettings = LayoutSettings()
    suggestions: SuggestionSettings = SuggestionSettings()


settings = Settings()
