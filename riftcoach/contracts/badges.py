"""
Badge contracts: catalog entries (static configuration data), per-condition
evaluations, and the awarded / narrated outputs.
"""

from enum import Enum

from pydantic import Field, model_validator

from .common import BaseContract


class Polarity(str, Enum):
    GOOD = "good"
    BAD = "bad"
    NEUTRAL = "neutral"


class RoleFocus(str, Enum):
    """Which comparison a badge is evaluated against."""

    PRIMARY_ROLE_DIFF = "primary_role_diff"
    ABSOLUTE_VALUE = "absolute_value"


class Comparison(str, Enum):
    GTE = ">="
    LTE = "<="
    GT = ">"
    BETWEEN = "between"
    ABS_LTE = "abs<="


class ConditionStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    UNKNOWN = "unknown"


class BadgeCondition(BaseContract):
    """One thresholded comparison on a dotted metric path."""

    metric: str = Field(..., min_length=1, description="Dotted path, e.g. at_10.cs")
    comparison: Comparison = Comparison.GTE
    value: float | None = None
    min: float | None = None
    max: float | None = None
    threshold_by_role: dict[str, float] = Field(default_factory=dict)
    description: str | None = None

    @model_validator(mode="after")
    def check_bounds(self) -> "BadgeCondition":
        if self.comparison == Comparison.BETWEEN.value:
            if self.min is None or self.max is None or self.min > self.max:
                raise ValueError(f"{self.metric}: 'between' needs min <= max")
        elif self.value is None:
            raise ValueError(f"{self.metric}: '{self.comparison}' needs a value")
        return self


class BadgeBranch(BaseContract):
    must_meet: list[BadgeCondition] = Field(..., min_length=1)
    notes: str | None = None


class BadgeDefinition(BaseContract):
    """A named, statically cataloged classification rule."""

    name: str = Field(..., min_length=1)
    polarity: Polarity
    role_focus: RoleFocus = RoleFocus.PRIMARY_ROLE_DIFF
    description: str = ""
    exclude_roles: list[str] = Field(default_factory=list)
    prefer_non_utility: bool = False
    min_games: int | None = Field(None, ge=1)
    must_meet: list[BadgeCondition] = Field(default_factory=list)
    any_of: list[BadgeBranch] = Field(default_factory=list)
    notes: str | None = None

    @model_validator(mode="after")
    def check_predicate(self) -> "BadgeDefinition":
        if not self.must_meet and not self.any_of:
            raise ValueError(f"badge {self.name!r} has no conditions")
        return self


class BadgeCatalog(BaseContract):
    version: str = Field(..., min_length=1)
    badges: list[BadgeDefinition] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_unique_names(self) -> "BadgeCatalog":
        names = [badge.name for badge in self.badges]
        if len(names) != len(set(names)):
            raise ValueError("badge names must be unique")
        return self

    def get(self, name: str) -> BadgeDefinition | None:
        for badge in self.badges:
            if badge.name == name:
                return badge
        return None


class ConditionEvaluation(BaseContract):
    metric: str
    value: float | None = None
    comparison: Comparison
    threshold: str
    status: ConditionStatus
    strength: float | None = Field(
        None, description="How far past its threshold a passing value sits (1.0 = exactly at)"
    )
    detail: str = ""


class BadgeEvaluation(BaseContract):
    name: str
    polarity: Polarity
    status: ConditionStatus
    strength: float = 0.0
    summary: str = ""
    conditions: list[ConditionEvaluation] = Field(default_factory=list)


class AwardedBadge(BaseContract):
    name: str
    polarity: Polarity
    description: str = ""
    reason: str = ""
    strength: float = Field(..., ge=0)


class BadgeReport(BaseContract):
    """Rule-based badge outcome for one player."""

    puuid: str
    primary_role: str | None = None
    catalog_version: str
    awarded: list[AwardedBadge] = Field(default_factory=list)
    evaluations: list[BadgeEvaluation] = Field(default_factory=list)


class NarratedBadge(BaseContract):
    title: str
    description: str = ""
    reason: str = ""
    polarity: Polarity = Polarity.NEUTRAL


class BadgeNarration(BaseContract):
    """Badges as presented to the user, from the narrator or the fallback."""

    badges: list[NarratedBadge] = Field(default_factory=list)
    source: str = Field("llm", description="'llm' or 'fallback'")
