"""Pydantic schemas for the athlete dashboard domain records.

Records are immutable once produced by a data provider. Field names are
snake_case in Python and camelCase on the wire (``heightCm``, ``durationMin``,
``painLevel`` ...), so the same models validate backend JSON and serialize the
payloads sent to the narrative model.
"""

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# ============================================================================
# Enums
# ============================================================================


class UserRole(StrEnum):
    """Role of the person using the dashboard."""

    ATHLETE = "ATHLETE"
    COACH = "COACH"
    PHYSIO = "PHYSIO"


class InjurySeverity(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class InjuryStatus(StrEnum):
    """Injury lifecycle status.

    Transitions are monotonic: Active -> Recovering -> Resolved.
    """

    ACTIVE = "Active"
    RECOVERING = "Recovering"
    RESOLVED = "Resolved"


class FinancialRecordType(StrEnum):
    INCOME = "Income"
    EXPENSE = "Expense"


class GoalStatus(StrEnum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    ACHIEVED = "Achieved"


# ============================================================================
# Records
# ============================================================================


class DomainRecord(BaseModel):
    """Base for immutable, camelCase-on-the-wire records."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_payload(self) -> dict:
        """Serialize to the camelCase JSON-compatible wire form."""
        return self.model_dump(mode="json", by_alias=True)


class AthleteProfile(DomainRecord):
    """Profile of the athlete the dashboard session belongs to."""

    id: str
    name: str
    sport: str
    age: int = Field(gt=0)
    height_cm: float = Field(gt=0)
    weight_kg: float = Field(gt=0)
    role: UserRole = UserRole.ATHLETE
    avatar_url: str | None = None

    @property
    def bmi(self) -> float:
        """Body mass index rounded to one decimal."""
        height_m = self.height_cm / 100
        return round(self.weight_kg / (height_m * height_m), 1)


class PerformanceLog(DomainRecord):
    """One training session measurement.

    ``strain`` is the athlete's perceived exertion (RPE) on a 1-10 scale.
    """

    id: str
    date: dt.date
    metric: str = Field(description='Free text, e.g. "100m Sprint", "Squat 1RM"')
    value: float
    unit: str
    strain: float = Field(ge=1, le=10)
    duration_min: float = Field(gt=0)

    @property
    def load(self) -> float:
        """Session load as strain x duration."""
        return self.strain * self.duration_min


class InjuryRecord(DomainRecord):
    id: str
    date: dt.date
    area: str
    severity: InjurySeverity
    status: InjuryStatus
    pain_level: float = Field(ge=0, le=10)

    @property
    def is_active(self) -> bool:
        """True for Active and Recovering injuries."""
        return self.status != InjuryStatus.RESOLVED


class DietLog(DomainRecord):
    id: str
    date: dt.date
    meal: str
    calories: float = Field(ge=0)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fats: float = Field(ge=0)
    description: str = ""


class FinancialRecord(DomainRecord):
    id: str
    date: dt.date
    record_type: FinancialRecordType = Field(alias="type")
    category: str
    amount: float = Field(ge=0)
    description: str = ""


class CareerGoal(DomainRecord):
    id: str
    title: str
    target_date: dt.date
    status: GoalStatus = GoalStatus.PENDING
