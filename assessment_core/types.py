from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Literal, Optional, Tuple

Rating = Literal["excellent", "good", "questionable", "poor"]
CheckName = Literal[
    "straightlining",
    "variability",
    "extreme_responding",
    "completion_rate",
    "response_time",
]


@dataclass(frozen=True)
class Dimension:
    id: str
    name: str
    description: str = ""
    item_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Item:
    id: str
    dimension_id: str
    text: str = ""
    is_reversed: bool = False
    weight: float = 1.0
    min_value: float = 1
    max_value: float = 5


@dataclass(frozen=True)
class Answer:
    """One answer; ``value is None`` means the item was left unanswered."""

    item_id: str
    value: Optional[float] = None
    answered_at: Optional[datetime] = None

    @property
    def is_answered(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class AssessmentDefinition:
    id: str
    title: str = ""
    description: str = ""
    dimensions: Tuple[Dimension, ...] = ()
    items: Tuple[Item, ...] = ()

    def item_map(self) -> Dict[str, Item]:
        return {it.id: it for it in self.items}

    def items_for(self, dimension_id: str) -> Tuple[Item, ...]:
        return tuple(it for it in self.items if it.dimension_id == dimension_id)


@dataclass(frozen=True)
class DimensionScore:
    dimension_id: str
    name: str
    raw_score: float
    normalized_score: float
    percentile: int


@dataclass(frozen=True)
class ScoreSet:
    dimensions: Tuple[DimensionScore, ...]
    overall_score: float
    computed_at: datetime


@dataclass(frozen=True)
class ReliabilityCheck:
    check_name: CheckName
    passed: bool
    score: float
    message: str


@dataclass(frozen=True)
class ReliabilityResult:
    checks: Tuple[ReliabilityCheck, ...]
    overall_rating: Rating
    flags: Tuple[str, ...]
    checked_at: datetime

    @property
    def is_usable(self) -> bool:
        return self.overall_rating != "poor"


@dataclass(frozen=True)
class SubmissionMetadata:
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    time_spent: Optional[float] = None  # seconds
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class AssessmentResponse:
    id: str
    user_id: str
    assessment_id: str
    answers: Tuple[Answer, ...]
    scores: ScoreSet
    reliability: ReliabilityResult
    metadata: SubmissionMetadata = field(default_factory=SubmissionMetadata)
    created_at: Optional[datetime] = None
