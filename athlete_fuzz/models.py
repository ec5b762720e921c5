"""
Data classes and type definitions for the athlete endpoint fuzzing framework
"""

import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from functools import reduce
from typing import Any, Dict, Iterable, Optional, Tuple


class Sex(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class TotalActivityDuration(str, Enum):
    ZERO_TO_THREE_HOURS = "ZERO_TO_THREE_HOURS"
    THREE_TO_SIX_HOURS = "THREE_TO_SIX_HOURS"
    SIX_TO_NINE_HOURS = "SIX_TO_NINE_HOURS"
    NINE_TO_TWELVE_HOURS = "NINE_TO_TWELVE_HOURS"
    TWELVE_PLUS_HOURS = "TWELVE_PLUS_HOURS"


@dataclass(frozen=True)
class AthleteInput:
    """One point of the input matrix sent to the endpoint"""
    gender: Optional[Sex] = None
    total_activity_duration: Optional[TotalActivityDuration] = None
    age: Optional[float] = None
    weight_today: Optional[float] = None
    height: Optional[float] = None
    category: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Build the JSON request body, leaving out absent fields"""
        payload = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            payload[f.name] = value
        return payload

    def describe(self) -> str:
        """Short human readable title for logs and reports"""
        payload = self.to_payload()
        if not payload:
            return "<empty input>"
        return ", ".join(f"{key}={value}" for key, value in payload.items())


@dataclass(frozen=True)
class CarbRange:
    low_min: float
    low_max: float
    med_min: float
    med_max: float
    high_min: float
    high_max: float


@dataclass(frozen=True)
class CarbRangesOutput:
    main_ranges: CarbRange
    snack_ranges: CarbRange


@dataclass(frozen=True)
class AthleteOutput:
    """Response shape the nutrition endpoint is expected to return"""
    ranges: CarbRangesOutput
    RMR: float
    protein_constant: float

    @classmethod
    def from_payload(cls, data: Any) -> Optional["AthleteOutput"]:
        """Parse a response body, returning None if it does not match the expected shape"""
        if not isinstance(data, dict):
            return None
        try:
            ranges = data["ranges"]
            return cls(
                ranges=CarbRangesOutput(
                    main_ranges=CarbRange(**ranges["main_ranges"]),
                    snack_ranges=CarbRange(**ranges["snack_ranges"]),
                ),
                RMR=data["RMR"],
                protein_constant=data["protein_constant"],
            )
        except (KeyError, TypeError):
            return None


@dataclass(frozen=True)
class TestResult:
    """Outcome of exercising one AthleteInput"""
    __test__ = False  # keep pytest from collecting this class

    test_id: str
    test_input: AthleteInput
    success: bool
    status: int
    data: Any
    elapsed_ms: float
    error: Optional[str] = None


@dataclass(frozen=True)
class RunSummary:
    """Aggregate statistics over a batch of test results.

    Built by folding results one at a time with ``add``; every step returns a
    new summary so partial summaries can be passed around and merged.
    """
    total: int = 0
    success_count: int = 0
    failure_count: int = 0
    failures: Tuple[TestResult, ...] = ()
    elapsed_times: Tuple[float, ...] = field(default=(), repr=False)

    @classmethod
    def empty(cls) -> "RunSummary":
        return cls()

    @classmethod
    def from_results(cls, results: Iterable[TestResult]) -> "RunSummary":
        return reduce(lambda summary, result: summary.add(result), results, cls.empty())

    def add(self, result: TestResult) -> "RunSummary":
        if result.success:
            return replace(
                self,
                total=self.total + 1,
                success_count=self.success_count + 1,
                elapsed_times=self.elapsed_times + (result.elapsed_ms,),
            )
        return replace(
            self,
            total=self.total + 1,
            failure_count=self.failure_count + 1,
            failures=self.failures + (result,),
            elapsed_times=self.elapsed_times + (result.elapsed_ms,),
        )

    def merge(self, other: "RunSummary") -> "RunSummary":
        return RunSummary(
            total=self.total + other.total,
            success_count=self.success_count + other.success_count,
            failure_count=self.failure_count + other.failure_count,
            failures=self.failures + other.failures,
            elapsed_times=self.elapsed_times + other.elapsed_times,
        )

    @property
    def total_elapsed_ms(self) -> float:
        return math.fsum(self.elapsed_times)

    @property
    def average_elapsed_ms(self) -> float:
        # nan for an empty run; callers format it
        if self.total == 0:
            return math.nan
        return self.total_elapsed_ms / self.total
