"""
Test case generator for the athlete nutrition endpoint
"""

import itertools
from dataclasses import dataclass
from typing import List, Optional, Tuple

from athlete_fuzz.models import AthleteInput, Sex, TotalActivityDuration


@dataclass(frozen=True)
class MatrixConfig:
    """Parameter domains of the input matrix"""
    sexes: Tuple[Sex, ...] = tuple(Sex)
    durations: Tuple[TotalActivityDuration, ...] = tuple(TotalActivityDuration)
    ages: Tuple[float, ...] = (0, 25, 50, 75, 100)
    weights: Tuple[float, ...] = (30, 70, 113.9, 150, 200)
    heights: Tuple[float, ...] = (140, 160, 173, 190, 210)
    categories: Tuple[str, ...] = ('beginner', 'intermediate', 'advanced')


class MatrixGenerator:
    """Generate the full combinatorial set of athlete inputs"""

    def __init__(self, config: Optional[MatrixConfig] = None):
        self.config = config or MatrixConfig()

    def _domains(self) -> List[tuple]:
        # outermost first
        return [
            self.config.sexes,
            self.config.durations,
            self.config.ages,
            self.config.weights,
            self.config.heights,
            self.config.categories,
        ]

    def expected_count(self) -> int:
        count = 1
        for domain in self._domains():
            count *= len(domain)
        return count

    def generate_test_cases(self) -> List[AthleteInput]:
        """Cartesian product of all domains, sex outermost and category innermost"""
        return [
            AthleteInput(
                gender=gender,
                total_activity_duration=duration,
                age=age,
                weight_today=weight,
                height=height,
                category=category,
            )
            for gender, duration, age, weight, height, category in itertools.product(*self._domains())
        ]


def generate_test_cases() -> List[AthleteInput]:
    """Generate the default 750-case matrix"""
    return MatrixGenerator().generate_test_cases()
