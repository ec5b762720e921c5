"""
Sample data shared across the test modules
"""

from athlete_fuzz.models import AthleteInput, Sex, TotalActivityDuration

SAMPLE_OUTPUT = {
    "ranges": {
        "main_ranges": {
            "low_min": 30, "low_max": 45,
            "med_min": 45, "med_max": 60,
            "high_min": 60, "high_max": 90,
        },
        "snack_ranges": {
            "low_min": 10, "low_max": 15,
            "med_min": 15, "med_max": 25,
            "high_min": 25, "high_max": 35,
        },
    },
    "RMR": 1700,
    "protein_constant": 1.2,
}

SAMPLE_INPUT = AthleteInput(
    gender=Sex.MALE,
    total_activity_duration=TotalActivityDuration.ZERO_TO_THREE_HOURS,
    age=25,
    weight_today=70,
    height=173,
    category="beginner",
)
