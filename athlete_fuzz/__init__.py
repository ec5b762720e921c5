"""
Combinatorial fuzzing of the athlete nutrition endpoint
"""
