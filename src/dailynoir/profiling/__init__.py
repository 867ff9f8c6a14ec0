"""Detective profiles, ranks and achievements."""

from dailynoir.profiling.achievements import ACHIEVEMENTS, Achievement, record_accusation, record_start
from dailynoir.profiling.profile import DetectiveProfile, detective_rank

__all__ = [
    "ACHIEVEMENTS",
    "Achievement",
    "DetectiveProfile",
    "detective_rank",
    "record_accusation",
    "record_start",
]
