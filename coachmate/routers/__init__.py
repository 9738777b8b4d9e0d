from . import health, timetable, teacher_assignment

__all__ = [
    "health",
    "timetable",
    "teacher_assignment"
]
