# coachmate/core/exceptions.py
"""Custom exceptions for the CoachMate scheduling engine."""
from fastapi import HTTPException
from typing import Any, Dict, List, Optional


class CoachMateException(HTTPException):
    """Base exception for CoachMate application."""
    def __init__(
        self,
        status_code: int,
        detail: Any,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)

    @property
    def message(self) -> str:
        if isinstance(self.detail, dict):
            return self.detail.get("message", "")
        return str(self.detail)


class ValidationError(CoachMateException):
    """Exception raised for malformed input or an empty time range."""
    def __init__(self, message: str, field: Optional[str] = None):
        detail = {"error": "ValidationError", "message": message}
        if field:
            detail["field"] = field
        super().__init__(status_code=422, detail=detail)


class NotFound(CoachMateException):
    """Referenced entity is missing or belongs to another tenant."""
    def __init__(self, resource: str, message: Optional[str] = None):
        super().__init__(
            status_code=404,
            detail={
                "error": "NotFound",
                "message": message or f"{resource} not found",
                "resource": resource
            }
        )


class QualificationError(CoachMateException):
    """Teacher is not qualified to teach the subject."""
    def __init__(self, teacher_id: Any, subject_id: Any, qualified_subjects: List[str]):
        subjects = ", ".join(qualified_subjects) or "None"
        super().__init__(
            status_code=400,
            detail={
                "error": "QualificationError",
                "message": f"Teacher is not qualified to teach this subject. Teacher's subjects: {subjects}",
                "teacher_id": str(teacher_id),
                "subject_id": str(subject_id),
                "qualified_subjects": qualified_subjects
            }
        )


class DuplicateAssignment(CoachMateException):
    """An identical active entry already exists."""
    def __init__(self, message: str, existing_id: Any = None):
        detail = {"error": "DuplicateAssignment", "message": message}
        if existing_id is not None:
            detail["existing_id"] = str(existing_id)
        super().__init__(status_code=409, detail=detail)


class ScheduleConflict(CoachMateException):
    """Teacher is already booked during (part of) the requested range."""
    def __init__(self, conflicts: List[Dict[str, Any]]):
        first = conflicts[0]
        message = (
            f"Time conflict detected: Teacher already has a class \"{first['class_name']}\" "
            f"on {first['day_of_week']} from {first['start_time']} to {first['end_time']}"
        )
        if len(conflicts) > 1:
            message += f" (and {len(conflicts) - 1} more)"
        super().__init__(
            status_code=409,
            detail={
                "error": "ScheduleConflict",
                "message": message,
                "conflicts": conflicts
            }
        )

    @property
    def conflicts(self) -> List[Dict[str, Any]]:
        return self.detail["conflicts"]


class ConcurrencyConflict(CoachMateException):
    """Transaction aborted by a competing write. Safe to retry."""
    def __init__(self, message: str = "The schedule was modified concurrently, please retry"):
        super().__init__(
            status_code=409,
            detail={"error": "ConcurrencyConflict", "message": message},
            headers={"Retry-After": "1"}
        )


class PermissionDenied(CoachMateException):
    """Caller's role may not perform this operation."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            status_code=403,
            detail={"error": "PermissionDenied", "message": message}
        )
