from .interval import TimeRange, overlaps, parse_hhmm, format_hhmm, build_time_range
from .entity_store import EntityStore
from .qualification_index import QualificationIndex
from .conflict_detector import ConflictDetector, ConflictScan, SlotCandidate, describe_conflict, parse_day
from .primary_enforcer import PrimaryInvariantEnforcer

__all__ = [
    "TimeRange",
    "overlaps",
    "parse_hhmm",
    "format_hhmm",
    "build_time_range",
    "EntityStore",
    "QualificationIndex",
    "ConflictDetector",
    "ConflictScan",
    "SlotCandidate",
    "describe_conflict",
    "parse_day",
    "PrimaryInvariantEnforcer",
]
