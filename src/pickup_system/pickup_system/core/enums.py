from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles handed over by the external login layer."""

    ADMIN = "admin"
    GUARDIAN = "guardian"


class ChildStatus(str, Enum):
    """Live status of a child; decides what the next scan does."""

    ABSENT = "ABSENT"
    PRESENT = "PRESENT"
    PICKED_UP = "PICKED_UP"
    PICKUP_REQUESTED = "PICKUP_REQUESTED"


class RecordStatus(str, Enum):
    """Lifecycle of a single attendance record (not the child's live status)."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"


class ActionKind(str, Enum):
    CHECK_IN = "CHECK_IN"
    PICK_UP = "PICK_UP"


class QRRejection(str, Enum):
    MALFORMED = "MALFORMED"
    WRONG_FACILITY = "WRONG_FACILITY"
    EXPIRED = "EXPIRED"
    NOT_YET_VALID = "NOT_YET_VALID"


class QRValidity(str, Enum):
    """How long an issued facility code stays valid."""

    DAILY = "daily"
    WEEKLY = "weekly"


class ScanStatus(str, Enum):
    """Overall result of one guardian scan across all linked children."""

    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class RejectReason(str, Enum):
    COOLDOWN = "cooldown"
    CONFLICT = "conflict"
    DEPENDENCY = "dependency"
    TIMEOUT = "timeout"
    UNCONFIRMED = "unconfirmed"
