from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import ChildStatus, Role


@dataclass(frozen=True)
class Child:
    """Domain entity: a child tracked for attendance."""

    child_id: int
    name: str
    status: ChildStatus
    guardian_id: int
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Guardian:
    """Domain entity: the parent linked to one or more children.

    Note: Pure data object (no DB access code).
    """

    guardian_id: int
    name: str
    phone: Optional[str]
    role: Role = Role.GUARDIAN
    children: tuple[Child, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PresentChildRow:
    """Read-model for the dashboard list of children currently on site."""

    child_id: int
    name: str
    guardian_name: Optional[str]
    updated_at: Optional[datetime]
