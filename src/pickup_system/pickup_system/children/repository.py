from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import ChildStatus
from .model import Guardian, PresentChildRow


class GuardianRepository(Protocol):
    """Read side of guardians and their children.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_guardian(self, guardian_id: int) -> Optional[Guardian]:
        """Guardian with its linked children loaded."""

        raise NotImplementedError

    def count_children(self, *, status: Optional[ChildStatus] = None) -> int:
        raise NotImplementedError

    def list_children_with_status(self, status: ChildStatus) -> Sequence[PresentChildRow]:
        raise NotImplementedError
