from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import QRRejection


@dataclass(frozen=True)
class QRValidation:
    """Outcome of checking a scanned code against the facility and the current window."""

    accepted: bool
    message: str
    reason: Optional[QRRejection] = None
    code_date: Optional[date] = None

    @classmethod
    def ok(cls, code_date: date) -> "QRValidation":
        return cls(accepted=True, message="QR code accepted", code_date=code_date)

    @classmethod
    def reject(cls, reason: QRRejection, message: str, code_date: Optional[date] = None) -> "QRValidation":
        return cls(accepted=False, message=message, reason=reason, code_date=code_date)
