from __future__ import annotations

import io
import logging
from datetime import date, datetime

import qrcode

from ..common.datetime_utils import week_start
from ..core.constants import QR_DATE_FORMAT
from ..core.enums import QRRejection, QRValidity
from ..core.exceptions import QRCodeRejected
from .model import QRValidation

logger = logging.getLogger(__name__)

_DATE_TOKEN_LEN = len("YYYY-MM-DD")


class QRCodeService:
    """Issues and validates the shared facility code.

    A code is ``"{facility_id}-{YYYY-MM-DD}"``: bound to one facility and to
    the first day of its validity window. The facility id may contain
    hyphens; the date token is always the last ten characters.
    """

    def __init__(self, *, validity: QRValidity = QRValidity.DAILY):
        self._validity = QRValidity(validity)

    @property
    def validity(self) -> QRValidity:
        return self._validity

    def window_start(self, day: date) -> date:
        if self._validity == QRValidity.WEEKLY:
            return week_start(day)
        return day

    def issue_code(self, facility_id: str, day: date) -> str:
        return f"{facility_id}-{self.window_start(day).strftime(QR_DATE_FORMAT)}"

    def validate(self, code: str, facility_id: str, now: datetime) -> QRValidation:
        code = (code or "").strip()
        if len(code) <= _DATE_TOKEN_LEN + 1 or code[-_DATE_TOKEN_LEN - 1] != "-":
            return QRValidation.reject(QRRejection.MALFORMED, "This is not a facility check-in code.")

        code_facility = code[: -_DATE_TOKEN_LEN - 1]
        try:
            code_date = datetime.strptime(code[-_DATE_TOKEN_LEN:], QR_DATE_FORMAT).date()
        except ValueError:
            return QRValidation.reject(QRRejection.MALFORMED, "This is not a facility check-in code.")

        if code_facility != facility_id:
            return QRValidation.reject(
                QRRejection.WRONG_FACILITY,
                "This QR code belongs to a different facility.",
                code_date,
            )

        current = self.window_start(now.date())
        if code_date < current:
            return QRValidation.reject(
                QRRejection.EXPIRED,
                "QR code has expired. Please scan today's code.",
                code_date,
            )
        if code_date > current:
            return QRValidation.reject(
                QRRejection.NOT_YET_VALID,
                "QR code is not valid yet. Please scan today's code.",
                code_date,
            )
        return QRValidation.ok(code_date)

    def require_valid(self, code: str, facility_id: str, now: datetime) -> QRValidation:
        result = self.validate(code, facility_id, now)
        if not result.accepted:
            logger.info("QR code rejected (%s): %r", result.reason.value, code)
            raise QRCodeRejected(result.message, result.reason)
        return result

    def render_png(self, code: str) -> bytes:
        # High error correction so a printed code still reads from a distance.
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_H,
            box_size=10,
            border=2,
        )
        qr.add_data(code)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()
