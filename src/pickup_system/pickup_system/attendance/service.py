from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, wait
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..children.model import Child, Guardian
from ..children.repository import GuardianRepository
from ..common.datetime_utils import FacilityClock, format_display_time
from ..common.locks import KeyedLock
from ..core.constants import DEFAULT_SCAN_TIMEOUT_SECONDS
from ..core.enums import ActionKind, ChildStatus, RejectReason, Role, ScanStatus
from ..core.exceptions import AuthorizationError, ConflictError, DependencyError, ValidationError
from ..notifications.service import NotificationService
from ..qr.service import QRCodeService
from .action_cache import ActionCache
from .repository import AttendanceLedger
from .transitions import TransitionEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanOutcome:
    child_id: int
    child_name: str
    accepted: bool
    message: str
    action: Optional[ActionKind] = None
    formatted_time: Optional[str] = None
    reason: Optional[RejectReason] = None

    def to_dict(self) -> dict:
        return {
            "child_id": self.child_id,
            "child_name": self.child_name,
            "accepted": self.accepted,
            "action": self.action.value if self.action else None,
            "time": self.formatted_time,
            "message": self.message,
            "reason": self.reason.value if self.reason else None,
        }


@dataclass(frozen=True)
class ScanReport:
    """Itemized result of one scan: one outcome per linked child."""

    guardian_id: int
    scanned_at: datetime
    outcomes: tuple[ScanOutcome, ...]

    @property
    def accepted_count(self) -> int:
        return sum(1 for o in self.outcomes if o.accepted)

    @property
    def status(self) -> ScanStatus:
        accepted = self.accepted_count
        if accepted == 0:
            return ScanStatus.FAILED
        if accepted == len(self.outcomes):
            return ScanStatus.SUCCESS
        return ScanStatus.PARTIAL

    @property
    def message(self) -> str:
        if self.status == ScanStatus.SUCCESS:
            return "Actions processed successfully"
        if self.status == ScanStatus.PARTIAL:
            return f"Processed {self.accepted_count} of {len(self.outcomes)} children"
        return self.outcomes[0].message if self.outcomes else "No actions performed"

    def to_dict(self) -> dict:
        return {
            "success": self.accepted_count > 0,
            "status": self.status.value,
            "message": self.message,
            "scanned_at": self.scanned_at.isoformat(),
            "results": [o.to_dict() for o in self.outcomes],
        }


class CheckInService:
    """Use case: a guardian scans the facility code.

    Each linked child is processed independently (in parallel when an
    executor is given). Work on one child is serialized by a per-child lock
    held across cooldown check, status read and ledger write; the ledger
    itself also rejects conflicting writes.
    """

    def __init__(
        self,
        guardians: GuardianRepository,
        ledger: AttendanceLedger,
        notifier: NotificationService,
        *,
        qr: QRCodeService,
        cache: ActionCache,
        clock: FacilityClock,
        facility_id: str,
        engine: Optional[TransitionEngine] = None,
        executor: Optional[Executor] = None,
        scan_timeout: float = DEFAULT_SCAN_TIMEOUT_SECONDS,
        locks: Optional[KeyedLock] = None,
    ):
        self._guardians = guardians
        self._ledger = ledger
        self._notifier = notifier
        self._qr = qr
        self._cache = cache
        self._clock = clock
        self._facility_id = facility_id
        self._engine = engine or TransitionEngine()
        self._executor = executor
        self._scan_timeout = float(scan_timeout)
        self._locks = locks or KeyedLock()

    def scan(
        self,
        *,
        guardian_id: int,
        role: Role,
        code: str,
        child_ids: Optional[Iterable[int]] = None,
    ) -> ScanReport:
        if role != Role.GUARDIAN:
            raise AuthorizationError("Not authorized as parent")

        # One nominal timestamp for the whole batch.
        now = self._clock.now()
        self._qr.require_valid(code, self._facility_id, now)

        guardian = self._guardians.get_guardian(int(guardian_id))
        if not guardian or guardian.role != Role.GUARDIAN:
            raise AuthorizationError("Not authorized as parent")

        children = self._select_children(guardian, child_ids)
        outcomes = self._run_batch(guardian, children, now)

        report = ScanReport(guardian_id=guardian.guardian_id, scanned_at=now, outcomes=tuple(outcomes))
        logger.info(
            "Scan by guardian %s: %s (%d/%d accepted)",
            guardian.guardian_id,
            report.status.value,
            report.accepted_count,
            len(report.outcomes),
        )
        return report

    @staticmethod
    def _select_children(guardian: Guardian, child_ids: Optional[Iterable[int]]) -> Sequence[Child]:
        if not guardian.children:
            raise ValidationError("No children are linked to this account")
        if not child_ids:
            return list(guardian.children)

        owned = {c.child_id: c for c in guardian.children}
        selected = []
        for cid in dict.fromkeys(int(c) for c in child_ids):
            if cid not in owned:
                raise AuthorizationError(f"Child {cid} is not linked to this account")
            selected.append(owned[cid])
        return selected

    def _run_batch(self, guardian: Guardian, children: Sequence[Child], now: datetime) -> list[ScanOutcome]:
        day = now.date()
        formatted = format_display_time(now)
        cancelled = threading.Event()

        if self._executor is None:
            return [self._process_child(guardian, c, now, day, formatted, cancelled) for c in children]

        futures = [
            (self._executor.submit(self._process_child, guardian, c, now, day, formatted, cancelled), c)
            for c in children
        ]
        done, not_done = wait([f for f, _ in futures], timeout=self._scan_timeout)
        skipped = set()
        if not_done:
            # Children not started yet are skipped; committed siblings stay committed.
            cancelled.set()
            skipped = {f for f in not_done if f.cancel()}
            logger.warning("Scan by guardian %s timed out for %d children", guardian.guardian_id, len(not_done))

        outcomes = []
        for f, child in futures:
            if f in done:
                outcomes.append(f.result())
            elif f in skipped:
                outcomes.append(
                    ScanOutcome(
                        child_id=child.child_id,
                        child_name=child.name,
                        accepted=False,
                        message=f"Processing {child.name} took too long. Please scan again.",
                        reason=RejectReason.TIMEOUT,
                    )
                )
            else:
                # Still running: the change may commit after this response.
                outcomes.append(
                    ScanOutcome(
                        child_id=child.child_id,
                        child_name=child.name,
                        accepted=False,
                        message=f"{child.name} may already have been recorded. Check the status before scanning again.",
                        reason=RejectReason.UNCONFIRMED,
                    )
                )
        return outcomes

    def _process_child(
        self,
        guardian: Guardian,
        child: Child,
        now: datetime,
        day: date,
        formatted_time: str,
        cancelled: threading.Event,
    ) -> ScanOutcome:
        def rejected(reason: RejectReason, message: str) -> ScanOutcome:
            return ScanOutcome(
                child_id=child.child_id,
                child_name=child.name,
                accepted=False,
                message=message,
                reason=reason,
            )

        try:
            with self._locks.hold(child.child_id):
                if cancelled.is_set():
                    return rejected(RejectReason.TIMEOUT, f"Processing {child.name} took too long. Please scan again.")

                if self._cache.should_reject(child.child_id, day, now):
                    logger.info("Child %s scanned again inside the cooldown window", child.child_id)
                    return rejected(RejectReason.COOLDOWN, f"Action for {child.name} was performed recently.")

                with self._ledger.transaction() as session:
                    status = session.get_status(child.child_id)
                    if status is None:
                        raise ConflictError(f"Child {child.name} not found")
                    transition = self._engine.for_status(status, child_name=child.name)
                    result = transition.apply(session, child_id=child.child_id, work_date=day, at=now)

                self._cache.record(child.child_id, day, result.action, now)
        except ConflictError as e:
            logger.info("Scan rejected for child %s: %s", child.child_id, e)
            return rejected(RejectReason.CONFLICT, str(e))
        except DependencyError as e:
            logger.error("Ledger unavailable for child %s: %s", child.child_id, e)
            return rejected(RejectReason.DEPENDENCY, f"Could not record {child.name} right now. Please try again.")
        except Exception:
            logger.exception("Unexpected failure processing child %s", child.child_id)
            return rejected(RejectReason.DEPENDENCY, f"Could not record {child.name} right now. Please try again.")

        logger.info(
            "Child %s %s -> %s at %s",
            child.child_id,
            result.from_status.value,
            result.to_status.value,
            now.isoformat(),
        )
        try:
            message = self._notifier.dispatch(
                action=result.action,
                child=child,
                guardian=guardian,
                at=now,
                formatted_time=formatted_time,
            )
        except Exception:
            # Already committed; still reported as accepted.
            logger.exception("Notification fan-out failed for child %s", child.child_id)
            message = NotificationService.build_message(result.action, child.name, formatted_time)
        return ScanOutcome(
            child_id=child.child_id,
            child_name=child.name,
            accepted=True,
            message=message,
            action=result.action,
            formatted_time=formatted_time,
        )

    def override_status(self, *, current_role: Role, child_id: int, status: str) -> ChildStatus:
        """Admin correction of a child's live status. No notification is sent."""

        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can change a child's status")
        try:
            new_status = ChildStatus(str(status).upper())
        except ValueError:
            raise ValidationError(f"Unknown status: {status}")

        now = self._clock.now()
        with self._locks.hold(int(child_id)):
            with self._ledger.transaction() as session:
                if session.get_status(int(child_id)) is None:
                    raise ValidationError("Child not found")
                session.set_child_status(child_id=int(child_id), status=new_status, at=now)

        logger.info("Child %s status set to %s by admin", child_id, new_status.value)
        return new_status
