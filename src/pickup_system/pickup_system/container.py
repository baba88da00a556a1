from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from .attendance.action_cache import ActionCache, CacheSweeper
from .attendance.mysql_attendance_ledger import MySQLAttendanceLedger
from .attendance.repository import AttendanceLedger
from .attendance.service import CheckInService
from .children.mysql_guardian_repository import MySQLGuardianRepository
from .children.repository import GuardianRepository
from .common.datetime_utils import FacilityClock
from .core.constants import (
    DEFAULT_COOLDOWN_MINUTES,
    DEFAULT_FACILITY_TIMEZONE,
    DEFAULT_SCAN_TIMEOUT_SECONDS,
    DEFAULT_SCAN_WORKERS,
    DEFAULT_SMS_TIMEOUT_SECONDS,
    DEFAULT_STREAM_HEARTBEAT_SECONDS,
    DEFAULT_SWEEP_INTERVAL_SECONDS,
)
from .core.enums import QRValidity
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .notifications.hub import NotificationHub
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .notifications.sms import LogOnlySmsSender, SmsSender, TwilioSmsSender
from .qr.service import QRCodeService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    guardians_repo: GuardianRepository
    ledger: AttendanceLedger
    notifications_repo: NotificationRepository

    clock: FacilityClock
    facility_id: str
    stream_heartbeat_seconds: float

    qr_service: QRCodeService
    action_cache: ActionCache
    cache_sweeper: CacheSweeper
    notification_hub: NotificationHub
    notification_service: NotificationService
    checkin_service: CheckInService
    dashboard_service: DashboardService

    scan_executor: Optional[ThreadPoolExecutor] = None
    sms_executor: Optional[ThreadPoolExecutor] = None
    conn: Optional[DatabaseConnection] = None

    def start(self) -> None:
        self.cache_sweeper.start()

    def close(self) -> None:
        self.cache_sweeper.stop(timeout=1.0)
        for executor in (self.scan_executor, self.sms_executor):
            if executor is not None:
                executor.shutdown(wait=False, cancel_futures=True)


def assemble_container(
    *,
    guardians_repo: GuardianRepository,
    ledger: AttendanceLedger,
    notifications_repo: NotificationRepository,
    sms: SmsSender,
    clock: FacilityClock,
    facility_id: str,
    qr_validity: QRValidity = QRValidity.DAILY,
    cooldown_minutes: int = DEFAULT_COOLDOWN_MINUTES,
    sweep_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    scan_workers: int = DEFAULT_SCAN_WORKERS,
    scan_timeout: float = DEFAULT_SCAN_TIMEOUT_SECONDS,
    stream_heartbeat_seconds: float = DEFAULT_STREAM_HEARTBEAT_SECONDS,
    sms_workers: int = 2,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of already-built repositories.

    ``scan_workers=0`` processes children sequentially on the request
    thread and ``sms_workers=0`` sends SMS inline (used by tests).
    """

    scan_executor = (
        ThreadPoolExecutor(max_workers=int(scan_workers), thread_name_prefix="scan") if scan_workers else None
    )
    sms_executor = ThreadPoolExecutor(max_workers=int(sms_workers), thread_name_prefix="sms") if sms_workers else None

    qr_service = QRCodeService(validity=QRValidity(qr_validity))
    action_cache = ActionCache(cooldown=timedelta(minutes=int(cooldown_minutes)))
    cache_sweeper = CacheSweeper(action_cache, clock.now, interval_seconds=sweep_seconds)
    notification_hub = NotificationHub()

    notification_service = NotificationService(
        notifications_repo,
        notification_hub,
        sms,
        sms_executor=sms_executor,
    )
    checkin_service = CheckInService(
        guardians_repo,
        ledger,
        notification_service,
        qr=qr_service,
        cache=action_cache,
        clock=clock,
        facility_id=facility_id,
        executor=scan_executor,
        scan_timeout=scan_timeout,
    )
    dashboard_service = DashboardService(guardians_repo, ledger, clock)

    return Container(
        guardians_repo=guardians_repo,
        ledger=ledger,
        notifications_repo=notifications_repo,
        clock=clock,
        facility_id=facility_id,
        stream_heartbeat_seconds=float(stream_heartbeat_seconds),
        qr_service=qr_service,
        action_cache=action_cache,
        cache_sweeper=cache_sweeper,
        notification_hub=notification_hub,
        notification_service=notification_service,
        checkin_service=checkin_service,
        dashboard_service=dashboard_service,
        scan_executor=scan_executor,
        sms_executor=sms_executor,
        conn=conn,
    )


def build_sms_sender(
    *,
    account_sid: Optional[str],
    auth_token: Optional[str],
    from_number: Optional[str],
    timeout: float = DEFAULT_SMS_TIMEOUT_SECONDS,
) -> SmsSender:
    if account_sid and auth_token and from_number:
        return TwilioSmsSender(
            account_sid=account_sid,
            auth_token=auth_token,
            from_number=from_number,
            timeout=timeout,
        )
    logger.warning("Twilio is not configured; guardian SMS will only be logged")
    return LogOnlySmsSender()


def build_container(*, db_config: dict, settings=None) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    def setting(name, default):
        return getattr(settings, name, default) if settings is not None else default

    sms = build_sms_sender(
        account_sid=setting("TWILIO_ACCOUNT_SID", None),
        auth_token=setting("TWILIO_AUTH_TOKEN", None),
        from_number=setting("TWILIO_FROM_NUMBER", None),
        timeout=float(setting("SMS_TIMEOUT_SECONDS", DEFAULT_SMS_TIMEOUT_SECONDS)),
    )

    return assemble_container(
        guardians_repo=MySQLGuardianRepository(conn),
        ledger=MySQLAttendanceLedger(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        sms=sms,
        clock=FacilityClock(setting("FACILITY_TIMEZONE", DEFAULT_FACILITY_TIMEZONE)),
        facility_id=str(setting("FACILITY_ID", "FACILITY")),
        qr_validity=QRValidity(setting("QR_VALIDITY", QRValidity.DAILY.value)),
        cooldown_minutes=int(setting("ACTION_COOLDOWN_MINUTES", DEFAULT_COOLDOWN_MINUTES)),
        sweep_seconds=float(setting("CACHE_SWEEP_SECONDS", DEFAULT_SWEEP_INTERVAL_SECONDS)),
        scan_workers=int(setting("SCAN_WORKERS", DEFAULT_SCAN_WORKERS)),
        scan_timeout=float(setting("SCAN_TIMEOUT_SECONDS", DEFAULT_SCAN_TIMEOUT_SECONDS)),
        conn=conn,
    )
