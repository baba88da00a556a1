from __future__ import annotations

import logging
from typing import Optional, Protocol

from twilio.base.exceptions import TwilioException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

logger = logging.getLogger(__name__)


class SmsSender(Protocol):
    def send(self, to: str, message: str) -> bool:
        raise NotImplementedError


class TwilioSmsSender(SmsSender):
    """Delivers guardian SMS through the Twilio REST API."""

    def __init__(self, *, account_sid: str, auth_token: str, from_number: str, timeout: Optional[float] = None):
        self._client = Client(account_sid, auth_token, http_client=TwilioHttpClient(timeout=timeout))
        self._from_number = from_number

    def send(self, to: str, message: str) -> bool:
        if not to or not message:
            return False
        try:
            self._client.messages.create(body=message, to=to, from_=self._from_number)
            return True
        except TwilioException as e:
            logger.warning("SMS to %s failed: %s", to, e)
            return False


class LogOnlySmsSender(SmsSender):
    """Used when no SMS provider is configured: logs instead of sending."""

    def send(self, to: str, message: str) -> bool:
        logger.info("SMS (not sent, no provider configured) to %s: %s", to, message)
        return True
