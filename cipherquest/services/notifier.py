"""
Outbound notifications (verification, password reset, qualification,
submission confirmation).

Contract: notify(kind, recipient, payload) -> bool and never raises.
A False result is logged and reported to the registered failure hooks; the
state change that triggered the notification is never undone because of it.

SimulatedNotifier is used when no email relay is configured: it logs the
rendered message and reports success. RelayNotifier POSTs the rendered
message to an HTTP email relay.
"""
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import httpx

from cipherquest.config.settings import Settings

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    VERIFICATION = "verification"
    PASSWORD_RESET = "password_reset"
    QUALIFICATION = "qualification"
    SUBMISSION_CONFIRMATION = "submission_confirmation"


FailureHook = Callable[[NotificationKind, str, Optional[str]], None]


def render_message(kind: NotificationKind, payload: Dict[str, Any], frontend_url: str) -> Dict[str, str]:
    """Build subject and plain-text body for a notification."""
    team_name = payload.get("team_name", "team")

    if kind == NotificationKind.VERIFICATION:
        url = f"{frontend_url}/verify-email?token={payload.get('token')}"
        return {
            "subject": "Verify Your Email - CipherQuest",
            "body": (
                f"Hello {team_name},\n\n"
                f"Thank you for registering for the CipherQuest Hackathon. "
                f"Verify your email address here:\n{url}\n\n"
                f"This link will expire in 24 hours."
            ),
        }

    if kind == NotificationKind.PASSWORD_RESET:
        url = f"{frontend_url}/reset-password?token={payload.get('token')}"
        return {
            "subject": "Password Reset - CipherQuest",
            "body": (
                f"Hello {team_name},\n\n"
                f"Reset your CipherQuest password here:\n{url}\n\n"
                f"This link will expire in 1 hour. If you didn't request this, ignore this email."
            ),
        }

    if kind == NotificationKind.QUALIFICATION:
        return {
            "subject": "Congratulations! You Qualified for CipherQuest Build Phase",
            "body": (
                f"Congratulations {team_name}!\n\n"
                f"You completed the CipherQuest challenge and qualified for the Build Phase.\n"
                f"Your assigned problem: {payload.get('problem_title', 'see your dashboard')}\n\n"
                f"Submit your PPT and prototype before the deadline."
            ),
        }

    lines = [f"Hello {team_name},", "", "Your CipherQuest project submission has been received."]
    for label, key in (("PPT", "ppt_url"), ("Prototype", "prototype_url"), ("GitHub", "github_url")):
        if payload.get(key):
            lines.append(f"{label}: {payload[key]}")
    return {"subject": "CipherQuest Submission Received", "body": "\n".join(lines)}


class Notifier:
    """Base notifier. Subclasses implement _deliver()."""

    def __init__(self, frontend_url: str = "http://localhost:3001"):
        self.frontend_url = frontend_url
        self._failure_hooks: List[FailureHook] = []

    def on_failure(self, hook: FailureHook):
        """Register a callback invoked as hook(kind, recipient, reason) on failed delivery."""
        self._failure_hooks.append(hook)

    async def _deliver(self, recipient: str, message: Dict[str, str], kind: NotificationKind) -> bool:
        raise NotImplementedError

    async def notify(self, kind: NotificationKind, recipient: str, payload: Dict[str, Any]) -> bool:
        try:
            message = render_message(kind, payload, self.frontend_url)
            delivered = await self._deliver(recipient, message, kind)
            reason = None if delivered else "delivery rejected"
        except Exception as e:
            delivered = False
            reason = f"{type(e).__name__}: {str(e)}"

        if not delivered:
            logger.warning(f"❌ {kind.value} notification to {recipient} failed: {reason}")
            self._report_failure(kind, recipient, reason)
        return delivered

    def _report_failure(self, kind: NotificationKind, recipient: str, reason: Optional[str]):
        for hook in self._failure_hooks:
            try:
                hook(kind, recipient, reason)
            except Exception as e:
                logger.error(f"Notification failure hook raised {type(e).__name__}: {str(e)}")


class SimulatedNotifier(Notifier):
    """Logs messages instead of sending them."""

    def __init__(self, frontend_url: str = "http://localhost:3001"):
        super().__init__(frontend_url)
        self.sent: List[Dict[str, Any]] = []

    async def _deliver(self, recipient: str, message: Dict[str, str], kind: NotificationKind) -> bool:
        logger.info(f"📧 [SIMULATED] {kind.value} email to {recipient}: {message['subject']}")
        self.sent.append({"kind": kind, "recipient": recipient, **message})
        return True


class RelayNotifier(Notifier):
    """Sends messages through an HTTP email relay."""

    def __init__(
        self,
        relay_url: str,
        sender: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        frontend_url: str = "http://localhost:3001",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(frontend_url)
        self.relay_url = relay_url
        self.sender = sender
        self.token = token
        self.timeout = timeout
        self._transport = transport

    async def _deliver(self, recipient: str, message: Dict[str, str], kind: NotificationKind) -> bool:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        body = {
            "from": self.sender,
            "to": recipient,
            "subject": message["subject"],
            "text": message["body"],
            "tags": [kind.value],
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(self.relay_url, json=body, headers=headers)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error(f"Email relay request failed: {str(e)}")
                return False
        logger.info(f"✅ {kind.value} email sent to {recipient}")
        return True


def build_notifier(settings: Settings) -> Notifier:
    if settings.email_relay_url:
        return RelayNotifier(
            relay_url=settings.email_relay_url,
            sender=settings.email_sender,
            token=settings.email_relay_token,
            timeout=settings.notify_timeout_seconds,
            frontend_url=settings.frontend_url,
        )
    logger.info("📧 No EMAIL_RELAY_URL configured - notifications run in simulation mode")
    return SimulatedNotifier(frontend_url=settings.frontend_url)
