"""Real provider adapters for production sending.

Mental model refresher:
- This module is an outbound adapter.
- Each sender is a long-lived callable built once by the composition root.
  Provider clients/credentials are set up lazily, on first use.
- Domain code only sees `send_*(**fields) -> bool`; it does not know which
  provider is underneath.
- Senders return True on success and raise ChannelDeliveryFailure when the
  provider rejects the request or cannot be reached.
"""

from __future__ import annotations

import base64
import html
import json
import threading
from typing import Any, Mapping
import urllib.error
import urllib.parse
import urllib.request

import firebase_admin
from firebase_admin import credentials, messaging
import structlog

from ..domain.envelope import mask_recipient
from ..errors import ChannelDeliveryFailure

logger = structlog.get_logger()

# Guards the process-global Firebase app registry.
_FIREBASE_APP_LOCK = threading.Lock()


class ResendEmailSender:
    """Send email through the Resend REST API."""

    def __init__(
        self,
        *,
        api_key: str | None,
        from_address: str,
        reply_to: str | None = None,
        base_url: str = "https://api.resend.com",
        timeout_seconds: float = 10.0,
    ) -> None:
        self._api_key = api_key
        self._from_address = from_address
        self._reply_to = reply_to
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    def __call__(self, *, to_email: str, subject: str, body: str) -> bool:
        if not self._api_key:
            raise RuntimeError("RESEND_API_KEY not configured")

        payload: dict[str, Any] = {
            "from": self._from_address,
            "to": [to_email],
            "subject": subject,
            "text": body,
            "html": html.escape(body).replace("\n", "<br>"),
        }
        if self._reply_to:
            payload["reply_to"] = self._reply_to

        request = urllib.request.Request(
            f"{self._base_url}/emails",
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
        )
        request.add_header("Authorization", f"Bearer {self._api_key}")
        request.add_header("Content-Type", "application/json")

        _post(request, timeout_seconds=self._timeout_seconds, provider="Resend email", channel="email")
        logger.info("email_sent", to=mask_recipient(to_email), subject=subject)
        return True


class TwilioSmsSender:
    """Send SMS through the Twilio REST API."""

    def __init__(
        self,
        *,
        account_sid: str | None,
        auth_token: str | None,
        from_number: str | None = None,
        messaging_service_sid: str | None = None,
        base_url: str = "https://api.twilio.com",
        timeout_seconds: float = 10.0,
    ) -> None:
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_number = from_number
        self._messaging_service_sid = messaging_service_sid
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    def __call__(self, *, to_phone_e164: str, message: str) -> bool:
        if not self._account_sid or not self._auth_token:
            raise RuntimeError("Twilio credentials not configured")

        fields = {"To": to_phone_e164, "Body": message}
        if self._messaging_service_sid:
            fields["MessagingServiceSid"] = self._messaging_service_sid
        elif self._from_number:
            fields["From"] = self._from_number
        else:
            raise RuntimeError("TWILIO_PHONE_NUMBER or TWILIO_MESSAGING_SERVICE_SID is required")

        endpoint = f"{self._base_url}/2010-04-01/Accounts/{self._account_sid}/Messages.json"
        request = urllib.request.Request(
            endpoint,
            data=urllib.parse.urlencode(fields).encode("utf-8"),
            method="POST",
        )
        request.add_header("Authorization", _basic_auth_header(self._account_sid, self._auth_token))
        request.add_header("Content-Type", "application/x-www-form-urlencoded")

        response_body = _post(
            request, timeout_seconds=self._timeout_seconds, provider="Twilio SMS", channel="sms"
        )
        logger.info("sms_sent", to=mask_recipient(to_phone_e164), sid=_json_field(response_body, "sid"))
        return True


class FirebasePushSender:
    """Send push notifications through Firebase Cloud Messaging.

    The Firebase app is initialized once per process, on the first send;
    later senders with the same app name reuse it. Without credentials push
    is disabled: sends are logged and return False.
    """

    def __init__(
        self,
        *,
        project_id: str | None,
        private_key: str | None,
        client_email: str | None,
        app_name: str = "notification-dispatch",
    ) -> None:
        self._project_id = project_id
        self._private_key = private_key
        self._client_email = client_email
        self._app_name = app_name
        self._app: firebase_admin.App | None = None

    @property
    def configured(self) -> bool:
        return bool(self._project_id and self._private_key and self._client_email)

    def __call__(
        self,
        *,
        token: str,
        title: str,
        body: str,
        data: Mapping[str, Any] | None = None,
    ) -> bool:
        app = self._get_app()
        if app is None:
            logger.warning("push_skipped", reason="firebase_not_configured")
            return False

        message = messaging.Message(
            token=token,
            notification=messaging.Notification(title=title, body=body),
            data=_stringify_data(data),
            apns=messaging.APNSConfig(payload=messaging.APNSPayload(aps=messaging.Aps(sound="default"))),
            android=messaging.AndroidConfig(
                priority="high",
                notification=messaging.AndroidNotification(sound="default"),
            ),
        )
        try:
            response = messaging.send(message, app=app)
        except Exception as exc:
            raise ChannelDeliveryFailure(f"Firebase push send failed: {exc}", channel="push") from exc

        logger.info("push_sent", token=f"{token[:10]}...", message_id=response)
        return True

    def _get_app(self) -> firebase_admin.App | None:
        if not self.configured:
            return None
        with _FIREBASE_APP_LOCK:
            if self._app is None:
                self._app = self._existing_app() or self._initialize_app()
        return self._app

    def _existing_app(self) -> firebase_admin.App | None:
        try:
            return firebase_admin.get_app(self._app_name)
        except ValueError:
            return None

    def _initialize_app(self) -> firebase_admin.App:
        credential = credentials.Certificate(
            {
                "type": "service_account",
                "project_id": self._project_id,
                "private_key": self._private_key,
                "client_email": self._client_email,
                "token_uri": "https://oauth2.googleapis.com/token",
            }
        )
        app = firebase_admin.initialize_app(
            credential, {"projectId": self._project_id}, name=self._app_name
        )
        logger.info("firebase_initialized", project_id=self._project_id, app_name=self._app_name)
        return app


def _post(
    request: urllib.request.Request,
    *,
    timeout_seconds: float,
    provider: str,
    channel: str,
) -> bytes:
    try:
        with urllib.request.urlopen(request, timeout=timeout_seconds) as response:
            status = int(response.getcode())
            if status < 200 or status >= 300:
                raise ChannelDeliveryFailure(
                    f"{provider} send failed with status {status}", channel=channel
                )
            return response.read()
    except urllib.error.HTTPError as exc:
        details = exc.read().decode("utf-8", errors="replace")
        raise ChannelDeliveryFailure(
            f"{provider} send failed HTTP {exc.code}: {details[:300]}", channel=channel
        ) from exc
    except urllib.error.URLError as exc:
        raise ChannelDeliveryFailure(f"{provider} send failed: {exc.reason}", channel=channel) from exc


def _stringify_data(data: Mapping[str, Any] | None) -> dict[str, str] | None:
    """FCM only accepts string values in the data payload."""
    if not data:
        return None
    return {
        str(key): value if isinstance(value, str) else json.dumps(value, default=str)
        for key, value in data.items()
    }


def _json_field(raw: bytes, name: str) -> Any:
    try:
        parsed = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    return parsed.get(name) if isinstance(parsed, dict) else None


def _basic_auth_header(username: str, password: str) -> str:
    token = f"{username}:{password}".encode("utf-8")
    encoded = base64.b64encode(token).decode("ascii")
    return f"Basic {encoded}"
