import requests
from keydir_core.logger import get_logger
from keydir_core.models import Identity, Notification
from keydir_core.utils import short
from .notifier_base import BaseNotifier, NotifierPermanentError, NotifierTransientError

log = get_logger("KeyDir.Notify.HTTP")


class HTTPNotifier(BaseNotifier):
    """
    Posts notifications as JSON to a mail-relay webhook.

    The relay owns delivery and retries; a 5xx or connection failure is
    reported as NotifierTransientError, any other non-2xx as
    NotifierPermanentError.
    """
    name = "http"

    def __init__(self, webhook_url: str, timeout: float = 5.0, headers: dict | None = None):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json", **(headers or {})}

    def notify(self, identity: Identity, notification: Notification) -> dict:
        message = self.to_message(identity, notification)
        log.debug(f"[HTTP NOTIFY] -> {self.webhook_url} | kind={notification.kind} to={identity.email}")
        try:
            res = requests.post(self.webhook_url, json=message, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as e:
            log.error(f"[HTTP NOTIFY] connection error: {e}")
            raise NotifierTransientError(str(e)) from e

        if res.ok:
            log.info(f"[HTTP NOTIFY] {res.status_code} {notification.kind} token={short(notification.token)}")
            return {"status": res.status_code}
        log.error(f"[HTTP NOTIFY] {res.status_code}: {res.text}")
        if res.status_code >= 500:
            raise NotifierTransientError(f"{res.status_code}: {res.text}")
        raise NotifierPermanentError(f"{res.status_code}: {res.text}")

    def healthz(self) -> dict:
        return {"status": "ok", "notifier": self.name, "webhook": self.webhook_url}
