from __future__ import annotations
from typing import Any
from keydir_core.errors import KeyDirError
from keydir_core.models import Identity, Notification


class NotifierError(KeyDirError):
    pass


class NotifierTransientError(NotifierError):
    pass


class NotifierPermanentError(NotifierError):
    pass


class BaseNotifier:
    """
    Notifier contract used by the directory server.

    notify() is fire-and-forget from the server's point of view: it is called
    after the token is recorded and outside the table lock. Retries, if any,
    belong to the adapter.
    """
    name: str = "base"

    def notify(self, identity: Identity, notification: Notification) -> Any:
        raise NotImplementedError

    def healthz(self) -> dict:
        return {"status": "ok", "notifier": self.name}

    @staticmethod
    def to_message(identity: Identity, notification: Notification) -> dict:
        return {"to": identity.email, **notification.to_dict()}
