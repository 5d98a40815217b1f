from __future__ import annotations
from collections import deque
from typing import Callable, Deque, List, Tuple
from keydir_core.logger import get_logger
from keydir_core.models import Identity, Notification
from keydir_core.utils import short
from .notifier_base import BaseNotifier

log = get_logger("KeyDir.Notify.Local")

DEFAULT_OUTBOX_LIMIT = 100

Handler = Callable[[Identity, Notification], None]


class LocalNotifier(BaseNotifier):
    """
    In-process notifier.

    Every message is appended to the outbox and handed to each subscribed
    handler. The outbox keeps only the most recent outbox_limit messages.
    Handlers may call back into the server (e.g. verify the token straight
    away), since notifications are delivered outside its lock.
    """
    name = "local"

    def __init__(self, outbox_limit: int = DEFAULT_OUTBOX_LIMIT):
        self.outbox: Deque[Tuple[Identity, Notification]] = deque(maxlen=outbox_limit)
        self.handlers: List[Handler] = []

    def subscribe(self, handler: Handler) -> None:
        self.handlers.append(handler)

    def notify(self, identity: Identity, notification: Notification) -> None:
        log.info(f"[LOCAL NOTIFY] {notification.kind} -> {identity.email} token={short(notification.token)}")
        self.outbox.append((identity, notification))
        for handler in list(self.handlers):
            handler(identity, notification)

    def sent_to(self, identity: Identity) -> List[Notification]:
        return [n for i, n in self.outbox if i == identity]

    def clear(self) -> None:
        self.outbox.clear()


class NullNotifier(BaseNotifier):
    name = "null"

    def notify(self, identity: Identity, notification: Notification) -> None:
        log.debug(f"[NULL NOTIFY] dropped {notification.kind} for {identity.email}")
