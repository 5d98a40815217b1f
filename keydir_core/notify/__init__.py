# keydir_core/notify/__init__.py
import os
from keydir_core.errors import ConfigError
from .notifier_base import BaseNotifier, NotifierError, NotifierPermanentError, NotifierTransientError
from .notifier_local import DEFAULT_OUTBOX_LIMIT, LocalNotifier, NullNotifier
from .notifier_http import HTTPNotifier


def notifier_factory(
    mode: str | None = None,
    webhook_url: str | None = None,
    timeout: float = 5.0,
    outbox_limit: int = DEFAULT_OUTBOX_LIMIT,
) -> BaseNotifier:
    """
    mode:
      - "local" -> in-process outbox (default)
      - "http"  -> JSON webhook to a mail relay
      - "null"  -> discard
    """
    mode = (mode or os.getenv("KEYDIR_NOTIFIER", "local")).lower()

    if mode == "http":
        return HTTPNotifier(
            webhook_url or os.getenv("KEYDIR_WEBHOOK_URL", "http://localhost:8080/notify"),
            timeout=timeout,
        )

    if mode == "null":
        return NullNotifier()

    if mode == "local":
        return LocalNotifier(outbox_limit=outbox_limit)

    raise ConfigError(f"Unknown notifier: {mode}")


__all__ = [
    "BaseNotifier",
    "NotifierError",
    "NotifierTransientError",
    "NotifierPermanentError",
    "LocalNotifier",
    "NullNotifier",
    "HTTPNotifier",
    "notifier_factory",
]
