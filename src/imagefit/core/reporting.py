"""Error reporting through Sentry."""

import logging
from typing import Dict, Mapping, Optional

import sentry_sdk
from sentry_sdk.utils import BadDsn, event_from_exception

from .exceptions import ReportingClientConstructionError

logger = logging.getLogger(__name__)


class ErrorReporter:
    """
    Sends exceptions to Sentry with a fixed set of base tags.

    An empty DSN produces a disabled client: ``report`` becomes a no-op
    returning None, which keeps local and test deployments quiet.
    """

    def __init__(self, client: "sentry_sdk.Client", tags: Optional[Mapping[str, str]] = None):
        self._client = client
        self.tags: Dict[str, str] = dict(tags or {})

    @classmethod
    def from_dsn(
        cls,
        dsn: str,
        tags: Optional[Mapping[str, str]] = None,
        **client_options,
    ) -> "ErrorReporter":
        """
        Build a reporter for ``dsn``.

        Raises:
            ReportingClientConstructionError: If the DSN is malformed
        """
        # Explicit capture only; no global hooks.
        client_options.setdefault("default_integrations", False)
        try:
            client = sentry_sdk.Client(dsn=dsn or None, **client_options)
        except BadDsn as exc:
            raise ReportingClientConstructionError(f"Invalid Sentry DSN: {exc}") from exc
        return cls(client, tags)

    @property
    def enabled(self) -> bool:
        return self._client.is_active() and self._client.dsn is not None

    @property
    def client(self) -> "sentry_sdk.Client":
        return self._client

    def report(self, error: BaseException, **tags: str) -> Optional[str]:
        """Capture ``error`` and return the event id, if one was sent."""
        if not self.enabled:
            logger.debug(f"Error reporting disabled, dropping {type(error).__name__}")
            return None

        event, hint = event_from_exception(error, client_options=self._client.options)
        event["tags"] = {**self.tags, **tags}
        return self._client.capture_event(event, hint=hint)

    def close(self, timeout: Optional[float] = None) -> None:
        self._client.close(timeout=timeout)
