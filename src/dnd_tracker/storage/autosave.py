"""Debounced background saving of a session engine's current session.

The engine never waits on storage. The writer subscribes to it and
writes only the latest session once changes have been quiet for the
configured delay, so a burst of taps costs a single write.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from dnd_tracker.core.exceptions import StorageError
from dnd_tracker.core.logging import character_context, get_logger


if TYPE_CHECKING:
    from collections.abc import Callable

    from dnd_tracker.core.config import Settings
    from dnd_tracker.engine.session_engine import SessionEngine
    from dnd_tracker.models.session import CharacterSession
    from dnd_tracker.storage.repository import CharacterRepository


logger = get_logger(__name__)


class DebouncedSessionWriter:
    """Writes the newest published session after a quiet period.

    Example:
        >>> writer = DebouncedSessionWriter(database, delay_seconds=1.0)
        >>> writer.attach(engine)
        >>> engine.modify_hp(-3)   # write scheduled
        >>> writer.flush()         # or write now
        True
    """

    def __init__(self, repository: CharacterRepository, *, delay_seconds: float = 1.0) -> None:
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must not be negative, got {delay_seconds}")
        self._repository = repository
        self._delay = delay_seconds
        self._lock = threading.Lock()
        # Held from taking the pending session until its write finishes
        self._write_lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._pending: CharacterSession | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self.write_count = 0
        self.failure_count = 0

    @classmethod
    def from_settings(cls, repository: CharacterRepository, settings: Settings) -> DebouncedSessionWriter:
        return cls(repository, delay_seconds=settings.storage.autosave_delay_seconds)

    @property
    def has_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def attach(self, engine: SessionEngine) -> None:
        """Start saving every session the engine publishes."""
        self.detach()
        self._unsubscribe = engine.subscribe(self.schedule)

    def detach(self) -> None:
        """Stop listening; a scheduled write still happens on flush."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def schedule(self, session: CharacterSession) -> None:
        """Queue ``session`` for writing, restarting the quiet period."""
        with self._lock:
            self._pending = session
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._delay, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> bool:
        """Write the queued session now.

        Returns:
            True if there was nothing to write or the write succeeded,
            False if storage failed. A failed session stays queued for
            the next flush unless a newer one replaced it.

        Flushes run one at a time, so a slow write of an older session
        can never land after a newer one.
        """
        with self._write_lock:
            return self._write_pending()

    def _write_pending(self) -> bool:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            session = self._pending
            self._pending = None

        if session is None:
            return True

        with character_context(session.definition_id):
            try:
                self._repository.save_session(session)
            except StorageError as exc:
                logger.error("Autosave failed", error=str(exc))
                with self._lock:
                    self.failure_count += 1
                    if self._pending is None:
                        self._pending = session
                return False

            with self._lock:
                self.write_count += 1
            logger.debug("Autosaved session")
        return True

    def cancel(self) -> None:
        """Drop any queued write without saving it."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = None

    def close(self) -> bool:
        """Detach and write anything still queued."""
        self.detach()
        return self.flush()


__all__ = ["DebouncedSessionWriter"]
