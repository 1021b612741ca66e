"""Clock and identifier generator collaborators.

The core never reads the wall clock or generates ids on its own; both are
injected so tests can pin them.
"""

from abc import ABC, abstractmethod
from datetime import datetime, UTC
from uuid import uuid4


class Clock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current timezone-aware timestamp."""
        pass


class SystemClock(Clock):
    """Clock backed by the system time in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class IdGenerator(ABC):
    """Source of globally unique identifiers."""

    @abstractmethod
    def new_id(self) -> str:
        """Return a new unique identifier."""
        pass


class UUIDGenerator(IdGenerator):
    """Identifier generator producing random UUID4 strings."""

    def new_id(self) -> str:
        return str(uuid4())
