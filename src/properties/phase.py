"""Two-phase build lifecycle flag shared by every component of a build."""

from __future__ import annotations

from enum import Enum

from contracts.errors import PhaseError


class BuildPhase(str, Enum):
    DECLARING = "declaring"
    RESOLVING = "resolving"


class PhaseGate:
    """Hard barrier between declaration and resolution.

    The gate starts in :attr:`BuildPhase.DECLARING` and can only move
    forward once.  Extensions refuse mutation after the barrier and the
    resolver refuses to compute values before it.
    """

    def __init__(self) -> None:
        self._phase = BuildPhase.DECLARING

    @property
    def phase(self) -> BuildPhase:
        return self._phase

    @property
    def declaring(self) -> bool:
        return self._phase is BuildPhase.DECLARING

    def close(self) -> bool:
        """Cross the barrier; returns ``False`` if it was already crossed."""

        if self._phase is BuildPhase.RESOLVING:
            return False
        self._phase = BuildPhase.RESOLVING
        return True

    def require_declaring(self, action: str) -> None:
        if self._phase is not BuildPhase.DECLARING:
            raise PhaseError(f"Cannot {action}: declaration phase has finished")

    def require_resolving(self, action: str) -> None:
        if self._phase is not BuildPhase.RESOLVING:
            raise PhaseError(f"Cannot {action} before all declarations are complete")


__all__ = ["BuildPhase", "PhaseGate"]
