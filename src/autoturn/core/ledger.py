import asyncio
from dataclasses import dataclass, field
from typing import Dict, List

from autoturn.models import OutcomeKind, Outcome, QueuedAction, Token


class Pacer:
    """
    Cancellable sleep shared by one run. `cancel()` wakes every pending
    `sleep` at once and makes later ones return immediately.
    """

    def __init__(self):
        self._cancelled = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    async def sleep(self, seconds: float) -> bool:
        """Wait up to `seconds`. Returns False if the run was cancelled."""
        if self.cancelled:
            return False
        if seconds <= 0:
            await asyncio.sleep(0)
            return not self.cancelled
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return True
        return False

    def cancel(self) -> None:
        self._cancelled.set()


@dataclass
class RunContext:
    """
    Per-run state: the subject, the action snapshot and the ledger of
    outcomes keyed by action id (insertion ordered).
    """
    subject: Token
    actions: List[QueuedAction]
    results: Dict[str, Outcome] = field(default_factory=dict)
    pacer: Pacer = field(default_factory=Pacer)
    stopped: bool = False

    def record(self, action_id: str, outcome: Outcome) -> None:
        self.results[action_id] = outcome

    def find_action(self, action_id: str | None) -> QueuedAction | None:
        if not action_id:
            return None
        return next((a for a in self.actions if a.id == action_id), None)

    def first_attack(self) -> Outcome | None:
        """Earliest attack outcome recorded this run."""
        return next((o for o in self.results.values() if o.kind == OutcomeKind.ATTACK), None)

    def first_save(self) -> Outcome | None:
        """Earliest outcome that carries a saving throw result."""
        return next((o for o in self.results.values() if o.saved is not None), None)


@dataclass
class RunSummary:
    subject_id: str
    executed: int
    skipped: int
    stopped: bool
    results: Dict[str, Outcome]
