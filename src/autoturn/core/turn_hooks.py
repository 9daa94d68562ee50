import logging
from typing import Callable, List, Protocol

from autoturn.core.engine import ExecutionEngine
from autoturn.core.exceptions import ResourceLoadError
from autoturn.core.ledger import RunSummary
from autoturn.core.notifications import LoggingNotifier, Notifier
from autoturn.models import QueuedAction, Token

logger = logging.getLogger(__name__)


class QueueProvider(Protocol):
    def is_queue_enabled(self, subject_id: str) -> bool: ...

    def get_sorted_actions(self, subject_id: str) -> List[QueuedAction]: ...

    def load_ordered_enabled(self, subject_id: str) -> List[QueuedAction]: ...


# Whether this client is allowed to drive the token (owner or GM)
OwnershipCheck = Callable[[Token], bool]


def always_owned(token: Token) -> bool:
    return True


class TurnTrigger:
    """
    Turns "it's X's turn" events into engine runs. Only fresh turns count;
    a turn update that doesn't start a new turn (HP change, re-render) is
    ignored.
    """

    def __init__(
        self,
        engine: ExecutionEngine,
        queues: QueueProvider,
        notifier: Notifier | None = None,
        is_owner: OwnershipCheck = always_owned,
    ):
        self.engine = engine
        self.queues = queues
        self.notifier = notifier or LoggingNotifier()
        self.is_owner = is_owner

    async def on_turn(self, subject: Token, is_new_turn: bool = True) -> RunSummary | None:
        if not is_new_turn:
            return None
        if not self.is_owner(subject):
            logger.debug("Not the owner of %s, leaving its turn alone", subject.name)
            return None

        try:
            if not self.queues.is_queue_enabled(subject.id):
                return None
            actions = self.queues.get_sorted_actions(subject.id)
        except ResourceLoadError as e:
            self.notifier.run_error(subject, str(e))
            return None

        if not actions:
            return None

        logger.debug("Turn started for %s with %d queued action(s)", subject.name, len(actions))
        return await self.engine.execute_queue(subject, actions)
