import logging
from typing import Protocol

from pydantic import ValidationError

from autoturn.core.ledger import Pacer, RunContext
from autoturn.models import (
    ActionType,
    AttackPayload,
    ErrorKind,
    ItemPayload,
    MovementPayload,
    Outcome,
    OutcomeKind,
    QueuedAction,
    Token,
)

logger = logging.getLogger(__name__)


# ============================================================
# EXECUTOR PROTOCOLS
# ============================================================
class MovementExecutor(Protocol):
    async def execute_movement(
        self, subject: Token, payload: MovementPayload, pacer: Pacer | None = None
    ) -> Outcome: ...


class AttackExecutor(Protocol):
    async def execute_attack(self, subject: Token, payload: AttackPayload) -> Outcome: ...


class ItemExecutor(Protocol):
    async def execute_item(self, subject: Token, payload: ItemPayload) -> Outcome: ...


# Action types that resolve through the attack executor
ATTACK_ROUTED = (ActionType.ATTACK, ActionType.SPELL, ActionType.BONUS_ACTION, ActionType.REACTION)


class ActionDispatcher:
    """
    Routes a queued action to the executor for its type and normalizes
    whatever happens into an Outcome. `dispatch` never raises.
    """

    def __init__(
        self,
        movement: MovementExecutor | None = None,
        attack: AttackExecutor | None = None,
        item: ItemExecutor | None = None,
    ):
        self.movement = movement
        self.attack = attack
        self.item = item

    async def dispatch(self, action: QueuedAction, context: RunContext) -> Outcome:
        subject = context.subject
        try:
            if action.type == ActionType.MOVEMENT:
                if self.movement is None:
                    return self._unavailable("movement")
                return await self.movement.execute_movement(subject, action.movement(), context.pacer)

            if action.type in ATTACK_ROUTED:
                if self.attack is None:
                    return self._unavailable("attack")
                return await self.attack.execute_attack(subject, action.attack())

            if action.type == ActionType.ITEM:
                if self.item is None:
                    return self._unavailable("item")
                return await self.item.execute_item(subject, action.item())

            if action.type == ActionType.END_TURN:
                return Outcome(success=True, kind=OutcomeKind.INFO, message="Turn ended")

            return Outcome.failure(ErrorKind.UNKNOWN_ACTION_TYPE, f"Unknown action type: {action.type}")

        except ValidationError as e:
            logger.warning("Invalid payload on action %s: %s", action.name, e)
            return Outcome.failure(ErrorKind.INVALID_PAYLOAD, f"Invalid data on {action.name}: {e.error_count()} error(s)")
        except Exception as e:
            logger.exception("Action %s raised during execution", action.name)
            return Outcome.failure(ErrorKind.EXECUTION_ERROR, str(e))

    @staticmethod
    def _unavailable(kind: str) -> Outcome:
        return Outcome.failure(ErrorKind.EXECUTOR_UNAVAILABLE, f"No {kind} executor available")
