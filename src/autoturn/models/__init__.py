from .schemas import (
    ActionType,
    ConditionType,
    TargetPriority,
    MovementTarget,
    OutcomeKind,
    ErrorKind,
    Disposition,
    Attribute,
    Attributes,
    ItemType,
    Position,
)

from .state import (
    Item,
    Token,
)

from .actions import (
    QUEUE_VERSION,
    new_action_id,
    Condition,
    MovementPayload,
    AttackPayload,
    ItemPayload,
    QueuedAction,
    Outcome,
    QueueEnvelope,
    QueueExport,
)

__all__ = [
    # Schemas
    "ActionType",
    "ConditionType",
    "TargetPriority",
    "MovementTarget",
    "OutcomeKind",
    "ErrorKind",
    "Disposition",
    "Attribute",
    "Attributes",
    "ItemType",
    "Position",

    # State
    "Item",
    "Token",

    # Actions
    "QUEUE_VERSION",
    "new_action_id",
    "Condition",
    "MovementPayload",
    "AttackPayload",
    "ItemPayload",
    "QueuedAction",
    "Outcome",
    "QueueEnvelope",
    "QueueExport",
]
