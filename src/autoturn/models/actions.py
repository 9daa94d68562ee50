from typing import Annotated, Any, List
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from autoturn.models.schemas import (
    ActionType,
    ConditionType,
    ErrorKind,
    MovementTarget,
    OutcomeKind,
    Position,
    TargetPriority,
)

QUEUE_VERSION = "1.0.0"


def new_action_id() -> str:
    """Fresh opaque id for a queued action."""
    return uuid4().hex[:16]


class RecordModel(BaseModel):
    """Base for everything stored in a queue record (camelCase on the wire)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# ========================================================================================
# CONDITIONS: Gates evaluated right before an action is dispatched.
# ========================================================================================
class Condition(RecordModel):
    """
    Tagged condition variant. Unknown `type` strings are kept as plain strings
    so records written by newer versions still load (and evaluate as true).
    """
    type: ConditionType | str = Field(default=ConditionType.ALWAYS, union_mode="left_to_right")
    value: str | None = None        # "spell-slot-3", "resource-ki", "< 50" ...

    @classmethod
    def always(cls) -> "Condition":
        return cls(type=ConditionType.ALWAYS)


# ============================================================
# PAYLOADS
# ============================================================
class MovementPayload(RecordModel):
    waypoints: List[Position] = []                  # Grid squares; the last one is the destination
    target_type: MovementTarget = MovementTarget.WAYPOINT
    target_id: str | None = None
    max_distance: int | None = None                 # Feet; defaults to the subject's speed
    avoid_opportunity_attacks: bool = True


class AttackPayload(RecordModel):
    item_uuid: str | None = None
    target_priority: List[Annotated[TargetPriority | str, Field(union_mode="left_to_right")]] = [TargetPriority.NEAREST]
    target_id: str | None = None                    # Explicit target beats every priority
    advantage_override: bool | None = None          # True, False, None (auto)
    consume_resource: bool = True


class ItemPayload(RecordModel):
    item_uuid: str | None = None


# ============================================================
# ACTION & OUTCOME
# ============================================================
class QueuedAction(RecordModel):
    """One step of a subject's turn script."""
    id: str = Field(default_factory=new_action_id)
    type: ActionType | str = Field(default=ActionType.MOVEMENT, union_mode="left_to_right")
    order: int = 0
    enabled: bool = True
    name: str = "Untitled Action"
    description: str = ""

    condition: Condition = Field(default_factory=Condition.always, alias="conditions")
    payload: dict[str, Any] = Field(default_factory=dict, alias="data")

    # Conditional branching: id of the action to run right after this one
    on_success: str | None = None
    on_failure: str | None = None

    def movement(self) -> MovementPayload:
        return MovementPayload.model_validate(self.payload)

    def attack(self) -> AttackPayload:
        return AttackPayload.model_validate(self.payload)

    def item(self) -> ItemPayload:
        return ItemPayload.model_validate(self.payload)


class Outcome(BaseModel):
    """Normalized result of dispatching one action."""
    success: bool
    kind: OutcomeKind = OutcomeKind.INFO
    hit: bool | None = None
    damage: int | None = None
    critical: bool | None = None
    saved: bool | None = None                       # Target's saving throw, for save-based effects
    message: str = ""
    error_kind: ErrorKind | None = None

    @classmethod
    def failure(cls, error_kind: ErrorKind, message: str) -> "Outcome":
        return cls(success=False, kind=OutcomeKind.ERROR, error_kind=error_kind, message=message)


class QueueEnvelope(RecordModel):
    """Persisted form of one subject's queue."""
    version: str = QUEUE_VERSION
    enabled: bool = True
    actions: List[QueuedAction] = []


class QueueExport(RecordModel):
    """Portable export of a queue, as written by `ActionQueueManager.export_queue`."""
    version: str = QUEUE_VERSION
    token_name: str | None = None
    actions: List[QueuedAction]
