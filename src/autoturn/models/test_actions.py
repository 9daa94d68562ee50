"""Action record tests. Run with: pytest src/autoturn/models/test_actions.py"""

import pytest
from pydantic import ValidationError

from autoturn.models import (
    ActionType,
    ConditionType,
    ErrorKind,
    MovementTarget,
    Outcome,
    OutcomeKind,
    Position,
    QueuedAction,
    QueueEnvelope,
    TargetPriority,
)


def test_record_uses_camel_case():
    action = QueuedAction(
        id="swing",
        type=ActionType.ATTACK,
        order=2,
        payload={"itemUuid": "item_longsword_001"},
        on_success="trip",
    )

    record = action.to_record()

    assert record["onSuccess"] == "trip"
    assert record["onFailure"] is None
    assert record["data"] == {"itemUuid": "item_longsword_001"}
    assert record["conditions"] == {"type": "always", "value": None}
    assert record["type"] == "attack"
    print("✓ Action records serialize in camelCase")


def test_load_stored_record():
    record = {
        "id": "a1",
        "type": "movement",
        "order": 0,
        "enabled": False,
        "name": "Advance",
        "description": "",
        "conditions": {"type": "hpThreshold", "value": "> 25"},
        "data": {"targetType": "nearestEnemy", "maxDistance": 30},
        "onSuccess": None,
        "onFailure": "a2",
    }

    action = QueuedAction.model_validate(record)

    assert action.type == ActionType.MOVEMENT
    assert not action.enabled
    assert action.condition.type == ConditionType.HP_THRESHOLD
    assert action.on_failure == "a2"

    movement = action.movement()
    assert movement.target_type == MovementTarget.NEAREST_ENEMY
    assert movement.max_distance == 30
    assert movement.avoid_opportunity_attacks


def test_defaults():
    action = QueuedAction()
    assert len(action.id) == 16
    assert action.enabled
    assert action.name == "Untitled Action"
    assert action.condition.type == ConditionType.ALWAYS
    assert QueuedAction().id != action.id


def test_unknown_types_are_preserved():
    action = QueuedAction.model_validate({
        "id": "x",
        "type": "legendaryAction",
        "conditions": {"type": "isBloodied"},
    })

    assert action.type == "legendaryAction"
    assert action.condition.type == "isBloodied"
    assert action.to_record()["conditions"]["type"] == "isBloodied"


def test_attack_payload():
    action = QueuedAction(type=ActionType.SPELL, payload={
        "itemUuid": "item_firebolt_001",
        "targetPriority": ["lowestHP", "highestDefense"],
        "advantageOverride": False,
    })

    attack = action.attack()

    assert attack.item_uuid == "item_firebolt_001"
    assert attack.target_priority == [TargetPriority.LOWEST_HP, "highestDefense"]
    assert attack.advantage_override is False
    assert attack.consume_resource
    assert QueuedAction(type=ActionType.ATTACK).attack().target_priority == [TargetPriority.NEAREST]


def test_movement_waypoints():
    action = QueuedAction(payload={"waypoints": [{"x": 1, "y": 2}, {"x": 3, "y": 4}]})
    assert action.movement().waypoints == [Position(1, 2), Position(3, 4)]

    with pytest.raises(ValidationError):
        QueuedAction(payload={"waypoints": "north"}).movement()


def test_envelope_round_trip():
    envelope = QueueEnvelope(actions=[QueuedAction(id="a"), QueuedAction(id="b", order=1)])
    restored = QueueEnvelope.model_validate(envelope.to_record())

    assert restored.version == "1.0.0"
    assert restored.enabled
    assert [a.id for a in restored.actions] == ["a", "b"]


def test_failure_outcome():
    outcome = Outcome.failure(ErrorKind.OUT_OF_RANGE, "too far")
    assert not outcome.success
    assert outcome.kind == OutcomeKind.ERROR
    assert outcome.error_kind == ErrorKind.OUT_OF_RANGE
