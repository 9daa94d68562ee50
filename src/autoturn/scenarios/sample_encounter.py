"""
Sample encounter for trying out automated turns.
"""
from typing import List

from autoturn.models import (
    ActionType,
    Attribute,
    Attributes,
    Condition,
    ConditionType,
    Disposition,
    Item,
    ItemType,
    Position,
    QueuedAction,
    TargetPriority,
    Token,
)
from autoturn.storage.graph.scene_graph import SceneGraph

FIGHTER_ID = "token_fighter_001"
MAGE_ID = "token_mage_001"


def create_sample_encounter(grid_distance: int = 5) -> SceneGraph:
    """
    Creates a small skirmish: a fighter and a mage against three goblins
    on an open 20x20 grid.

    Returns:
        SceneGraph: tokens placed and equipped, ready for queues
    """
    scene = SceneGraph(grid_distance=grid_distance)

    # ==================== PARTY ====================

    fighter = Token(
        id=FIGHTER_ID,
        name="Brenna Ironhide",
        position=Position(2, 2),
        disposition=Disposition.FRIENDLY,
        hp=28,
        max_hp=34,
        ac=17,
        speed=30,
        attributes=Attributes(STR=16, DEX=12, CON=15, INT=9, WIS=11, CHA=10),
        resources={"superiority": 2},
        auto_initiative=True,
    )
    mage = Token(
        id=MAGE_ID,
        name="Quillan Ashvale",
        position=Position(1, 4),
        disposition=Disposition.FRIENDLY,
        hp=16,
        max_hp=16,
        ac=12,
        speed=30,
        attributes=Attributes(STR=8, DEX=14, CON=12, INT=17, WIS=12, CHA=10),
        spell_slots={1: 2, 2: 1},
        auto_initiative=True,
    )
    scene.add_token(fighter)
    scene.add_token(mage)

    scene.add_item(Item(
        id="item_longsword_001",
        name="Longsword",
        description="A well-balanced steel blade",
        attack_bonus=5,
        damage="1d8+STR",
    ), owner_id=FIGHTER_ID)
    scene.add_item(Item(
        id="item_trip_attack_001",
        name="Trip Attack",
        item_type=ItemType.FEAT,
        description="Battle master manoeuvre; spends a superiority die",
        consume_target="superiority",
        attack_bonus=5,
        damage="2d8+STR",
    ), owner_id=FIGHTER_ID)
    scene.add_item(Item(
        id="item_potion_001",
        name="Potion of Healing",
        item_type=ItemType.CONSUMABLE,
        uses=1,
        max_uses=1,
        healing="2d4+2",
    ), owner_id=FIGHTER_ID)

    scene.add_item(Item(
        id="item_firebolt_001",
        name="Fire Bolt",
        item_type=ItemType.SPELL,
        reach=120,
        attack_bonus=5,
        damage="1d10",
    ), owner_id=MAGE_ID)
    scene.add_item(Item(
        id="item_burning_hands_001",
        name="Burning Hands",
        item_type=ItemType.SPELL,
        level=1,
        reach=15,
        damage="3d6",
        save_dc=13,
        save_attribute=Attribute.DEX,
    ), owner_id=MAGE_ID)

    # ==================== GOBLINS ====================

    goblin_positions = [Position(6, 3), Position(8, 6), Position(11, 2)]
    for idx, position in enumerate(goblin_positions, start=1):
        goblin_id = f"token_goblin_{idx:03d}"
        scene.add_token(Token(
            id=goblin_id,
            name=f"Goblin {idx}",
            position=position,
            disposition=Disposition.HOSTILE,
            hp=7,
            max_hp=7,
            ac=15,
            attributes=Attributes(STR=8, DEX=14, CON=10, INT=10, WIS=8, CHA=8),
            auto_initiative=True,
        ))
        scene.add_item(Item(
            id=f"item_scimitar_{idx:03d}",
            name="Scimitar",
            attack_bonus=4,
            damage="1d6+2",
        ), owner_id=goblin_id)

    return scene


def create_sample_queues() -> dict[str, List[QueuedAction]]:
    """Turn scripts for the two party members, keyed by token id."""
    fighter_queue = [
        QueuedAction(
            id="fighter_drink",
            name="Drink potion when hurt",
            type=ActionType.ITEM,
            order=0,
            condition=Condition(type=ConditionType.HP_THRESHOLD, value="< 50"),
            payload={"itemUuid": "item_potion_001"},
        ),
        QueuedAction(
            id="fighter_close",
            name="Close on nearest goblin",
            type=ActionType.MOVEMENT,
            order=1,
            payload={"targetType": "nearestEnemy", "maxDistance": 30},
        ),
        QueuedAction(
            id="fighter_swing",
            name="Longsword",
            type=ActionType.ATTACK,
            order=2,
            payload={"itemUuid": "item_longsword_001", "targetPriority": [TargetPriority.NEAREST.value]},
        ),
        QueuedAction(
            id="fighter_trip",
            name="Trip Attack",
            type=ActionType.BONUS_ACTION,
            order=3,
            condition=Condition(type=ConditionType.ATTACK_HIT),
            payload={"itemUuid": "item_trip_attack_001"},
        ),
        QueuedAction(id="fighter_end", name="End turn", type=ActionType.END_TURN, order=4),
    ]

    mage_queue = [
        QueuedAction(
            id="mage_burn",
            name="Burning Hands if they get close",
            type=ActionType.SPELL,
            order=0,
            condition=Condition(type=ConditionType.TARGET_IN_RANGE),
            payload={"itemUuid": "item_burning_hands_001", "targetPriority": ["nearest"]},
        ),
        QueuedAction(
            id="mage_bolt",
            name="Fire Bolt the weakest",
            type=ActionType.SPELL,
            order=1,
            payload={"itemUuid": "item_firebolt_001", "targetPriority": ["lowestHP", "nearest"]},
            on_failure="mage_fall_back",
        ),
        QueuedAction(
            id="mage_fall_back",
            name="Fall back",
            type=ActionType.MOVEMENT,
            order=2,
            enabled=False,              # Only runs as a branch
            payload={"targetType": "waypoint", "waypoints": [{"x": 0, "y": 4}]},
        ),
    ]

    return {FIGHTER_ID: fighter_queue, MAGE_ID: mage_queue}
