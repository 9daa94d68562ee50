# src/autoturn/systems/items.py
import logging
from typing import List, Protocol

from autoturn.config import Settings
from autoturn.core.rules_engine import RulesEngine
from autoturn.models import ErrorKind, Item, ItemPayload, Outcome, OutcomeKind, Token
from autoturn.storage.graph.scene_graph import SceneGraph

logger = logging.getLogger(__name__)


class ItemWorkflow(Protocol):
    """
    Richer item resolution provided by the host (automated rolls, effects,
    reactions). When installed and enabled it replaces the built-in rules
    and is responsible for consuming the item's resources itself.
    """

    async def use_item(self, subject: Token, item: Item, targets: List[Token], consume: bool = True) -> Outcome: ...


# ============================================================
# USABILITY & CONSUMPTION
# ============================================================
def unusable_reason(subject: Token, item: Item) -> str | None:
    """Why `subject` can't use `item` right now, or None if it can."""
    if item.uses is not None and item.uses <= 0:
        return f"{item.name} has no uses remaining"
    if item.level > 0 and subject.spell_slots.get(item.level, 0) <= 0:
        return f"No level {item.level} spell slots remaining"
    if item.consume_target and subject.resources.get(item.consume_target, 0) <= 0:
        return f"No {item.consume_target} remaining"
    return None


def consume(subject: Token, item: Item) -> None:
    """Spend one use, one slot of the item's level and one point of its resource."""
    if item.uses is not None:
        item.uses -= 1
    if item.level > 0:
        subject.spell_slots[item.level] -= 1
    if item.consume_target:
        subject.resources[item.consume_target] -= 1


class ItemSystem:
    """Item use that doesn't target anyone: potions, features, self buffs."""

    def __init__(
        self,
        scene: SceneGraph,
        rules: RulesEngine,
        settings: Settings,
        workflow: ItemWorkflow | None = None,
    ):
        self.scene = scene
        self.rules = rules
        self.settings = settings
        self.workflow = workflow

    async def execute_item(self, subject: Token, payload: ItemPayload) -> Outcome:
        if not payload.item_uuid:
            return Outcome.failure(ErrorKind.ITEM_NOT_FOUND, "No item specified")

        item = self.scene.get_item(payload.item_uuid)
        if item is None:
            return Outcome.failure(ErrorKind.ITEM_NOT_FOUND, f"Item not found: {payload.item_uuid}")

        if reason := unusable_reason(subject, item):
            return Outcome.failure(ErrorKind.ITEM_UNUSABLE, reason)

        if self.workflow is not None and self.settings.use_workflow:
            logger.debug("Using %s through the item workflow", item.name)
            return await self.workflow.use_item(subject, item, [])

        consume(subject, item)
        message = f"{subject.name} used {item.name}"

        if item.healing:
            healed = self.rules.roll_dice(item.healing, context=self._modifiers(subject))
            before = subject.hp
            subject.hp = min(subject.max_hp, subject.hp + max(healed, 0))
            message += f", recovering {subject.hp - before} HP"

        logger.info(message)
        return Outcome(success=True, kind=OutcomeKind.ITEM, message=message)

    def _modifiers(self, subject: Token) -> dict:
        return {name: self.rules.calculate_modifier(value) for name, value in subject.attributes.items()}
