# src/autoturn/systems/attack.py
import logging

from autoturn.config import Settings
from autoturn.core.rules_engine import RulesEngine
from autoturn.models import AttackPayload, ErrorKind, Item, Outcome, OutcomeKind, Token
from autoturn.storage.graph.scene_graph import SceneGraph
from autoturn.systems.items import ItemWorkflow, consume, unusable_reason
from autoturn.systems.targeting import select_target

logger = logging.getLogger(__name__)


class AttackSystem:
    """
    Resolves attack, spell, bonus action and reaction steps: pick the item,
    pick a target, then roll.

    A resolved attack is a success whether it hits or misses; `hit` says
    which. Only problems that prevent the attack (no item, no target, no
    resources) produce failed outcomes.
    """

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

    async def execute_attack(self, subject: Token, payload: AttackPayload) -> Outcome:
        if not payload.item_uuid:
            return Outcome.failure(ErrorKind.ITEM_NOT_FOUND, "No item specified")

        item = self.scene.get_item(payload.item_uuid)
        if item is None:
            return Outcome.failure(ErrorKind.ITEM_NOT_FOUND, f"Item not found: {payload.item_uuid}")

        # Check resources before picking a target so nothing is spent on a failed use
        if reason := unusable_reason(subject, item):
            return Outcome.failure(ErrorKind.ITEM_UNUSABLE, reason)

        target = self.find_target(subject, payload)
        if target is None:
            return Outcome.failure(ErrorKind.NO_VALID_TARGET, "No valid target found")

        if self.workflow is not None and self.settings.use_workflow:
            logger.debug("Resolving %s through the item workflow", item.name)
            outcome = await self.workflow.use_item(subject, item, [target], consume=payload.consume_resource)
            if outcome.success:
                outcome = outcome.model_copy(update={"kind": OutcomeKind.ATTACK})
            return outcome

        if payload.consume_resource:
            consume(subject, item)

        if item.has_attack:
            return self._resolve_attack_roll(subject, item, target, payload)
        if item.has_save:
            return self._resolve_save(subject, item, target)

        message = f"{subject.name} used {item.name} on {target.name}"
        logger.info(message)
        return Outcome(success=True, kind=OutcomeKind.ITEM, message=message)

    def find_target(self, subject: Token, payload: AttackPayload) -> Token | None:
        if payload.target_id:
            target = self.scene.get_token(payload.target_id)
            if target is None or not target.alive:
                return None
            return target

        candidates = self.scene.hostiles_of(subject, reveal_hidden=self.settings.reveal_hidden_targets)
        return select_target(self.scene, subject, candidates, payload.target_priority)

    # ============================================================
    # STANDARD RULES
    # ============================================================
    def _resolve_attack_roll(self, subject: Token, item: Item, target: Token, payload: AttackPayload) -> Outcome:
        if payload.advantage_override is None:
            advantage = bool(subject.advantage)
            disadvantage = bool(subject.disadvantage)
        else:
            advantage = payload.advantage_override
            disadvantage = not payload.advantage_override

        roll = self.rules.attack_roll(item.attack_bonus, advantage, disadvantage)
        hit = self.rules.attack_hits(roll, target.ac)

        damage = 0
        if hit and item.has_damage:
            damage = self._apply_damage(subject, item, target, critical=roll.critical)

        if roll.critical:
            message = f"{subject.name} critically hit {target.name} with {item.name} for {damage} damage"
        elif hit:
            message = f"{subject.name} hit {target.name} with {item.name} for {damage} damage"
        else:
            message = f"{subject.name} missed {target.name} with {item.name} ({roll.total} vs AC {target.ac})"
        logger.info(message)

        return Outcome(
            success=True,
            kind=OutcomeKind.ATTACK,
            hit=hit,
            damage=damage,
            critical=roll.critical,
            message=message,
        )

    def _resolve_save(self, subject: Token, item: Item, target: Token) -> Outcome:
        attribute = item.save_attribute.value
        saved = self.rules.saving_throw(target.attributes[attribute], item.save_dc)

        damage = 0
        if item.has_damage:
            damage = self._apply_damage(subject, item, target, halve=saved)

        outcome = "succeeded" if saved else "failed"
        message = f"{target.name} {outcome} a DC {item.save_dc} {attribute} save against {item.name} ({damage} damage)"
        logger.info(message)

        return Outcome(
            success=True,
            kind=OutcomeKind.ATTACK,
            hit=not saved,
            damage=damage,
            critical=False,
            saved=saved,
            message=message,
        )

    def _apply_damage(self, subject: Token, item: Item, target: Token, critical: bool = False, halve: bool = False) -> int:
        modifiers = {name: self.rules.calculate_modifier(value) for name, value in subject.attributes.items()}
        damage = max(self.rules.roll_dice(item.damage, context=modifiers, critical=critical), 0)
        if halve:
            damage //= 2
        target.hp = max(0, target.hp - damage)
        if not target.alive:
            logger.info("%s is down", target.name)
        return damage
