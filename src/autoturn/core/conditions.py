"""
Condition evaluation.

Conditions gate an action right before it is dispatched. Every branch fails
open: a reference that can't be read, a malformed value or an error while
evaluating all count as "true" so a broken condition never blocks a turn.
"""

import logging
import re
from typing import Callable

from autoturn.core.exceptions import ConditionEvalError
from autoturn.core.ledger import RunContext
from autoturn.models import Condition, ConditionType, QueuedAction, Token

logger = logging.getLogger(__name__)

HP_THRESHOLD_PATTERN = re.compile(r"([<>]=?)\s*(\d+)")

# (subject, action) -> is a target in range
RangeChecker = Callable[[Token, QueuedAction | None], bool]


class ConditionEvaluator:

    def __init__(self, range_checker: RangeChecker | None = None):
        self.range_checker = range_checker

    def evaluate(self, condition: Condition | None, context: RunContext, action: QueuedAction | None = None) -> bool:
        """True if the action may run. Never raises."""
        if condition is None:
            return True
        try:
            return self._evaluate(condition, context, action)
        except Exception as e:
            error = ConditionEvalError(f"Condition {condition.type!r} failed: {e}")
            logger.warning("%s; treating as true", error)
            return True

    def _evaluate(self, condition: Condition, context: RunContext, action: QueuedAction | None) -> bool:
        subject = context.subject

        match condition.type:
            case ConditionType.ALWAYS:
                return True

            case ConditionType.TARGET_IN_RANGE:
                if self.range_checker is None:
                    return True
                return self.range_checker(subject, action)

            case ConditionType.RESOURCE_AVAILABLE:
                return self.check_resource(subject, condition.value)

            case ConditionType.HP_THRESHOLD:
                return self.check_hp_threshold(subject, condition.value)

            case ConditionType.ATTACK_HIT:
                attack = context.first_attack()
                return attack is None or attack.hit is True

            case ConditionType.ATTACK_MISS:
                attack = context.first_attack()
                return attack is None or attack.hit is False

            case ConditionType.SAVE_SUCCESS:
                save = context.first_save()
                return save is None or save.saved is True

            case ConditionType.SAVE_FAILURE:
                save = context.first_save()
                return save is None or save.saved is False

            case ConditionType.HAS_ADVANTAGE:
                return subject.advantage is None or subject.advantage

            case ConditionType.HAS_DISADVANTAGE:
                return subject.disadvantage is None or subject.disadvantage

            case _:
                logger.debug("Unknown condition type %r, treating as true", condition.type)
                return True

    @staticmethod
    def check_resource(subject: Token, ref: str | None) -> bool:
        """
        "spell-slot-3" -> any level 3 slot left; "resource-ki" -> ki pool
        above zero; a pool the token lacks is empty. Malformed refs count as
        available.
        """
        if not ref:
            return True

        if ref.startswith("spell-slot-"):
            level = ref.split("-")[2]
            if not level.isdigit():
                return True
            return subject.spell_slots.get(int(level), 0) > 0

        if ref.startswith("resource-"):
            name = ref.split("-", 1)[1]
            return subject.resources.get(name, 0) > 0

        return True

    @staticmethod
    def check_hp_threshold(subject: Token, value: str | None) -> bool:
        match = HP_THRESHOLD_PATTERN.search(value or "")
        if not match or subject.max_hp <= 0:
            return True

        operator, threshold = match.group(1), int(match.group(2))
        hp_percent = subject.hp_percent

        if operator == "<":
            return hp_percent < threshold
        if operator == "<=":
            return hp_percent <= threshold
        if operator == ">":
            return hp_percent > threshold
        return hp_percent >= threshold
