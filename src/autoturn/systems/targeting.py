# src/autoturn/systems/targeting.py
import logging
from typing import Callable, Dict, List

from autoturn.models import QueuedAction, TargetPriority, Token
from autoturn.storage.graph.scene_graph import SceneGraph

logger = logging.getLogger(__name__)

Strategy = Callable[[SceneGraph, Token, List[Token]], Token | None]


def nearest(scene: SceneGraph, subject: Token, candidates: List[Token]) -> Token | None:
    return min(candidates, key=lambda t: scene.distance_between(subject, t), default=None)


def furthest(scene: SceneGraph, subject: Token, candidates: List[Token]) -> Token | None:
    return max(candidates, key=lambda t: scene.distance_between(subject, t), default=None)


def lowest_hp(scene: SceneGraph, subject: Token, candidates: List[Token]) -> Token | None:
    return min(candidates, key=lambda t: t.hp, default=None)


def highest_hp(scene: SceneGraph, subject: Token, candidates: List[Token]) -> Token | None:
    return max(candidates, key=lambda t: t.hp, default=None)


def lowest_ac(scene: SceneGraph, subject: Token, candidates: List[Token]) -> Token | None:
    return min(candidates, key=lambda t: t.ac, default=None)


def highest_ac(scene: SceneGraph, subject: Token, candidates: List[Token]) -> Token | None:
    return max(candidates, key=lambda t: t.ac, default=None)


STRATEGIES: Dict[str, Strategy] = {
    TargetPriority.NEAREST.value: nearest,
    TargetPriority.FURTHEST.value: furthest,
    TargetPriority.LOWEST_HP.value: lowest_hp,
    TargetPriority.HIGHEST_HP.value: highest_hp,
    TargetPriority.LOWEST_AC.value: lowest_ac,
    TargetPriority.HIGHEST_AC.value: highest_ac,
    # Older records name AC "defense"
    "lowestDefense": lowest_ac,
    "highestDefense": highest_ac,
}


def select_target(
    scene: SceneGraph,
    subject: Token,
    candidates: List[Token],
    priorities: List[TargetPriority | str],
) -> Token | None:
    """
    Try each priority in turn and take the first pick. Unknown priorities are
    skipped; if none picks anything the first candidate is used.
    """
    if not candidates:
        return None

    for priority in priorities:
        key = priority.value if isinstance(priority, TargetPriority) else priority
        strategy = STRATEGIES.get(key)
        if strategy is None:
            logger.debug("Unknown target priority %r", priority)
            continue
        target = strategy(scene, subject, candidates)
        if target is not None:
            return target

    return candidates[0]


class SceneRangeChecker:
    """
    Answers "is a target in range" for the targetInRange condition: any
    valid hostile within the reach of the action's item (5 ft when the
    action has no item).
    """

    def __init__(self, scene: SceneGraph, reveal_hidden: bool = False):
        self.scene = scene
        self.reveal_hidden = reveal_hidden

    def __call__(self, subject: Token, action: QueuedAction | None = None) -> bool:
        reach = self.scene.grid_distance
        if action is not None:
            item = self.scene.get_item(action.payload.get("itemUuid") or action.payload.get("item_uuid"))
            if item is not None:
                reach = item.reach

        return any(
            self.scene.distance_between(subject, hostile) <= reach
            for hostile in self.scene.hostiles_of(subject, self.reveal_hidden)
        )
