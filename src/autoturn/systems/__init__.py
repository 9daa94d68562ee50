from autoturn.systems.attack import AttackSystem
from autoturn.systems.items import ItemSystem, ItemWorkflow
from autoturn.systems.movement import MovementSystem
from autoturn.systems.targeting import SceneRangeChecker, select_target

__all__ = [
    'AttackSystem',
    'ItemSystem',
    'ItemWorkflow',
    'MovementSystem',
    'SceneRangeChecker',
    'select_target',
]
