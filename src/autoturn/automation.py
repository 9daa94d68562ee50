from dataclasses import dataclass

from autoturn.config import Settings, settings as default_settings
from autoturn.core import (
    ActionDispatcher,
    ConditionEvaluator,
    ExecutionEngine,
    LoggingNotifier,
    Notifier,
    RulesEngine,
    TurnTrigger,
)
from autoturn.storage import ActionQueueManager, Database, SceneGraph
from autoturn.systems import AttackSystem, ItemSystem, ItemWorkflow, MovementSystem, SceneRangeChecker


@dataclass
class Automation:
    """Everything a host needs to drive automated turns for one scene."""
    scene: SceneGraph
    queues: ActionQueueManager
    engine: ExecutionEngine
    trigger: TurnTrigger
    rules: RulesEngine


def initialize_automation(
    scene: SceneGraph,
    db: Database | None = None,
    settings: Settings | None = None,
    rules: RulesEngine | None = None,
    notifier: Notifier | None = None,
    workflow: ItemWorkflow | None = None,
) -> Automation:
    """Instantiate the executors, engine and turn trigger around a scene."""
    settings = settings or default_settings
    rules = rules or RulesEngine()
    notifier = notifier or LoggingNotifier()
    db = db or Database(settings.db_path)

    # Effect executors
    dispatcher = ActionDispatcher(
        movement=MovementSystem(scene, settings),
        attack=AttackSystem(scene, rules, settings, workflow=workflow),
        item=ItemSystem(scene, rules, settings, workflow=workflow),
    )
    evaluator = ConditionEvaluator(
        range_checker=SceneRangeChecker(scene, reveal_hidden=settings.reveal_hidden_targets)
    )

    engine = ExecutionEngine(
        dispatcher=dispatcher,
        evaluator=evaluator,
        notifier=notifier,
        pacing_delay_ms=settings.pacing_delay_ms,
    )
    queues = ActionQueueManager(db)
    trigger = TurnTrigger(engine, queues, notifier=notifier)

    return Automation(scene=scene, queues=queues, engine=engine, trigger=trigger, rules=rules)
