from autoturn.core.combat import Combat
from autoturn.core.conditions import ConditionEvaluator
from autoturn.core.dispatcher import ActionDispatcher
from autoturn.core.engine import ExecutionEngine
from autoturn.core.exceptions import AutoTurnError, ConditionEvalError, QueueImportError, ResourceLoadError
from autoturn.core.ledger import Pacer, RunContext, RunSummary
from autoturn.core.notifications import LoggingNotifier, Notifier
from autoturn.core.rules_engine import RulesEngine
from autoturn.core.turn_hooks import TurnTrigger
from autoturn.core.validation import QueueReport, validate_queue

__all__ = [
    'ActionDispatcher',
    'AutoTurnError',
    'Combat',
    'ConditionEvalError',
    'ConditionEvaluator',
    'ExecutionEngine',
    'LoggingNotifier',
    'Notifier',
    'Pacer',
    'QueueImportError',
    'QueueReport',
    'ResourceLoadError',
    'RulesEngine',
    'RunContext',
    'RunSummary',
    'TurnTrigger',
    'validate_queue',
]
