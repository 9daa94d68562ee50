# ============================================================
# ENGINE EXCEPTIONS
# ============================================================
from autoturn.models import ErrorKind


class AutoTurnError(Exception):
    """Base exception for automation errors"""
    kind: ErrorKind = ErrorKind.EXECUTION_ERROR


class ResourceLoadError(AutoTurnError):
    """The queue provider could not load or save a subject's queue"""
    kind = ErrorKind.RESOURCE_LOAD_ERROR


class QueueImportError(ResourceLoadError):
    """Imported queue JSON was malformed or failed validation"""
    pass


class ConditionEvalError(AutoTurnError):
    """A condition raised while evaluating. Logged, never propagated: conditions fail open"""
    kind = ErrorKind.CONDITION_EVAL_ERROR
