from typing import TypedDict
from dataclasses import dataclass
from enum import Enum
# Enum Classes
class ActionType(str, Enum):        # Kinds of steps a queued turn script can hold.
    MOVEMENT = "movement"
    ATTACK = "attack"
    SPELL = "spell"                     # --Routed through the attack path
    ITEM = "item"
    BONUS_ACTION = "bonusAction"        # --Routed through the attack path
    REACTION = "reaction"               # --Routed through the attack path
    END_TURN = "endTurn"
class ConditionType(str, Enum):     # Runtime gates checked before an action runs.
    ALWAYS = "always"
    TARGET_IN_RANGE = "targetInRange"
    RESOURCE_AVAILABLE = "resourceAvailable"
    HP_THRESHOLD = "hpThreshold"
    ATTACK_HIT = "attackHit"
    ATTACK_MISS = "attackMiss"
    SAVE_SUCCESS = "saveSuccess"
    SAVE_FAILURE = "saveFailure"
    HAS_ADVANTAGE = "hasAdvantage"
    HAS_DISADVANTAGE = "hasDisadvantage"
class TargetPriority(str, Enum):    # Target selection strategies, tried in the order given.
    NEAREST = "nearest"
    FURTHEST = "furthest"
    LOWEST_HP = "lowestHP"
    HIGHEST_HP = "highestHP"
    LOWEST_AC = "lowestAC"
    HIGHEST_AC = "highestAC"
class MovementTarget(str, Enum):    # How a movement action picks its destination.
    WAYPOINT = "waypoint"
    NEAREST_ENEMY = "nearestEnemy"
    TOKEN = "token"
class OutcomeKind(str, Enum):
    ATTACK = "attack"
    MOVEMENT = "movement"
    ITEM = "item"
    INFO = "info"
    ERROR = "error"
class ErrorKind(str, Enum):         # Failure taxonomy carried on failed Outcomes.
    NO_VALID_TARGET = "NoValidTarget"
    NO_VALID_DESTINATION = "NoValidDestination"
    OUT_OF_RANGE = "OutOfRange"
    ITEM_NOT_FOUND = "ItemNotFound"
    ITEM_UNUSABLE = "ItemUnusable"
    UNKNOWN_ACTION_TYPE = "UnknownActionType"
    CONDITION_EVAL_ERROR = "ConditionEvalError"
    RESOURCE_LOAD_ERROR = "ResourceLoadError"
    CONCURRENT_RUN_REJECTED = "ConcurrentRunRejected"
    INVALID_PAYLOAD = "InvalidPayload"
    EXECUTOR_UNAVAILABLE = "ExecutorUnavailable"
    EXECUTION_ERROR = "ExecutionError"
class Disposition(int, Enum):       # Token allegiance; hostile to a token means the negated value.
    HOSTILE = -1
    NEUTRAL = 0
    FRIENDLY = 1
class Attribute(str, Enum):         # Attributes (D&D standard six)
    STR = 'STR'
    DEX = 'DEX'
    CON = 'CON'
    INT = 'INT'
    WIS = 'WIS'
    CHA = 'CHA'
class Attributes(TypedDict):        # Set of attribute values for an entity.
    STR: int
    DEX: int
    CON: int
    INT: int
    WIS: int
    CHA: int
class ItemType(str, Enum):
    WEAPON = "weapon"
    SPELL = "spell"
    CONSUMABLE = "consumable"
    FEAT = "feat"

# Object Classes
@dataclass
class Position:                     # Grid square coordinates on the battle map.
    x: int
    y: int
