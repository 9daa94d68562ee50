"""
Storage layer for token automation.

Provides:
- SQLite database holding one versioned action queue per token
- NetworkX scene graph for tokens, positions and carried items
"""

from autoturn.storage.database import Database, to_json, from_json, SCHEMA_VERSION
from autoturn.storage.graph.scene_graph import SceneGraph, NodeType, EdgeType
from autoturn.storage.queue_store import ActionQueueManager

__all__ = [
    # Database
    "Database",
    "to_json",
    "from_json",
    "SCHEMA_VERSION",
    # Graph
    "SceneGraph",
    "NodeType",
    "EdgeType",
    # Queues
    "ActionQueueManager",
]
