from autoturn.storage.graph.scene_graph import SceneGraph, NodeType, EdgeType

__all__ = ["SceneGraph", "NodeType", "EdgeType"]
