"""
SceneGraph: NetworkX-based registry of everything on the battle map.

Tokens and items are nodes; ownership is an edge. Executors resolve item
references, positions and hostile candidates through it.
"""

from enum import Enum
from typing import Iterator

import networkx as nx

from autoturn.models import Item, Position, Token


class NodeType(str, Enum):
    """Types of nodes in the scene graph."""
    TOKEN = "token"
    ITEM = "item"


class EdgeType(str, Enum):
    """Types of relationships between nodes."""
    OWNS = "owns"                   # token -> item


class SceneGraph:
    """
    Directed graph of tokens and the items they carry.

    Distances are measured in feet on a square grid: every step, diagonal
    included, costs `grid_distance`.
    """

    def __init__(self, grid_distance: int = 5):
        """Initialize empty scene."""
        self._graph: nx.DiGraph = nx.DiGraph()
        self.grid_distance = grid_distance

    # =========================================================================
    # NODE OPERATIONS
    # =========================================================================

    def has_node(self, node_id: str) -> bool:
        """Check if node exists."""
        return node_id in self._graph

    def get_nodes_by_type(self, node_type: NodeType) -> list[str]:
        """Get all node IDs of a specific type."""
        return [
            node_id for node_id, data in self._graph.nodes(data=True)
            if data.get("node_type") == node_type.value
        ]

    def remove_node(self, node_id: str) -> bool:
        """Remove a node and all its edges."""
        if node_id in self._graph:
            self._graph.remove_node(node_id)
            return True
        return False

    # =========================================================================
    # TOKENS
    # =========================================================================

    def add_token(self, token: Token) -> None:
        self._graph.add_node(token.id, node_type=NodeType.TOKEN.value, obj=token)

    def get_token(self, token_id: str | None) -> Token | None:
        if token_id is None or token_id not in self._graph:
            return None
        data = self._graph.nodes[token_id]
        if data.get("node_type") != NodeType.TOKEN.value:
            return None
        return data["obj"]

    def tokens(self) -> Iterator[Token]:
        """All tokens in insertion order."""
        for node_id in self.get_nodes_by_type(NodeType.TOKEN):
            yield self._graph.nodes[node_id]["obj"]

    def move_token(self, token_id: str, destination: Position) -> bool:
        token = self.get_token(token_id)
        if token is None:
            return False
        token.position = Position(destination.x, destination.y)
        return True

    def hostiles_of(self, token: Token, reveal_hidden: bool = False) -> list[Token]:
        """
        Valid hostile candidates for `token`: other tokens of the opposite
        disposition that are alive and visible (hidden ones only when revealed).
        """
        hostile = token.hostile_disposition()
        candidates = []
        for other in self.tokens():
            if other.id == token.id:
                continue
            if other.disposition != hostile:
                continue
            if not other.alive:
                continue
            if other.hidden and not reveal_hidden:
                continue
            candidates.append(other)
        return candidates

    # =========================================================================
    # ITEMS
    # =========================================================================

    def add_item(self, item: Item, owner_id: str | None = None) -> None:
        self._graph.add_node(item.id, node_type=NodeType.ITEM.value, obj=item)
        if owner_id is not None:
            self._graph.add_edge(owner_id, item.id, edge_type=EdgeType.OWNS.value)

    def get_item(self, item_id: str | None) -> Item | None:
        """Resolve an item reference; None for unknown ids or non-item nodes."""
        if not item_id or item_id not in self._graph:
            return None
        data = self._graph.nodes[item_id]
        if data.get("node_type") != NodeType.ITEM.value:
            return None
        return data["obj"]

    def get_owner(self, item_id: str) -> Token | None:
        if item_id not in self._graph:
            return None
        for owner_id in self._graph.predecessors(item_id):
            edge = self._graph.edges[owner_id, item_id]
            if edge.get("edge_type") == EdgeType.OWNS.value:
                return self.get_token(owner_id)
        return None

    def items_of(self, token_id: str) -> list[Item]:
        if token_id not in self._graph:
            return []
        return [
            self._graph.nodes[item_id]["obj"]
            for item_id in self._graph.successors(token_id)
            if self._graph.edges[token_id, item_id].get("edge_type") == EdgeType.OWNS.value
        ]

    # =========================================================================
    # DISTANCE
    # =========================================================================

    def distance(self, start: Position, end: Position) -> int:
        """Grid distance in feet between two squares."""
        squares = max(abs(end.x - start.x), abs(end.y - start.y))
        return squares * self.grid_distance

    def distance_between(self, first: Token, second: Token) -> int:
        return self.distance(first.position, second.position)

    def path_distance(self, waypoints: list[Position]) -> int:
        """Total length of a waypoint route in feet."""
        return sum(
            self.distance(waypoints[i - 1], waypoints[i])
            for i in range(1, len(waypoints))
        )

    # =========================================================================
    # STATISTICS
    # =========================================================================

    def get_stats(self) -> dict:
        """Get scene statistics."""
        return {
            "tokens": len(self.get_nodes_by_type(NodeType.TOKEN)),
            "items": len(self.get_nodes_by_type(NodeType.ITEM)),
            "ownership_edges": self._graph.number_of_edges(),
        }

    def __repr__(self) -> str:
        stats = self.get_stats()
        return f"SceneGraph(tokens={stats['tokens']}, items={stats['items']})"
