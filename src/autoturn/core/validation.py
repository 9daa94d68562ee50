"""Static checks on a queue's branch references."""

import logging
from collections import Counter
from dataclasses import dataclass, field

import networkx as nx

from autoturn.models import QueuedAction

logger = logging.getLogger(__name__)


@dataclass
class QueueReport:
    duplicate_ids: list[str] = field(default_factory=list)
    # (action id, "onSuccess" | "onFailure", missing target id)
    dangling: list[tuple[str, str, str]] = field(default_factory=list)
    self_branches: list[str] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.duplicate_ids or self.dangling or self.self_branches or self.cycles)

    def problems(self) -> list[str]:
        lines = [f"duplicate id {action_id}" for action_id in self.duplicate_ids]
        lines += [f"{action_id}.{slot} -> missing {target}" for action_id, slot, target in self.dangling]
        lines += [f"{action_id} branches to itself" for action_id in self.self_branches]
        lines += [" -> ".join(cycle + cycle[:1]) for cycle in self.cycles]
        return lines


def branch_graph(actions: list[QueuedAction]) -> nx.DiGraph:
    """Directed graph of action ids with one edge per branch reference."""
    graph = nx.DiGraph()
    for action in actions:
        graph.add_node(action.id, name=action.name, order=action.order)
    for action in actions:
        for slot, target in (("onSuccess", action.on_success), ("onFailure", action.on_failure)):
            if target:
                graph.add_edge(action.id, target, slot=slot)
    return graph


def validate_queue(actions: list[QueuedAction]) -> QueueReport:
    """
    Report queue problems. None of these stop execution: a dangling branch is
    skipped at run time and branch targets never chain further branches, so a
    cycle can't loop. They usually mean the queue was edited by hand.
    """
    report = QueueReport()
    counts = Counter(action.id for action in actions)
    report.duplicate_ids = [action_id for action_id, n in counts.items() if n > 1]

    known = set(counts)
    for action in actions:
        for slot, target in (("onSuccess", action.on_success), ("onFailure", action.on_failure)):
            if not target:
                continue
            if target not in known:
                report.dangling.append((action.id, slot, target))
            elif target == action.id and action.id not in report.self_branches:
                report.self_branches.append(action.id)

    graph = branch_graph(actions)
    graph.remove_edges_from(list(nx.selfloop_edges(graph)))
    report.cycles = [list(cycle) for cycle in nx.simple_cycles(graph)]

    if not report.ok:
        logger.warning("Queue has %d branch problem(s): %s", len(report.problems()), "; ".join(report.problems()))
    return report
