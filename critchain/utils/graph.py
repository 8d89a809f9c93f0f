import logging
from collections import deque

import networkx as nx
import numpy as np

from critchain.domain.dependency import DependencyType, CircularDependencyError
from critchain.domain.schedule import ScheduleEntry
from critchain.domain.task import TaskError

logger = logging.getLogger(__name__)


class ScheduleInconsistencyError(Exception):
    """Raised when the backward pass yields negative slack (contradictory lags or target)."""

    pass


class InsufficientDataError(Exception):
    """Raised when there is nothing to schedule."""

    pass


class ProjectNetwork:
    """
    Dense, index-based view of one project's tasks and dependency edges.

    Tasks are sorted by id and addressed by integer handles so that repeated
    re-scheduling during resource leveling works on flat arrays. Each edge is a
    tuple ``(predecessor, successor, dep_type, lag, synthetic)``; an ``nx.DiGraph``
    over the same handles answers reachability questions.
    """

    def __init__(self, tasks, dependencies=()):
        tasks = sorted(tasks, key=lambda t: str(t.id))
        task_ids = [task.id for task in tasks]
        if len(set(task_ids)) != len(task_ids):
            raise TaskError("Task ids must be unique within a project")

        self.tasks = tasks
        self.task_ids = task_ids
        self.index = {task_id: i for i, task_id in enumerate(task_ids)}
        self.durations = np.array([task.duration for task in tasks], dtype=np.int64)

        self.edges = []
        self.incoming = [[] for _ in task_ids]
        self.outgoing = [[] for _ in task_ids]
        self.graph = nx.DiGraph()
        self.graph.add_nodes_from(range(len(task_ids)))

        for dep in dependencies:
            if dep.predecessor_id not in self.index or dep.successor_id not in self.index:
                logger.debug("Skipping %r, an endpoint is outside the task snapshot", dep)
                continue
            self.add_edge(
                self.index[dep.predecessor_id],
                self.index[dep.successor_id],
                dep.dep_type,
                dep.lag_minutes,
            )

    def __len__(self):
        return len(self.task_ids)

    def add_edge(self, predecessor, successor, dep_type=DependencyType.FS, lag=0, synthetic=False):
        """Append an edge between two task handles and return its handle."""
        handle = len(self.edges)
        self.edges.append((predecessor, successor, dep_type, lag, synthetic))
        self.outgoing[predecessor].append(handle)
        self.incoming[successor].append(handle)
        self.graph.add_edge(predecessor, successor)
        return handle

    def predecessors(self, node):
        return [self.edges[handle][0] for handle in self.incoming[node]]

    def successors(self, node):
        return [self.edges[handle][1] for handle in self.outgoing[node]]

    def is_ordered(self, first, second):
        """True when a directed path already exists between the two tasks, either way."""
        return nx.has_path(self.graph, first, second) or nx.has_path(
            self.graph, second, first
        )

    def copy(self):
        """Clone the edge structure; tasks and durations are shared read-only."""
        clone = ProjectNetwork.__new__(ProjectNetwork)
        clone.tasks = self.tasks
        clone.task_ids = self.task_ids
        clone.index = self.index
        clone.durations = self.durations
        clone.edges = list(self.edges)
        clone.incoming = [list(handles) for handles in self.incoming]
        clone.outgoing = [list(handles) for handles in self.outgoing]
        clone.graph = self.graph.copy()
        return clone


def topological_order(network):
    """Kahn's algorithm over task handles."""
    in_degree = [len(handles) for handles in network.incoming]
    queue = deque(node for node, degree in enumerate(in_degree) if degree == 0)

    order = []
    while queue:
        current = queue.popleft()
        order.append(current)
        for handle in network.outgoing[current]:
            successor = network.edges[handle][1]
            in_degree[successor] -= 1
            if in_degree[successor] == 0:
                queue.append(successor)

    if len(order) != len(network):
        stuck = sorted(
            str(network.task_ids[node])
            for node, degree in enumerate(in_degree)
            if degree > 0
        )
        raise CircularDependencyError(
            "Task dependencies contain a cycle involving: " + ", ".join(stuck)
        )

    return order


def forward_pass(network, order):
    """Calculate early start and early finish times"""
    durations = network.durations
    early_start = np.zeros(len(network), dtype=np.int64)
    early_finish = durations.copy()

    for node in order:
        duration = durations[node]
        start = 0
        for handle in network.incoming[node]:
            predecessor, _, dep_type, lag, _ = network.edges[handle]
            if dep_type is DependencyType.FS:
                candidate = early_finish[predecessor] + lag
            elif dep_type is DependencyType.SS:
                candidate = early_start[predecessor] + lag
            elif dep_type is DependencyType.FF:
                candidate = early_finish[predecessor] + lag - duration
            else:
                candidate = early_start[predecessor] + lag - duration
            if candidate > start:
                start = candidate

        early_start[node] = start
        early_finish[node] = start + duration

    return early_start, early_finish


def backward_pass(network, order, early_finish, project_end=None):
    """
    Calculate late start and late finish times.

    The target finish defaults to the latest early finish of any task.
    """
    durations = network.durations
    if project_end is None:
        project_end = int(early_finish.max()) if len(network) else 0

    late_start = project_end - durations
    late_finish = np.full(len(network), project_end, dtype=np.int64)

    for node in reversed(order):
        duration = durations[node]
        finish = project_end
        start = project_end - duration
        for handle in network.outgoing[node]:
            _, successor, dep_type, lag, _ = network.edges[handle]
            if dep_type is DependencyType.FS:
                finish = min(finish, late_start[successor] - lag)
            elif dep_type is DependencyType.SS:
                start = min(start, late_start[successor] - lag)
            elif dep_type is DependencyType.FF:
                finish = min(finish, late_finish[successor] - lag)
            else:
                start = min(start, late_finish[successor] - lag)

        start = min(start, finish - duration)
        late_start[node] = start
        late_finish[node] = start + duration

    return late_start, late_finish


def calculate_schedule(network, project_end=None):
    """
    Run the forward and backward passes and return a ScheduleEntry per task id.

    Raises:
        CircularDependencyError: If the network is not acyclic
        ScheduleInconsistencyError: If any task ends up with negative slack
    """
    order = topological_order(network)
    early_start, early_finish = forward_pass(network, order)
    late_start, late_finish = backward_pass(network, order, early_finish, project_end)

    negative = np.flatnonzero(late_start < early_start)
    if negative.size:
        offenders = ", ".join(
            f"{network.task_ids[node]} ({int(late_start[node] - early_start[node])})"
            for node in negative
        )
        raise ScheduleInconsistencyError(
            f"Negative slack, the supplied lags or target finish are contradictory: {offenders}"
        )

    return {
        task_id: ScheduleEntry(
            task_id,
            int(network.durations[node]),
            int(early_start[node]),
            int(early_finish[node]),
            int(late_start[node]),
            int(late_finish[node]),
        )
        for node, task_id in enumerate(network.task_ids)
    }


def project_finish(schedule):
    """Latest early finish over all tasks, 0 for an empty schedule."""
    return max((entry.early_finish for entry in schedule.values()), default=0)


def is_longer_path(total, path, other_total, other_path):
    """Order paths by total duration, then by the smaller sequence of task ids."""
    if total != other_total:
        return total > other_total
    return [str(task_id) for task_id in path] < [str(task_id) for task_id in other_path]


def longest_path(network, nodes, order):
    """
    Longest path by duration over the subgraph induced by ``nodes``.

    Returns a mapping node -> (total duration, tuple of task ids) for the best
    path ending at each node.
    """
    best = {}
    for node in order:
        if node not in nodes:
            continue
        candidate = None
        for predecessor in network.predecessors(node):
            if predecessor not in best:
                continue
            if candidate is None or is_longer_path(*best[predecessor], *candidate):
                candidate = best[predecessor]

        duration = int(network.durations[node])
        task_id = network.task_ids[node]
        if candidate is None:
            best[node] = (duration, (task_id,))
        else:
            best[node] = (candidate[0] + duration, candidate[1] + (task_id,))
    return best


def find_critical_path(network, schedule, order=None):
    """Find the longest zero-slack path, ties broken by task id"""
    if order is None:
        order = topological_order(network)

    critical = {node for node in order if schedule[network.task_ids[node]].slack == 0}
    best = longest_path(network, critical, order)

    # Only maximal paths compete, so zero-duration milestones are not cut off
    winner = None
    for node, (total, path) in best.items():
        if any(successor in critical for successor in network.successors(node)):
            continue
        if winner is None or is_longer_path(total, path, *winner):
            winner = (total, path)

    return list(winner[1]) if winner else []
