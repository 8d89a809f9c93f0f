import logging
from collections import deque

import networkx as nx

from critchain.domain.dependency import (
    Dependency,
    DependencyType,
    SelfDependencyError,
    DuplicateDependencyError,
    CircularDependencyError,
    DependencyNotFoundError,
    TaskNotFoundError,
)

logger = logging.getLogger(__name__)


class DependencyGraph:
    """
    Holds the dependency edges of one project and keeps them acyclic.

    Cycles are rejected when an edge is inserted: before adding
    ``predecessor -> successor`` a breadth-first search from ``successor`` looks
    for ``predecessor``. Failed insertions leave the graph untouched.
    """

    def __init__(self, task_ids=None):
        """
        Args:
            task_ids: Optional known task ids. When given, edges between unknown
                tasks are rejected with TaskNotFoundError.
        """
        self._graph = nx.DiGraph()
        self._edges = {}  # Dependency id -> Dependency, in insertion order
        self._task_ids = None
        if task_ids is not None:
            self._task_ids = set(task_ids)
            self._graph.add_nodes_from(self._task_ids)

    @classmethod
    def from_dependencies(cls, dependencies, task_ids=None):
        """Rebuild a store from persisted edges, validating every insertion."""
        graph = cls(task_ids)
        for dep in dependencies:
            graph.add_edge(
                dep.predecessor_id,
                dep.successor_id,
                dep.dep_type,
                dep.lag_minutes,
                id=dep.id,
            )
        return graph

    def add_task(self, task_id):
        if self._task_ids is not None:
            self._task_ids.add(task_id)
        self._graph.add_node(task_id)
        return self

    def add_edge(
        self,
        predecessor_id,
        successor_id,
        dep_type=DependencyType.FS,
        lag_minutes=0,
        id=None,
    ):
        """
        Insert a dependency edge.

        Returns:
            Dependency: The stored edge

        Raises:
            SelfDependencyError: predecessor and successor are the same task
            TaskNotFoundError: an endpoint is not a known task
            DuplicateDependencyError: the pair (or the id) is already stored
            CircularDependencyError: successor already reaches predecessor
        """
        if predecessor_id == successor_id:
            raise SelfDependencyError("A task cannot depend on itself")

        dependency = Dependency(predecessor_id, successor_id, dep_type, lag_minutes, id=id)

        if self._task_ids is not None:
            for task_id, role in ((predecessor_id, "Predecessor"), (successor_id, "Successor")):
                if task_id not in self._task_ids:
                    raise TaskNotFoundError(f"{role} task '{task_id}' not found")

        if self._graph.has_edge(predecessor_id, successor_id):
            raise DuplicateDependencyError("This dependency already exists")
        if dependency.id in self._edges:
            raise DuplicateDependencyError(f"Dependency id '{dependency.id}' already exists")

        if self.reaches(successor_id, predecessor_id):
            raise CircularDependencyError(
                "Adding this dependency would create a circular dependency chain"
            )

        self._graph.add_edge(predecessor_id, successor_id, id=dependency.id)
        self._edges[dependency.id] = dependency
        logger.debug("Added dependency %r", dependency)
        return dependency

    def reaches(self, source, target):
        """Breadth-first search along predecessor -> successor edges."""
        if source not in self._graph:
            return False

        visited = {source}
        queue = deque([source])
        while queue:
            current = queue.popleft()
            if current == target:
                return True
            for successor in self._graph.successors(current):
                if successor not in visited:
                    visited.add(successor)
                    queue.append(successor)
        return False

    def remove_edge(self, dependency_id):
        """
        Remove a dependency by id. No cycle check is needed on removal.

        Raises:
            DependencyNotFoundError: If the id is unknown
        """
        dependency = self._edges.pop(dependency_id, None)
        if dependency is None:
            raise DependencyNotFoundError(f"Dependency '{dependency_id}' not found")
        self._graph.remove_edge(dependency.predecessor_id, dependency.successor_id)
        logger.debug("Removed dependency %r", dependency)
        return dependency

    def get_edge(self, dependency_id):
        try:
            return self._edges[dependency_id]
        except KeyError:
            raise DependencyNotFoundError(f"Dependency '{dependency_id}' not found")

    def edges_for_task(self, task_id):
        """
        Edges touching a task, for display.

        Returns:
            dict: ``predecessors`` (edges into the task) and ``successors``
            (edges out of it)
        """
        return {
            "predecessors": [
                dep for dep in self._edges.values() if dep.successor_id == task_id
            ],
            "successors": [
                dep for dep in self._edges.values() if dep.predecessor_id == task_id
            ],
        }

    def edges(self):
        """All edges of the project, in insertion order."""
        return list(self._edges.values())

    def __len__(self):
        return len(self._edges)

    def __contains__(self, dependency_id):
        return dependency_id in self._edges

    def __iter__(self):
        return iter(self.edges())
