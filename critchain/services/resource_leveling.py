import logging

from critchain.domain.dependency import Dependency, DependencyType
from critchain.utils.graph import calculate_schedule

logger = logging.getLogger(__name__)


class ResourceLevelingDidNotConverge(UserWarning):
    """Leveling stopped at its iteration cap; the last computed schedule is kept."""

    pass


class LevelingResult:
    """Outcome of resource leveling over one project network."""

    def __init__(self, network, schedule, resource_edges, iterations, converged, warnings):
        self.network = network
        self.schedule = schedule
        self.resource_edges = resource_edges
        self.iterations = iterations
        self.converged = converged
        self.warnings = warnings


def find_resource_conflicts(network, schedule):
    """
    Find pairs of tasks that share a resource and overlap in the schedule.

    Args:
        network: ProjectNetwork
        schedule: Mapping task id -> ScheduleEntry

    Returns:
        list: ``(first, second)`` task handles, ``first`` being the one that
        starts earlier (ties by task id)
    """
    by_resource = {}
    for node, task in enumerate(network.tasks):
        for resource_id in task.resource_ids:
            by_resource.setdefault(resource_id, []).append(node)

    def start_key(node):
        return (schedule[network.task_ids[node]].early_start, str(network.task_ids[node]))

    conflicts = []
    seen = set()
    for resource_id in sorted(by_resource, key=str):
        members = sorted(by_resource[resource_id], key=start_key)
        for position, first in enumerate(members):
            first_entry = schedule[network.task_ids[first]]
            for second in members[position + 1 :]:
                if (first, second) in seen:
                    continue
                if first_entry.overlaps(schedule[network.task_ids[second]]):
                    seen.add((first, second))
                    conflicts.append((first, second))

    return conflicts


def _unordered(network, conflicts):
    return [pair for pair in conflicts if not network.is_ordered(*pair)]


def level_resources(network, schedule=None, max_iterations=100):
    """
    Serialize tasks that would run concurrently on a shared resource.

    Each round adds a zero-lag FS edge for every overlapping pair that no path
    orders yet, then re-runs the schedule calculator. Rounds repeat until no edge
    is added or ``max_iterations`` rounds have run.

    Args:
        network: ProjectNetwork with the logical dependencies; left unmodified
        schedule: Schedule of ``network``, computed when omitted
        max_iterations: Cap on re-scheduling rounds

    Returns:
        LevelingResult: Leveled network and schedule plus the synthesized edges
    """
    network = network.copy()
    if schedule is None:
        schedule = calculate_schedule(network)

    resource_edges = []
    iterations = 0
    converged = False

    while iterations < max_iterations:
        added = 0
        for first, second in _unordered(network, find_resource_conflicts(network, schedule)):
            # Earlier pairs in this round may have ordered this one already
            if network.is_ordered(first, second):
                continue
            network.add_edge(first, second, DependencyType.FS, 0, synthetic=True)
            predecessor_id = network.task_ids[first]
            successor_id = network.task_ids[second]
            resource_edges.append(
                Dependency(
                    predecessor_id,
                    successor_id,
                    DependencyType.FS,
                    0,
                    id=f"resource:{predecessor_id}->{successor_id}",
                )
            )
            added += 1

        if not added:
            converged = True
            break

        iterations += 1
        schedule = calculate_schedule(network)
        logger.debug(
            "Leveling round %d serialized %d task pair(s)", iterations, added
        )

    warnings = []
    if not converged:
        pending = _unordered(network, find_resource_conflicts(network, schedule))
        if pending:
            warning = ResourceLevelingDidNotConverge(
                f"Resource leveling did not converge after {max_iterations} iteration(s); "
                f"{len(pending)} resource conflict(s) remain"
            )
            logger.warning(str(warning))
            warnings.append(warning)
        else:
            converged = True

    return LevelingResult(network, schedule, resource_edges, iterations, converged, warnings)
