import logging

from ..domain.chain import Chain
from ..utils.graph import find_critical_path, topological_order
from .resource_leveling import level_resources

logger = logging.getLogger(__name__)


def identify_critical_chain(network, schedule):
    """
    Identify the critical chain of a schedule.

    Args:
        network: ProjectNetwork the schedule was computed on
        schedule: Mapping task id -> ScheduleEntry

    Returns:
        Chain: The longest zero-slack path as a critical chain
    """
    critical_path = find_critical_path(network, schedule, topological_order(network))

    critical_chain = Chain("critical", "Critical Chain", type="critical")
    for task_id in critical_path:
        critical_chain.add_task(task_id, schedule[task_id].duration)

    return critical_chain


def resolve_resource_conflicts(network, schedule, max_iterations=100):
    """
    Resolve resource conflicts and derive the critical chain on the leveled schedule.

    This method ensures that the critical chain properly accounts for resource
    dependencies, not just task dependencies.

    Args:
        network: ProjectNetwork with the logical dependencies
        schedule: Logical schedule of ``network``
        max_iterations: Cap on leveling rounds

    Returns:
        tuple: (critical chain Chain, LevelingResult)
    """
    leveling = level_resources(network, schedule, max_iterations)
    if leveling.resource_edges:
        logger.info(
            "Resource leveling added %d edge(s) in %d round(s)",
            len(leveling.resource_edges),
            leveling.iterations,
        )

    critical_chain = identify_critical_chain(leveling.network, leveling.schedule)
    return critical_chain, leveling
