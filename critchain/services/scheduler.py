import logging

from critchain.domain.analysis import CriticalChainAnalysis
from critchain.domain.buffer import round_half_up
from critchain.utils.graph import (
    ProjectNetwork,
    InsufficientDataError,
    calculate_schedule,
    find_critical_path,
    topological_order,
)
from critchain.services.buffer_strategies import RootSumSquareMethod
from critchain.services.critical_chain import (
    identify_critical_chain,
    resolve_resource_conflicts,
)
from critchain.services.feeding_chain import identify_feeding_chains

logger = logging.getLogger(__name__)


class CCPMScheduler:
    """
    Runs the Critical Chain analysis over a project snapshot.

    The scheduler keeps no graph between calls: every ``analyze`` rebuilds the
    network from the tasks and dependencies it is given, so one instance can be
    shared across projects and threads.
    """

    def __init__(
        self,
        project_buffer_strategy=None,
        feeding_buffer_strategy=None,
        max_leveling_iterations=100,
        level_resources=True,
    ):
        if max_leveling_iterations < 0:
            raise ValueError("max_leveling_iterations cannot be negative")

        # Set default buffer calculation strategies
        self.project_buffer_strategy = project_buffer_strategy or RootSumSquareMethod()
        self.feeding_buffer_strategy = feeding_buffer_strategy or RootSumSquareMethod()

        self.max_leveling_iterations = max_leveling_iterations
        self.level_resources = level_resources

    def build_network(self, tasks, dependencies):
        """Build the dense dependency network for one snapshot."""
        tasks = list(tasks)
        if not tasks:
            raise InsufficientDataError("No tasks found in this project")
        return ProjectNetwork(tasks, dependencies)

    def calculate_baseline_schedule(self, tasks, dependencies):
        """Calculate the logical schedule (early/late start/finish) without leveling"""
        return calculate_schedule(self.build_network(tasks, dependencies))

    def size_buffer(self, strategy, durations):
        return round_half_up(strategy.calculate_buffer_size(durations))

    def analyze(self, tasks, dependencies=()):
        """
        Run the full CCPM analysis.

        Args:
            tasks: Iterable of Task snapshots for one project
            dependencies: Iterable of Dependency edges between those tasks

        Returns:
            CriticalChainAnalysis

        Raises:
            InsufficientDataError: If there are no tasks
            CircularDependencyError: If the dependencies contain a cycle
            ScheduleInconsistencyError: If the lags produce negative slack
        """
        network = self.build_network(tasks, dependencies)

        # Logical schedule and critical path
        logical_schedule = calculate_schedule(network)
        logical_path = find_critical_path(
            network, logical_schedule, topological_order(network)
        )

        # Resource leveling, then the critical chain on the leveled schedule
        if self.level_resources:
            critical_chain, leveling = resolve_resource_conflicts(
                network, logical_schedule, self.max_leveling_iterations
            )
            leveled_network = leveling.network
            schedule = leveling.schedule
            resource_edges = leveling.resource_edges
            warnings = leveling.warnings
            iterations = leveling.iterations
        else:
            leveled_network = network
            schedule = logical_schedule
            critical_chain = identify_critical_chain(network, schedule)
            resource_edges, warnings, iterations = [], [], 0

        # Project buffer over the critical chain
        project_buffer = self.size_buffer(
            self.project_buffer_strategy,
            [schedule[task_id].duration for task_id in critical_chain.tasks],
        )
        critical_chain.buffer_minutes = project_buffer

        # Feeding chains and their buffers
        feeding_chains = identify_feeding_chains(leveled_network, critical_chain)
        for chain in feeding_chains:
            chain.buffer_minutes = self.size_buffer(
                self.feeding_buffer_strategy,
                [schedule[task_id].duration for task_id in chain.tasks],
            )

        analysis = CriticalChainAnalysis(
            critical_chain=critical_chain,
            logical_critical_path=logical_path,
            feeding_chains=feeding_chains,
            project_buffer_minutes=project_buffer,
            schedule=schedule,
            logical_schedule=logical_schedule,
            resource_edges=resource_edges,
            warnings=warnings,
            leveling_iterations=iterations,
            network=leveled_network,
        )
        logger.info(
            "Critical chain of %d task(s) finishing at %d min, project buffer %d min, "
            "%d feeding chain(s)",
            len(critical_chain),
            analysis.planned_finish_minutes,
            project_buffer,
            len(feeding_chains),
        )
        return analysis
