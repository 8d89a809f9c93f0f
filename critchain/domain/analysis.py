from typing import List, Dict, Any


class CriticalChainAnalysis:
    """
    Result of one analysis run over a project snapshot.

    Attributes:
        critical_chain: Chain on the resource-leveled schedule
        logical_critical_path: Task ids of the longest zero-slack path before leveling
        feeding_chains: Feeding Chain objects, each with ``buffer_minutes`` set
        project_buffer_minutes: Buffer appended after the critical chain
        schedule: Leveled schedule, task id -> ScheduleEntry
        logical_schedule: Schedule before resource leveling
        resource_edges: Dependencies synthesized by resource leveling
        warnings: Non-fatal warnings such as ResourceLevelingDidNotConverge
        network: Leveled ProjectNetwork, reused by the forecast
    """

    def __init__(
        self,
        critical_chain,
        logical_critical_path,
        feeding_chains,
        project_buffer_minutes,
        schedule,
        logical_schedule,
        resource_edges=None,
        warnings=None,
        leveling_iterations=0,
        network=None,
    ):
        self.critical_chain = critical_chain
        self.logical_critical_path = list(logical_critical_path)
        self.feeding_chains = list(feeding_chains)
        self.project_buffer_minutes = project_buffer_minutes
        self.schedule = schedule
        self.logical_schedule = logical_schedule
        self.resource_edges = list(resource_edges or [])
        self.warnings = list(warnings or [])
        self.leveling_iterations = leveling_iterations
        self.network = network

    @property
    def planned_finish_minutes(self) -> int:
        """Finish of the last critical chain task, the planned completion before buffering."""
        return max(
            (self.schedule[task_id].early_finish for task_id in self.critical_chain.tasks),
            default=0,
        )

    @property
    def logical_finish_minutes(self) -> int:
        return max(
            (self.logical_schedule[task_id].early_finish for task_id in self.logical_critical_path),
            default=0,
        )

    @property
    def total_project_duration_minutes(self) -> int:
        return self.planned_finish_minutes + self.project_buffer_minutes

    @property
    def feeding_buffers(self) -> List[Dict[str, Any]]:
        return [
            {"mergeTaskId": chain.connects_to_task_id, "bufferMinutes": chain.buffer_minutes}
            for chain in self.feeding_chains
        ]

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the analysis to the shape rendered by the request layer.
        """
        return {
            "projectBufferMinutes": self.project_buffer_minutes,
            "criticalChain": [{"taskId": task_id} for task_id in self.critical_chain.tasks],
            "feedingBuffers": self.feeding_buffers,
            "feedingChains": [
                {
                    "mergeTaskId": chain.connects_to_task_id,
                    "tasks": [{"taskId": task_id} for task_id in chain.tasks],
                }
                for chain in self.feeding_chains
            ],
            "totalProjectDurationMinutes": self.total_project_duration_minutes,
            "warnings": [str(warning) for warning in self.warnings],
        }

    def __repr__(self) -> str:
        return (
            f"CriticalChainAnalysis(critical_chain={self.critical_chain.tasks}, "
            f"feeding_chains={len(self.feeding_chains)}, "
            f"project_buffer={self.project_buffer_minutes})"
        )
