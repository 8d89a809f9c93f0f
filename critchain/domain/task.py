from typing import List, Dict, Optional, Any, Union


class TaskError(Exception):
    """Exception raised for errors in the Task class."""

    pass


class Task:
    """
    Represents a task as seen by the Critical Chain engine.

    Tasks are read-only snapshots handed over by the persistence layer. Only the
    effort estimate and the assigned resources matter for scheduling; the parent
    task is carried along for callers but never used by the engine.
    """

    def __init__(
        self,
        id: str,
        effort_minutes: Optional[Union[int, float]] = None,
        resource_ids: Optional[Union[List[str], str]] = None,
        parent_id: Optional[str] = None,
        pessimistic_minutes: Optional[Union[int, float]] = None,
        name: Optional[str] = None,
    ):
        """
        Initialize a new Task.

        Args:
            id: Unique identifier for the task
            effort_minutes: Planned effort in minutes, None is scheduled as zero
            resource_ids: Assigned resource (user) ids, or a single id as string
            parent_id: Parent task id, ignored by scheduling
            pessimistic_minutes: Worst-case estimate, defaults to 150% of effort
            name: Display label, defaults to the id

        Raises:
            TaskError: If any input validation fails
        """
        if id is None or str(id).strip() == "":
            raise TaskError("Task ID cannot be None or empty")
        self.id = id

        if effort_minutes is not None:
            if not isinstance(effort_minutes, (int, float)) or isinstance(
                effort_minutes, bool
            ):
                raise TaskError("Effort must be a number of minutes")
            if effort_minutes < 0:
                raise TaskError("Effort cannot be negative")
        self.effort_minutes = effort_minutes

        if isinstance(resource_ids, str):
            self.resource_ids = [resource_ids]
        elif resource_ids is None:
            self.resource_ids = []
        elif isinstance(resource_ids, (list, tuple, set)):
            self.resource_ids = sorted(set(resource_ids))
        else:
            raise TaskError("Resource ids must be a list of strings")

        self.parent_id = parent_id

        if pessimistic_minutes is not None:
            if not isinstance(pessimistic_minutes, (int, float)):
                raise TaskError("Pessimistic estimate must be a number of minutes")
            if pessimistic_minutes < self.duration:
                raise TaskError(
                    "Pessimistic estimate cannot be shorter than the planned effort"
                )
        self._pessimistic_minutes = pessimistic_minutes

        self.name = name or str(id)

    @property
    def duration(self) -> int:
        """Scheduling duration in whole minutes; unset effort counts as zero."""
        if self.effort_minutes is None:
            return 0
        return int(round(self.effort_minutes))

    @property
    def pessimistic_duration(self) -> int:
        if self._pessimistic_minutes is None:
            return int(round(self.duration * 1.5))
        return int(round(self._pessimistic_minutes))

    def shares_resource_with(self, other: "Task") -> bool:
        return bool(set(self.resource_ids) & set(other.resource_ids))

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert task to the dictionary shape used by the request layer.

        Returns:
            dict: Dictionary representation of the task
        """
        return {
            "id": self.id,
            "name": self.name,
            "effortMinutes": self.effort_minutes,
            "pessimisticMinutes": self._pessimistic_minutes,
            "assignedResourceIds": list(self.resource_ids),
            "parentTaskId": self.parent_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """
        Create a task from a request-layer dictionary.

        Both camelCase and snake_case keys are accepted.
        """
        return cls(
            id=data["id"],
            effort_minutes=data.get("effortMinutes", data.get("effort_minutes")),
            resource_ids=data.get(
                "assignedResourceIds", data.get("resource_ids", [])
            ),
            parent_id=data.get("parentTaskId", data.get("parent_id")),
            pessimistic_minutes=data.get(
                "pessimisticMinutes", data.get("pessimistic_minutes")
            ),
            name=data.get("name"),
        )

    def __repr__(self) -> str:
        return (
            f"Task(id={self.id}, effort={self.effort_minutes}, "
            f"resources={self.resource_ids})"
        )
