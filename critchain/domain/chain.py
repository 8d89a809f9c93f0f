from typing import List, Dict, Any, Optional


class ChainError(Exception):
    """Exception raised for errors in the Chain class."""

    pass


class Chain:
    """
    Represents a chain of tasks in a Critical Chain Project Management (CCPM) system.

    A chain can be either a critical chain (the primary sequence of tasks that determines
    project duration) or a feeding chain (a sequence that feeds into the critical chain
    at its merge task).
    """

    def __init__(self, id: str, name: str, type: str = "feeding"):
        """
        Initialize a new Chain.

        Args:
            id: Unique identifier for the chain
            name: Descriptive name for the chain
            type: Chain type ("critical" or "feeding")

        Raises:
            ChainError: If any input validation fails
        """
        if id is None or str(id).strip() == "":
            raise ChainError("Chain ID cannot be None or empty")
        self.id = id

        if not name or not isinstance(name, str):
            raise ChainError("Chain name must be a non-empty string")
        self.name = name

        if type not in ["critical", "feeding"]:
            raise ChainError("Chain type must be either 'critical' or 'feeding'")
        self.type = type

        self.tasks = []  # Task IDs in path order
        self.connects_to_task_id = None  # Merge task for feeding chains
        self.total_duration = 0  # Sum of task durations along the path
        self.buffer_minutes = None  # Protective buffer sized for this chain

    def add_task(self, task_id: str, duration: int = 0) -> "Chain":
        """
        Append a task to the end of this chain.

        Args:
            task_id: ID of the task to add
            duration: Scheduling duration of the task in minutes

        Returns:
            self: For method chaining

        Raises:
            ChainError: If task_id is None or empty
        """
        if task_id is None or str(task_id).strip() == "":
            raise ChainError("Task ID cannot be None or empty")

        if task_id not in self.tasks:
            self.tasks.append(task_id)
            self.total_duration += duration
        return self

    def set_connection(self, task_id: str) -> "Chain":
        """
        Set the critical chain task this feeding chain merges into.

        Raises:
            ChainError: If task_id is None or this is not a feeding chain
        """
        if task_id is None or str(task_id).strip() == "":
            raise ChainError("Task ID cannot be None or empty")

        if self.type != "feeding":
            raise ChainError("Only feeding chains can connect to other tasks")

        self.connects_to_task_id = task_id
        return self

    @property
    def merge_task_id(self) -> Optional[str]:
        return self.connects_to_task_id

    def get_tasks(self) -> List[str]:
        return self.tasks.copy()

    def is_critical(self) -> bool:
        return self.type == "critical"

    def is_feeding(self) -> bool:
        return self.type == "feeding"

    def __len__(self) -> int:
        return len(self.tasks)

    def __contains__(self, task_id) -> bool:
        return task_id in self.tasks

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert chain to a dictionary representation.

        Returns:
            dict: Dictionary representation of the chain
        """
        result = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "tasks": self.tasks.copy(),
            "connects_to_task_id": self.connects_to_task_id,
            "total_duration": self.total_duration,
        }
        if self.buffer_minutes is not None:
            result["buffer_minutes"] = self.buffer_minutes
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Chain":
        """
        Create a chain from a dictionary representation.

        Args:
            data: Dictionary representation of the chain

        Returns:
            Chain: New chain instance
        """
        chain = cls(id=data["id"], name=data["name"], type=data.get("type", "feeding"))

        if "tasks" in data:
            chain.tasks = data["tasks"].copy()

        if data.get("connects_to_task_id") is not None:
            chain.set_connection(data["connects_to_task_id"])

        chain.total_duration = data.get("total_duration", 0)
        chain.buffer_minutes = data.get("buffer_minutes")

        return chain

    def __repr__(self) -> str:
        tasks_str = ", ".join(str(t) for t in self.tasks)
        return f"Chain(id={self.id}, name={self.name}, type={self.type}, tasks=[{tasks_str}])"
