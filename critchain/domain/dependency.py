import uuid
from enum import Enum
from typing import Dict, Any, Optional


class DependencyType(Enum):
    """
    Temporal relation between a predecessor and a successor task.
    """

    FS = "FS"  # finish-to-start
    SS = "SS"  # start-to-start
    FF = "FF"  # finish-to-finish
    SF = "SF"  # start-to-finish


class DependencyError(Exception):
    """Base exception for dependency graph errors."""

    pass


class SelfDependencyError(DependencyError):
    """Raised when a task is made to depend on itself."""

    pass


class DuplicateDependencyError(DependencyError):
    """Raised when the same predecessor/successor pair is added twice."""

    pass


class CircularDependencyError(DependencyError):
    """Raised when a dependency would close a cycle, or a cycle is found while sorting."""

    pass


class DependencyNotFoundError(DependencyError):
    """Raised when removing or fetching an unknown dependency."""

    pass


class TaskNotFoundError(DependencyError):
    """Raised when a dependency endpoint is not a known task."""

    pass


class Dependency:
    """
    A directed precedence edge predecessor -> successor with a relation type and lag.
    """

    def __init__(
        self,
        predecessor_id: str,
        successor_id: str,
        dep_type: Any = DependencyType.FS,
        lag_minutes: int = 0,
        id: Optional[str] = None,
    ):
        """
        Initialize a new Dependency.

        Args:
            predecessor_id: Task that constrains the successor
            successor_id: Task being constrained
            dep_type: DependencyType or its string value ("FS", "SS", "FF", "SF")
            lag_minutes: Signed lag applied to the constraint
            id: Identifier, generated when omitted

        Raises:
            SelfDependencyError: If both endpoints are the same task
            DependencyError: If the type or lag is invalid
        """
        if predecessor_id is None or successor_id is None:
            raise DependencyError("Dependency endpoints cannot be None")
        if predecessor_id == successor_id:
            raise SelfDependencyError("A task cannot depend on itself")
        self.predecessor_id = predecessor_id
        self.successor_id = successor_id

        if isinstance(dep_type, str):
            try:
                dep_type = DependencyType(dep_type.upper())
            except ValueError:
                raise DependencyError(
                    f"Dependency type must be one of FS, SS, FF, SF, got {dep_type!r}"
                )
        elif not isinstance(dep_type, DependencyType):
            raise DependencyError("Dependency type must be a DependencyType")
        self.dep_type = dep_type

        if lag_minutes is None:
            lag_minutes = 0
        if not isinstance(lag_minutes, int) or isinstance(lag_minutes, bool):
            raise DependencyError("Lag must be a whole number of minutes")
        self.lag_minutes = lag_minutes

        self.id = id or uuid.uuid4().hex

    @property
    def pair(self):
        return (self.predecessor_id, self.successor_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "predecessorTaskId": self.predecessor_id,
            "successorTaskId": self.successor_id,
            "depType": self.dep_type.value,
            "lagMinutes": self.lag_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dependency":
        """
        Create a dependency from a request-layer dictionary.

        Both camelCase and snake_case keys are accepted.
        """
        return cls(
            predecessor_id=data.get("predecessorTaskId", data.get("predecessor_id")),
            successor_id=data.get("successorTaskId", data.get("successor_id")),
            dep_type=data.get("depType", data.get("dep_type", "FS")),
            lag_minutes=data.get("lagMinutes", data.get("lag_minutes", 0)),
            id=data.get("id"),
        )

    def __repr__(self) -> str:
        lag = f"{self.lag_minutes:+d}" if self.lag_minutes else ""
        return (
            f"Dependency({self.predecessor_id} -{self.dep_type.value}{lag}-> "
            f"{self.successor_id})"
        )
