import math
from datetime import datetime
from enum import Enum
from typing import List, Dict, Any, Optional


class BufferType(Enum):
    PROJECT = "PROJECT"
    FEEDING = "FEEDING"


class BufferStatus(Enum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class BufferZone(Enum):
    """
    Consumption zone of a buffer, as shown on a fever chart.
    """

    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


class BufferError(Exception):
    """Exception raised for errors in the Buffer class."""

    pass


class BufferNotFoundError(BufferError):
    """Raised when a buffer id is unknown to the repository."""

    pass


def round_half_up(value: float) -> int:
    """Round to the nearest whole number, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


class Buffer:
    """
    Represents a persisted buffer in a Critical Chain Project Management (CCPM) system.

    Buffers protect against uncertainty by providing time reserves. They can be:
    - Project Buffer: Protects the project completion, appended after the critical chain
    - Feeding Buffer: Protects the critical chain from delays in one feeding chain

    Buffers are append-only history: regeneration archives the active ones and
    inserts fresh ones, nothing is ever deleted. ``consumed_minutes`` is updated
    by whoever tracks actual time against plan, never by the analysis.
    """

    def __init__(
        self,
        id: str,
        project_id: str,
        buffer_type: Any,
        size_minutes: int,
        name: Optional[str] = None,
        merge_task_id: Optional[str] = None,
        chain_task_ids: Optional[List[str]] = None,
        consumed_minutes: int = 0,
        status: Any = BufferStatus.ACTIVE,
        created_by: str = "system",
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        """
        Initialize a new Buffer.

        Args:
            id: Unique identifier for the buffer
            project_id: Owning project
            buffer_type: BufferType or "PROJECT" / "FEEDING"
            size_minutes: Size of the buffer in minutes
            name: Display name, derived from the type when omitted
            merge_task_id: Critical chain task protected (feeding buffers only)
            chain_task_ids: Ordered task ids of the protected chain
            consumed_minutes: Minutes consumed so far
            status: BufferStatus or "ACTIVE" / "ARCHIVED"

        Raises:
            BufferError: If any input validation fails
        """
        if id is None or str(id).strip() == "":
            raise BufferError("Buffer ID cannot be None or empty")
        self.id = id

        if project_id is None or str(project_id).strip() == "":
            raise BufferError("Buffer must belong to a project")
        self.project_id = project_id

        try:
            self.buffer_type = BufferType(
                buffer_type.value if isinstance(buffer_type, BufferType) else buffer_type
            )
        except ValueError:
            raise BufferError("Buffer type must be either 'PROJECT' or 'FEEDING'")

        if not isinstance(size_minutes, (int, float)) or isinstance(size_minutes, bool):
            raise BufferError("Buffer size must be a number")
        if size_minutes < 0:
            raise BufferError("Buffer size cannot be negative")
        self.size_minutes = int(size_minutes)

        if self.buffer_type == BufferType.FEEDING and (
            merge_task_id is None or str(merge_task_id).strip() == ""
        ):
            raise BufferError("Feeding buffers must specify the merge task ID")
        self.merge_task_id = merge_task_id

        self.chain_task_ids = list(chain_task_ids) if chain_task_ids else []

        if consumed_minutes < 0:
            raise BufferError("Consumed minutes cannot be negative")
        self.consumed_minutes = consumed_minutes

        try:
            self.status = BufferStatus(
                status.value if isinstance(status, BufferStatus) else status
            )
        except ValueError:
            raise BufferError("Buffer status must be either 'ACTIVE' or 'ARCHIVED'")

        if name is None:
            if self.buffer_type == BufferType.PROJECT:
                name = "Project Buffer"
            else:
                name = f"Feeding Buffer -> {merge_task_id}"
        self.name = name

        self.created_by = created_by
        self.created_at = created_at or datetime.now()
        self.updated_at = updated_at or self.created_at

    @property
    def is_active(self) -> bool:
        return self.status == BufferStatus.ACTIVE

    def archive(self, timestamp: Optional[datetime] = None) -> "Buffer":
        """Mark the buffer archived. Size, consumption and chain are left untouched."""
        self.status = BufferStatus.ARCHIVED
        self.updated_at = timestamp or datetime.now()
        return self

    def get_consumption_ratio(self) -> float:
        """
        Fraction of the buffer consumed; 0 for a zero-size buffer.
        """
        if self.size_minutes == 0:
            return 0.0
        return self.consumed_minutes / self.size_minutes

    def get_consumption_percentage(self) -> int:
        return round_half_up(self.get_consumption_ratio() * 100)

    def get_zone(
        self, green_threshold: float = 0.33, yellow_threshold: float = 0.66
    ) -> BufferZone:
        """
        Determine the consumption zone.

        Args:
            green_threshold: Highest ratio still considered green
            yellow_threshold: Highest ratio still considered yellow

        Returns:
            BufferZone: GREEN, YELLOW or RED
        """
        ratio = self.get_consumption_ratio()
        if ratio <= green_threshold:
            return BufferZone.GREEN
        if ratio <= yellow_threshold:
            return BufferZone.YELLOW
        return BufferZone.RED

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert buffer to a dictionary representation.

        Returns:
            dict: Dictionary representation of the buffer
        """
        return {
            "id": self.id,
            "projectId": self.project_id,
            "bufferType": self.buffer_type.value,
            "name": self.name,
            "sizeMinutes": self.size_minutes,
            "consumedMinutes": self.consumed_minutes,
            "feedingSourceTaskId": self.merge_task_id,
            "chainTaskIds": list(self.chain_task_ids),
            "status": self.status.value,
            "createdBy": self.created_by,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Buffer":
        """
        Create a buffer from a dictionary representation.

        Args:
            data: Dictionary representation of the buffer

        Returns:
            Buffer: New buffer instance
        """
        return cls(
            id=data["id"],
            project_id=data["projectId"],
            buffer_type=data["bufferType"],
            size_minutes=data["sizeMinutes"],
            name=data.get("name"),
            merge_task_id=data.get("feedingSourceTaskId"),
            chain_task_ids=data.get("chainTaskIds"),
            consumed_minutes=data.get("consumedMinutes", 0),
            status=data.get("status", "ACTIVE"),
            created_by=data.get("createdBy", "system"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )

    def __repr__(self) -> str:
        return (
            f"Buffer(id={self.id}, name={self.name}, "
            f"type={self.buffer_type.value}, size={self.size_minutes}, "
            f"consumed={self.consumed_minutes} ({self.get_consumption_percentage()}%), "
            f"status={self.status.value})"
        )
