from typing import Dict, Any


class ScheduleEntry:
    """
    Earliest/latest start and finish of one task, in minutes from the project epoch.
    """

    def __init__(
        self,
        task_id: str,
        duration: int,
        early_start: int,
        early_finish: int,
        late_start: int,
        late_finish: int,
    ):
        self.task_id = task_id
        self.duration = duration
        self.early_start = early_start
        self.early_finish = early_finish
        self.late_start = late_start
        self.late_finish = late_finish

    @property
    def slack(self) -> int:
        return self.late_start - self.early_start

    @property
    def is_critical(self) -> bool:
        return self.slack == 0

    def overlaps(self, other: "ScheduleEntry") -> bool:
        """True when the half-open [early_start, early_finish) windows intersect."""
        return (
            self.early_start < other.early_finish
            and other.early_start < self.early_finish
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "taskId": self.task_id,
            "duration": self.duration,
            "earlyStart": self.early_start,
            "earlyFinish": self.early_finish,
            "lateStart": self.late_start,
            "lateFinish": self.late_finish,
            "slack": self.slack,
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, ScheduleEntry):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"ScheduleEntry({self.task_id}: ES={self.early_start}, EF={self.early_finish}, "
            f"LS={self.late_start}, LF={self.late_finish}, slack={self.slack})"
        )
