import logging
import threading
import uuid
from datetime import datetime
from typing import Dict, Any

from critchain.domain.buffer import (
    Buffer,
    BufferType,
    BufferStatus,
    BufferNotFoundError,
    BufferError,
)
from critchain.services.scheduler import CCPMScheduler

logger = logging.getLogger(__name__)


class InMemoryBufferRepository:
    """
    Buffer storage keyed by buffer id.

    Stands in for the persistence layer. A database-backed repository only
    needs the same five methods.
    """

    def __init__(self):
        self._buffers = {}
        self._lock = threading.Lock()

    def insert(self, buffer):
        with self._lock:
            if buffer.id in self._buffers:
                raise BufferError(f"Buffer '{buffer.id}' already exists")
            self._buffers[buffer.id] = buffer
        return buffer

    def get(self, buffer_id):
        try:
            return self._buffers[buffer_id]
        except KeyError:
            raise BufferNotFoundError(f"Buffer '{buffer_id}' not found")

    def list(self, project_id, buffer_type=None, status=None):
        """Buffers of a project in creation order, optionally filtered."""
        if buffer_type is not None:
            buffer_type = BufferType(getattr(buffer_type, "value", buffer_type))
        if status is not None:
            status = BufferStatus(getattr(status, "value", status))

        with self._lock:
            buffers = list(self._buffers.values())
        return [
            buffer
            for buffer in buffers
            if buffer.project_id == project_id
            and (buffer_type is None or buffer.buffer_type == buffer_type)
            and (status is None or buffer.status == status)
        ]

    def archive_active(self, project_id, timestamp):
        """Archive every active buffer of a project and return them."""
        with self._lock:
            archived = [
                buffer.archive(timestamp)
                for buffer in self._buffers.values()
                if buffer.project_id == project_id and buffer.is_active
            ]
        return archived

    def record_consumption(self, buffer_id, consumed_minutes, timestamp=None):
        """Set the consumed minutes of a buffer, as reported by time tracking."""
        if consumed_minutes < 0:
            raise BufferError("Consumed minutes cannot be negative")
        buffer = self.get(buffer_id)
        with self._lock:
            buffer.consumed_minutes = consumed_minutes
            buffer.updated_at = timestamp or datetime.now()
        return buffer


class RegenerationResult:
    def __init__(self, project_buffer_id, feeding_buffer_ids, analysis):
        self.project_buffer_id = project_buffer_id
        self.feeding_buffer_ids = feeding_buffer_ids
        self.analysis = analysis

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectBufferId": self.project_buffer_id,
            "feedingBufferIds": list(self.feeding_buffer_ids),
            "analysis": self.analysis.to_dict(),
        }


class BufferConsumption:
    """Read-time consumption figures of one active buffer."""

    def __init__(self, buffer, consumption_percent, zone):
        self.buffer = buffer
        self.consumption_percent = consumption_percent
        self.zone = zone

    def to_dict(self) -> Dict[str, Any]:
        result = self.buffer.to_dict()
        result["consumptionPercent"] = self.consumption_percent
        result["zone"] = self.zone.value
        return result

    def __repr__(self) -> str:
        return (
            f"BufferConsumption({self.buffer.name}: {self.consumption_percent}%, "
            f"{self.zone.value})"
        )


class BufferLifecycleManager:
    """
    Archives and regenerates a project's buffers and reports their consumption.

    The analysis runs outside any lock. Only the archive-then-insert sequence
    is serialized, per project, so two regenerations of the same project can
    never leave two active project buffers behind.
    """

    def __init__(
        self,
        snapshot_source,
        repository=None,
        scheduler=None,
        green_threshold=0.33,
        yellow_threshold=0.66,
        clock=datetime.now,
    ):
        """
        Args:
            snapshot_source: Callable ``project_id -> (tasks, dependencies)``
            repository: Buffer repository, in-memory when omitted
            scheduler: CCPMScheduler running the analysis
            green_threshold: Highest consumption ratio reported GREEN
            yellow_threshold: Highest consumption ratio reported YELLOW
            clock: Callable returning the current timestamp
        """
        if not 0 <= green_threshold <= yellow_threshold:
            raise ValueError("Zone thresholds must satisfy 0 <= green <= yellow")

        self.snapshot_source = snapshot_source
        self.repository = repository if repository is not None else InMemoryBufferRepository()
        self.scheduler = scheduler or CCPMScheduler()
        self.green_threshold = green_threshold
        self.yellow_threshold = yellow_threshold
        self.clock = clock

        self._locks = {}
        self._locks_guard = threading.Lock()

    def _project_lock(self, project_id):
        with self._locks_guard:
            lock = self._locks.get(project_id)
            if lock is None:
                lock = self._locks[project_id] = threading.Lock()
            return lock

    def analyze(self, project_id):
        """Run the analysis on the current snapshot without touching buffers."""
        tasks, dependencies = self.snapshot_source(project_id)
        return self.scheduler.analyze(tasks, dependencies)

    def regenerate(self, project_id, created_by="system"):
        """
        Replace the active buffers of a project with freshly computed ones.

        Nothing is archived if the analysis fails.

        Returns:
            RegenerationResult: New buffer ids and the analysis they came from
        """
        analysis = self.analyze(project_id)

        with self._project_lock(project_id):
            timestamp = self.clock()
            archived = self.repository.archive_active(project_id, timestamp)

            project_buffer = self.repository.insert(
                Buffer(
                    id=uuid.uuid4().hex,
                    project_id=project_id,
                    buffer_type=BufferType.PROJECT,
                    size_minutes=analysis.project_buffer_minutes,
                    chain_task_ids=analysis.critical_chain.tasks,
                    created_by=created_by,
                    created_at=timestamp,
                )
            )

            feeding_buffer_ids = []
            for chain in analysis.feeding_chains:
                feeding_buffer = self.repository.insert(
                    Buffer(
                        id=uuid.uuid4().hex,
                        project_id=project_id,
                        buffer_type=BufferType.FEEDING,
                        size_minutes=chain.buffer_minutes,
                        merge_task_id=chain.connects_to_task_id,
                        chain_task_ids=chain.tasks,
                        created_by=created_by,
                        created_at=timestamp,
                    )
                )
                feeding_buffer_ids.append(feeding_buffer.id)

        logger.info(
            "Regenerated buffers for project %s: archived %d, created %d",
            project_id,
            len(archived),
            1 + len(feeding_buffer_ids),
        )
        return RegenerationResult(project_buffer.id, feeding_buffer_ids, analysis)

    def status(self, project_id):
        """
        Consumption percentage and zone of every active buffer of a project.

        Returns:
            list: BufferConsumption per active buffer, in creation order
        """
        return [
            BufferConsumption(
                buffer,
                buffer.get_consumption_percentage(),
                buffer.get_zone(self.green_threshold, self.yellow_threshold),
            )
            for buffer in self.repository.list(project_id, status=BufferStatus.ACTIVE)
        ]
