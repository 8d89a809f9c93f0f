"""
Critical Chain Analysis Engine
==============================

Schedules a project's task graph, resolves resource contention, finds the
critical chain and its feeding chains, and sizes protective buffers.

Available modules:
- domain: Task, Dependency, Chain, Buffer and schedule types
- services: dependency store, scheduler, leveling, buffer sizing and lifecycle
- utils.graph: network arena with forward and backward passes
- visualization: Gantt chart of an analysis
"""

from critchain.domain.task import Task, TaskError
from critchain.domain.dependency import (
    Dependency,
    DependencyType,
    DependencyError,
    SelfDependencyError,
    DuplicateDependencyError,
    CircularDependencyError,
    DependencyNotFoundError,
    TaskNotFoundError,
)
from critchain.domain.buffer import (
    Buffer,
    BufferType,
    BufferStatus,
    BufferZone,
    BufferError,
    BufferNotFoundError,
)
from critchain.utils.graph import ScheduleInconsistencyError, InsufficientDataError
from critchain.services.dependency_graph import DependencyGraph
from critchain.services.scheduler import CCPMScheduler
from critchain.services.resource_leveling import ResourceLevelingDidNotConverge
from critchain.services.buffer_strategies import RootSumSquareMethod, CutAndPasteMethod
from critchain.services.buffer_manager import (
    BufferLifecycleManager,
    InMemoryBufferRepository,
)
from critchain.services.forecast import forecast_completion

__all__ = [
    "Task",
    "TaskError",
    "Dependency",
    "DependencyType",
    "DependencyError",
    "SelfDependencyError",
    "DuplicateDependencyError",
    "CircularDependencyError",
    "DependencyNotFoundError",
    "TaskNotFoundError",
    "Buffer",
    "BufferType",
    "BufferStatus",
    "BufferZone",
    "BufferError",
    "BufferNotFoundError",
    "ScheduleInconsistencyError",
    "InsufficientDataError",
    "DependencyGraph",
    "CCPMScheduler",
    "ResourceLevelingDidNotConverge",
    "RootSumSquareMethod",
    "CutAndPasteMethod",
    "BufferLifecycleManager",
    "InMemoryBufferRepository",
    "forecast_completion",
]
