"""
Pick-and-place task sequencing for the sorting arm.
"""

from armsort_sim.tasks.sorter import (
    SortingStateMachine,
    TaskEvent,
    TaskPhase,
    TaskState,
    TaskTarget,
)

__all__ = [
    "SortingStateMachine",
    "TaskEvent",
    "TaskPhase",
    "TaskState",
    "TaskTarget",
]
