"""Task model, scheduling and execution for the two-phase build."""

from . import log
from .executor import Executor, SequentialExecutor
from .gate import always_run, presence_gate, should_run
from .project import Project, SourceSet
from .scheduler import Scheduler
from .task import ActionContext, BuildReport, TaskDescriptor, TaskResult, TaskState

__all__ = [
    "ActionContext",
    "BuildReport",
    "Executor",
    "Project",
    "Scheduler",
    "SequentialExecutor",
    "SourceSet",
    "TaskDescriptor",
    "TaskResult",
    "TaskState",
    "always_run",
    "log",
    "presence_gate",
    "should_run",
]
