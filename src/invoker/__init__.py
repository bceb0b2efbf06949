"""Staging, launching and classifying external tool runs."""

from .process import (
    InvocationOutcome,
    ProcessInvoker,
    ToolCommand,
    WorkingDirectoryLayout,
    classify_output,
    java_command,
)
from .service_builder import build_arguments

__all__ = [
    "InvocationOutcome",
    "ProcessInvoker",
    "ToolCommand",
    "WorkingDirectoryLayout",
    "build_arguments",
    "classify_output",
    "java_command",
]
