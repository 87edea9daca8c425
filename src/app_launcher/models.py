"""Pydantic models for app-launcher.

Logging Models:
- LauncherEvent: Structured log entry for lifecycle events

Execution Models:
- FrozenModel: Base class for immutable models
- WorkerExecution: Argument vector and environment for the worker
"""

from __future__ import annotations

__all__ = [
    "FrozenModel",
    "LauncherEvent",
    "WorkerExecution",
]

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FrozenModel(BaseModel):
    """Base class for immutable Pydantic models."""

    model_config = ConfigDict(frozen=True)


class WorkerExecution(FrozenModel):
    """Everything needed to replace the launcher with the worker process.

    Attributes:
        args: Argument vector; args[0] is the program, looked up on PATH
            when it is not a path.
        env: Complete environment for the worker.
    """

    args: list[str] = Field(min_length=1)
    env: dict[str, str]


class LauncherEvent(BaseModel):
    """One launcher log entry.

    Used for DEBUG through ERROR events of the lifecycle commands. In daemon
    mode the entries end up in the launcher log as JSON lines.

    Note: 'time' is None when created, populated by ISO8601Formatter during logging.
    """

    # --- core ---
    time: Optional[str] = Field(
        None,
        description="ISO 8601 timestamp (UTC), added by formatter during serialization",
    )
    event: Optional[str] = Field(
        None,
        description="Machine-friendly event name, e.g. 'pid_written', 'signal_sent'",
    )
    message: str = Field(description="Human-readable log message")

    # --- process context ---
    command: Optional[str] = Field(
        None,
        description="Lifecycle command being executed, e.g. 'start'",
    )
    pid: Optional[int] = Field(
        None,
        description="Process id the event refers to",
    )
    signal: Optional[str] = Field(
        None,
        description="Signal name, e.g. 'SIGTERM'",
    )
    path: Optional[str] = Field(
        None,
        description="File or directory the event refers to",
    )

    # --- errors ---
    error_type: Optional[str] = Field(
        None,
        description="Exception class name, e.g. 'PermissionError'",
    )
    error_message: Optional[str] = Field(
        None,
        description="Exception message",
    )

    model_config = ConfigDict(extra="forbid")
