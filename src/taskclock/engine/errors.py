"""Engine error types."""

from __future__ import annotations


class TaskClockError(Exception):
    """Base class for engine errors."""


class NoSpeechDetected(TaskClockError):
    """The transcript was empty or held nothing to parse."""

    def __init__(self, message: str = "No speech detected. Please try again."):
        super().__init__(message)


class TaskNotFound(TaskClockError):
    """No live task carries the given id."""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class InvalidTransition(TaskClockError):
    """The requested lifecycle change is not allowed from the task's state."""


class CaptureStateError(TaskClockError):
    """A capture session was used after it was finalized or cancelled."""


class CaptureCancelled(CaptureStateError):
    """The session was cancelled while its transcript was being processed."""

    def __init__(self, message: str = "Capture cancelled before the task was created."):
        super().__init__(message)
