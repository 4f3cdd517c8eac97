"""Background workers for the studio booking system."""

from .class_completion_worker import ClassCompletionWorker

__all__ = ["ClassCompletionWorker"]
