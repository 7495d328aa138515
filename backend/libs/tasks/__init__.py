"""
Deferred task scheduling.
"""
from __future__ import annotations

from libs.tasks.queue import TaskQueue, get_task_queue, reset_task_queue, run_after

__all__ = ["TaskQueue", "get_task_queue", "reset_task_queue", "run_after"]
