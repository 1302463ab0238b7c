"""Task result collection."""

from __future__ import annotations

from collections.abc import Iterable

from server_notification.payload.models import TaskResultDetails
from server_notification.results import TaskResult


def collect_tasks(task_results: Iterable[TaskResult]) -> list[TaskResultDetails]:
    """Describe each task with its plugin, flags and terminal state.

    Args:
        task_results: All configured tasks of a job, in execution order.

    Returns:
        One entry per task. Missing descriptions and plugin keys become
        empty strings.
    """
    tasks = []
    for task_result in task_results:
        identifier = task_result.task_identifier
        tasks.append(
            TaskResultDetails(
                description=identifier.user_description or "",
                plugin_key=identifier.plugin_key or "",
                is_enabled=bool(identifier.is_enabled),
                is_final=bool(identifier.is_finalising),
                state=task_result.task_state.name if task_result.task_state else "",
            )
        )
    return tasks
