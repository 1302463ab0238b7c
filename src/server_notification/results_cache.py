"""Cache of per-job test and task results.

Job results are captured when each job finishes and read back when the
chain-level notification is assembled, since by then the detailed per-test
data is no longer attached to the results summary.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from server_notification.results import PlanResultKey, TaskResult, TestResults


@dataclass
class ResultsContainer:
    """Detailed results of one job."""

    successful_tests: list[TestResults] = field(default_factory=list)
    skipped_tests: list[TestResults] = field(default_factory=list)
    failed_tests: list[TestResults] = field(default_factory=list)
    task_results: list[TaskResult] = field(default_factory=list)


class ResultsCache:
    """Thread-safe map from plan-result key to ResultsContainer.

    Keys may be given as PlanResultKey or as their string form.
    """

    def __init__(self) -> None:
        self._entries: dict[str, ResultsContainer] = {}
        self._lock = threading.Lock()

    def put(self, key: PlanResultKey | str, container: ResultsContainer) -> None:
        with self._lock:
            self._entries[str(key)] = container

    def get(self, key: PlanResultKey | str) -> ResultsContainer | None:
        with self._lock:
            return self._entries.get(str(key))

    def remove(self, key: PlanResultKey | str) -> ResultsContainer | None:
        with self._lock:
            return self._entries.pop(str(key), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return str(key) in self._entries
