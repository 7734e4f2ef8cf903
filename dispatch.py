"""Dispatchers that run download completions on the thread owning the data."""

import queue
from typing import Callable

Task = Callable[[], None]


class TkDispatcher:
    """Runs tasks on the Tk main loop."""

    def __init__(self, root):
        self.root = root

    def __call__(self, task: Task) -> None:
        self.root.after(0, task)


class QueueDispatcher:
    """Collects tasks from any thread; the owner runs them with run_pending()."""

    def __init__(self):
        self._tasks: "queue.Queue[Task]" = queue.Queue()

    def __call__(self, task: Task) -> None:
        self._tasks.put(task)

    def run_pending(self, timeout: float = 0.0) -> int:
        """
        Run queued tasks on the calling thread.

        Waits up to timeout seconds for the first task, then runs everything
        already queued. Returns the number of tasks run.
        """
        count = 0
        try:
            task = self._tasks.get(timeout=timeout) if timeout > 0 else self._tasks.get_nowait()
        except queue.Empty:
            return 0
        while True:
            task()
            count += 1
            try:
                task = self._tasks.get_nowait()
            except queue.Empty:
                return count


class ImmediateDispatcher:
    """Runs tasks inline; only safe when completions arrive on the owning thread."""

    def __call__(self, task: Task) -> None:
        task()
