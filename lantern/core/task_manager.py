"""
Single place for scheduling: named in-memory timers (one-shot or repeating).
"""
import logging
import threading
from datetime import datetime
from threading import Timer
from typing import Callable, Dict


class TaskManager:
    def __init__(self):
        self.tasks: Dict[str, Timer] = {}
        self.logger = logging.getLogger("TaskManager")
        self._lock = threading.Lock()
        self._stopped = False

    def schedule_task(self, name: str, callback: Callable, delay: float, one_time: bool = True) -> None:
        """Schedule a task to run after delay seconds. An existing task with the same name is cancelled."""
        self.logger.info(f"Scheduling task {name} with delay {delay} seconds")
        with self._lock:
            if self._stopped:
                self.logger.debug(f"Task manager stopped; not scheduling {name}")
                return
            if name in self.tasks:
                self.logger.info(f"Cancelling existing task {name}")
                self.tasks[name].cancel()

            scheduled_time = datetime.now().timestamp() + delay
            timer = Timer(delay, self._run_task, args=(name, callback, delay, one_time))
            timer.daemon = True
            timer.scheduled_time = scheduled_time

            self.tasks[name] = timer
            timer.start()
        self.logger.debug(f"Timer started for {name}, scheduled for {datetime.fromtimestamp(scheduled_time)}")

    def cancel_task(self, name: str) -> bool:
        """Cancel a pending task. Returns False when nothing was scheduled under name."""
        with self._lock:
            timer = self.tasks.pop(name, None)
        if timer is None:
            return False
        timer.cancel()
        self.logger.info(f"Cancelled task {name}")
        return True

    def _run_task(self, name: str, callback: Callable, delay: float, one_time: bool) -> None:
        """Run the task and reschedule if needed.

        A timer that was replaced or cancelled after it started firing no longer
        owns its name and returns without running the callback.
        """
        with self._lock:
            if self.tasks.get(name) is not threading.current_thread():
                self.logger.debug(f"Skipping stale timer for {name}")
                return
            if one_time:
                del self.tasks[name]
        try:
            callback()
        except Exception as e:
            self.logger.exception(f"Error running task {name}: {e}")
        if not one_time and not self._stopped:
            self.schedule_task(name, callback, delay, one_time)

    def stop(self) -> None:
        """Stop all scheduled tasks."""
        self._stopped = True
        with self._lock:
            timers = list(self.tasks.values())
            self.tasks.clear()
        for task in timers:
            task.cancel()
