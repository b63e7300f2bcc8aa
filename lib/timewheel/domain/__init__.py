"""The timewheel domain objects are dumb data containers.

Task:
A callback (method, url, headers & request body) to fire at some second in the future,
identified by a caller supplied key. The key is how a task is later cancelled.

"""

from timewheel.domain.task import Task


__all__ = [
    "Task",
]
