"""A scheduler is responsible for
- registering & cancelling tasks in the store
- ticking once a second, claiming the tasks that are due
- firing the claimed tasks' callbacks, giving up on stragglers after a deadline

"""

from timewheel.scheduler.dispatcher import Dispatcher, Result
from timewheel.scheduler.wheel_impl import TimeWheel


__all__ = [
    "Dispatcher",
    "Result",
    "TimeWheel",
]
