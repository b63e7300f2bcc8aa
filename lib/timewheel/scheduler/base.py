import abc


class Base(metaclass=abc.ABCMeta):

    _DEFAULT_TICK_TIME = 1  # time between ticks in seconds
    _DEFAULT_BATCH_TIMEOUT = 30  # most time a tick's batch may take in seconds

    @abc.abstractmethod
    def register(self, key: str, task, execute_at) -> int:
        """Schedule the given task to fire at execute_at.

        Registering a key that has been cancelled (for the same minute) un-cancels it.

        :param key: caller supplied identity, used to cancel the task later
        :param task: domain.Task
        :param execute_at: datetime or seconds since epoch
        :return: int number of tasks newly added
        :raises ValidationError: if the task is invalid
        :raises StoreError: if the store could not be written to

        """
        pass

    @abc.abstractmethod
    def cancel(self, key: str, execute_at) -> int:
        """Cancel the task with the given key scheduled for execute_at.

        :param key:
        :param execute_at: the same time given to register()
        :return: int number of tombstones in the task's shard
        :raises StoreError: if the store could not be written to

        """
        pass

    @abc.abstractmethod
    def tick(self):
        """Start processing the current second's tasks, without waiting for them.

        """
        pass

    @abc.abstractmethod
    def stop(self):
        """Order scheduler to stop. Calling this more than once does nothing more.

        """
        pass

    @property
    def tick_time(self) -> float:
        """Approximately how long we should take between ticks.

        :return: float

        """
        return self._DEFAULT_TICK_TIME

    @property
    def batch_timeout(self) -> float:
        """How long a single tick's work is waited on.

        :return: float

        """
        return self._DEFAULT_BATCH_TIMEOUT
