import copy
import threading
import time

from timewheel import domain
from timewheel import enums
from timewheel import exceptions as exc
from timewheel import utils
from timewheel.scheduler.base import Base
from timewheel.scheduler.dispatcher import Dispatcher
from timewheel.store import keys


logger = utils.logger()


class TimeWheel(Base):
    """A time wheel whose slots live in a shared store.

    Every tick (once a second by default) we claim the tasks due in the current second and
    fire their callbacks. Claiming removes the tasks from the store in the same atomic step
    that reads them, so any number of wheels can run against the same store without firing
    a task twice.

    """

    def __init__(
        self,
        store,
        transport,
        tick_time: float=Base._DEFAULT_TICK_TIME,
        batch_timeout: float=Base._DEFAULT_BATCH_TIMEOUT,
        key_prefix: str=keys.DEFAULT_PREFIX,
        clock=time.time,
        autostart: bool=True,
    ):
        """

        :param store: store.Base
        :param transport: transport.Base used to fire callbacks
        :param tick_time: seconds between ticks.
        :param batch_timeout: seconds a tick's batch of callbacks is waited on. Callbacks
            still running after this are abandoned.
        :param key_prefix: prefix of all keys we write to the store.
        :param clock: function returning the current time in seconds since the epoch.
        :param autostart: start the timer thread now.

        """
        self._store = store
        self._dispatcher = Dispatcher(transport)
        self._tick_time = float(tick_time)
        self._batch_timeout = float(batch_timeout)
        self._prefix = key_prefix
        self._clock = clock

        self._state = enums.State.RUNNING
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()

        self._timer = None
        self._batch_count = 0

        if autostart:
            self.start()

    @property
    def tick_time(self) -> float:
        return self._tick_time

    @property
    def batch_timeout(self) -> float:
        return self._batch_timeout

    @property
    def state(self) -> enums.State:
        return self._state

    def register(self, key: str, task: domain.Task, execute_at) -> int:
        """Schedule the given task to fire at execute_at.

        :param key:
        :param task:
        :param execute_at: datetime or seconds since epoch
        :return: int
        :raises ValidationError:
        :raises StoreError:

        """
        task = copy.copy(task)
        task.key = key
        task.validate()

        try:
            score = utils.epoch_seconds(execute_at)
        except TypeError as e:
            raise exc.ValidationError(f"invalid execute_at: {execute_at}") from e

        shard = keys.shard_keys(score, prefix=self._prefix)
        added = self._store.register(shard.data, shard.marker, score, task.dumps(), key)

        logger.info(f"registered: key:{key} execute_at:{score} shard:{shard.data}")
        return added

    def cancel(self, key: str, execute_at) -> int:
        """Tombstone the task with the given key.

        The task stays in the store until its second is polled, it's simply not fired then.

        :param key:
        :param execute_at:
        :return: int
        :raises ValidationError: if execute_at isn't a time
        :raises StoreError:

        """
        try:
            score = utils.epoch_seconds(execute_at)
        except TypeError as e:
            raise exc.ValidationError(f"invalid execute_at: {execute_at}") from e

        shard = keys.shard_keys(score, prefix=self._prefix)
        count = self._store.cancel(shard.marker, key)

        logger.info(f"cancelled: key:{key} execute_at:{score} shard:{shard.marker}")
        return count

    def executable_tasks(self, now=None) -> list:
        """Claim the tasks due in the current second, dropping cancelled & corrupt ones.

        Nb. claimed tasks are gone from the store once this returns, whatever we do with them.

        :param now: seconds since epoch, defaults to our clock
        :return: []domain.Task
        :raises StoreError:

        """
        if now is None:
            now = self._clock()

        second = utils.epoch_seconds(now)
        shard = keys.shard_keys(second, prefix=self._prefix)

        # scores are whole seconds, so [second, second] is the window [second, second + 1)
        reply = self._store.poll_and_claim(shard.data, shard.marker, second, second)

        tasks = []
        for raw in reply.entries:
            try:
                task = domain.Task.loads(raw)
            except exc.DeserializationError as e:
                logger.warning(f"dropping entry: shard:{shard.data} error:{e}")
                continue

            if task.key in reply.tombstones:
                logger.info(f"skipping cancelled task: key:{task.key}")
                continue

            tasks.append(task)

        return tasks

    def run_batch(self, now=None) -> list:
        """Claim & fire the current second's tasks, waiting at most batch_timeout.

        :param now: seconds since epoch, defaults to our clock
        :return: []dispatcher.Result
        :raises StoreError:

        """
        deadline = time.monotonic() + self._batch_timeout

        tasks = self.executable_tasks(now=now)
        if not tasks:
            return []

        logger.info(f"dispatching batch: tasks:{len(tasks)}")
        return self._dispatcher.dispatch(tasks, deadline)

    def _run_batch(self):
        """Thread target for a tick. Nothing here is allowed to escape & kill the thread noisily.

        """
        try:
            self.run_batch()
        except exc.StoreError as e:
            # the next tick polls the next second; anything left unclaimed in this one stays
            # in the store & is never fired
            logger.error(f"batch abandoned, unable to poll store: {e}")
        except Exception as e:
            logger.exception(f"unexpected exception processing batch: {e}")

    def tick(self):
        """Start a batch in its own thread & return immediately.

        :return: threading.Thread or None if we're stopped

        """
        if self._state == enums.State.STOPPED:
            return None

        self._batch_count += 1

        thread = threading.Thread(target=self._run_batch, name=f"batch-{self._batch_count}")
        thread.daemon = True
        thread.start()
        return thread

    def run(self):
        """Tick every tick_time seconds until stopped. Blocks.

        """
        logger.info(f"time wheel running: tick_time:{self._tick_time}")

        next_tick = time.monotonic()
        while True:
            next_tick += self._tick_time
            if self._stop_event.wait(max(next_tick - time.monotonic(), 0)):
                break

            self.tick()

            # if we've fallen well behind don't fire a burst of ticks to catch up
            now = time.monotonic()
            if now - next_tick > self._tick_time:
                next_tick = now

        logger.info("time wheel stopped")

    def start(self):
        """Start the timer thread, if it isn't running already.

        """
        with self._state_lock:
            if self._state == enums.State.STOPPED:
                logger.warning("not starting time wheel: already stopped")
                return

            if self._timer:
                return

            self._timer = threading.Thread(target=self.run, name="timewheel-timer")
            self._timer.daemon = True
            self._timer.start()

    def stop(self):
        """Order the wheel to stop ticking. Batches already running finish in their own time.

        """
        with self._state_lock:
            if self._state == enums.State.STOPPED:
                return

            self._state = enums.State.STOPPED
            self._stop_event.set()

        logger.info("time wheel stopping")

    def join(self, timeout: float=None):
        """Wait for the timer thread to exit.

        :param timeout:

        """
        timer = self._timer
        if timer:
            timer.join(timeout)
