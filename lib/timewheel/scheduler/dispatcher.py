import queue
import threading
import time

from collections import namedtuple

from timewheel import exceptions as exc
from timewheel import utils


logger = utils.logger()


# error is None if the callback was delivered
Result = namedtuple("Result", ["task", "error"])


class Dispatcher:
    """Fires a batch of tasks at their callbacks, all at once.

    Every task gets its own thread, which reports back a Result. We wait on results until
    they're all in or the deadline passes; whatever is still running then is abandoned (the
    thread carries on, but nobody is listening). Nothing is retried.

    """

    def __init__(self, transport):
        """

        :param transport: transport.Base

        """
        self._transport = transport

    def _invoke(self, index: int, task, deadline: float, results: queue.Queue):
        """Fire a single task, reporting (index, Result) on the results queue.

        :param index: position of task in the batch
        :param task: domain.Task
        :param deadline: time.monotonic() value
        :param results:

        """
        error = None
        try:
            self._transport.invoke(deadline, task.method, task.callback_url, task.header, task.req)
        except exc.DispatchError as e:
            error = e
        except Exception as e:
            error = exc.DispatchError(f"unexpected error: {e}")
            error.__cause__ = e

        results.put((index, Result(task, error)))

    def dispatch(self, tasks: list, deadline: float) -> list:
        """Fire all tasks, returning once they've all finished or the deadline has passed.

        :param tasks: []domain.Task
        :param deadline: time.monotonic() value
        :return: []Result in the same order as tasks

        """
        if not tasks:
            return []

        results = queue.Queue()
        collected = {}

        for i, t in enumerate(tasks):
            thread = threading.Thread(
                target=self._invoke,
                args=(i, t, deadline, results),
                name=f"dispatch-{t.key}",
            )
            thread.daemon = True
            thread.start()

        while len(collected) < len(tasks):
            time_left = deadline - time.monotonic()
            if time_left <= 0:
                break

            try:
                index, result = results.get(timeout=time_left)
            except queue.Empty:
                break

            collected[index] = result

        final = []
        for i, t in enumerate(tasks):
            result = collected.get(i)
            if result is None:
                result = Result(t, exc.DispatchError("abandoned: batch deadline passed"))

            if result.error:
                logger.warning(f"dispatch failed: key:{t.key} url:{t.callback_url} error:{result.error}")
            else:
                logger.info(f"dispatched: key:{t.key} url:{t.callback_url}")

            final.append(result)

        return final
