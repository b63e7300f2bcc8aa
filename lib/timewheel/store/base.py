import abc

from timewheel.store.reply import PollReply


class Base(metaclass=abc.ABCMeta):
    """A store holds pending tasks in per minute shards.

    Each of the operations here must be atomic: nothing else can observe (or interleave with)
    half of one. Implementations raise StoreError if they can't reach their backend.

    """

    DEFAULT_TOMBSTONE_TTL = 120  # seconds

    @abc.abstractmethod
    def register(self, data_key: str, marker_key: str, score: int, task: str, task_key: str) -> int:
        """Remove task_key from the marker set & add task to the data set at score.

        :param data_key:
        :param marker_key:
        :param score: second the task should fire at
        :param task: serialized task
        :param task_key:
        :return: int number of entries newly added to the data set (0 if updated)

        """
        pass

    @abc.abstractmethod
    def cancel(self, marker_key: str, task_key: str) -> int:
        """Add task_key to the marker set. If the set now holds exactly one key, arm its
        expiry. Cancels that leave more than one key in the set do NOT refresh the expiry;
        re-cancelling the set's only key does (the set still holds exactly one key).

        :param marker_key:
        :param task_key:
        :return: int number of keys in the marker set

        """
        pass

    @abc.abstractmethod
    def poll_and_claim(self, data_key: str, marker_key: str, low: int, high: int) -> PollReply:
        """Read the marker set, then fetch & remove every entry of the data set with
        low <= score <= high.

        :param data_key:
        :param marker_key:
        :param low:
        :param high:
        :return: PollReply

        """
        pass
