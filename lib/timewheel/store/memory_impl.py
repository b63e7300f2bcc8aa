import threading
import time

from timewheel.store.base import Base
from timewheel.store.reply import PollReply


class MemoryStore(Base):
    """Single process store with the same semantics as the redis store.

    A lock makes each operation atomic. Tombstone sets expire the same way redis expires keys:
    lazily, when next touched after their deadline. Only useful when there's a single
    scheduler instance (eg. local runs & tests).

    """

    def __init__(self, tombstone_ttl: int=Base.DEFAULT_TOMBSTONE_TTL, clock=time.time):
        """

        :param tombstone_ttl: seconds a shard's tombstone set lives after its first cancel.
        :param clock: function returning the current time in seconds.

        """
        self._tombstone_ttl = int(tombstone_ttl)
        self._clock = clock

        self._lock = threading.Lock()
        self._data = {}  # data key -> {entry: score}
        self._markers = {}  # marker key -> set(task key)
        self._expires = {}  # marker key -> time at which the set vanishes

    def _live_markers(self, marker_key: str) -> set:
        """Return the marker set for the given key, dropping it first if it has expired.

        Nb. Caller must hold the lock.

        :param marker_key:
        :return: set

        """
        expires = self._expires.get(marker_key)
        if expires is not None and self._clock() >= expires:
            self._markers.pop(marker_key, None)
            del self._expires[marker_key]

        return self._markers.get(marker_key, set())

    def register(self, data_key: str, marker_key: str, score: int, task: str, task_key: str) -> int:
        with self._lock:
            markers = self._live_markers(marker_key)
            markers.discard(task_key)
            if not markers:
                # redis deletes a set when its last member goes (taking the expiry with it)
                self._markers.pop(marker_key, None)
                self._expires.pop(marker_key, None)

            entries = self._data.setdefault(data_key, {})
            added = 0 if task in entries else 1
            entries[task] = int(score)
            return added

    def cancel(self, marker_key: str, task_key: str) -> int:
        with self._lock:
            markers = self._live_markers(marker_key)
            markers.add(task_key)
            self._markers[marker_key] = markers

            count = len(markers)
            if count == 1:
                self._expires[marker_key] = self._clock() + self._tombstone_ttl
            return count

    def poll_and_claim(self, data_key: str, marker_key: str, low: int, high: int) -> PollReply:
        with self._lock:
            tombstones = frozenset(self._live_markers(marker_key))

            entries = self._data.get(data_key, {})
            claimed = sorted(
                [(score, entry) for entry, score in entries.items() if low <= score <= high]
            )
            for _, entry in claimed:
                del entries[entry]

            if not entries:
                self._data.pop(data_key, None)

            return PollReply(tombstones, [entry for _, entry in claimed])

    def ttl(self, marker_key: str):
        """Return seconds until the given marker set expires, or None if it has no expiry.

        :param marker_key:
        :return: float or None

        """
        with self._lock:
            self._live_markers(marker_key)
            expires = self._expires.get(marker_key)
            if expires is None:
                return None
            return expires - self._clock()

    def pending(self, data_key: str) -> int:
        """Return the number of entries still waiting in the given data set.

        :param data_key:
        :return: int

        """
        with self._lock:
            return len(self._data.get(data_key, {}))
