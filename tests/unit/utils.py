import threading
import uuid

from timewheel import domain
from timewheel import exceptions as exc
from timewheel.transport.base import Base


# 2023-11-14 22:14:00 UTC, the first second of a minute
MINUTE_START = 1700000040


class FakeClock:
    """A clock that only moves when told to.
    """

    def __init__(self, now: float=MINUTE_START):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class RecordingTransport(Base):
    """Records every callback it's asked to fire.

    Urls in fail_urls raise, urls in hang_urls block until release() is called.

    """

    def __init__(self, fail_urls=None, hang_urls=None):
        self.calls = []
        self.fail_urls = set(fail_urls or [])
        self.hang_urls = set(hang_urls or [])
        self._lock = threading.Lock()
        self._release = threading.Event()

    def invoke(self, deadline, method, url, headers, body):
        if url in self.hang_urls:
            self._release.wait(30)

        with self._lock:
            self.calls.append((method, url, headers, body))

        if url in self.fail_urls:
            raise exc.DispatchError(f"refused: {url}")

    def release(self):
        self._release.set()

    def calls_to(self, url) -> list:
        with self._lock:
            return [c for c in self.calls if c[1] == url]


def new_task(key=None, url="http://example.test/cb", method="POST", req=None):
    task = domain.Task.new(url, method=method, header={"X-Test": "1"}, req=req or {"x": 1})
    task.key = key or str(uuid.uuid4())
    return task


class StoreTest:
    """Generic tests for the store contract. All store implementations should satisfy these.

    Subclasses set self.store (& anything else they need) in setup_method.

    """

    store = None

    TTL = 120

    DATA = "test_task_{2023-11-14-22:14}"
    MARKER = "test_delset_{2023-11-14-22:14}"
    SECOND = MINUTE_START + 5

    def _age_tombstones(self, seconds):
        """Make the marker set's expiry come `seconds` sooner, as if that much time passed.
        """
        raise NotImplementedError

    def _tombstone_ttl(self) -> float:
        """Seconds left before the marker set expires.
        """
        raise NotImplementedError

    def _register(self, key, score=None):
        task = new_task(key=key)
        added = self.store.register(self.DATA, self.MARKER, score or self.SECOND, task.dumps(), key)
        return task, added

    def test_register_returns_added(self):
        # arrange
        task = new_task(key="a")

        # act
        first = self.store.register(self.DATA, self.MARKER, self.SECOND, task.dumps(), "a")
        second = self.store.register(self.DATA, self.MARKER, self.SECOND, task.dumps(), "a")

        # assert
        assert first == 1
        assert second == 0

    def test_poll_claims_only_window(self):
        # arrange
        before, _ = self._register("before", score=self.SECOND - 1)
        now, _ = self._register("now", score=self.SECOND)
        after, _ = self._register("after", score=self.SECOND + 1)

        # act
        result = self.store.poll_and_claim(self.DATA, self.MARKER, self.SECOND, self.SECOND)

        # assert
        assert result.entries == [now.dumps()]
        assert result.tombstones == frozenset()

    def test_poll_removes_claimed(self):
        # arrange
        self._register("a")
        self._register("b")

        # act
        first = self.store.poll_and_claim(self.DATA, self.MARKER, self.SECOND, self.SECOND)
        second = self.store.poll_and_claim(self.DATA, self.MARKER, self.SECOND, self.SECOND)

        # assert
        assert len(first.entries) == 2
        assert second.entries == []

    def test_poll_inclusive_range(self):
        # arrange
        for i in range(0, 5):
            self._register(f"k{i}", score=self.SECOND + i)

        # act
        result = self.store.poll_and_claim(self.DATA, self.MARKER, self.SECOND + 1, self.SECOND + 3)

        # assert
        assert [domain.Task.loads(e).key for e in result.entries] == ["k1", "k2", "k3"]

    def test_poll_empty_shard(self):
        # act
        result = self.store.poll_and_claim(self.DATA, self.MARKER, self.SECOND, self.SECOND)

        # assert
        assert result.entries == []
        assert result.tombstones == frozenset()

    def test_cancel_then_poll(self):
        # arrange
        task, _ = self._register("a")
        other, _ = self._register("b")

        # act
        self.store.cancel(self.MARKER, "a")
        result = self.store.poll_and_claim(self.DATA, self.MARKER, self.SECOND, self.SECOND)

        # assert
        assert "a" in result.tombstones
        assert "b" not in result.tombstones
        # the cancelled entry is still claimed (lazy delete), just marked
        assert sorted(result.entries) == sorted([task.dumps(), other.dumps()])

    def test_register_wins_over_stale_cancel(self):
        # arrange
        self._register("a")
        self.store.cancel(self.MARKER, "a")

        # act
        self._register("a")
        result = self.store.poll_and_claim(self.DATA, self.MARKER, self.SECOND, self.SECOND)

        # assert
        assert "a" not in result.tombstones
        assert len(result.entries) == 1

    def test_cancel_returns_cardinality(self):
        # act
        results = [
            self.store.cancel(self.MARKER, "a"),
            self.store.cancel(self.MARKER, "b"),
            self.store.cancel(self.MARKER, "a"),  # already there
            self.store.cancel(self.MARKER, "c"),
        ]

        # assert
        assert results == [1, 2, 2, 3]

    def test_first_cancel_arms_ttl(self):
        # act
        self.store.cancel(self.MARKER, "k1")

        # assert
        assert self.TTL - 5 < self._tombstone_ttl() <= self.TTL

    def test_recancel_of_only_key_rearms_ttl(self):
        # arrange
        self.store.cancel(self.MARKER, "k1")
        self._age_tombstones(100)

        # act
        count = self.store.cancel(self.MARKER, "k1")

        # assert
        assert count == 1
        assert self._tombstone_ttl() > 100

    def test_cancel_of_second_key_keeps_ttl(self):
        # arrange
        self.store.cancel(self.MARKER, "k1")
        self._age_tombstones(100)

        # act
        self.store.cancel(self.MARKER, "k2")
        self.store.cancel(self.MARKER, "k1")

        # assert
        assert 0 < self._tombstone_ttl() <= self.TTL - 100

    def test_at_most_one_claim(self):
        # arrange
        expected = set()
        for i in range(0, 50):
            task, _ = self._register(f"k{i}", score=self.SECOND + i % 3)
            expected.add(task.dumps())

        claimed = []
        lock = threading.Lock()
        start = threading.Event()

        def poll(low, high):
            start.wait(5)
            result = self.store.poll_and_claim(self.DATA, self.MARKER, low, high)
            with lock:
                claimed.extend(result.entries)

        ranges = [
            (self.SECOND, self.SECOND + 2),
            (self.SECOND, self.SECOND),
            (self.SECOND + 1, self.SECOND + 2),
            (self.SECOND, self.SECOND + 1),
        ] * 4
        threads = [threading.Thread(target=poll, args=r) for r in ranges]
        for t in threads:
            t.start()

        # act
        start.set()
        for t in threads:
            t.join(10)

        # assert
        assert len(claimed) == len(expected)
        assert set(claimed) == expected
