import redis

from redis import exceptions as redis_exc

from timewheel import exceptions as exc
from timewheel import utils
from timewheel.store.base import Base
from timewheel.store.reply import PollReply, decode_poll_reply
from timewheel.store import scripts


logger = utils.logger()


class RedisStore(Base):
    """Store implemented with redis sorted sets, sets & lua scripts.

       - Nb. scripts are sent once & then run by their sha (EVALSHA), redis-py reloads them
         transparently if redis has forgotten them (eg. after a restart).

    """

    def __init__(
        self,
        host: str="localhost",
        port: int=6379,
        db: int=0,
        password: str=None,
        max_connections: int=50,
        blocking: bool=False,
        pool_timeout: float=5,
        socket_timeout: float=5,
        health_check_interval: int=30,
        tombstone_ttl: int=Base.DEFAULT_TOMBSTONE_TTL,
        conn=None,
    ):
        """

        :param host:
        :param port:
        :param db:
        :param password:
        :param max_connections: most connections the pool will ever open.
        :param blocking: if set, wait up to pool_timeout seconds for a free connection when
            the pool is exhausted (rather than raising immediately).
        :param pool_timeout:
        :param socket_timeout: seconds before a single redis call is considered failed.
        :param health_check_interval: connections idle for longer than this are PINGed when
            taken from the pool.
        :param tombstone_ttl: seconds a shard's tombstone set lives after its first cancel.
        :param conn: an already built redis client (other params are then ignored). It must
            not decode responses itself.

        """
        self._tombstone_ttl = int(tombstone_ttl)

        if conn is None:
            kwargs = {
                "host": host,
                "port": int(port),
                "db": int(db),
                "password": password or None,
                "max_connections": int(max_connections),
                "socket_timeout": float(socket_timeout),
                "health_check_interval": int(health_check_interval),
                # replies are decoded per entry in reply.py, so one bad entry can't sink a poll
                "decode_responses": False,
            }

            pool_cls = redis.ConnectionPool
            if blocking:
                pool_cls = redis.BlockingConnectionPool
                kwargs["timeout"] = float(pool_timeout)

            conn = redis.Redis(connection_pool=pool_cls(**kwargs))

        if conn.get_encoder().decode_responses:
            raise ValueError("redis client must be built with decode_responses=False")

        self._conn = conn

        self._register = self._conn.register_script(scripts.REGISTER)
        self._cancel = self._conn.register_script(scripts.CANCEL)
        self._poll_and_claim = self._conn.register_script(scripts.POLL_AND_CLAIM)

    def register(self, data_key: str, marker_key: str, score: int, task: str, task_key: str) -> int:
        """Add task to the data set, clearing any tombstone for it.

        :param data_key:
        :param marker_key:
        :param score:
        :param task:
        :param task_key:
        :return: int

        """
        try:
            added = self._register(keys=[data_key, marker_key], args=[int(score), task, task_key])
        except redis_exc.RedisError as e:
            raise exc.StoreError(f"register failed: key:{task_key} shard:{data_key} error:{e}") from e

        return int(added)

    def cancel(self, marker_key: str, task_key: str) -> int:
        """Tombstone the given task key.

        :param marker_key:
        :param task_key:
        :return: int

        """
        try:
            count = self._cancel(keys=[marker_key], args=[task_key, self._tombstone_ttl])
        except redis_exc.RedisError as e:
            raise exc.StoreError(f"cancel failed: key:{task_key} shard:{marker_key} error:{e}") from e

        return int(count)

    def poll_and_claim(self, data_key: str, marker_key: str, low: int, high: int) -> PollReply:
        """Claim every task scored within [low, high] along with the shard's tombstones.

        :param data_key:
        :param marker_key:
        :param low:
        :param high:
        :return: PollReply
        :raises MalformedReply: if redis replied with something odd

        """
        try:
            raw = self._poll_and_claim(keys=[data_key, marker_key], args=[int(low), int(high)])
        except redis_exc.RedisError as e:
            raise exc.StoreError(f"poll failed: shard:{data_key} error:{e}") from e

        return decode_poll_reply(raw)
