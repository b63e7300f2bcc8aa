"""Builds timewheel components from a config dict (see timewheel.config).

"""
from timewheel import config as cfg
from timewheel import utils
from timewheel.scheduler import TimeWheel
from timewheel.store import MemoryStore, RedisStore
from timewheel.transport import HttpTransport


logger = utils.logger()

_STORE_REDIS = "redis"
_STORE_MEMORY = "memory"


def open_store(config: dict=None):
    """Open the store named in config.

    :param config:
    :return: store.Base
    :raises ValueError: if the store type is unknown

    """
    config = config or cfg.read_default_config()

    store_type = config.get("store", {}).get("type", _STORE_REDIS).lower()
    ttl = int(config.get("scheduler", {}).get("tombstone_ttl", MemoryStore.DEFAULT_TOMBSTONE_TTL))

    if store_type == _STORE_MEMORY:
        logger.info("opening memory store")
        return MemoryStore(tombstone_ttl=ttl)

    if store_type != _STORE_REDIS:
        raise ValueError(f"unknown store type: {store_type}")

    rds = config.get("redis", {})
    logger.info(f"opening redis store: host:{rds.get('host', 'localhost')} port:{rds.get('port', 6379)}")
    return RedisStore(
        host=rds.get("host", "localhost"),
        port=int(rds.get("port", 6379)),
        db=int(rds.get("db", 0)),
        password=rds.get("password") or None,
        max_connections=int(rds.get("max_connections", 50)),
        blocking=cfg.get_bool(rds.get("blocking", False)),
        pool_timeout=float(rds.get("pool_timeout", 5)),
        socket_timeout=float(rds.get("socket_timeout", 5)),
        health_check_interval=int(rds.get("health_check_interval", 30)),
        tombstone_ttl=ttl,
    )


def open_transport(config: dict=None) -> HttpTransport:
    """

    :param config:
    :return: HttpTransport

    """
    config = config or cfg.read_default_config()
    return HttpTransport(timeout=float(config.get("transport", {}).get("timeout", 10)))


def new_time_wheel(config: dict=None, autostart: bool=True) -> TimeWheel:
    """Build a time wheel wired to the configured store & transport.

    :param config:
    :param autostart: start ticking straight away
    :return: TimeWheel

    """
    config = config or cfg.read_default_config()
    sch = config.get("scheduler", {})

    return TimeWheel(
        open_store(config),
        open_transport(config),
        tick_time=float(sch.get("tick_time", TimeWheel._DEFAULT_TICK_TIME)),
        batch_timeout=float(sch.get("batch_timeout", TimeWheel._DEFAULT_BATCH_TIMEOUT)),
        key_prefix=sch.get("key_prefix", "timewheel"),
        autostart=autostart,
    )
