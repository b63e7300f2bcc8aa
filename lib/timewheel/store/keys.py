from collections import namedtuple

from timewheel import utils


DEFAULT_PREFIX = "timewheel"

# data: sorted set of serialized tasks scored by second
# marker: set of cancelled task keys (tombstones)
ShardKeys = namedtuple("ShardKeys", ["data", "marker"])


def shard_keys(execute_at, prefix: str=DEFAULT_PREFIX) -> ShardKeys:
    """Return the (data, marker) redis keys for the minute the given instant falls in.

    Both keys carry the minute as a redis cluster hash tag, eg. "{2024-01-02-15:04}", so they
    always land on the same node & our lua scripts can touch both atomically.

    :param execute_at: datetime or seconds since epoch
    :param prefix:
    :return: ShardKeys

    """
    tag = utils.minute_str(execute_at)
    return ShardKeys(
        f"{prefix}_task_{{{tag}}}",
        f"{prefix}_delset_{{{tag}}}",
    )
