"""A store is responsible for
- holding pending tasks in per minute shards, ordered by the second they fire at
- holding tombstones for tasks that have been cancelled
- handing out (and removing) the tasks due in a given window, exactly once

All cross process correctness rests on the store running each operation atomically.

"""

from timewheel.store.keys import ShardKeys, shard_keys
from timewheel.store.reply import PollReply, decode_poll_reply
from timewheel.store.redis_impl import RedisStore
from timewheel.store.memory_impl import MemoryStore


__all__ = [
    "ShardKeys",
    "shard_keys",
    "PollReply",
    "decode_poll_reply",
    "RedisStore",
    "MemoryStore",
]
