from collections import namedtuple

from timewheel import exceptions as exc


# tombstones: frozenset of cancelled task keys for the shard
# entries: serialized tasks claimed by the poll, in score order. An entry that isn't valid utf8
#   is passed on as raw bytes, for the caller to reject on its own.
PollReply = namedtuple("PollReply", ["tombstones", "entries"])


def _check(value):
    if not isinstance(value, (bytes, str)):
        raise exc.MalformedReply(f"expected string, got {type(value)}: {value!r}")
    return value


def _key(value) -> str:
    value = _check(value)
    if isinstance(value, bytes):
        # a mangled key can't match any task, which is as good as not being there
        return str(value, encoding="utf8", errors="replace")
    return value


def _entry(value):
    value = _check(value)
    if isinstance(value, bytes):
        try:
            return str(value, encoding="utf8")
        except UnicodeDecodeError:
            return value
    return value


def decode_poll_reply(raw) -> PollReply:
    """Decode the reply of the poll & claim script.

    We expect a list whose first element is the list of tombstoned keys and whose remaining
    elements are the claimed entries.

    :param raw:
    :return: PollReply
    :raises MalformedReply: if the reply isn't shaped as above

    """
    if not isinstance(raw, (list, tuple)) or not raw:
        raise exc.MalformedReply(f"expected non empty list, got: {raw!r}")

    head = raw[0]
    if not isinstance(head, (list, tuple, set)):
        raise exc.MalformedReply(f"expected tombstone list, got: {head!r}")

    return PollReply(
        frozenset(_key(k) for k in head),
        [_entry(e) for e in raw[1:]],
    )
