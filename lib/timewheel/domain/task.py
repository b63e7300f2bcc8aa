import json

from timewheel.domain.base import Serializable
from timewheel import enums
from timewheel import exceptions as exc


_SCHEMES = ("http://", "https://")


class Task(Serializable):

    def __init__(
        self,
        key: str=None,
        callback_url: str=None,
        method: str=enums.Method.POST.value,
        header: dict=None,
        req=None,
    ):
        self.key = key
        self.callback_url = callback_url
        self.method = method
        self.header = header or {}
        self.req = req

    @classmethod
    def new(cls, callback_url: str, method: str=enums.Method.POST.value, header=None, req=None):
        """Build a task to fire at the given url.

        The key is set when the task is registered.

        :param callback_url: absolute http(s) url
        :param method: GET or POST
        :param header: http headers to send
        :param req: request payload, anything json can encode
        :return: Task

        """
        return cls(callback_url=callback_url, method=method, header=header, req=req)

    def validate(self):
        """Check the task is something we're willing to schedule.

        :raises ValidationError:

        """
        if not self.key or not isinstance(self.key, str):
            raise exc.ValidationError(f"invalid key: {self.key}")

        if self.method not in [m.value for m in enums.Method]:
            raise exc.ValidationError(f"invalid method: {self.method}")

        if not isinstance(self.callback_url, str) or not self.callback_url.startswith(_SCHEMES):
            raise exc.ValidationError(f"invalid url: {self.callback_url}")

        if not isinstance(self.header, dict):
            raise exc.ValidationError(f"invalid header: {self.header}")

    def encode(self) -> dict:
        """

        :return: dict

        """
        return {
            "key": self.key,
            "callback_url": self.callback_url,
            "method": self.method,
            "req": self.req,
            "header": self.header,
        }

    @classmethod
    def decode(cls, data: dict):
        """

        :param data:
        :return: Task
        :raises ValueError: if data represents an invalid task

        """
        if not isinstance(data, dict):
            raise ValueError(f"expected dict, got {type(data)}")

        me = cls(
            key=data.get("key"),
            callback_url=data.get("callback_url"),
            method=data.get("method"),
            header=data.get("header") or {},
            req=data.get("req"),
        )

        # stored entries get the same checks as registered ones; a wrong typed key would
        # otherwise blow up the tombstone lookup for the whole batch
        try:
            me.validate()
        except exc.ValidationError as e:
            raise ValueError(f"invalid task: {e}") from e

        return me

    def dumps(self) -> str:
        """Serialize to the string we store in redis.

        Keys are sorted so the same task always produces the same sorted set member; registering
        it twice for the same second updates rather than duplicates it.

        :return: str
        :raises ValidationError: if the request payload can't be encoded

        """
        try:
            return json.dumps(self.encode(), sort_keys=True, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise exc.ValidationError(f"unable to encode task: key:{self.key} error:{e}") from e

    @classmethod
    def loads(cls, raw):
        """Inflate a task from a stored string.

        :param raw: str or bytes
        :return: Task
        :raises DeserializationError:

        """
        try:
            if isinstance(raw, bytes):
                raw = str(raw, encoding="utf8")
            return cls.decode(json.loads(raw))
        except (TypeError, ValueError) as e:
            raise exc.DeserializationError(f"unable to decode task: {raw!r} error:{e}") from e

    def __eq__(self, other):
        if not isinstance(other, Task):
            return NotImplemented
        return self.encode() == other.encode()

    def __repr__(self):
        return f"Task(key={self.key!r}, method={self.method!r}, url={self.callback_url!r})"
