"""Callbacks are sent over HTTP, with the task's request payload encoded as JSON.

"""
import time

import requests

from timewheel import exceptions as exc
from timewheel import utils
from timewheel.transport.base import Base


logger = utils.logger()


class HttpTransport(Base):
    """Super simple HTTP client for firing callbacks.

    One requests.Session (and so one connection pool) is shared by every dispatch thread.

    """

    _MIN_TIMEOUT = 0.01

    def __init__(self, timeout: float=10, session: requests.Session=None):
        """

        :param timeout: most seconds we'll wait on a single callback.
        :param session:

        """
        self._timeout = float(timeout)
        self._session = session or requests.Session()

    def _request_timeout(self, deadline: float) -> float:
        """Time we can give the request: our own limit, capped by the time left before the
        deadline.

        :param deadline: time.monotonic() value
        :return: float
        :raises DispatchError: if the deadline has passed

        """
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise exc.DispatchError("deadline passed before callback was sent")
        return max(min(self._timeout, remaining), self._MIN_TIMEOUT)

    @staticmethod
    def _headers(headers: dict) -> dict:
        """

        :return: dict

        """
        result = {"Content-Type": "application/json"}
        result.update(headers or {})
        return result

    def invoke(self, deadline: float, method: str, url: str, headers: dict, body):
        """Send the callback request.

        :param deadline:
        :param method:
        :param url:
        :param headers:
        :param body: json encodable payload (not sent if None)
        :raises DispatchError: on connection failure or a non 2xx reply

        """
        timeout = self._request_timeout(deadline)

        kwargs = {"headers": self._headers(headers), "timeout": timeout}
        if body is not None:
            kwargs["json"] = body

        logger.info(f"    --> {method} {url}")
        try:
            result = self._session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise exc.DispatchError(f"{method} {url} failed: {e}") from e
        logger.info(f"{result.status_code} <-- {method} {url}")

        self._check_status(method, url, result)

    @staticmethod
    def _check_status(method: str, url: str, result):
        """Raises if the callback didn't reply with a 2xx.

        :param method:
        :param url:
        :param result: requests.Response

        """
        if 200 <= result.status_code < 300:
            return

        raise exc.DispatchError(f"{method} {url} replied {result.status_code}: {result.text[:200]}")
