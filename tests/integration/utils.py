import time

import docker
import pytest
import redis

from docker import errors


_DEFAULT_URL = "unix:///var/run/docker.sock"


class _Container:
    """Wrapper for a docker container
    """

    def __init__(self, container):
        self._container = container

    def stop(self):
        """Kill the container

        """
        try:
            self._container.stop(timeout=3)
        except Exception:
            pass

        try:
            self._container.remove()
        except Exception:
            pass

    def start(self):
        """Start the container

        """
        self._container.start()

    def __enter__(self):
        self._container.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            self.stop()
        except errors.NotFound:
            pass


class Client:

    _redis = 'docker.io/redis:7'

    def __init__(self, url=_DEFAULT_URL):
        self._client = docker.DockerClient(base_url=url)

    @classmethod
    def or_skip(cls, url=_DEFAULT_URL):
        """Return a client, skipping the calling tests if docker isn't reachable.

        :param url:
        :return: Client

        """
        try:
            client = cls(url=url)
            client._client.ping()
        except Exception as e:
            pytest.skip(f"docker unavailable: {e}")
        return client

    def redis_container(self, port=6379):
        """Return a 'redis db' docker container, once redis answers a ping.

        The container is automatically configured with
         - detach mode
         - auto remove

        """
        rds = self.create_container(self._redis, ports={6379: port})

        err = None
        for i in range(1, 5):
            # 5 attempts to connect to redis 'cause containers don't start immediately
            try:
                redis.Redis(host="localhost", port=port).ping()
                return rds
            except Exception as e:
                err = e
                time.sleep(2)

        rds.stop()
        raise err

    def create_container(self, image, cmd=None, **kwargs):
        """Return a generic container.

        The container is automatically configured with
         - detach mode
         - auto remove

        :param image:
        :param cmd:
        :param kwargs:
        :return: _Container

        """
        kwargs["detach"] = True
        kwargs["auto_remove"] = True
        conn = self._client.containers.create(image, command=cmd, **kwargs)
        conn.start()
        return _Container(conn)
