import abc


class Base(metaclass=abc.ABCMeta):

    @abc.abstractmethod
    def invoke(self, deadline: float, method: str, url: str, headers: dict, body):
        """Fire a task's callback.

        :param deadline: time.monotonic() value after which we no longer care about the result
        :param method:
        :param url:
        :param headers:
        :param body: request payload
        :raises DispatchError: if the callback could not be delivered

        """
        pass
