
class TimeWheelError(Exception):
    """Base of all timewheel errors.
    """
    pass


class ValidationError(TimeWheelError):
    """The task given to us can't be scheduled (bad method, url etc). Raised before we
    touch the store.
    """
    pass


class StoreError(TimeWheelError):
    """A generic "we failed to talk to the store"
    """
    pass


class MalformedReply(StoreError):
    """The store replied, but not with anything we understand.
    """
    pass


class DeserializationError(TimeWheelError):
    """A stored task entry could not be decoded.
    """
    pass


class DispatchError(TimeWheelError):
    """Calling a task's callback failed, or we gave up waiting on it.
    """
    pass
