import enum


class Method(enum.Enum):
    """Callback methods we're willing to fire.

    """
    GET = "GET"
    POST = "POST"


class State(enum.Enum):
    # the wheel is ticking; each tick claims & dispatches the current second's tasks
    RUNNING = "RUNNING"

    # the wheel has been ordered to stop. There is no way back from here.
    STOPPED = "STOPPED"
