"""A transport delivers a due task to its callback. We only care whether that worked.

"""

from timewheel.transport.http import HttpTransport


__all__ = [
    "HttpTransport",
]
