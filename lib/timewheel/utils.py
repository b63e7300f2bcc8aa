import datetime
import logging
import math
import os
import sys
import time


_MINUTE_FORMAT = "%Y-%m-%d-%H:%M"

_logger = None


def logger(name="timewheel", filename=None, logpath="/tmp"):
    """Build a new logger.

    :param name:
    :param filename:
    :param logpath:

    """
    global _logger

    if not _logger:
        if not filename:
            filename = name + ".log"

        fmt = logging.Formatter(
            "%(asctime)s | %(threadName)-12.12s | %(levelname)-5.5s | %(message)s"
        )
        fullpath = os.path.join(logpath, filename)

        _logger = logging.getLogger(name)

        fh = logging.FileHandler(fullpath)
        fh.setFormatter(fmt)
        _logger.addHandler(fh)

        sh = logging.StreamHandler(sys.stdout)
        sh.setFormatter(fmt)
        _logger.addHandler(sh)

        _logger.setLevel(logging.DEBUG)

        _logger.info(f"logpath: {fullpath}")

    return _logger


def epoch_seconds(when) -> int:
    """Return the given instant as whole seconds since the epoch.

    Fractions of a second are floored, so 10.9 belongs to second 10.

    :param when: datetime or number (seconds since epoch)
    :return: int
    :raises TypeError: if given something we can't turn into a time

    """
    if isinstance(when, datetime.datetime):
        # naive datetimes are taken as local time, same as datetime.timestamp()
        return int(math.floor(when.timestamp()))

    if isinstance(when, bool) or not isinstance(when, (int, float)):
        raise TypeError(f"expected datetime or seconds since epoch, got {type(when)}")

    return int(math.floor(when))


def minute_str(when) -> str:
    """Return the UTC minute the given instant falls in, formatted as YYYY-MM-DD-HH:MM.

    :param when: datetime or number (seconds since epoch)
    :return: str

    """
    seconds = epoch_seconds(when)
    return time.strftime(_MINUTE_FORMAT, time.gmtime(seconds - seconds % 60))
