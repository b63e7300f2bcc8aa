import os
import sys

from copy import deepcopy

import configparser


_DEFAULT_CONFIG_ENV = 'TIMEWHEEL_CONFIG'
_DEFAULT_CONFIG_NAME = 'timewheel.ini'
_DEFAULT_CONFIG_DIR = 'timewheel'

_default_config = {
    'store': {
        # one of "redis" or "memory" (memory is single process only)
        'type': 'redis',
    },
    'redis': {
        'host': 'localhost',
        'port': 6379,
        'db': 0,
        'password': '',
        # connection pool settings
        'max_connections': 50,
        'blocking': False,  # wait for a free connection rather than erroring
        'pool_timeout': 5,
        'socket_timeout': 5,
        'health_check_interval': 30,  # seconds idle before a connection is pinged on borrow
    },
    'scheduler': {
        'tick_time': 1,
        'batch_timeout': 30,
        'key_prefix': 'timewheel',
        'tombstone_ttl': 120,
    },
    'transport': {
        'timeout': 10,
    },
}


def read_default_config() -> dict:
    """We read the first one of

        ${TIMEWHEEL_CONFIG}
        timewheel.ini
        ~/.config/timewheel/timewheel.ini
        ~/.timewheel/timewheel.ini
        /etc/timewheel/timewheel.ini

    Values missing from the file are filled in from the defaults.

    :return: dict

    """
    for p in [
        os.getenv(_DEFAULT_CONFIG_ENV),
        _DEFAULT_CONFIG_NAME,
        os.path.join("~/.config", _DEFAULT_CONFIG_DIR, _DEFAULT_CONFIG_NAME),
        os.path.join(f"~/.{_DEFAULT_CONFIG_DIR}", _DEFAULT_CONFIG_NAME),
        os.path.join("/etc", _DEFAULT_CONFIG_DIR, _DEFAULT_CONFIG_NAME),
    ]:
        if not p:
            continue

        p = os.path.expanduser(p)
        if os.path.isfile(p):
            try:
                return merge_defaults(read_config_file(p))
            except Exception as e:
                print(f"failed to read {p}: {e}", file=sys.stderr)

    # we didn't find anything (or couldn't read), so we'll fallback on the default setup
    return deepcopy(_default_config)


def read_config_file(configpath: str) -> dict:
    """Read in config file & return as dict

    :return: dict

    """
    config = configparser.ConfigParser()
    config.read(configpath)

    data = {}
    for section in config.sections():
        data[section.lower()] = {}
        for opt in config.options(section):
            data[section.lower()][opt.lower()] = config.get(section, opt)
    return data


def merge_defaults(data: dict) -> dict:
    """Return a copy of the default config overlaid with the given values.

    :param data:
    :return: dict

    """
    merged = deepcopy(_default_config)
    for section, values in data.items():
        merged.setdefault(section, {}).update(values)
    return merged


def get_bool(value) -> bool:
    """Config files hand us strings; "false" should be False.

    :param value:
    :return: bool

    """
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)
