import logging
import os
import re
from argparse import ArgumentTypeError
from datetime import datetime, timezone
from typing import Mapping

DEFAULT_LOGGING_OPTIONS = {
    'version': 1,
    'formatters': {
        'full': {
            'format': '%(levelname)s|%(asctime)s|%(threadName)s|%(name)s|%(message)s'
        },
        'messageonly': {
            'format': '%(message)s'
        }
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'level': 'INFO',
            'formatter': 'messageonly',
            'stream': 'ext://sys.stderr'
        },
    },
    'loggers': {
        '__main__': {
            'level': 'DEBUG',
            'handlers': ['console'],
            'propagate': False
        },
        'ldpwalker': {
            'level': 'DEBUG',
            'handlers': ['console'],
            'propagate': False
        },
        # suppress connection pool chatter from urllib3 by default
        'urllib3': {
            'level': 'WARNING',
        },
    },
    'root': {
        'level': 'DEBUG'
    }
}
logger = logging.getLogger(__name__)


def datetimestamp(digits_only: bool = True) -> str:
    """Current UTC time, to the second. Used to name log files, so the
    default drops everything but the digits (`20261018093005`)."""
    now = datetime.now(timezone.utc).replace(tzinfo=None).isoformat(timespec='seconds')
    if digits_only:
        return re.sub(r'[^0-9]', '', now)
    else:
        return now


def envsubst(value: str | list | dict, env: Mapping[str, str] = None) -> str | list | dict:
    """Fill in `${NAME}` references in a configuration value (a string, or
    a list or dict of them, at any depth) from `env`, or from the process
    environment when `env` is not given. Unknown names are logged and kept."""
    if env is None:
        env = os.environ
    if isinstance(value, str):
        if '${' in value:
            try:
                return value.replace('${', '{').format(**env)
            except KeyError as e:
                missing_key = str(e.args[0])
                logger.warning(f'Environment variable ${{{missing_key}}} not found')
                # for a missing key, just return the string without substitution
                return envsubst(value, {missing_key: f'${{{missing_key}}}', **env})
        else:
            return value
    elif isinstance(value, list):
        return [envsubst(v, env) for v in value]
    elif isinstance(value, dict):
        return {k: envsubst(v, env) for k, v in value.items()}
    else:
        return value


def positive_int(value: str | int) -> int:
    """Argument type for options that take a number greater than zero.

    ```pycon
    >>> positive_int('3')
    3
    ```

    Raises `ArgumentTypeError` for anything else."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ArgumentTypeError(f'"{value}" is not an integer')
    if number < 1:
        raise ArgumentTypeError(f'"{value}" must be greater than zero')
    return number
