"""Build the run configuration for a walk from command line arguments and an
optional YAML configuration file.

The configuration file uses the same `REPOSITORY` section layout as other
repository tools, plus a `WALKER` section for traversal settings:

```yaml
REPOSITORY:
  REST_ENDPOINT: http://localhost:8080/fcrepo/rest
  FEDORA_USER: fedoraAdmin
  FEDORA_PASSWORD: ${FEDORA_PASSWORD}
  LOG_DIR: logs
WALKER:
  MAX_DEPTH: 50
  MAX_PER_ROUTE: 20
  IDLE_TIMEOUT: 3
```

Values given on the command line take precedence over the file.
"""
import logging
import sys
from argparse import ArgumentParser, ArgumentTypeError, FileType, Namespace
from dataclasses import dataclass
from typing import Optional, Sequence, TextIO, Any

import yaml
from urlobject import URLObject

from ldpwalker import __version__
from ldpwalker.client import DEFAULT_MAX_PER_ROUTE, DEFAULT_IDLE_TIMEOUT
from ldpwalker.exceptions import ConfigError
from ldpwalker.utils import envsubst, positive_int

logger = logging.getLogger(__name__)


class UsageParser(ArgumentParser):
    """Argument parser that raises a `ConfigError` instead of printing to
    stderr and exiting when the arguments cannot be parsed."""

    def error(self, message):
        raise ConfigError(f'Error parsing args: {message}')


def build_parser() -> UsageParser:
    parser = UsageParser(
        prog='ldpwalker',
        description='Walk an LDP repository from a base URL, verifying and counting every resource.',
    )
    parser.add_argument(
        '-b', '--baseURL',
        help='Base URL from which the walker will traverse.',
        dest='base_url',
        metavar='baseURL',
        action='store'
    )
    parser.add_argument(
        '-u', '--username',
        help='username for repository basic authentication',
        action='store'
    )
    parser.add_argument(
        '-p', '--password',
        help='password for repository basic authentication',
        action='store'
    )
    parser.add_argument(
        '-c', '--config',
        help='Path to configuration file.',
        dest='config_file',
        action='store',
        type=FileType('r')
    )
    parser.add_argument(
        '-d', '--max-depth',
        help='abort the walk if a resource is nested more than this many levels below the base URL',
        dest='max_depth',
        type=positive_int,
        action='store'
    )
    parser.add_argument(
        '-v', '--verbose',
        help='increase the verbosity of the status output',
        action='store_true'
    )
    parser.add_argument(
        '-q', '--quiet',
        help='decrease the verbosity of the status output',
        action='store_true'
    )
    parser.add_argument(
        '-V', '--version',
        help='Print version and exit.',
        action='version',
        version=__version__
    )
    return parser


def print_usage(message: str, parser: ArgumentParser = None, file: TextIO = None):
    """Print `message` set off by rules, followed by the full help text."""
    if parser is None:
        parser = build_parser()
    if file is None:
        file = sys.stdout
    rule = '-----------------------'
    print(f'\n{rule}\n{message}\n{rule}\n', file=file)
    print('Running repository Walker Utility from command line arguments', file=file)
    parser.print_help(file=file)
    print('\n', file=file)


def load_config_file(file: TextIO) -> dict[str, Any]:
    try:
        config = yaml.safe_load(file)
    except yaml.YAMLError as e:
        raise ConfigError(f'Unable to parse configuration file {file.name}: {e}') from e
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f'Configuration file {file.name} must contain a mapping')
    return envsubst(config)


def _number_setting(name: str, value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return positive_int(value)
    except ArgumentTypeError as e:
        raise ConfigError(f'Invalid value for {name}: {e}') from e


def _first(*values):
    return next((v for v in values if v is not None), None)


@dataclass(frozen=True)
class RunConfig:
    base_url: str
    username: Optional[str] = None
    password: Optional[str] = None
    server_cert: Optional[str] = None
    max_depth: Optional[int] = None
    max_per_route: int = DEFAULT_MAX_PER_ROUTE
    idle_timeout: int = DEFAULT_IDLE_TIMEOUT
    log_dir: Optional[str] = None
    logging_config: Optional[str] = None
    verbose: bool = False
    quiet: bool = False

    def __post_init__(self):
        if not self.base_url:
            raise ConfigError("Arg 'baseUrl' must not be null")
        url = URLObject(self.base_url)
        if url.scheme not in ('http', 'https') or not url.hostname:
            raise ConfigError(f"Arg 'baseUrl' must be an absolute HTTP(S) URL: {self.base_url}")
        if (self.username is None) != (self.password is None):
            raise ConfigError('Username and password must be given together')

    @property
    def has_credentials(self) -> bool:
        return self.username is not None and self.password is not None

    @classmethod
    def from_args(cls, args: Namespace) -> 'RunConfig':
        """Build a `RunConfig` from parsed command line arguments, filling in
        unset values from the configuration file named by `args.config_file`,
        if any."""
        config = {}
        if getattr(args, 'config_file', None) is not None:
            with args.config_file:
                config = load_config_file(args.config_file)
            logger.debug(f'Loaded configuration from {args.config_file.name}')
        repo_config = config.get('REPOSITORY') or {}
        walker_config = config.get('WALKER') or {}

        return cls(
            base_url=_first(args.base_url, repo_config.get('REST_ENDPOINT')),
            username=_first(args.username, repo_config.get('FEDORA_USER')),
            password=_first(args.password, repo_config.get('FEDORA_PASSWORD')),
            server_cert=repo_config.get('SERVER_CERT'),
            max_depth=_first(
                getattr(args, 'max_depth', None),
                _number_setting('MAX_DEPTH', walker_config.get('MAX_DEPTH')),
            ),
            max_per_route=_first(
                _number_setting('MAX_PER_ROUTE', walker_config.get('MAX_PER_ROUTE')),
                DEFAULT_MAX_PER_ROUTE,
            ),
            idle_timeout=_first(
                _number_setting('IDLE_TIMEOUT', walker_config.get('IDLE_TIMEOUT')),
                DEFAULT_IDLE_TIMEOUT,
            ),
            log_dir=repo_config.get('LOG_DIR'),
            logging_config=repo_config.get('LOGGING_CONFIG'),
            verbose=getattr(args, 'verbose', False),
            quiet=getattr(args, 'quiet', False),
        )


def resolve(argv: Sequence[str] = None, parser: ArgumentParser = None) -> RunConfig:
    """Parse `argv` (defaults to `sys.argv[1:]`) with `parser` (defaults to
    `build_parser()`) and return the validated `RunConfig`. Raises a
    `ConfigError` if the arguments cannot be parsed, the base URL is missing
    or malformed, or only one of username and password is given."""
    if parser is None:
        parser = build_parser()
    return RunConfig.from_args(parser.parse_args(argv))
