#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import copy
import logging
import logging.config
import os
import sys
from typing import Sequence

import yaml

from ldpwalker import __version__
from ldpwalker.config import RunConfig, build_parser, print_usage, resolve
from ldpwalker.exceptions import ConfigError, WalkerError
from ldpwalker.utils import DEFAULT_LOGGING_OPTIONS, datetimestamp
from ldpwalker.walker import Walker

logger = logging.getLogger(__name__)


def configure_logging(config: RunConfig):
    if config.logging_config is not None:
        with open(config.logging_config, 'r') as logging_config_file:
            logging_options = yaml.safe_load(logging_config_file)
    else:
        logging_options = copy.deepcopy(DEFAULT_LOGGING_OPTIONS)

    # log file configuration
    if config.log_dir is not None:
        if not os.path.isdir(config.log_dir):
            os.makedirs(config.log_dir)
        logfile = os.path.join(config.log_dir, f'ldpwalker.{datetimestamp()}.log')
        logging_options['handlers']['file'] = {
            'class': 'logging.FileHandler',
            'level': 'DEBUG',
            'formatter': 'full',
            'filename': logfile,
        }
        for name, logger_options in logging_options.get('loggers', {}).items():
            if name in ('__main__', 'ldpwalker'):
                logger_options.setdefault('handlers', []).append('file')

    # manipulate console verbosity
    if 'console' in logging_options.get('handlers', {}):
        if config.verbose:
            logging_options['handlers']['console']['level'] = 'DEBUG'
        elif config.quiet:
            logging_options['handlers']['console']['level'] = 'WARNING'

    logging.config.dictConfig(logging_options)


def main(argv: Sequence[str] = None):
    """Parse args, walk the repository, and print the number of resources."""
    parser = build_parser()
    try:
        config = resolve(argv, parser=parser)
    except ConfigError as e:
        print_usage(str(e), parser=parser)
        sys.exit(1)

    configure_logging(config)
    logger.info(f'ldpwalker {__version__}')
    logger.info(f'Walking {config.base_url}')
    if config.has_credentials:
        logger.info(f'Authenticating as {config.username}')

    walker = Walker(config)
    try:
        with walker:
            count = walker.run()
    except WalkerError as e:
        # something failed, exit with non-zero status
        logger.error(str(e))
        logger.error(f'Walk aborted after visiting {walker.count} resource(s)')
        sys.exit(1)
    except KeyboardInterrupt:
        # aborted due to Ctrl+C
        logger.warning(f'Walk interrupted after visiting {walker.count} resource(s)')
        sys.exit(2)

    logger.info(f'Walk complete: {count} resource(s) visited')
    print(count)


if __name__ == "__main__":
    main()
