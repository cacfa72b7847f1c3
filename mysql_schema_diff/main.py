#!/usr/bin/env python3

import argparse
import logging
import sys

from mysql.connector import Error as MySQLError

from .config import Settings
from .diff_extractor import extract_diff
from .schema_loader import load_schema


LOG_LEVELS = {
    'critical': logging.CRITICAL,
    'error': logging.ERROR,
    'warning': logging.WARNING,
    'info': logging.INFO,
    'debug': logging.DEBUG,
}


def set_logging_config(tags, log_level_str=None):
    """Configure logging to output only to stderr, stdout carries the diff."""
    handlers = [logging.StreamHandler(sys.stderr)]

    log_level = LOG_LEVELS.get(log_level_str)
    if log_level is None:
        logging.warning(f'Unknown log level {log_level_str}, setting info')
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format=f'[{tags} %(asctime)s %(levelname)8s] %(message)s',
        handlers=handlers,
    )


def run_diff(args, config: Settings):
    old_tables = load_schema(args.old, config)
    new_tables = load_schema(args.new, config)

    diff = extract_diff(old_tables, new_tables)

    output = args.output or config.output
    if output:
        with open(output, 'w', encoding='utf-8') as f:
            f.write(diff)
        logging.info(f'diff written to {output}')
    else:
        sys.stdout.write(diff)

    if not diff:
        logging.info('schemas are identical')


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Generate the DDL that migrates an old MySQL schema to a new one',
    )
    parser.add_argument('old', help='old schema: SQL file path or db:<database>', type=str)
    parser.add_argument('new', help='new schema: SQL file path or db:<database>', type=str)
    parser.add_argument('--config', help='config file path', default=None, type=str)
    parser.add_argument('--output', help='write the diff to this file instead of stdout', default=None, type=str)
    parser.add_argument(
        '--log-level', help='log level, overrides config',
        default=None, type=str, choices=list(LOG_LEVELS),
    )
    args = parser.parse_args(argv)

    config = Settings()
    try:
        config.load(args.config)
    except (OSError, ValueError) as e:
        set_logging_config('schemadiff', log_level_str=args.log_level or Settings.DEFAULT_LOG_LEVEL)
        logging.error(f'failed to load config: {e}')
        return 1

    if args.log_level:
        config.log_level = args.log_level
    set_logging_config('schemadiff', log_level_str=config.log_level)

    try:
        run_diff(args, config)
    except (OSError, ValueError, MySQLError) as e:
        logging.error(f'{type(e).__name__}: {e}')
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
