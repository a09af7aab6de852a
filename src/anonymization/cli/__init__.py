"""
Command-line interface for anonymizer registries.

Available commands:
- migrate: Convert a (legacy) registry document to the current format
- audit: List anonymized fields
- export: Anonymize serialized records
"""

import logging
import sys

from anonymization.errors import AnonymizationError
from utils.logging import configure_from_env, setup_logging
from utils.tracing import shutdown_tracing

from .commands import cmd_audit, cmd_export, cmd_migrate
from .parser import create_parser

logger = logging.getLogger(__name__)

COMMANDS = {
    'migrate': cmd_migrate,
    'audit': cmd_audit,
    'export': cmd_export,
}


def main(argv=None) -> int:
    """Main entry point for the anonymization CLI"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.log_level or args.log_json:
        setup_logging(args.log_level or "INFO", json_format=args.log_json)
    else:
        configure_from_env()

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    try:
        return command(args)
    except (AnonymizationError, ValueError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    finally:
        shutdown_tracing()


__all__ = [
    'main',
    'cmd_migrate',
    'cmd_audit',
    'cmd_export',
    'create_parser',
]


if __name__ == '__main__':
    sys.exit(main())
