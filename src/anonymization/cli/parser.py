"""
Command-line argument parser configuration.
"""

import argparse


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="anonymization",
        description="Manage anonymizer registries and export anonymized records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fold legacy entries into a current registry document
  anonymization migrate --input registry.json --output registry.v2.json

  # Show which fields are anonymized and how
  anonymization audit --input registry.json

  # Anonymize JSON-lines records with a registry
  ANON_SESSION_ID=study-42 ANON_HASH_SALT=... \\
      anonymization export --registry registry.json --input data.jsonl --output out.jsonl
        """
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: LOG_LEVEL or INFO)'
    )
    parser.add_argument(
        '--log-json',
        action='store_true',
        help='Emit logs as JSON (default: LOG_JSON)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # ========== Migrate command ==========
    migrate_parser = subparsers.add_parser(
        'migrate', help='Migrate a registry document to the current format'
    )
    migrate_parser.add_argument(
        '--input',
        required=True,
        help='Registry document (current, legacy list, or mixed)'
    )
    migrate_parser.add_argument(
        '--output',
        help='Output file for the migrated document (default: stdout)'
    )
    migrate_parser.add_argument(
        '--strict',
        action='store_true',
        help='Exit non-zero if any entry was rejected'
    )

    # ========== Audit command ==========
    audit_parser = subparsers.add_parser('audit', help='Print registry assignments')
    audit_parser.add_argument(
        '--input',
        required=True,
        help='Registry document'
    )
    audit_parser.add_argument(
        '--format',
        choices=['console', 'json'],
        default='console',
        help='Output format (default: console)'
    )

    # ========== Export command ==========
    export_parser = subparsers.add_parser(
        'export', help='Anonymize JSON-lines records'
    )
    export_parser.add_argument(
        '--registry',
        required=True,
        help='Registry document'
    )
    export_parser.add_argument(
        '--input',
        required=True,
        help='Input file with one serialized record per line'
    )
    export_parser.add_argument(
        '--output',
        help='Output file (default: stdout)'
    )
    export_parser.add_argument(
        '--session-id',
        help='Session id (default: ANON_SESSION_ID)'
    )
    export_parser.add_argument(
        '--use-vault',
        action='store_true',
        help='Fetch the session hash salt from HashiCorp Vault'
    )

    return parser
