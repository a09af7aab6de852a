"""
CLI command implementations.

- migrate: load a registry document and write it in the current format
- audit: print the assignments of a registry document
- export: anonymize JSON-lines records
"""

import argparse
import io
import json
import logging
import sys
from pathlib import Path
from typing import TextIO

from anonymization.config import load_session_context
from anonymization.interceptor import AnonymizingSerializer, deserialize
from anonymization.persistence import LoadReport, dumps_registry, load_registry
from utils.logging import ContextLogger
from utils.tracing import trace_function

logger = logging.getLogger(__name__)


def _load(path: str) -> LoadReport:
    report = load_registry(Path(path).read_text(encoding="utf-8"))
    for message in report.diagnostics:
        print(f"warning: {message}", file=sys.stderr)
    return report


def _write(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        logger.info(f"Wrote {output}")
    else:
        sys.stdout.write(text)


@trace_function(component="cli")
def cmd_migrate(args: argparse.Namespace) -> int:
    """
    Migrate a registry document

    Returns:
        Process exit code
    """
    report = _load(args.input)
    _write(dumps_registry(report.registry) + "\n", args.output)

    print(
        f"{len(report.restored)} restored, {len(report.migrated)} migrated, "
        f"{len(report.diagnostics)} rejected",
        file=sys.stderr,
    )

    if args.strict and report.diagnostics:
        return 1
    return 0


@trace_function(component="cli")
def cmd_audit(args: argparse.Namespace) -> int:
    """
    Print the assignments of a registry document

    Returns:
        Process exit code
    """
    entries = _load(args.input).registry.snapshot()

    if args.format == "json":
        print(json.dumps(
            [{"type": e.kind, "property": e.field, "anonymizer": e.anonymizer} for e in entries],
            indent=2,
        ))
        return 0

    if not entries:
        print("No fields are anonymized.")
        return 0

    kind_width = max(len("KIND"), *(len(e.kind) for e in entries))
    field_width = max(len("FIELD"), *(len(e.field) for e in entries))
    print(f"{'KIND':<{kind_width}}  {'FIELD':<{field_width}}  ANONYMIZER")
    for entry in entries:
        print(f"{entry.kind:<{kind_width}}  {entry.field:<{field_width}}  {entry.anonymizer}")
    return 0


def _export_lines(source: TextIO, sink: TextIO, serializer: AnonymizingSerializer) -> int:
    count = 0
    for line_number, line in enumerate(source, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            record = deserialize(line)
        except (ValueError, LookupError) as e:
            raise ValueError(f"Line {line_number}: {e}") from e
        sink.write(serializer.to_json(record) + "\n")
        count += 1
    return count


@trace_function(component="cli")
def cmd_export(args: argparse.Namespace) -> int:
    """
    Anonymize JSON-lines records

    The output is written only if every record succeeds.

    Returns:
        Process exit code
    """
    registry = _load(args.registry).registry
    context = load_session_context(session_id=args.session_id, use_vault=args.use_vault)
    serializer = AnonymizingSerializer(registry, context)

    buffer = io.StringIO()
    with open(args.input, encoding="utf-8") as source:
        count = _export_lines(source, buffer, serializer)

    _write(buffer.getvalue(), args.output)
    ContextLogger(__name__, session_id=context.session_id).info(
        f"Exported {count} record(s)", record_count=count
    )
    return 0
