#!/usr/bin/env python3
"""
Verify schema consistency across the language variants of every entity.

Usage:
    python -m herbapedia.verify              # console report
    python -m herbapedia.verify --json       # JSON to stdout
    python -m herbapedia.verify --report     # also write CONTENT_REPORT.md / content-report.json
    python -m herbapedia.verify --strict     # exit 1 when any entity is incomplete

English is the reference: a field present in en.yaml but absent from a
translation is a schema gap. The store is never modified.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .reports import render_console, render_json, write_reports
from .store import ContentStore
from .utils.config import Config
from .utils.logger import add_logging_arguments, setup_logging_from_args
from .verifier import verify_store


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Herbapedia content verifier",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m herbapedia.verify
    python -m herbapedia.verify --report
    python -m herbapedia.verify --json > report.json
    python -m herbapedia.verify --strict
        """
    )
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--report", action="store_true", help="Write Markdown and JSON report files")
    parser.add_argument("--strict", action="store_true",
                        help="Exit with status 1 when incomplete entities exist")
    parser.add_argument("--content-dir", help="Content store directory")
    parser.add_argument("--config", help="YAML config file")
    add_logging_arguments(parser, default_level="WARNING")
    args = parser.parse_args(argv)

    # stdout carries the JSON document
    setup_logging_from_args(args, quiet=args.json)
    config = Config.load(args.config)
    content_dir = Path(args.content_dir) if args.content_dir else config.store.content_dir
    strict = args.strict or config.verify.strict

    result = verify_store(ContentStore(content_dir), config.verify.fields)

    if args.json:
        print(render_json(result))
    else:
        print(render_console(result))

    if args.report:
        write_reports(result, config.verify.markdown_report, config.verify.json_report)
        print(f"Reports saved: {config.verify.markdown_report}, {config.verify.json_report}",
              file=sys.stderr)

    if strict and result.incomplete > 0:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
