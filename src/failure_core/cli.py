"""failure_core command line tool.

Classify failure messages and redact dead-letter payloads from the shell,
e.g. when triaging an exported DLQ item.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

import yaml
from dotenv import load_dotenv

from failure_core.config import FailureCoreConfig, build_redactor, load_config
from failure_core.errors.classifier import classify_workflow_error
from failure_core.errors.exceptions import ConfigurationError
from failure_core.logging.setup import setup_logging
from failure_core.logging.utilities import truncate_message
from failure_core.redaction.idempotency import sanitize_idempotency_payload
from failure_core.utils.json_serializers import json_serializer

logger = logging.getLogger(__name__)


def _read_json(path: Optional[Path], stdin: TextIO) -> object:
    if path is None:
        return json.load(stdin)
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def cmd_classify(args: argparse.Namespace, config: FailureCoreConfig) -> int:
    """Execute classify command."""
    if args.file is not None:
        error = _read_json(args.file, sys.stdin)
    else:
        error = " ".join(args.message)

    classification = classify_workflow_error(error)
    message = truncate_message(classification.message, config.max_message_length)

    if args.json:
        output = classification.to_dict()
        output["message"] = message
        print(json.dumps(output, indent=2))
    else:
        verdict = "retriable" if classification.retriable else "not retriable"
        print(f"{classification.category.value} ({verdict}): {message}")

    logger.debug(
        "Classified message",
        extra={"error_category": classification.category.value},
    )
    return 0


def cmd_redact(args: argparse.Namespace, config: FailureCoreConfig) -> int:
    """Execute redact command."""
    payload = _read_json(args.file, sys.stdin)

    if args.idempotency:
        redacted = sanitize_idempotency_payload(payload)
    else:
        redacted = build_redactor(config).redact(payload)

    print(json.dumps(redacted, indent=2, default=json_serializer, ensure_ascii=False))
    return 0


def cmd_config(args: argparse.Namespace, config: FailureCoreConfig) -> int:
    """Execute config command (validation already ran during load)."""
    print("✓ Configuration validation passed")
    if args.show:
        print(
            yaml.dump(
                {
                    "logging": {
                        "level": config.log_level,
                        "json": config.json_logs,
                        "log_dir": config.log_dir,
                    },
                    "redaction": {
                        "extra_sensitive_keys": config.extra_sensitive_keys,
                        "mask_phone_numbers": config.mask_phone_numbers,
                    },
                    "classification": {
                        "max_message_length": config.max_message_length,
                    },
                },
                default_flow_style=False,
                sort_keys=False,
            )
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="failure-core",
        description="Workflow failure classification and payload redaction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Classify an error message
    failure-core classify "503 service unavailable"

    # Classify a structured error payload exported from the DLQ
    failure-core classify --file error.json --json

    # Redact a step input snapshot
    failure-core redact payload.json

    # Redact from stdin with phone masking (idempotency cache format)
    cat response.json | failure-core redact --idempotency

    # Validate and show configuration
    failure-core --config config/failure_core.yaml config --show
        """,
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to YAML config file (default: config/failure_core.yaml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_classify = subparsers.add_parser("classify", help="Classify a failure")
    parser_classify.add_argument("message", nargs="*", help="Error message text")
    parser_classify.add_argument(
        "--file",
        type=Path,
        help="Read the failure value as JSON from a file",
    )
    parser_classify.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format instead of human-readable",
    )
    parser_classify.set_defaults(func=cmd_classify)

    parser_redact = subparsers.add_parser("redact", help="Redact a JSON payload")
    parser_redact.add_argument(
        "file",
        nargs="?",
        type=Path,
        help="JSON file to redact (default: stdin)",
    )
    parser_redact.add_argument(
        "--idempotency",
        action="store_true",
        help="Also mask phone numbers, as for cached idempotency responses",
    )
    parser_redact.set_defaults(func=cmd_redact)

    parser_config = subparsers.add_parser("config", help="Validate configuration")
    parser_config.add_argument(
        "--show",
        action="store_true",
        help="Display the effective configuration as YAML",
    )
    parser_config.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "classify" and not args.message and args.file is None:
        parser.error("classify requires a message or --file")

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"✗ Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(
        log_dir=Path(config.log_dir) if config.log_dir else None,
        json_format=config.json_logs,
        console_level=logging.DEBUG if args.verbose else config.log_level_number,
        redactor=build_redactor(config),
    )

    try:
        return args.func(args, config)
    except FileNotFoundError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"✗ Invalid JSON: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
