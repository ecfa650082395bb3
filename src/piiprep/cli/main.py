"""
CLI to build ingestion requests from member and event files.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from piiprep import Encoding, InvalidInputError, UserDataFormatter
from piiprep.errors import IngestFileError
from piiprep.ingest import (
    build_audience_members,
    build_audience_members_requests,
    build_destination,
    build_events,
    build_events_requests,
    read_event_json,
    read_member_csv,
)

REQUIRED_OPTIONS = {
    "audience": (
        "operating_account_type",
        "operating_account_id",
        "audience_id",
        "csv_file",
    ),
    "events": (
        "operating_account_type",
        "operating_account_id",
        "conversion_action_id",
        "json_file",
    ),
}

PATH_OPTIONS = ("csv_file", "json_file", "output")
FLAG_OPTIONS = ("pretty", "verbose")
BOOLEAN_OPTIONS = ("validate_only",) + FLAG_OPTIONS


def _add_common_arguments(parser):
    parser.add_argument(
        "--operating-account-type",
        help="The account type of the operating account (e.g., GOOGLE_ADS)",
    )
    parser.add_argument(
        "--operating-account-id",
        help="The ID of the operating account",
    )
    parser.add_argument(
        "--login-account-type",
        help="The account type of the login account",
    )
    parser.add_argument(
        "--login-account-id",
        help="The ID of the login account",
    )
    parser.add_argument(
        "--linked-account-type",
        help="The account type of the linked account",
    )
    parser.add_argument(
        "--linked-account-id",
        help="The ID of the linked account",
    )
    parser.add_argument(
        "--validate-only",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Only validate the request, without applying changes (default: on)",
    )
    parser.add_argument(
        "--encoding",
        choices=[e.value for e in Encoding],
        help="Encoding for hashed identifiers (default: $PIIPREP_ENCODING or hex)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a JSON file with option defaults",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output file path (default: stdout)",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty print JSON output",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress at INFO level",
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="piiprep",
        description="Normalize, hash and batch user data for ingestion",
    )
    subparsers = parser.add_subparsers(dest="command")

    audience = subparsers.add_parser(
        "audience",
        help="Build audience member requests from a CSV file",
    )
    _add_common_arguments(audience)
    audience.add_argument(
        "--audience-id",
        help="The ID of the destination audience",
    )
    audience.add_argument(
        "--csv-file",
        type=Path,
        help="CSV file with email_* and phone_* columns",
    )

    events = subparsers.add_parser(
        "events",
        help="Build event requests from a JSON file",
    )
    _add_common_arguments(events)
    events.add_argument(
        "--conversion-action-id",
        help="The ID of the conversion action",
    )
    events.add_argument(
        "--json-file",
        type=Path,
        help="JSON file containing an array of events",
    )

    return parser


def apply_config(args: argparse.Namespace, config_path: Path) -> None:
    """
    Fill options not given on the command line from a JSON config file.

    Raises:
        ValueError: If the file is not a JSON object, names an unknown option,
            or gives an option a value of the wrong type.
    """
    config = json.loads(config_path.read_text())
    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} must hold a JSON object")

    for key, value in config.items():
        dest = key.replace("-", "_")
        if dest in ("command", "config") or not hasattr(args, dest):
            raise ValueError(f"Unknown option in config file: {key}")
        if dest in BOOLEAN_OPTIONS:
            if not isinstance(value, bool):
                raise ValueError(
                    f"Config option {key} must be true or false, got {json.dumps(value)}"
                )
        elif value is not None and not isinstance(value, str):
            raise ValueError(
                f"Config option {key} must be a string, got {json.dumps(value)}"
            )
        current = getattr(args, dest)
        if current is None or (current is False and dest in FLAG_OPTIONS):
            if dest in PATH_OPTIONS and value is not None:
                value = Path(value)
            setattr(args, dest, value)


def main(argv=None):
    # .env in the working directory, not next to this module
    load_dotenv(find_dotenv(usecwd=True))

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.config:
        try:
            apply_config(args, args.config)
        except OSError as e:
            print(f"Error: Cannot read config file: {e}", file=sys.stderr)
            sys.exit(1)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    missing = [
        "--" + name.replace("_", "-")
        for name in REQUIRED_OPTIONS[args.command]
        if not getattr(args, name)
    ]
    if missing:
        parser.error(f"the following arguments are required: {', '.join(missing)}")

    validate_only = True if args.validate_only is None else bool(args.validate_only)

    try:
        formatter = UserDataFormatter(encoding=args.encoding)
    except InvalidInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    product_destination_id = (
        args.audience_id if args.command == "audience" else args.conversion_action_id
    )
    try:
        destination = build_destination(
            operating_account_type=args.operating_account_type,
            operating_account_id=args.operating_account_id,
            product_destination_id=product_destination_id,
            login_account_type=args.login_account_type,
            login_account_id=args.login_account_id,
            linked_account_type=args.linked_account_type,
            linked_account_id=args.linked_account_id,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    input_path = args.csv_file if args.command == "audience" else args.json_file
    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "audience":
            members = build_audience_members(read_member_csv(input_path), formatter)
            requests = build_audience_members_requests(
                members, destination, formatter.encoding, validate_only=validate_only
            )
        else:
            events = build_events(read_event_json(input_path), formatter)
            requests = build_events_requests(
                events, destination, formatter.encoding, validate_only=validate_only
            )
    except (IngestFileError, UnicodeDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    indent = 2 if args.pretty else None
    output = json.dumps([request.to_payload() for request in requests], indent=indent)

    if args.output:
        args.output.write_text(output)
    else:
        print(output)

    print(f"# of requests built: {len(requests)}", file=sys.stderr)


if __name__ == "__main__":
    main()
