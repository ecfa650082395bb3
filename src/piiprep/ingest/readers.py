"""Readers for member CSV files and event JSON files."""

import csv
import json
import logging
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from ..errors import IngestFileError
from ..schemas.base import EventRow, MemberRow

logger = logging.getLogger(__name__)

EMAIL_COLUMN_PREFIX = "email_"
PHONE_COLUMN_PREFIX = "phone_"


def read_member_csv(path: Union[str, Path]) -> List[MemberRow]:
    """
    Read audience members from a CSV file with a header row.

    Columns named ``email_*`` hold email addresses and ``phone_*`` hold phone
    numbers. Blank cells are ignored, as are rows with no data at all.
    """
    members: List[MemberRow] = []
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        # Header is line 1
        for line_number, row in enumerate(reader, start=2):
            member = MemberRow()
            for field_name, field_value in row.items():
                # Cells past the header land under a None key, short rows give None values
                if not field_name or field_value is None:
                    continue
                value = field_value.strip()
                if not value:
                    continue

                if field_name.startswith(EMAIL_COLUMN_PREFIX):
                    member.emails.append(value)
                elif field_name.startswith(PHONE_COLUMN_PREFIX):
                    member.phone_numbers.append(value)
                else:
                    logger.warning("Ignoring unrecognized field: %s", field_name)

            if member.emails or member.phone_numbers:
                members.append(member)
            else:
                logger.warning("Ignoring line %d. No data.", line_number)

    logger.info("Read %d member rows from %s", len(members), path)
    return members


def read_event_json(path: Union[str, Path]) -> List[EventRow]:
    """
    Read event rows from a JSON file holding an array of event objects.

    Elements that are objects but do not match the event row shape are
    skipped with a warning, so one bad record does not sink the file.

    Raises:
        IngestFileError: If the file is not valid JSON, is not an array, or
            holds an element that is not an object.
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise IngestFileError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, list):
        raise IngestFileError(
            f"Expected a JSON array of events in {path}, got {type(data).__name__}"
        )

    rows: List[EventRow] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise IngestFileError(f"Event #{index} in {path} is not an object")
        try:
            rows.append(EventRow.model_validate(item))
        except ValidationError as e:
            logger.warning(
                "Skipping event #%d in %s: %d invalid field(s): %s",
                index,
                path,
                e.error_count(),
                ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors()),
            )

    logger.info("Read %d event rows from %s", len(rows), path)
    return rows
