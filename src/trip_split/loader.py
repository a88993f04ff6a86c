"""Read trips from a JSON ledger file."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from .exceptions import LedgerFileError
from .models import Ledger, Trip

logger = logging.getLogger(__name__)


def parse_ledger(data: object) -> Ledger:
    """
    Validate decoded JSON into a Ledger.

    Accepts either ``{"trips": [...]}`` or a single trip object. Amounts may
    be numbers or numeric strings; both become Decimal here.

    Raises:
        LedgerFileError: If the data doesn't match either shape
    """
    try:
        if isinstance(data, dict) and "trips" in data:
            return Ledger.model_validate(data)
        return Ledger(trips=[Trip.model_validate(data)])
    except ValidationError as e:
        raise LedgerFileError(f"Invalid ledger data:\n{e}") from e


def load_ledger(path: Path) -> Ledger:
    """
    Load and validate a ledger file.

    Args:
        path: Path to a JSON ledger file

    Returns:
        The validated ledger

    Raises:
        LedgerFileError: If the file is missing, unreadable, or invalid
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise LedgerFileError(f"Ledger file not found: {path}") from e
    except UnicodeDecodeError as e:
        raise LedgerFileError(f"Ledger file {path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise LedgerFileError(f"Could not read ledger file {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise LedgerFileError(f"Ledger file {path} is not valid JSON: {e}") from e

    ledger = parse_ledger(data)

    logger.info(
        f"Loaded {len(ledger.trips)} trips "
        f"({sum(len(trip.expenses) for trip in ledger.trips)} expenses) from {path}"
    )

    return ledger
