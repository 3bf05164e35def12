"""
Utilities for the elections module.
"""

import json
import uuid

import pytz

from datetime import datetime
from nexus.config import TIMEZONE


# -- JSON manipulation --


def to_json(d: dict):
    return json.dumps(d, sort_keys=True, default=str)


# -- Identifiers --


def generate_id():
    return str(uuid.uuid4())


# -- Results --


def percentage(votes: int, total: int) -> float:
    if not total:
        return 0
    return round(votes / total * 100, 2)


# -- Datetime --


def tz_now():
    """
    Current time in TIMEZONE, normalised to UTC before it is stored.
    """
    tz = pytz.timezone(TIMEZONE)
    return as_utc(datetime.now(tz))


def as_aware(value: datetime | None):
    """
    Datetimes read back from the database may come without tzinfo
    (MySQL and SQLite drop it); those are taken to be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value


def as_utc(value: datetime | None):
    # the DateTime columns keep no offset, every stored value is UTC
    if value is None:
        return None
    return as_aware(value).astimezone(pytz.utc)
