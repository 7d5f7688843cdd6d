# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_identity

"""
Timestamp in the format required by the ESIA documentation.
"""

from datetime import datetime

TIMESTAMP_FORMAT = "%Y.%m.%d %H:%M:%S %z"


def get_timestamp(now: datetime | None = None) -> str:
    """
    Formats the local time as `YYYY.MM.DD HH:MM:SS +HHMM`.

    Args:
        now: The moment to format. Defaults to the current time.
            Naive datetimes are treated as local time.

    Returns:
        str: The formatted timestamp, e.g. "2015.06.03 02:01:02 +0300".
    """
    if now is None:
        now = datetime.now()

    # astimezone() on a naive value attaches the local UTC offset
    return now.astimezone().strftime(TIMESTAMP_FORMAT)
