"""Canonical naming for dated source files."""

import re
from pathlib import Path

from ..errors import NoMatchError
from .models import RenamePlan

EXPECTED_PATTERN = "<prefix>_<ddmmyyyy>.<extension>"
DEFAULT_DATE_PATTERN = re.compile(r"^\S+_(\d{8})\.([^.\s]+)$")


def try_rename(
    file_name: str,
    date_pattern: re.Pattern[str] = DEFAULT_DATE_PATTERN,
    *,
    prefix: str,
    extension: str | None = None,
) -> RenamePlan:
    """Build the canonical ``<prefix>_<yyyymmdd>.<ext>`` name.

    The first group of ``date_pattern`` must capture the 8 digit
    ``ddmmyyyy`` token. Day, month and year are cut at fixed offsets
    of that token. Without ``extension`` the source extension is kept.

    Raises NoMatchError naming the file when the shape is wrong.
    """
    match = date_pattern.match(file_name)
    if match is None:
        raise NoMatchError(
            f"File name '{file_name}' does not match the expected pattern "
            f"'{EXPECTED_PATTERN}'"
        )

    token = match.group(1)
    if len(token) != 8 or not token.isdigit():
        raise NoMatchError(
            f"File name '{file_name}' has no 8 digit date token "
            f"matching '{EXPECTED_PATTERN}'"
        )

    day, month, year = token[0:2], token[2:4], token[4:8]
    target_ext = (extension or Path(file_name).suffix).lstrip(".")

    return RenamePlan(new_file_name=f"{prefix}_{year}{month}{day}.{target_ext}", year=year)


def destination_folder(root: Path, year: str, year_subfolder: bool) -> Path:
    """Return the folder a renamed file belongs in."""
    if year_subfolder:
        return root / year
    return root
