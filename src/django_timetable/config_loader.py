"""Read conference bootstrap files.

A bootstrap file is TOML with a single ``[conference]`` table holding
``[[conference.sections]]`` and optional ``[[conference.categories]]``
arrays (see ``examples/conference.example.toml``).  The loader only checks
shape and values; writing rows is left to the ``bootstrap_conference``
management command.
"""

import datetime
import re
import tomllib
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.utils.text import slugify

from django_timetable.settings import SECTION_TYPES

CONFERENCE_KEYS: frozenset[str] = frozenset({"name", "start", "end", "timezone"})
SECTION_KEYS: frozenset[str] = frozenset({"name", "start", "end"})
CATEGORY_KEYS: frozenset[str] = frozenset({"name"})

HEX_COLOR = re.compile(r"#[0-9A-Fa-f]{6}")


def _require_table(value: object, keys: frozenset[str], where: str) -> dict[str, Any]:
    """Return *value* if it is a table carrying every key in *keys*.

    Raises:
        TypeError: If *value* is not a table.
        ValueError: If any key is absent.
    """
    if not isinstance(value, dict):
        msg = f"{where} must be a mapping, got {type(value).__name__}"
        raise TypeError(msg)
    absent = sorted(keys - value.keys())
    if absent:
        msg = f"{where} is missing required fields: {', '.join(absent)}"
        raise ValueError(msg)
    return value


def _named_tables(conf: dict[str, Any], key: str, keys: frozenset[str], *, required: bool) -> list[dict[str, Any]]:
    """Return the array of tables under ``conference.<key>``.

    Every entry needs a non-blank string ``name``, unique within the array.
    """
    where = f"conference.{key}"
    entries = conf.get(key)
    if entries is None and not required:
        return []
    if not isinstance(entries, list) or not entries and required:
        msg = f"{where} must be a non-empty list"
        raise ValueError(msg)

    names: list[str] = []
    for idx, entry in enumerate(entries):
        name = _require_table(entry, keys, f"{where}[{idx}]")["name"]
        if not isinstance(name, str) or not name.strip():
            msg = f"{where}[{idx}].name must be a non-empty string"
            raise ValueError(msg)
        names.append(name)

    repeated = sorted({name for name in names if names.count(name) > 1})
    if repeated:
        msg = f"{where} has duplicate names: {', '.join(repeated)}"
        raise ValueError(msg)
    return entries


def _check_conference(conf: dict[str, Any]) -> None:
    # TOML datetimes are dates too, so they are ruled out explicitly.
    for key in ("start", "end"):
        value = conf[key]
        if not isinstance(value, datetime.date) or isinstance(value, datetime.datetime):
            msg = f"conference.{key} must be a date (YYYY-MM-DD)"
            raise ValueError(msg)
    if conf["end"] < conf["start"]:
        msg = f"conference.end ({conf['end']}) is before conference.start ({conf['start']})"
        raise ValueError(msg)

    try:
        ZoneInfo(conf["timezone"])
    except (ZoneInfoNotFoundError, TypeError, ValueError) as exc:
        msg = f"conference.timezone is not a known time zone: {conf['timezone']!r}"
        raise ValueError(msg) from exc

    conf.setdefault("slug", slugify(conf["name"]))


def _check_section(section: dict[str, Any], where: str) -> None:
    start, end = section["start"], section["end"]
    if not (isinstance(start, datetime.datetime) and isinstance(end, datetime.datetime)):
        msg = f"{where}.start and {where}.end must be datetimes (YYYY-MM-DDTHH:MM:SS)"
        raise ValueError(msg)
    if (start.tzinfo is None) is not (end.tzinfo is None):
        msg = f"{where}.start and {where}.end must both carry an offset or both omit it"
        raise ValueError(msg)
    if end <= start:
        msg = f"{where}.end must be after {where}.start"
        raise ValueError(msg)

    if section.setdefault("type", "presentation") not in SECTION_TYPES:
        msg = f"{where}.type must be one of: {', '.join(sorted(SECTION_TYPES))}"
        raise ValueError(msg)

    capacity = section.get("capacity")
    if capacity is not None and (type(capacity) is not int or capacity < 0):
        msg = f"{where}.capacity must be a non-negative integer"
        raise ValueError(msg)


def _check_category(category: dict[str, Any], where: str) -> None:
    color = category.get("color")
    if color is not None and not (isinstance(color, str) and HEX_COLOR.fullmatch(color)):
        msg = f"{where}.color must be a hex colour like '#2563EB'"
        raise ValueError(msg)


def load_conference_config(path: str | Path) -> dict[str, Any]:
    """Load and validate a conference bootstrap file.

    Args:
        path: Location of the TOML file.

    Returns:
        The ``[conference]`` table with TOML's native types: ``date`` for the
        conference range, ``datetime`` for section windows.  ``slug`` is
        derived from ``name`` when absent and section ``type`` defaults to
        ``presentation``.

    Raises:
        FileNotFoundError: If *path* does not exist.
        TypeError: If a table or array entry has the wrong shape.
        ValueError: If the file is not TOML, or a key is missing or invalid.
    """
    path = Path(path)
    if not path.is_file():
        msg = f"Conference config file not found: {path}"
        raise FileNotFoundError(msg)

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ValueError(msg) from exc

    if "conference" not in data:
        msg = "Missing required [conference] table in config file"
        raise ValueError(msg)

    conf = _require_table(data["conference"], CONFERENCE_KEYS, "conference")
    _check_conference(conf)

    for idx, section in enumerate(_named_tables(conf, "sections", SECTION_KEYS, required=True)):
        _check_section(section, f"conference.sections[{idx}]")
    for idx, category in enumerate(_named_tables(conf, "categories", CATEGORY_KEYS, required=False)):
        _check_category(category, f"conference.categories[{idx}]")

    return conf
