"""Table rendering for task lists and tasks."""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from rich import box
from rich.console import Console
from rich.table import Table

from .dates import format_instant, to_local_naive

TABLE_STYLES: Dict[str, box.Box] = {
    "Default": box.ASCII,
    "Bold": box.HEAVY,
    "Double": box.DOUBLE,
    "Light": box.SQUARE,
    "Rounded": box.ROUNDED,
    "Heavy": box.HEAVY_EDGE,
    "Simple": box.SIMPLE,
    "Minimal": box.MINIMAL,
    "Markdown": box.MARKDOWN,
}

IGNORED_COLUMN_CHARS = " [{}]"
COMPLETED = "completed"
ASC = "asc"
DSC = "dsc"
NO_SORT = "none"
SORT_OPTIONS = (ASC, DSC, NO_SORT)

Transformer = Callable[[Any], str]


class OutputError(ValueError):
    """Raised for invalid column or sort options"""


# ==========================================
# CELL TRANSFORMERS
# ==========================================

def bool_to_emoji(value: bool) -> str:
    return "✅" if value else "❌"


def transform(value: Any) -> str:
    """Render a cell based on its type"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return bool_to_emoji(value)
    if isinstance(value, datetime):
        return relative_time(value)
    if hasattr(value, 'value'):
        return str(value.value)
    return str(value)


def status_transform(value: Any) -> str:
    text = transform(value)
    return "✅" if text == COMPLETED else f"⏳ {text}"


def absolute_time(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone()
    return f"{format_instant(value, with_time=True)}{_zone_suffix(value)}"


def relative_time(value: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Format a datetime relative to now (e.g. '2 days ago', 'in 3 hours')"""
    if value is None:
        return ""
    local = to_local_naive(value)
    now = now or datetime.now()
    seconds = int((local - now).total_seconds())

    magnitude = abs(seconds)
    for unit, size in (("year", 365 * 86400), ("month", 30 * 86400), ("week", 7 * 86400),
                       ("day", 86400), ("hour", 3600), ("minute", 60)):
        if magnitude >= size:
            count = magnitude // size
            break
    else:
        return "now"

    amount = f"{count} {unit}{'s' if count != 1 else ''}"
    text = f"in {amount}" if seconds > 0 else f"{amount} ago"
    return f"{text}{_zone_suffix(value)}"


def _zone_suffix(value: datetime) -> str:
    if value.tzinfo is None:
        return ""
    return f" ({value.tzname()})"


# ==========================================
# COLUMNS
# ==========================================

@dataclass(frozen=True)
class Column:
    name: str
    getter: Callable[[Any], Any]
    justify: str = "center"
    transformer: Transformer = transform


def get_allowed_columns(exclude: str, columns: Sequence[Column]) -> List[Column]:
    """Drop the comma-separated ``exclude`` names (case-insensitive)"""
    exclude = exclude.strip(IGNORED_COLUMN_CHARS)
    if not exclude:
        return list(columns)

    names = {c.name.lower() for c in columns}
    excluded = set()
    for name in exclude.split(","):
        name = name.strip(IGNORED_COLUMN_CHARS).lower()
        if not name:
            continue
        if name not in names:
            raise OutputError(f"column '{name}' is not a valid column to exclude")
        excluded.add(name)

    return [c for c in columns if c.name.lower() not in excluded]


def find_column(name: str, columns: Sequence[Column]) -> Column:
    wanted = name.strip(IGNORED_COLUMN_CHARS).lower()
    for column in columns:
        if column.name.lower() == wanted or column.name.lower().replace(" ", "-") == wanted:
            return column
    raise OutputError(f"'{name}' is not a valid column - valid columns: {', '.join(c.name for c in columns)}")


# ==========================================
# SORTING
# ==========================================

def get_sort_mode(flag: str) -> Optional[bool]:
    """Map asc/dsc/none to descending=False/True/None"""
    flag = flag.strip().lower()
    if flag not in SORT_OPTIONS:
        raise OutputError(f"invalid sort option - valid options: [{', '.join(SORT_OPTIONS)}]")
    if flag == NO_SORT:
        return None
    return flag == DSC


def get_sort_by_columns(flag: str, columns: Sequence[Column]) -> List[Tuple[Column, bool]]:
    """Parse ``[title:dsc,created:asc,status]`` into (column, descending) pairs"""
    flag = flag.strip(IGNORED_COLUMN_CHARS)
    if not flag or flag.lower() == NO_SORT:
        return []

    sort_by = []
    for item in flag.split(","):
        name, _, direction = item.partition(":")
        descending = get_sort_mode(direction or ASC)
        if descending is None:
            raise OutputError(f"invalid sort direction for '{name.strip()}' - valid options: [{ASC}, {DSC}]")
        sort_by.append((find_column(name, columns), descending))
    return sort_by


def _sort_key(value: Any) -> Any:
    if isinstance(value, datetime):
        return to_local_naive(value)
    if hasattr(value, 'value'):
        return value.value
    if isinstance(value, str):
        return value.lower()
    return value


def sort_items(items: List[Any], sort_by: Sequence[Tuple[Column, bool]]) -> List[Any]:
    """Stable multi-key sort; missing values go last in either direction"""
    items = list(items)
    for column, descending in reversed(sort_by):
        present = [i for i in items if column.getter(i) is not None]
        missing = [i for i in items if column.getter(i) is None]
        present.sort(key=lambda i: _sort_key(column.getter(i)), reverse=descending)
        items = present + missing
    return items


# ==========================================
# RENDERING
# ==========================================

def build_table(items: Sequence[Any], columns: Sequence[Column], style: str = "Default") -> Table:
    table = Table(box=TABLE_STYLES[style], show_header=True)
    for column in columns:
        table.add_column(column.name, justify=column.justify)
    for item in items:
        table.add_row(*(column.transformer(column.getter(item)) for column in columns))
    return table


def render_table(items: Sequence[Any], columns: Sequence[Column], style: str = "Default",
                 console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(build_table(items, columns, style))


def task_list_columns() -> List[Column]:
    return [
        Column("ID", lambda l: l.id, justify="left"),
        Column("Name", lambda l: l.display_name, justify="left"),
        Column("Owner", lambda l: l.is_owner),
        Column("Shared", lambda l: l.is_shared),
    ]


def task_columns(absolute: bool = False) -> List[Column]:
    time_transformer = _time_transformer(absolute)
    return [
        Column("ID", lambda t: t.id, justify="left"),
        Column("Title", lambda t: t.title, justify="left"),
        Column("Importance", lambda t: t.importance),
        Column("Status", lambda t: t.status, transformer=status_transform),
        Column("Reminder", lambda t: t.reminder_date_time, transformer=time_transformer),
        Column("Due Date", lambda t: t.due_date_time, transformer=_due_transformer(absolute)),
        Column("Completed", lambda t: t.completed_date_time, transformer=time_transformer),
        Column("Created", lambda t: t.created_date_time, transformer=time_transformer),
        Column("Last Modified", lambda t: t.last_modified_date_time, transformer=time_transformer),
    ]


def _time_transformer(absolute: bool) -> Transformer:
    return absolute_time if absolute else relative_time


def _due_transformer(absolute: bool) -> Transformer:
    if absolute:
        return lambda v: format_instant(v) if v is not None else ""
    return relative_time


def matches_regex(pattern: Optional["re.Pattern"], text: str) -> bool:
    return pattern is None or pattern.search(text) is not None
