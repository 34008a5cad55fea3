"""Command-line interface for Microsoft To Do."""

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from functools import cached_property
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Pattern

import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .auth import AuthenticationError, TodoAuth
from .client import ApiError, TodoClient
from .config import (
    DEFAULT_CONFIG_DIR,
    ConfigError,
    Settings,
    load_settings,
    save_settings,
    validate_settings,
)
from .dates import DateParseError, DateParser, DateRange, matches
from .models import Importance, TaskStatus, TodoTask
from .output import (
    OutputError,
    get_allowed_columns,
    get_sort_by_columns,
    get_sort_mode,
    matches_regex,
    render_table,
    sort_items,
    task_columns,
    task_list_columns,
)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
TRIM_CHARS = "'\" "
ID_COLUMN = "ID"

SETUP_STEPS = """To register mstodo with Microsoft:
1. Go to https://portal.azure.com/ and open 'App registrations'
2. Register a new application for personal and work accounts
3. Add a 'Mobile and desktop applications' redirect URI: http://localhost:{port}/
4. Under 'Certificates & secrets' create a client secret
5. Under 'API permissions' add Tasks.ReadWrite and User.Read"""

app = typer.Typer(
    name="mstodo",
    help="mstodo is a CLI program for using Microsoft To Do.",
    add_completion=False,
    no_args_is_help=True,
)

error_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def now() -> datetime:
    return datetime.now()


@dataclass
class State:
    config_dir: Path
    port: Optional[int] = None
    auth_timeout: Optional[int] = None

    @cached_property
    def settings(self) -> Settings:
        return load_settings(self.config_dir, port=self.port, auth_timeout=self.auth_timeout)


def get_client(state: State) -> TodoClient:
    credentials = TodoAuth(state.settings, state.config_dir).get_credentials()
    return TodoClient(credentials)


@contextmanager
def reported_errors() -> Iterator[None]:
    """Print expected failures on stderr and exit with code 1"""
    try:
        yield
    except (DateParseError, ConfigError, AuthenticationError, ApiError, OutputError) as e:
        report(str(e))
        raise typer.Exit(1)
    except re.error as e:
        report(f"invalid regex {e.pattern!r}: {e}")
        raise typer.Exit(1)


def report(message: str) -> None:
    error_console.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)


def fail(message: str) -> None:
    raise OutputError(message)


def compile_filter(pattern: Optional[str]) -> Optional[Pattern]:
    if pattern is None:
        return None
    return re.compile(pattern)


def hide_id(exclude: str, show_id: bool) -> str:
    if show_id:
        return exclude
    return f"{ID_COLUMN},{exclude}" if exclude.strip() else ID_COLUMN


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path = typer.Option(DEFAULT_CONFIG_DIR, "--config-dir", help="Config directory"),
    port: Optional[int] = typer.Option(None, "--port", help="Port for the login callback server"),
    auth_timeout: Optional[int] = typer.Option(
        None, "--auth-timeout", help="Seconds to wait before giving up on authentication"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show log messages"),
) -> None:
    """mstodo is a CLI program for using Microsoft To Do.

    To see available commands, type mstodo --help
    """
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING, format=LOG_FORMAT)
    ctx.obj = State(config_dir=config_dir, port=port, auth_timeout=auth_timeout)


@app.command("version")
def version() -> None:
    """Show the mstodo version."""
    typer.echo(__version__)


# ==========================================
# SETUP
# ==========================================

@app.command("init")
def init_config(
    ctx: typer.Context,
    client_id: str = typer.Option(..., prompt=True, help="Application (client) ID"),
    client_secret: str = typer.Option(..., prompt=True, hide_input=True, help="Client secret"),
    port: int = typer.Option(8400, "--callback-port", help="Port for the login callback server"),
    auth_timeout: int = typer.Option(120, "--timeout", help="Seconds to wait for the browser login"),
    table_style: str = typer.Option("Default", help="Table border style"),
    tenant: str = typer.Option("common", help="Azure AD tenant"),
) -> None:
    """Write the mstodo configuration file."""
    state: State = ctx.obj
    typer.echo(SETUP_STEPS.format(port=port))

    with reported_errors():
        settings = validate_settings({
            "client_id": client_id,
            "client_secret": client_secret,
            "port": port,
            "auth_timeout": auth_timeout,
            "table_style": table_style,
            "tenant": tenant,
        })
        path = save_settings(settings, state.config_dir)

    typer.echo(f"Configuration written to {path}")


@app.command("login")
def login(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", "-f", help="Log in again even if a token is cached"),
) -> None:
    """Authenticate with Microsoft and cache the token."""
    state: State = ctx.obj
    with reported_errors():
        TodoAuth(state.settings, state.config_dir).get_credentials(force_login=force)
    typer.echo("✅ Logged in")


# ==========================================
# TASK LISTS
# ==========================================

@app.command("lists")
def lists(
    ctx: typer.Context,
    filter_flag: str = typer.Option(".", "--filter", "-f", help="Filter the lists which contain this regex"),
    sort: str = typer.Option("none", "--sort", "-s", help="Sort by the name - choices: [asc, dsc, none]"),
    exclude: str = typer.Option("", "--exclude", "-x", help="Exclude columns"),
    show_id: bool = typer.Option(False, "--id", "-i", help="Show the list IDs"),
) -> None:
    """Get a list of the Microsoft To Do task lists."""
    state: State = ctx.obj
    with reported_errors():
        pattern = compile_filter(filter_flag)
        descending = get_sort_mode(sort)
        all_columns = task_list_columns()
        columns = get_allowed_columns(hide_id(exclude, show_id), all_columns)

        task_lists = get_client(state).list_task_lists()
        logger.info(f"Fetched {len(task_lists)} task lists")

        rows = [l for l in task_lists if matches_regex(pattern, l.display_name)]
        if descending is not None:
            name_column = next(c for c in all_columns if c.name == "Name")
            rows = sort_items(rows, [(name_column, descending)])

        render_table(rows, columns, state.settings.table_style, Console())


# ==========================================
# TASKS
# ==========================================

@dataclass
class ViewFilters:
    title: Optional[Pattern] = None
    status: Optional[Pattern] = None
    reminder: Optional[DateRange] = None
    due: Optional[DateRange] = None
    completed: Optional[DateRange] = None
    created: Optional[DateRange] = None
    last_modified: Optional[DateRange] = None

    def accepts(self, task: TodoTask) -> bool:
        if not matches_regex(self.title, task.title):
            return False
        if not matches_regex(self.status, task.status.value):
            return False
        checks = (
            (self.reminder, task.reminder_date_time),
            (self.due, task.due_date_time),
            (self.completed, task.completed_date_time),
            (self.created, task.created_date_time),
            (self.last_modified, task.last_modified_date_time),
        )
        return all(matches(date_range, value) for date_range, value in checks)


def parse_range_flag(parser: DateParser, flag: Optional[str]) -> Optional[DateRange]:
    if flag is None:
        return None
    return parser.parse_range(flag)


@app.command("view")
def view(
    ctx: typer.Context,
    list_name: str = typer.Argument(..., help="Name of the task list"),
    title: Optional[str] = typer.Option(None, "--title", "-l", help="Filter the task names which contain this regex"),
    status: Optional[str] = typer.Option(None, "--status", "-u", help="Filter the status (use 'completed' for ✅)"),
    reminder: Optional[str] = typer.Option(None, "--reminder", "-r", help="Filter by reminder using the date syntax"),
    due: Optional[str] = typer.Option(None, "--due", "-d", help="Filter by due date using the date syntax"),
    completed: Optional[str] = typer.Option(None, "--completed", "-o", help="Filter by completed using the date syntax"),
    created: Optional[str] = typer.Option(None, "--created", "-c", help="Filter by created using the date syntax"),
    last_modified: Optional[str] = typer.Option(
        None, "--last-modified", "-m", help="Filter by last-modified using the date syntax"
    ),
    sort: str = typer.Option("none", "--sort", "-s", help="Sort by the fields, for example: --sort=\"[title:dsc,created:asc,status]\""),
    exclude: str = typer.Option("", "--exclude", "-x", help="Exclude columns"),
    absolute: bool = typer.Option(False, "--absolute", "-a", help="Show absolute datetime"),
    show_id: bool = typer.Option(False, "--id", "-i", help="Show the task IDs"),
) -> None:
    """View a specific task list.

    Dates can be filtered by specifying the start and/or end date you're
    interested in. For example:

    --reminder="start Monday; end fri"
    """
    state: State = ctx.obj
    with reported_errors():
        parser = DateParser(clock=now)
        filters = ViewFilters(
            title=compile_filter(title),
            status=compile_filter(status),
            reminder=parse_range_flag(parser, reminder),
            due=parse_range_flag(parser, due),
            completed=parse_range_flag(parser, completed),
            created=parse_range_flag(parser, created),
            last_modified=parse_range_flag(parser, last_modified),
        )

        all_columns = task_columns(absolute)
        sort_by = get_sort_by_columns(sort, all_columns)
        columns = get_allowed_columns(hide_id(exclude, show_id), all_columns)

        name = list_name.strip(TRIM_CHARS)
        if not name:
            fail("missing list name")

        client = get_client(state)
        tasks = client.list_tasks(client.get_list_id(name))

        rows = sort_items([t for t in tasks if filters.accepts(t)], sort_by)
        logger.info(f"Showing {len(rows)} of {len(tasks)} tasks from '{name}'")
        render_table(rows, columns, state.settings.table_style, Console())


def choice(value: str, options: List[str], field: str) -> str:
    value = value.strip(TRIM_CHARS).lower()
    if value not in options:
        fail(f"'{value}' is not a valid value for {field} - choices: [{', '.join(options)}]")
    return value


def build_task(
    parser: DateParser,
    title: str,
    reminder: Optional[str] = None,
    due_date: Optional[str] = None,
    importance: str = Importance.NORMAL.value,
    status: str = TaskStatus.NOT_STARTED.value,
) -> TodoTask:
    """Validate the add flags and assemble the task to create"""
    title = title.strip(TRIM_CHARS)
    if not title:
        fail("title is empty")

    task = TodoTask(
        title=title,
        importance=Importance(choice(importance, [i.value for i in Importance], "importance")),
        status=TaskStatus(choice(status, [s.value for s in TaskStatus], "status")),
    )

    reminder = (reminder or "").strip(TRIM_CHARS)
    if reminder:
        task.reminder_date_time = parser.parse_datetime(reminder)
        task.is_reminder_on = True

    due_date = (due_date or "").strip(TRIM_CHARS)
    if due_date:
        task.due_date_time = parser.parse_date(due_date)

    return task


@app.command("add")
def add(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Title of the task"),
    list_name: str = typer.Option("tasks", "--list", "-l", help="Add the task to the specified list"),
    reminder: Optional[str] = typer.Option(
        None, "--reminder", "-r", help="Task reminder (date time). For example, --reminder=\"Next Friday at 15:00\""
    ),
    due_date: Optional[str] = typer.Option(
        None, "--due-date", "-d", help="Task due date (date). For example, --due-date=\"next friday\""
    ),
    importance: str = typer.Option(
        Importance.NORMAL.value, "--importance", "-i",
        help=f"Task importance - choices: [{', '.join(i.value for i in Importance)}]",
    ),
    status: str = typer.Option(
        TaskStatus.NOT_STARTED.value, "--status", "-s",
        help=f"Task status - choices: [{', '.join(s.value for s in TaskStatus)}]",
    ),
) -> None:
    """Add a task."""
    state: State = ctx.obj
    with reported_errors():
        task = build_task(DateParser(clock=now), title, reminder, due_date, importance, status)

        client = get_client(state)
        created = client.create_task(client.get_list_id(list_name.strip(TRIM_CHARS)), task)

    typer.echo(f"✅ Task created: {created.title}")


def run() -> None:
    app()
