"""Microsoft To Do records as returned by Microsoft Graph.

Field names follow the Graph schema through camelCase aliases, see
https://docs.microsoft.com/en-us/graph/api/resources/todotask
"""

import logging
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

GRAPH_DATETIME_LAYOUT = "%Y-%m-%dT%H:%M:%S.0000000"
GRAPH_TIMEZONE = "UTC"

# Graph sends seven fractional digits; datetime handles at most six
_FRACTION = re.compile(r"(\.\d{6})\d+")

logger = logging.getLogger(__name__)


class Importance(str, Enum):
    """Task importance options"""
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class TaskStatus(str, Enum):
    """Task status options, in their displayed form"""
    NOT_STARTED = "not started"
    IN_PROGRESS = "in progress"
    COMPLETED = "completed"
    WAITING_ON_OTHERS = "waiting on others"
    DEFERRED = "deferred"

    @classmethod
    def from_graph(cls, value: str) -> "TaskStatus":
        """``waitingOnOthers`` -> ``waiting on others``"""
        return cls(re.sub(r"(?<!^)(?=[A-Z])", " ", value).lower())

    def to_graph(self) -> str:
        first, *rest = self.value.split(" ")
        return first + "".join(word.title() for word in rest)


def parse_graph_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp as written by Graph"""
    value = _FRACTION.sub(r"\1", value.replace('Z', '+00:00'))
    return datetime.fromisoformat(value)


def load_timezone(name: str):
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown time zone '{name}', assuming UTC")
        return timezone.utc


def to_graph_datetime(value: datetime) -> Dict[str, str]:
    """Serialize a local (naive) or aware datetime as a dateTimeTimeZone in UTC"""
    if value.tzinfo is None:
        value = value.astimezone()
    utc = value.astimezone(timezone.utc)
    return {"dateTime": utc.strftime(GRAPH_DATETIME_LAYOUT), "timeZone": GRAPH_TIMEZONE}


def to_graph_date(value: datetime) -> Dict[str, str]:
    """Serialize the calendar date of ``value`` as a dateTimeTimeZone"""
    midnight = value.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=None)
    return {"dateTime": midnight.strftime(GRAPH_DATETIME_LAYOUT), "timeZone": GRAPH_TIMEZONE}


class GraphModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TodoTaskList(GraphModel):
    """A task list"""
    id: str = Field(..., description="Identifier of the task list, unique in the user's mailbox")
    display_name: str = Field(..., alias="displayName", description="Name of the task list")
    is_owner: bool = Field(default=False, alias="isOwner", description="True if the user owns the list")
    is_shared: bool = Field(default=False, alias="isShared", description="True if the list is shared")
    wellknown_list_name: Optional[str] = Field(
        None,
        alias="wellknownListName",
        description="none, defaultList, flaggedEmails or unknownFutureValue",
    )


class TodoTask(GraphModel):
    """A task in a task list"""
    id: Optional[str] = None
    title: str
    importance: Importance = Importance.NORMAL
    is_reminder_on: bool = Field(default=False, alias="isReminderOn")
    status: TaskStatus = TaskStatus.NOT_STARTED
    reminder_date_time: Optional[datetime] = Field(None, alias="reminderDateTime")
    due_date_time: Optional[datetime] = Field(None, alias="dueDateTime")
    completed_date_time: Optional[datetime] = Field(None, alias="completedDateTime")
    created_date_time: Optional[datetime] = Field(None, alias="createdDateTime")
    last_modified_date_time: Optional[datetime] = Field(None, alias="lastModifiedDateTime")

    @field_validator('status', mode='before')
    @classmethod
    def validate_status(cls, v: Any) -> Any:
        if isinstance(v, str) and " " not in v:
            return TaskStatus.from_graph(v)
        return v

    @field_validator('reminder_date_time', 'completed_date_time', mode='before')
    @classmethod
    def validate_date_time_time_zone(cls, v: Any) -> Any:
        # {"dateTime": "2021-07-09T00:00:00.0000000", "timeZone": "UTC"}
        if isinstance(v, dict):
            moment = parse_graph_timestamp(v['dateTime'])
            return moment.replace(tzinfo=load_timezone(v.get('timeZone') or GRAPH_TIMEZONE))
        return v

    @field_validator('due_date_time', mode='before')
    @classmethod
    def validate_due_date(cls, v: Any) -> Any:
        # due dates are calendar dates, so the wall-clock value is kept as is
        if isinstance(v, dict):
            return parse_graph_timestamp(v['dateTime'])
        return v

    @field_validator('created_date_time', 'last_modified_date_time', mode='before')
    @classmethod
    def validate_timestamp(cls, v: Any) -> Any:
        if isinstance(v, str):
            return parse_graph_timestamp(v)
        return v

    def to_payload(self) -> Dict[str, Any]:
        """Body for creating this task"""
        payload: Dict[str, Any] = {
            "title": self.title,
            "importance": self.importance.value,
            "isReminderOn": self.is_reminder_on,
            "status": self.status.to_graph(),
        }
        if self.reminder_date_time is not None:
            payload["reminderDateTime"] = to_graph_datetime(self.reminder_date_time)
        if self.due_date_time is not None:
            payload["dueDateTime"] = to_graph_date(self.due_date_time)
        return payload


def parse_task_lists(items: List[Dict[str, Any]]) -> List[TodoTaskList]:
    return [TodoTaskList.model_validate(item) for item in items]


def parse_tasks(items: List[Dict[str, Any]]) -> List[TodoTask]:
    return [TodoTask.model_validate(item) for item in items]
