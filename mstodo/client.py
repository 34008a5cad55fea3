"""Client for the Microsoft To Do endpoints of Microsoft Graph."""

import logging
from typing import Any, Dict, Iterator, List, Optional

from google.auth.credentials import Credentials
from google.auth.transport.requests import AuthorizedSession
from requests import RequestException

from .models import TodoTask, TodoTaskList, parse_task_lists, parse_tasks

GRAPH_URL = "https://graph.microsoft.com/v1.0"
NEXT_LINK = "@odata.nextLink"
HTTP_CREATED = 201

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised when a Graph request fails"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ListNotFoundError(ApiError):
    """Raised when no task list has the requested name"""


class TodoClient:
    """Client for interacting with the Microsoft To Do API"""

    def __init__(self, credentials: Credentials, session: Optional[AuthorizedSession] = None):
        self.session = session or AuthorizedSession(credentials)

    def _url(self, path: str) -> str:
        return f"{GRAPH_URL}{path}"

    def _get_all(self, path: str) -> Iterator[Dict[str, Any]]:
        """Yield every item of a collection, following the paging links"""
        url: Optional[str] = self._url(path)
        while url:
            try:
                response = self.session.get(url)
                response.raise_for_status()
            except RequestException as e:
                logger.error(f"Error requesting {url}: {e}")
                status = e.response.status_code if e.response is not None else None
                raise ApiError(f"request to {url} failed: {e}", status) from e
            body = response.json()
            yield from body.get('value', [])
            url = body.get(NEXT_LINK)

    # --- Task List Operations ---

    def list_task_lists(self) -> List[TodoTaskList]:
        """List the user's task lists"""
        return parse_task_lists(list(self._get_all("/me/todo/lists")))

    def get_list_id(self, name: str, lists: Optional[List[TodoTaskList]] = None) -> str:
        """Find the ID of the task list called ``name`` (case-insensitive)"""
        if lists is None:
            lists = self.list_task_lists()
        wanted = name.lower()
        for task_list in lists:
            if task_list.display_name.lower() == wanted:
                return task_list.id
        raise ListNotFoundError(f"could not find list '{name}'")

    # --- Task Operations ---

    def list_tasks(self, list_id: str) -> List[TodoTask]:
        """List the tasks in a task list"""
        return parse_tasks(list(self._get_all(f"/me/todo/lists/{list_id}/tasks")))

    def create_task(self, list_id: str, task: TodoTask) -> TodoTask:
        """Create a new task"""
        url = self._url(f"/me/todo/lists/{list_id}/tasks")
        body = task.to_payload()
        logger.info(f"Creating task: {body}")
        try:
            response = self.session.post(url, json=body)
        except RequestException as e:
            logger.error(f"Error creating task: {e}")
            raise ApiError(f"request to {url} failed: {e}") from e

        if response.status_code != HTTP_CREATED:
            logger.error(f"Error creating task: http code {response.status_code}")
            raise ApiError(f"http code {response.status_code}\n{response.text}", response.status_code)

        return TodoTask.model_validate(response.json())
