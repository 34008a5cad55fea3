import pytest
from requests import ConnectionError as RequestsConnectionError
from requests import HTTPError

from mstodo.client import GRAPH_URL, ApiError, ListNotFoundError, TodoClient
from mstodo.models import TodoTask


class FakeResponse:
    def __init__(self, body=None, status_code=200, text=""):
        self.body = body or {}
        self.status_code = status_code
        self.text = text

    def json(self):
        return self.body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url):
        self.calls.append(("GET", url, None))
        return self.responses.pop(0)

    def post(self, url, json=None):
        self.calls.append(("POST", url, json))
        return self.responses.pop(0)


def make_client(*responses):
    session = FakeSession(responses)
    return TodoClient(credentials=None, session=session), session


def test_list_task_lists_follows_next_link():
    client, session = make_client(
        FakeResponse({"value": [{"id": "1", "displayName": "Tasks"}], "@odata.nextLink": "https://next/page"}),
        FakeResponse({"value": [{"id": "2", "displayName": "Work"}]}),
    )

    lists = client.list_task_lists()

    assert [l.id for l in lists] == ["1", "2"]
    assert [url for _, url, _ in session.calls] == [f"{GRAPH_URL}/me/todo/lists", "https://next/page"]


def test_get_list_id_ignores_case():
    client, _ = make_client(FakeResponse({"value": [{"id": "1", "displayName": "Tasks"}]}))
    assert client.get_list_id("TASKS") == "1"


def test_get_list_id_unknown_name():
    client, _ = make_client()
    with pytest.raises(ListNotFoundError):
        client.get_list_id("Missing", lists=[])


def test_list_tasks():
    client, session = make_client(FakeResponse({"value": [{"id": "t1", "title": "Write report", "status": "notStarted"}]}))
    tasks = client.list_tasks("abc")
    assert tasks[0].title == "Write report"
    assert session.calls[0][1] == f"{GRAPH_URL}/me/todo/lists/abc/tasks"


def test_http_errors_become_api_errors():
    client, _ = make_client(FakeResponse(status_code=401))
    with pytest.raises(ApiError) as excinfo:
        client.list_task_lists()
    assert excinfo.value.status_code == 401


def test_connection_errors_become_api_errors():
    class BrokenSession(FakeSession):
        def get(self, url):
            raise RequestsConnectionError("offline")

    client = TodoClient(credentials=None, session=BrokenSession([]))
    with pytest.raises(ApiError) as excinfo:
        client.list_task_lists()
    assert excinfo.value.status_code is None


def test_create_task_posts_payload():
    client, session = make_client(FakeResponse({"id": "t9", "title": "Buy milk"}, status_code=201))
    created = client.create_task("abc", TodoTask(title="Buy milk"))

    method, url, body = session.calls[0]
    assert method == "POST"
    assert url == f"{GRAPH_URL}/me/todo/lists/abc/tasks"
    assert body["title"] == "Buy milk"
    assert created.id == "t9"


def test_create_task_requires_created_status():
    client, _ = make_client(FakeResponse(status_code=400, text="bad request"))
    with pytest.raises(ApiError) as excinfo:
        client.create_task("abc", TodoTask(title="Buy milk"))
    assert excinfo.value.status_code == 400
    assert "bad request" in str(excinfo.value)
