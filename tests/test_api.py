"""
Tests for AppContext wiring and the FastAPI command/event surface.
"""
import pytest
from fastapi.testclient import TestClient

from configs.settings import Settings
from runtime.api.server import create_app
from runtime.context import AppContext
from runtime.notifications import EventBroadcaster


class FakeRenderer:
    def render(self, doc_definition, path):
        path.write_bytes(b"%PDF-1.4 fake")


class FakeResolver:
    async def get_default_printer(self):
        return "Office"


class FakeInvoker:
    def __init__(self):
        self.calls = []

    async def print_file(self, path, printer, tool_path, silent=True):
        self.calls.append((path, printer, tool_path))


@pytest.fixture
def settings(tmp_path, monkeypatch):
    monkeypatch.setenv("PRINTDESK_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("PRINTDESK_TEMP_DIR", str(tmp_path / "tmp"))
    monkeypatch.delenv("PRINTDESK_PRINTER", raising=False)
    return Settings()


@pytest.fixture
def invoker():
    return FakeInvoker()


@pytest.fixture
def broadcaster():
    return EventBroadcaster()


@pytest.fixture
def context(settings, broadcaster, invoker, tool_dir):
    return AppContext.from_settings(
        settings,
        sink=broadcaster,
        renderer=FakeRenderer(),
        printer_resolver=FakeResolver(),
        invoker=invoker,
        candidate_dirs=lambda: [tool_dir],
    )


def test_start_registers_default_commands_once(context):
    context.start()
    context.start()
    assert context.registry.channels() == ["get-logs", "print-summary"]

    context.shutdown()
    assert context.registry.channels() == []


@pytest.mark.asyncio
async def test_print_summary_through_the_registry(context, invoker, tool_dir):
    context.start()
    result = await context.registry.dispatch("print-summary")

    assert result.success is True
    assert result.data == {"success": True}
    [(path, printer, tool_path)] = invoker.calls
    assert printer == "Office"
    assert tool_path == tool_dir / "SumatraPDF-3.5.2-64.exe"
    assert not path.exists()
    context.shutdown()


@pytest.mark.asyncio
async def test_get_logs_returns_plain_entries(context):
    context.start()
    context.log_store.info("hello")

    result = await context.registry.dispatch("get-logs", {"limit": 1})

    assert result.success is True
    assert [e["message"] for e in result.data] == ["hello"]
    assert result.data[0]["level"] == "INFO"
    # Reading logs does not itself produce entries.
    assert context.log_store.update_count == 0
    context.shutdown()


@pytest.mark.asyncio
async def test_get_logs_clamps_limit(context):
    context.start()
    for i in range(3):
        context.log_store.info(f"msg {i}")

    negative = await context.registry.dispatch("get-logs", {"limit": -2})
    zero = await context.registry.dispatch("get-logs", {"limit": 0})
    default = await context.registry.dispatch("get-logs", {})

    assert negative.data == []
    assert zero.data == []
    assert [e["message"] for e in default.data][:3] == ["msg 2", "msg 1", "msg 0"]
    context.shutdown()


def test_http_surface(context):
    with TestClient(create_app(context)) as client:
        assert client.get("/healthz").json() == {"status": "ok"}
        assert client.get("/commands").json() == {"channels": ["get-logs", "print-summary"]}

        response = client.post("/commands/print-summary", json={"args": {"printer": "Front Desk"}})
        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"success": True}, "error": None}

        missing = client.post("/commands/nope").json()
        assert missing["success"] is False
        assert "nope" in missing["error"]

        logs = client.post("/commands/get-logs").json()
        assert logs["success"] is True
        assert "Print job completed successfully" in [e["message"] for e in logs["data"]]


def test_events_stream_status_notifications(context, broadcaster):
    with TestClient(create_app(context, broadcaster)) as client:
        with client.websocket_connect("/events") as ws:
            client.post("/commands/print-summary")

            for _ in range(20):
                event = ws.receive_json()
                if event["channel"] == "print-summary-status":
                    break
            else:
                pytest.fail("no print-summary-status event received")

    assert event["payload"] == {
        "success": True,
        "message": "Operation print-summary completed successfully",
        "data": {"success": True},
    }
