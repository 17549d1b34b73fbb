"""
Tests for the headless dashboard
"""

import json
from datetime import date
import pytest
from unittest.mock import AsyncMock, patch
from insighttask.api.realtime_client import RealtimeClient
from insighttask.main import DashboardApp, main, parse_args
from insighttask.models.response import InsightResult
from insighttask.utils.error_handler import NotAuthenticatedError
from fakes import FakeWebSocket, make_task


def test_parse_args():
    args = parse_args(["--query", "plan", "--insights", "--once"])

    assert args.query == "plan"
    assert args.insights is True
    assert args.once is True


def test_render_applies_query(sample_tasks, capsys):
    app = DashboardApp(query="outline")

    app.render(tuple(sample_tasks))

    output = capsys.readouterr().out
    assert "Plan week" in output
    assert "Build UI" not in output
    assert "Nothing due today." in output


@pytest.mark.asyncio
async def test_start_once_loads_and_summarizes(mock_store, sample_tasks, capsys):
    app = DashboardApp(show_insights=True, once=True)
    app.store = mock_store
    app.insights_service.get_weekly_insights = AsyncMock(
        return_value=InsightResult(success=True, summary="- Progress: steady")
    )

    with patch("insighttask.main.settings") as settings:
        settings.SUPABASE_ACCESS_TOKEN = "token-1"
        await app.start()

    output = capsys.readouterr().out
    mock_store.get_user.assert_called_once_with("token-1")
    mock_store.list_tasks.assert_called_once()
    assert "To do (1)" in output
    assert "- Progress: steady" in output


def test_parse_args_calendar_date():
    assert parse_args(["--date", "2026-10-20"]).date == date(2026, 10, 20)
    assert parse_args([]).date is None


def test_parse_args_rejects_bad_date():
    with pytest.raises(SystemExit):
        parse_args(["--date", "next week"])


def test_render_calendar_for_selected_date(sample_tasks, capsys):
    tasks = sample_tasks + [
        make_task(id="t3", title="Ship release", due_date="2026-10-20"),
        make_task(id="t4", title="Retro", due_date="2026-10-22"),
    ]
    app = DashboardApp(selected_date=date(2026, 10, 20))

    app.render(tuple(tasks))

    output = capsys.readouterr().out
    calendar = output[output.index("Calendar 2026-10-20"):]
    assert "Ship release" in calendar
    assert "Retro" not in calendar.split("Due dates:")[0]
    assert "Due dates: 2026-10-20, 2026-10-22" in output


def test_render_calendar_without_due_dates(sample_tasks, capsys):
    app = DashboardApp(selected_date=date(2026, 10, 20))

    app.render(tuple(sample_tasks))

    output = capsys.readouterr().out
    assert "Nothing due on this date." in output
    assert "Due dates: none" in output


class DroppingWebSocket(FakeWebSocket):
    """Socket that goes away right after the join is acknowledged"""

    async def send(self, raw: str) -> None:
        await super().send(raw)
        if json.loads(raw)["event"] == "phx_join":
            self.drop_connection()


@pytest.mark.asyncio
async def test_start_returns_when_feed_drops(mock_store, capsys):
    app = DashboardApp()
    app.store = mock_store
    websocket = DroppingWebSocket()

    def realtime_client(url, key):
        return RealtimeClient("https://example.supabase.co", "anon-key", connect=websocket.connect)

    with patch("insighttask.main.settings") as settings, \
            patch("insighttask.main.RealtimeClient", side_effect=realtime_client):
        settings.SUPABASE_ACCESS_TOKEN = "token-1"
        await app.start()

    output = capsys.readouterr().out
    assert "rerun to refresh the board" in output
    assert websocket.closed is True


@pytest.mark.asyncio
async def test_main_reports_failure_with_exit_code(capsys):
    with patch.object(DashboardApp, "start", AsyncMock(side_effect=NotAuthenticatedError())), \
            patch.object(DashboardApp, "stop", AsyncMock()) as stop:
        exit_code = await main(["--once"])

    assert exit_code == 1
    assert capsys.readouterr().out.strip() == "You must be logged in."
    stop.assert_called_once()


@pytest.mark.asyncio
async def test_main_success_exit_code():
    with patch.object(DashboardApp, "start", AsyncMock()), patch.object(DashboardApp, "stop", AsyncMock()):
        assert await main(["--once"]) == 0
