"""
Tests for the AI weekly insights
"""

import json
import pytest
from unittest.mock import AsyncMock, MagicMock
from insighttask.api.ai_client import CompletionClient
from insighttask.services.insights_service import InsightsService, build_prompt
from insighttask.utils.error_handler import ExternalServiceError, StoreUnavailableError


@pytest.fixture
def mock_completion_client():
    """Mock completion client"""
    client = MagicMock(spec=CompletionClient)
    client.has_api_key = True
    client.chat_completion = AsyncMock(
        return_value="  - Progress: 1 done\n- Bottlenecks: none\n- Predictions: on track  "
    )
    return client


@pytest.mark.asyncio
async def test_empty_tasks_return_canned_summary(mock_completion_client):
    """Test that no completion call is made for an empty collection"""
    service = InsightsService(mock_completion_client)

    result = await service.get_weekly_insights([])

    assert result.success is True
    assert result.summary == "No tasks available yet. Add tasks to generate insights."
    mock_completion_client.chat_completion.assert_not_called()


def test_build_prompt_has_system_and_tasks_json(sample_tasks):
    messages = build_prompt(sample_tasks)

    assert [message["role"] for message in messages] == ["system", "user"]
    assert "Progress, Bottlenecks, Predictions" in messages[0]["content"]
    assert "under 120 words" in messages[0]["content"]
    assert messages[1]["content"].startswith("Tasks JSON: ")

    tasks = json.loads(messages[1]["content"][len("Tasks JSON: "):])
    assert [task["title"] for task in tasks] == ["Plan week", "Build UI"]
    assert tasks[0]["user_id"] == "user-1"


@pytest.mark.asyncio
async def test_summary_is_stripped(mock_completion_client, sample_tasks):
    service = InsightsService(mock_completion_client)

    result = await service.get_weekly_insights(sample_tasks)

    assert result.success is True
    assert result.summary.startswith("- Progress")
    assert result.summary.endswith("on track")
    kwargs = mock_completion_client.chat_completion.call_args.kwargs
    assert kwargs["temperature"] == 0.2
    assert len(kwargs["messages"]) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, "", "   "])
async def test_empty_completion_is_rejected(mock_completion_client, sample_tasks, content):
    mock_completion_client.chat_completion = AsyncMock(return_value=content)
    service = InsightsService(mock_completion_client)

    result = await service.get_weekly_insights(sample_tasks)

    assert result.success is False
    assert result.summary is None
    assert result.error == "Unexpected response from Grok."


@pytest.mark.asyncio
async def test_completion_failure_is_generic_error(mock_completion_client, sample_tasks):
    mock_completion_client.chat_completion = AsyncMock(side_effect=ExternalServiceError("503"))
    service = InsightsService(mock_completion_client)

    result = await service.get_weekly_insights(sample_tasks)

    assert result.success is False
    assert result.error == "Unable to generate insights."


@pytest.mark.asyncio
async def test_missing_api_key(mock_completion_client, sample_tasks):
    mock_completion_client.has_api_key = False
    service = InsightsService(mock_completion_client)

    result = await service.get_weekly_insights(sample_tasks)

    assert result.error == "Missing Grok API key."
    mock_completion_client.chat_completion.assert_not_called()


@pytest.mark.asyncio
async def test_insights_for_owner_fetches_tasks(mock_completion_client, mock_store, session):
    service = InsightsService(mock_completion_client)

    result = await service.get_weekly_insights_for(mock_store, session)

    assert result.success is True
    mock_store.list_tasks.assert_called_once_with(session)


@pytest.mark.asyncio
async def test_insights_for_owner_fetch_failure(mock_completion_client, mock_store, session):
    mock_store.list_tasks = AsyncMock(side_effect=StoreUnavailableError("down"))
    service = InsightsService(mock_completion_client)

    result = await service.get_weekly_insights_for(mock_store, session)

    assert result.success is False
    assert result.error == "Unable to fetch tasks."
    mock_completion_client.chat_completion.assert_not_called()
