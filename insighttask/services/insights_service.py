"""
Weekly productivity insights
"""

import json
from typing import Dict, List, Sequence
from insighttask.api.ai_client import CompletionClient
from insighttask.api.store_client import TaskStoreClient
from insighttask.config.constants import (
    AI_EMPTY_SUMMARY,
    AI_SYSTEM_PROMPT,
    AI_TEMPERATURE,
    MSG_FETCH_FAILED,
    MSG_INSIGHTS_FAILED,
    MSG_INSIGHTS_MALFORMED,
    MSG_INSIGHTS_NO_KEY,
)
from insighttask.models.response import InsightResult
from insighttask.models.session import Session
from insighttask.models.task import Task
from insighttask.utils.error_handler import ExternalServiceError, InsightTaskError
from insighttask.utils.logger import logger


def build_prompt(tasks: Sequence[Task]) -> List[Dict[str, str]]:
    """
    Build the two-message summary prompt

    Args:
        tasks: Owner's tasks

    Returns:
        System instruction followed by the serialized tasks
    """
    tasks_json = json.dumps([task.to_record() for task in tasks], ensure_ascii=False)
    return [
        {"role": "system", "content": AI_SYSTEM_PROMPT},
        {"role": "user", "content": f"Tasks JSON: {tasks_json}"},
    ]


class InsightsService:
    """Service for the AI weekly summary"""

    def __init__(self, completion_client: CompletionClient):
        """
        Initialize insights service

        Args:
            completion_client: Chat completion client
        """
        self.completion_client = completion_client
        self.logger = logger

    async def get_weekly_insights(self, tasks: Sequence[Task]) -> InsightResult:
        """
        Summarize the week as Progress, Bottlenecks and Predictions bullets

        An empty collection gets a canned message without calling the
        completion service. Failures are returned, never raised, and are
        safe to retry.

        Args:
            tasks: Owner's full task collection

        Returns:
            InsightResult with the summary or a user-facing error
        """
        if not tasks:
            return InsightResult(success=True, summary=AI_EMPTY_SUMMARY)

        if not self.completion_client.has_api_key:
            return InsightResult(success=False, error=MSG_INSIGHTS_NO_KEY)

        try:
            content = await self.completion_client.chat_completion(
                messages=build_prompt(tasks),
                temperature=AI_TEMPERATURE,
            )
        except ExternalServiceError as e:
            self.logger.error(f"[Insights] Failed to generate insights: {e}")
            return InsightResult(success=False, error=MSG_INSIGHTS_FAILED)
        except Exception as e:
            self.logger.error(f"[Insights] Unexpected completion failure: {e}", exc_info=True)
            return InsightResult(success=False, error=MSG_INSIGHTS_FAILED)

        summary = content.strip() if isinstance(content, str) else ""
        if not summary:
            self.logger.warning("[Insights] Completion returned no usable text")
            return InsightResult(success=False, error=MSG_INSIGHTS_MALFORMED)

        return InsightResult(success=True, summary=summary)

    async def get_weekly_insights_for(self, store: TaskStoreClient, session: Session) -> InsightResult:
        """
        Fetch the owner's tasks and summarize them

        Args:
            store: Task store client
            session: Signed-in owner

        Returns:
            InsightResult
        """
        try:
            tasks = await store.list_tasks(session)
        except InsightTaskError as e:
            self.logger.error(f"[Insights] Failed to fetch tasks: {e}")
            return InsightResult(success=False, error=MSG_FETCH_FAILED)

        return await self.get_weekly_insights(tasks)
