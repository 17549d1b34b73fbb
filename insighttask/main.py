"""
Headless dashboard entry point

Signs in with the configured access token, loads the board, keeps it in
sync with the change feed and re-renders on every change.
"""

import argparse
import asyncio
import sys
from datetime import date
from typing import Optional
from insighttask.api.ai_client import CompletionClient
from insighttask.api.realtime_client import RealtimeClient
from insighttask.api.store_client import TaskStoreClient
from insighttask.config.settings import settings
from insighttask.models.events import ChangeEvent
from insighttask.services.change_feed import ChangeFeedSubscriber
from insighttask.services.insights_service import InsightsService
from insighttask.services.task_reconciler import Snapshot, TaskListReconciler
from insighttask.services.task_views import due_dates, due_on_date, due_today, filter_tasks_by_query
from insighttask.utils.date_utils import get_current_date, parse_due_date
from insighttask.utils.error_handler import format_error_message
from insighttask.utils.formatters import format_board, format_due_markers, format_task_list
from insighttask.utils.logger import logger


class DashboardApp:
    """Main dashboard application"""

    def __init__(
        self,
        query: str = "",
        show_insights: bool = False,
        once: bool = False,
        selected_date: Optional[date] = None,
    ):
        """
        Initialize dashboard

        Args:
            query: Search filter applied to every view
            show_insights: Print the AI weekly summary after the first load
            once: Render once and exit instead of following the feed
            selected_date: Day shown in the calendar view (defaults to today)
        """
        self.query = query
        self.show_insights = show_insights
        self.once = once
        self.selected_date = selected_date
        self.store = TaskStoreClient(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
        self.completion_client = CompletionClient()
        self.insights_service = InsightsService(self.completion_client)
        self.logger = logger

    def render(self, snapshot: Snapshot) -> None:
        """Print the board, My Day and the calendar for a snapshot"""
        tasks = filter_tasks_by_query(snapshot, self.query)
        day = self.selected_date or get_current_date()

        print(format_board(tasks))
        print()
        print(format_task_list("My Day", due_today(tasks), "Nothing due today."))
        print()
        print(format_task_list(f"Calendar {day.isoformat()}", due_on_date(tasks, day), "Nothing due on this date."))
        print(format_due_markers(due_dates(tasks)))
        print()

    async def start(self) -> None:
        """Load the board, then follow live changes until interrupted"""
        settings.validate()

        session = await self.store.get_user(settings.SUPABASE_ACCESS_TOKEN)
        reconciler = TaskListReconciler(self.store, session)

        await reconciler.load()
        if reconciler.error:
            print(reconciler.error)
        self.render(reconciler.snapshot())

        if self.show_insights:
            result = await self.insights_service.get_weekly_insights(reconciler.snapshot())
            print("Weekly insights")
            print(result.summary if result.success else result.error)
            print()

        if self.once:
            return

        reconciler.on_change = self.render
        queue: "asyncio.Queue[Optional[ChangeEvent]]" = asyncio.Queue()
        realtime = RealtimeClient(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)

        async with ChangeFeedSubscriber(realtime, session, queue) as feed:
            if feed.is_active:
                self.logger.info("Following live task changes (Ctrl+C to stop)")
                # Returns once the feed publishes its end marker
                await reconciler.consume(queue)

        print("Live updates unavailable; rerun to refresh the board")

    async def stop(self) -> None:
        """Close API clients"""
        await self.store.close()
        await self.completion_client.close()


def _calendar_date(value: str) -> date:
    try:
        day = parse_due_date(value)
    except ValueError:
        day = None
    if day is None:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r} (expected YYYY-MM-DD)")
    return day


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="InsightTask headless dashboard")
    parser.add_argument("--query", default="", help="search filter for title and description")
    parser.add_argument("--insights", action="store_true", help="print the AI weekly summary")
    parser.add_argument("--once", action="store_true", help="render once and exit")
    parser.add_argument("--date", type=_calendar_date, default=None, help="calendar day to show (YYYY-MM-DD)")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    """
    Main entry point

    Returns:
        Process exit code
    """
    args = parse_args(argv)
    app = DashboardApp(
        query=args.query,
        show_insights=args.insights,
        once=args.once,
        selected_date=args.date,
    )

    try:
        await app.start()
    except Exception as e:
        # format_error_message logs the traceback
        print(format_error_message(e))
        return 1
    finally:
        await app.stop()
    return 0


def run():
    """Console script entry point"""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
