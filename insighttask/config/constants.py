"""
Application constants
"""

# Store (Supabase REST dialect)
TASKS_TABLE = "tasks"
REST_PATH = "/rest/v1"
AUTH_PATH = "/auth/v1"
REALTIME_PATH = "/realtime/v1/websocket"
REALTIME_PROTOCOL_VERSION = "1.0.0"
REALTIME_HEARTBEAT_INTERVAL = 30  # seconds
REALTIME_JOIN_TIMEOUT = 10  # seconds
REALTIME_SCHEMA = "public"

# Task fields
TITLE_MAX_LENGTH = 120
DESCRIPTION_MAX_LENGTH = 1000
STATUS_COLUMNS = ("todo", "in_progress", "done")
DEFAULT_STATUS = "todo"

# AI summary
AI_TEMPERATURE = 0.2
AI_SYSTEM_PROMPT = (
    "You are a productivity coach. Return exactly 3 bullet lines: "
    "Progress, Bottlenecks, Predictions. Each bullet must be on its own line, "
    "concise, and under 120 words total."
)
AI_EMPTY_SUMMARY = "No tasks available yet. Add tasks to generate insights."

# User-facing messages
MSG_NOT_AUTHENTICATED = "You must be logged in."
MSG_LOAD_FAILED = "Unable to load tasks. Please try again."
MSG_STATUS_UPDATE_FAILED = "Unable to update task status. Please try again."
MSG_CREATE_FAILED = "Unable to create task."
MSG_UPDATE_FAILED = "Unable to update task."
MSG_DELETE_FAILED = "Unable to delete task."
MSG_FETCH_FAILED = "Unable to fetch tasks."
MSG_INSIGHTS_FAILED = "Unable to generate insights."
MSG_INSIGHTS_MALFORMED = "Unexpected response from Grok."
MSG_INSIGHTS_NO_KEY = "Missing Grok API key."
MSG_GENERIC = "Something went wrong. Please try again."

# Retry configuration
MAX_RETRIES = 3
RETRY_DELAY = 1  # seconds

# Logging
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
