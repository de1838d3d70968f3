"""Write structured records to, and read them back from, the function's log group.

The log group name comes from ``LOG_GROUP_NAME`` at each call. The CloudWatch
Logs client is passed in explicitly; ``get_logs_client`` builds one per process
for handlers that want to reuse it across invocations.

Neither entry point raises. Writing must never fail the request path, so every
remote error is logged locally and dropped; reading degrades to an empty list.
"""

from __future__ import annotations

import json
import logging
import os
import time
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional, Union

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from log_helper.logger import get_logger
from log_helper.models import parse_event_message

LOG_GROUP_ENV_VAR = "LOG_GROUP_NAME"
FUNCTION_NAME_ENV_VAR = "AWS_LAMBDA_FUNCTION_NAME"
DEFAULT_READ_LIMIT = 100

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

TimeInput = Union[datetime, str, int, float]

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_logs_client() -> Any:
    """Return the process-wide CloudWatch Logs client."""
    return boto3.client("logs")


def _now_millis() -> int:
    return int(time.time() * 1000)


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def _stream_exists(client: Any, log_group_name: str, stream_name: str) -> bool:
    try:
        resp = client.describe_log_streams(logGroupName=log_group_name, logStreamNamePrefix=stream_name)
    except ClientError as exc:
        logger.info("Describe of log stream %s failed (%s); will create it", stream_name, _error_code(exc))
        return False
    return any(s.get("logStreamName") == stream_name for s in resp.get("logStreams", []))


def _ensure_stream(client: Any, log_group_name: str, stream_name: str) -> None:
    """Create the stream unless it is already there.

    Describe-then-create is not atomic; a concurrent writer may create the
    same stream first, which counts as success.
    """
    if _stream_exists(client, log_group_name, stream_name):
        return
    try:
        client.create_log_stream(logGroupName=log_group_name, logStreamName=stream_name)
    except ClientError as exc:
        if _error_code(exc) != "ResourceAlreadyExistsException":
            raise
        logger.info("Log stream %s already exists", stream_name)


def write_log(
    client: Any,
    message: str,
    data: Optional[Dict[str, Any]] = None,
    level: str = "info",
) -> Optional[Dict[str, Any]]:
    """Log a structured record locally and append it to the function's log group.

    Returns the composed record, or ``None`` when no log group is configured.
    """
    log_group_name = os.environ.get(LOG_GROUP_ENV_VAR)
    if not log_group_name:
        logger.error("%s environment variable is not set", LOG_GROUP_ENV_VAR)
        return None

    record: Dict[str, Any] = {
        "message": message,
        "data": data if data is not None else {},
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
    }
    logger.log(_LEVELS.get(str(level).lower(), logging.INFO), message, extra={"record": record})

    try:
        now = _now_millis()
        function_name = os.environ.get(FUNCTION_NAME_ENV_VAR) or "local"
        stream_name = f"{function_name}-{now}"

        _ensure_stream(client, log_group_name, stream_name)
        client.put_log_events(
            logGroupName=log_group_name,
            logStreamName=stream_name,
            logEvents=[{"timestamp": now, "message": json.dumps(record, default=str)}],
        )
    except (ClientError, BotoCoreError) as exc:
        logger.error("Error writing to CloudWatch Logs: %s", exc)
    except Exception as exc:
        logger.error("Unexpected error writing to CloudWatch Logs: %s", exc)
    return record


def to_epoch_millis(value: TimeInput) -> int:
    """Convert a datetime, ISO-8601 string or epoch millis into epoch millis."""
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return int(moment.timestamp() * 1000)
    if isinstance(value, (int, float)):
        return int(value)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_epoch_millis(datetime.fromisoformat(text))


def read_logs(
    client: Any,
    *,
    filter_pattern: Optional[str] = None,
    limit: Optional[int] = None,
    start_time: Optional[TimeInput] = None,
    end_time: Optional[TimeInput] = None,
) -> List[Dict[str, Any]]:
    """Return matching records from the function's log group, in store order."""
    log_group_name = os.environ.get(LOG_GROUP_ENV_VAR)
    if not log_group_name:
        logger.error("%s environment variable is not set", LOG_GROUP_ENV_VAR)
        return []

    try:
        params: Dict[str, Any] = {
            "logGroupName": log_group_name,
            "filterPattern": filter_pattern or "",
            "limit": limit or DEFAULT_READ_LIMIT,
        }
        if start_time is not None:
            params["startTime"] = to_epoch_millis(start_time)
        if end_time is not None:
            params["endTime"] = to_epoch_millis(end_time)

        result = client.filter_log_events(**params)
    except (ClientError, BotoCoreError) as exc:
        logger.error("Error reading from CloudWatch Logs: %s", exc)
        return []
    except (TypeError, ValueError) as exc:
        logger.error("Invalid read_logs options: %s", exc)
        return []
    except Exception as exc:
        logger.error("Unexpected error reading from CloudWatch Logs: %s", exc)
        return []

    return [parse_event_message(str(event.get("message", ""))) for event in result.get("events", [])]
