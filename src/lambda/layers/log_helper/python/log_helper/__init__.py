"""Log helper layer: structured write/read against the function's own log group."""

from log_helper.bridge import get_logs_client, read_logs, to_epoch_millis, write_log
from log_helper.logger import extract_correlation_id, get_logger
from log_helper.models import LogEntry, parse_event_message

__all__ = [
    "LogEntry",
    "extract_correlation_id",
    "get_logger",
    "get_logs_client",
    "parse_event_message",
    "read_logs",
    "to_epoch_millis",
    "write_log",
]
