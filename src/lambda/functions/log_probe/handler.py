"""Log probe function deployed by the service stack.

Writes one structured record per invocation through the log helper layer and,
when asked, returns the most recent matching records from the same log group.
"""

from __future__ import annotations

from typing import Any, Dict

from log_helper import extract_correlation_id, get_logger, get_logs_client, read_logs, write_log


def main(event: Dict[str, Any], _context: Any) -> Dict[str, Any]:
    event = event if isinstance(event, dict) else {}
    correlation_id = extract_correlation_id(event)
    log = get_logger(__name__, correlation_id=correlation_id)
    client = get_logs_client()

    message = str(event.get("message") or "probe")
    record = write_log(client, message, {"correlation_id": correlation_id}, level=str(event.get("level") or "info"))
    log.info("Probe record written")

    body: Dict[str, Any] = {"written": record}
    if event.get("read"):
        body["records"] = read_logs(
            client,
            filter_pattern=event.get("filter_pattern"),
            limit=event.get("limit"),
            start_time=event.get("start_time"),
            end_time=event.get("end_time"),
        )
    return {"statusCode": 200, "body": body}
