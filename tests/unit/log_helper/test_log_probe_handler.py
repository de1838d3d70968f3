from pathlib import Path
from typing import Any, Callable, Dict

import pytest

from tests.fixtures.clients import CloudWatchLogsStub

HANDLER = str(Path(__file__).resolve().parents[3] / "src" / "lambda" / "functions" / "log_probe" / "handler.py")


@pytest.fixture
def probe(load_module: Callable[[str], Dict[str, Any]], monkeypatch: pytest.MonkeyPatch):
    """Load the handler with its logs client replaced by an in-memory stub."""
    stub = CloudWatchLogsStub()
    main = load_module(HANDLER)["main"]
    monkeypatch.setitem(main.__globals__, "get_logs_client", lambda: stub)
    return main, stub


def test_probe_writes_one_record(probe, log_env: Callable[..., None]) -> None:
    """
    Given: 로그 그룹이 설정된 함수 환경
    When: 상관관계 ID 가 있는 이벤트로 호출
    Then: 200 응답, 레코드 1건 기록, 레코드 data 에 상관관계 ID 포함
    """
    main, stub = probe
    log_env()

    resp = main({"message": "ping", "correlation_id": "cid-1"}, None)

    assert resp["statusCode"] == 200
    assert resp["body"]["written"]["message"] == "ping"
    assert resp["body"]["written"]["data"] == {"correlation_id": "cid-1"}
    assert "records" not in resp["body"]
    assert len(stub.put_calls) == 1


def test_probe_reads_back_when_asked(probe, log_env: Callable[..., None]) -> None:
    main, stub = probe
    log_env()

    resp = main({"message": "ping", "read": True, "limit": 1}, None)

    assert stub.filter_calls[0]["limit"] == 1
    assert resp["body"]["records"][0]["message"] == "ping"


def test_probe_without_log_group_still_succeeds(probe) -> None:
    main, stub = probe

    resp = main(None, None)

    assert resp["statusCode"] == 200
    assert resp["body"]["written"] is None
    assert stub.put_calls == []
