import os
import time
import sys
from pathlib import Path
from typing import Callable, Iterator

import pytest
from aws_cdk import App, Stack, aws_lambda as lambda_

# Ensure 'log_helper' layer is importable at collection time (module import stage)
_repo_root = Path(__file__).resolve().parents[1]
_repo_root_str = str(_repo_root)
if _repo_root_str not in sys.path:
    sys.path.insert(0, _repo_root_str)
_layer_path = _repo_root / "src" / "lambda" / "layers" / "log_helper" / "python"
_layer_str = str(_layer_path)
if _layer_str not in sys.path:
    sys.path.insert(0, _layer_str)


@pytest.fixture(autouse=True)
def aws_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Ensure default AWS region is set for moto/boto3 clients and clear cross-test env leaks."""
    monkeypatch.setenv("AWS_REGION", os.environ.get("AWS_REGION", "us-east-1"))
    monkeypatch.setenv("AWS_DEFAULT_REGION", os.environ.get("AWS_DEFAULT_REGION", "us-east-1"))
    # Provide dummy credentials so botocore signing doesn't fail under moto
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", os.environ.get("AWS_ACCESS_KEY_ID", "testing"))
    monkeypatch.setenv(
        "AWS_SECRET_ACCESS_KEY",
        os.environ.get("AWS_SECRET_ACCESS_KEY", "testing"),
    )
    monkeypatch.setenv("AWS_SESSION_TOKEN", os.environ.get("AWS_SESSION_TOKEN", "testing"))

    # Runtime log helper inputs must come from each test explicitly
    monkeypatch.delenv("LOG_GROUP_NAME", raising=False)
    monkeypatch.delenv("AWS_LAMBDA_FUNCTION_NAME", raising=False)
    yield


@pytest.fixture
def stack() -> Stack:
    """Fresh stack in a fresh app."""
    app = App()
    return Stack(app, "TestStack")


@pytest.fixture
def inline_code() -> lambda_.Code:
    return lambda_.Code.from_inline("def main(event, context):\n    return {'statusCode': 200}\n")


@pytest.fixture
def log_env(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Apply log helper environment variables."""

    def _apply(log_group_name: str = "/aws/lambda/test-fn", *, function_name: str = "test-fn") -> None:
        monkeypatch.setenv("LOG_GROUP_NAME", log_group_name)
        monkeypatch.setenv("AWS_LAMBDA_FUNCTION_NAME", function_name)

    return _apply


@pytest.fixture
def poll() -> Callable[..., object]:
    """Retry a read until it returns something truthy (log reads are eventually consistent)."""

    def _poll(read: Callable[[], object], *, attempts: int = 5, delay: float = 0.1) -> object:
        result = read()
        for attempt in range(1, attempts):
            if result:
                break
            time.sleep(delay * 2 ** (attempt - 1))
            result = read()
        return result

    return _poll


def pytest_configure(config):
    """Configure pytest with essential markers."""
    config.addinivalue_line("markers", "unit: unit test")
    config.addinivalue_line("markers", "integration: integration test")
    config.addinivalue_line("markers", "infrastructure: CDK synthesis test")
    config.addinivalue_line("markers", "log_helper: runtime log helper test")


def pytest_collection_modifyitems(config, items):
    """Add markers based on file location."""
    rootdir = Path(config.rootdir)

    for item in items:
        rel_path = Path(item.fspath).relative_to(rootdir)

        if "unit" in rel_path.parts:
            item.add_marker(pytest.mark.unit)
        if "integration" in rel_path.parts:
            item.add_marker(pytest.mark.integration)
        if {"constructs", "composite", "infrastructure"} & set(rel_path.parts):
            item.add_marker(pytest.mark.infrastructure)
        if "log_helper" in rel_path.parts:
            item.add_marker(pytest.mark.log_helper)


@pytest.fixture
def load_module() -> Callable[[str], dict]:
    import runpy

    def _apply(path: str) -> dict:
        return runpy.run_path(path)

    return _apply


@pytest.fixture(autouse=True)
def fake_python_layer(monkeypatch: pytest.MonkeyPatch) -> None:
    """Replace PythonLayerVersion with a plain asset layer to avoid Docker bundling during synth."""
    from infrastructure.composite import provisioner

    def _fake(scope, id, **kwargs):
        return lambda_.LayerVersion(
            scope,
            id,
            code=lambda_.Code.from_asset(kwargs["entry"]),
            description=kwargs.get("description"),
            compatible_runtimes=kwargs.get("compatible_runtimes"),
        )

    monkeypatch.setattr(provisioner, "PythonLayerVersion", _fake)
