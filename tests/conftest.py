import asyncio
import io
import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest

from soyloader.compiler import SoyCompiler
from soyloader.config import LoaderOptions


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("soyloader")
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    logger.setLevel(previous_level)
    log_stream.close()


def soy_source(namespace: str, *calls: str) -> str:
    """Template source declaring ``namespace`` with one template making ``calls``."""
    body = "\n".join(f"  {{call {call} /}}" for call in calls)
    return f"{{namespace {namespace}}}\n\n{{template .render}}\n{body}\n{{/template}}\n"


@pytest.fixture
def write_soy(tmp_path) -> Callable[..., Path]:
    """Write a template under ``tmp_path`` and return its absolute path."""

    def _write(relative: str, namespace: str, *calls: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(soy_source(namespace, *calls))
        return path

    return _write


@pytest.fixture
def options(tmp_path) -> LoaderOptions:
    """Loader options rooted at ``tmp_path`` without external dependencies."""
    return LoaderOptions(root=tmp_path, soy_deps=[])


class FakeCompiler(SoyCompiler):
    """Records compile calls and returns canned output or raises."""

    def __init__(self, output: str = "// compiled", error: Optional[Exception] = None):
        self.output = output
        self.error = error
        self.calls: List[Tuple[Path, List[Path]]] = []

    async def compile(self, source, soy_deps):
        self.calls.append((source, list(soy_deps)))
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return f"{self.output} {source.name}"


@pytest.fixture
def fake_compiler() -> FakeCompiler:
    return FakeCompiler()


@pytest.fixture
def make_compiler() -> Callable[..., FakeCompiler]:
    """Factory for compilers with custom output or a failure to raise."""
    return FakeCompiler
