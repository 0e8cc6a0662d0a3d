from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dotnet_packaging.lib import msbuild  # noqa: E402
from dotnet_packaging.lib.command import CmdResult  # noqa: E402


def write_assets(path: Path, libraries: List[str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    doc = {"version": 3, "libraries": {k: {"type": "package"} for k in libraries}}
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


class FakeDotnet:
    """Stands in for run_cmd: records every argv and answers restore calls."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.restore_returncode = 0
        self.properties: Optional[Dict[str, Any]] = {}
        self.raw_restore_stdout: Optional[str] = None
        self.target_returncode = 0

    @property
    def restore_calls(self) -> List[List[str]]:
        return [c for c in self.calls if "-t:Restore" in c]

    @property
    def target_calls(self) -> List[List[str]]:
        return [c for c in self.calls if any(a.startswith("/t:") for a in c)]

    def __call__(self, argv, *, capture: bool = True, env=None, cwd=None) -> CmdResult:
        argv = list(argv)
        self.calls.append(argv)
        if "-t:Restore" in argv:
            if self.raw_restore_stdout is not None:
                stdout = self.raw_restore_stdout
            else:
                stdout = json.dumps({"Properties": self.properties}, indent=2)
            return CmdResult(argv=argv, returncode=self.restore_returncode, stdout=stdout, stderr="")
        return CmdResult(argv=argv, returncode=self.target_returncode, stdout="", stderr="")


@pytest.fixture
def fake_dotnet(monkeypatch):
    fake = FakeDotnet()
    monkeypatch.setattr(msbuild, "run_cmd", fake)
    monkeypatch.delenv("DOTNET_HOST_PATH", raising=False)
    return fake


@pytest.fixture
def project_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def make_assets():
    return write_assets


@pytest.fixture(autouse=True)
def _isolate_root_logger():
    """Give each test a fresh root logger so handlers never point at a closed capture stream."""
    import logging

    logger = logging.getLogger()
    saved_handlers = list(logger.handlers)
    saved_level = logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in saved_handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(saved_level)
    for attr in ("_dotnet_packaging_configured", "_dotnet_packaging_console", "_dotnet_packaging_log_path"):
        if hasattr(logger, attr):
            delattr(logger, attr)
