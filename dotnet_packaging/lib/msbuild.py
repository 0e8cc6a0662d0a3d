from __future__ import annotations

import json
import logging
import os
import re
from typing import Dict, Optional, Sequence, Tuple

from ..errors import PackagingError
from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)


PACKAGING_TARGETS_ID = "Packaging.Targets"
DEFAULT_DOTNET = "dotnet"


def dotnet_executable(configured: Optional[str] = None) -> str:
    """Pick the dotnet host: explicit config, then DOTNET_HOST_PATH, then PATH."""
    if configured:
        return configured
    return os.environ.get("DOTNET_HOST_PATH") or DEFAULT_DOTNET


def msbuild_arguments(
    *,
    target: str,
    properties: Sequence[Tuple[str, Optional[str]]],
    project: str,
) -> list[str]:
    """Build ``msbuild /t:<target> /p:<Name>=<Value>... <project>``.

    Properties with an empty or missing value are left out; the rest keep
    their order.
    """

    argv = ["msbuild", f"/t:{target}"]
    for name, value in properties:
        if value is not None and str(value).strip():
            argv.append(f"/p:{name}={value}")
    argv.append(project)
    return argv


def _run_dotnet(argv: Sequence[str], *, capture: bool) -> CmdResult:
    try:
        return run_cmd(argv, capture=capture)
    except FileNotFoundError as e:
        raise PackagingError(f"Could not run '{argv[0]}'. Is the .NET SDK installed and on PATH?") from e


def run_target(dotnet: str, arguments: Sequence[str]) -> int:
    """Run a build target with output passed through; returns the exit code."""
    r = _run_dotnet([dotnet, *arguments], capture=False)
    return r.returncode


def restore(
    project: str,
    *,
    dotnet: str,
    framework: Optional[str] = None,
    verbose: bool = False,
    query: Sequence[str] = ("TargetFramework", "ProjectAssetsFile"),
) -> CmdResult:
    """Run the Restore target and ask MSBuild for property values afterwards.

    The values come back on stdout as JSON (see parse_properties).
    """

    argv = [dotnet, "msbuild", project, "-nologo", "-t:Restore"]
    if framework:
        argv.append(f"-p:TargetFramework={framework}")
    argv += [f"-getProperty:{name}" for name in query]
    argv.append("-v:detailed" if verbose else "-v:quiet")
    return _run_dotnet(argv, capture=True)


def parse_properties(stdout: str) -> Dict[str, str]:
    """Extract ``{"Properties": {...}}`` from msbuild -getProperty output.

    Log lines may precede the document (and contain braces), so candidate
    lines starting with ``{`` are tried from the end of the output.
    Raises ValueError when the output carries no such document.
    """

    decoder = json.JSONDecoder()
    starts = [m.start(1) for m in re.finditer(r"(?m)^[ \t]*(\{)", stdout)]
    for start in reversed(starts):
        try:
            doc, _ = decoder.raw_decode(stdout, start)
        except ValueError:
            continue
        props = doc.get("Properties") if isinstance(doc, dict) else None
        if isinstance(props, dict):
            break
    else:
        raise ValueError("msbuild output has no 'Properties' object")

    return {str(k): "" if v is None else str(v) for k, v in props.items()}
