from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .errors import ProjectResolutionError

logger = logging.getLogger(__name__)


PROJECT_GLOB = "*.*proj"


def candidate_projects(directory: Path) -> List[Path]:
    return sorted(p for p in directory.glob(PROJECT_GLOB) if p.is_file())


def find_project_file(
    project: Optional[str],
    *,
    cwd: Path,
    command_name: str,
    msbuild_target: str,
) -> str:
    """Resolve the project to build.

    An explicit path must exist. Otherwise the working directory must hold
    exactly one ``*.*proj`` file.
    """

    if project and project.strip():
        p = Path(project)
        if not (p if p.is_absolute() else cwd / p).is_file():
            raise ProjectResolutionError(f"Could not find the project file '{project}'.")
        return project

    found = candidate_projects(cwd)
    logger.debug("Project candidates in %s: %s", str(cwd), [c.name for c in found])
    if len(found) != 1:
        raise ProjectResolutionError(
            f"Failed to find a .*proj file in '{cwd}'. dotnet {command_name} only works if\n"
            f"you have exactly one .*proj file in your directory. For advanced scenarios, "
            f"please use 'dotnet msbuild /t:{msbuild_target}'"
        )
    return str(found[0])
