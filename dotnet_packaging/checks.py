from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from .errors import PreconditionError
from .lib.assets import has_library, load_library_keys
from .lib.msbuild import PACKAGING_TARGETS_ID, parse_properties, restore

logger = logging.getLogger(__name__)


def check_packaging_targets(
    project: str,
    *,
    dotnet: str,
    command_name: str,
    framework: Optional[str] = None,
    verbose: bool = False,
) -> None:
    """Restore ``project`` and make sure its lock file lists Packaging.Targets.

    Raises PreconditionError with the message to show the user.
    """

    name = Path(project).name

    r = restore(project, dotnet=dotnet, framework=framework, verbose=verbose)
    try:
        if r.returncode != 0:
            raise ValueError(f"restore exited with {r.returncode}")
        props = parse_properties(r.stdout)
    except ValueError as e:
        logger.debug("Restore of %s failed: %s", name, e)
        for output in (r.stdout, r.stderr):
            if output.strip():
                sys.stderr.write(output if output.endswith("\n") else output + "\n")
        raise PreconditionError(f"Failed to restore '{name}'. Please run dotnet restore, and try again.") from e

    if not props.get("TargetFramework", "").strip():
        raise PreconditionError(
            f"The project '{name}' does not specify a default target framework. "
            "Please specify the -f {framework} option, and try again."
        )

    assets_path = props.get("ProjectAssetsFile", "").strip()
    assets_error = (
        f"Failed to read the ProjectAssetsFile property for '{name}'. Please run dotnet restore, and try again."
    )
    if not assets_path:
        raise PreconditionError(assets_error)

    # The build engine only ever runs in a child process, so the lock file
    # is plain JSON to us.
    try:
        keys = load_library_keys(assets_path)
    except (OSError, ValueError) as e:
        logger.debug("Could not load %s: %s", assets_path, e)
        raise PreconditionError(assets_error) from e

    if not has_library(keys, PACKAGING_TARGETS_ID):
        raise PreconditionError(
            f"The project '{name}' doesn't have a PackageReference to {PACKAGING_TARGETS_ID}.\n"
            f"Please run 'dotnet {command_name} install', and try again."
        )

    logger.info("%s references %s", name, PACKAGING_TARGETS_ID)


def is_packaging_targets_installed(
    project: str,
    *,
    dotnet: str,
    command_name: str,
    framework: Optional[str] = None,
    verbose: bool = False,
) -> bool:
    try:
        check_packaging_targets(
            project,
            dotnet=dotnet,
            command_name=command_name,
            framework=framework,
            verbose=verbose,
        )
    except PreconditionError as e:
        print(str(e), file=sys.stderr)
        return False
    return True
