from __future__ import annotations

import argparse
import logging
import re
import sys
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .checks import is_packaging_targets_installed
from .config import DEFAULT_CONFIG_NAME, load_packaging_config
from .errors import PackagingError
from .lib.msbuild import PACKAGING_TARGETS_ID, dotnet_executable, msbuild_arguments, run_target
from .lib.props import ensure_package_reference
from .logging_utils import configure_logging
from .project import find_project_file
from .request import InvocationRequest

logger = logging.getLogger(__name__)


DIRECTORY_BUILD_PROPS = "Directory.Build.props"


def package_version(version: str) -> str:
    """``1.2.3.4`` / ``1.2.3rc1`` -> ``1.2.3-*`` so prereleases also match."""
    parts = []
    for piece in version.split(".")[:3]:
        m = re.match(r"\d+", piece)
        parts.append(m.group(0) if m else "0")
    while len(parts) < 3:
        parts.append("0")
    return ".".join(parts) + "-*"


class PackagingRunner:
    """Drive ``dotnet msbuild`` to produce one kind of installer package."""

    def __init__(self, output_name: str, msbuild_target: str, command_name: str) -> None:
        self.output_name = output_name
        self.msbuild_target = msbuild_target
        self.command_name = command_name

    @property
    def banner(self) -> str:
        return f"dotnet {self.command_name} ({__version__})"

    def build_parser(self) -> argparse.ArgumentParser:
        p = argparse.ArgumentParser(
            prog=f"dotnet-{self.command_name}",
            description=f"Create a {self.output_name} from a .NET project. "
            f"Run 'dotnet-{self.command_name} install' first to reference {PACKAGING_TARGETS_ID}.",
        )
        p.add_argument(
            "-r",
            "--runtime",
            help=f"Target runtime of the {self.output_name}. The target runtime has to be specified in the project file.",
        )
        p.add_argument(
            "-f",
            "--framework",
            help=f"Target framework of the {self.output_name}. The target framework has to be specified in the project file.",
        )
        p.add_argument(
            "-c",
            "--configuration",
            help=f"Target configuration of the {self.output_name}. The default for most projects is 'Debug'.",
        )
        p.add_argument(
            "-o",
            "--output",
            help="The output directory to place built packages in. The default is the output directory of your project.",
        )
        p.add_argument(
            "--version-suffix",
            dest="version_suffix",
            help="Defines the value for the $(VersionSuffix) property in the project.",
        )
        p.add_argument("--no-restore", action="store_true", help="Do not restore the project before building.")
        p.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output.")
        p.add_argument(
            "--config",
            default=None,
            help=f"YAML file with default option values (default: ./{DEFAULT_CONFIG_NAME} if present)",
        )
        p.add_argument(
            "project",
            nargs="?",
            default=None,
            help="The project file to operate on. If a file is not specified, "
            "the command will search the current directory for one.",
        )
        return p

    def build_install_parser(self) -> argparse.ArgumentParser:
        return argparse.ArgumentParser(
            prog=f"dotnet-{self.command_name} install",
            description=f"Add a PackageReference to {PACKAGING_TARGETS_ID} to {DIRECTORY_BUILD_PROPS} "
            "in the current directory.",
        )

    def run(self, argv: Optional[Sequence[str]] = None) -> int:
        args_list = list(sys.argv[1:] if argv is None else argv)
        try:
            if args_list[:1] == ["install"]:
                self.build_install_parser().parse_args(args_list[1:])
                return self.cmd_install(cwd=Path.cwd())

            args = self.build_parser().parse_args(args_list)
            return self.cmd_package(args, cwd=Path.cwd())
        except PackagingError as e:
            print(str(e), file=sys.stderr)
            return -1
        except KeyboardInterrupt:
            return 130
        except Exception:
            logger.exception("dotnet %s failed", self.command_name)
            raise

    def cmd_install(self, *, cwd: Path) -> int:
        configure_logging()
        print(self.banner)

        props_path = cwd / DIRECTORY_BUILD_PROPS
        try:
            changed = ensure_package_reference(
                props_path,
                PACKAGING_TARGETS_ID,
                {"Version": package_version(__version__), "PrivateAssets": "all"},
            )
        except (ET.ParseError, ValueError) as e:
            raise PackagingError(f"Failed to update '{props_path}': {e}") from e
        if not changed:
            logger.info("%s unchanged", str(props_path))

        print(f"Successfully installed dotnet {self.command_name}. Now run 'dotnet {self.command_name}' to package your")
        print(f"application as a {self.output_name}")
        return 0

    def cmd_package(self, args: argparse.Namespace, *, cwd: Path) -> int:
        config_path = args.config or str(cwd / DEFAULT_CONFIG_NAME)
        config = load_packaging_config(config_path, required=bool(args.config))
        request = InvocationRequest.from_args(args, config)

        configure_logging(
            level=logging.DEBUG if request.verbose else logging.WARNING,
            log_path=config.log_file,
        )
        print(self.banner)

        if request.verbose:
            for line in request.describe():
                print(line)

        project_path = find_project_file(
            request.project,
            cwd=cwd,
            command_name=self.command_name,
            msbuild_target=self.msbuild_target,
        )

        if request.verbose:
            print(f"User specified project '{request.project or ''}', using '{project_path}'.")

        dotnet = dotnet_executable(config.dotnet)

        if not request.no_restore:
            if not is_packaging_targets_installed(
                project_path,
                dotnet=dotnet,
                command_name=self.command_name,
                framework=request.framework,
                verbose=request.verbose,
            ):
                return -1

        returncode = run_target(dotnet, self.dispatch_arguments(request, project_path))

        if returncode != 0:
            logger.warning("%s exited with %d", self.msbuild_target, returncode)
        return returncode

    def dispatch_arguments(self, request: InvocationRequest, project_path: str) -> list[str]:
        return msbuild_arguments(
            target=self.msbuild_target,
            properties=[
                ("RuntimeIdentifier", request.runtime),
                ("TargetFramework", request.framework),
                ("Configuration", request.configuration),
                ("VersionSuffix", request.version_suffix),
                ("PackageDir", request.output),
            ],
            project=project_path,
        )
