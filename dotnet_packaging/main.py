from __future__ import annotations

import argparse
from typing import Dict, Optional

from .runner import PackagingRunner


RUNNERS: Dict[str, PackagingRunner] = {
    "deb": PackagingRunner("Debian/Ubuntu installer package", "CreateDeb", "deb"),
    "rpm": PackagingRunner("RedHat/CentOS installer package", "CreateRpm", "rpm"),
}


def deb_main(argv: Optional[list[str]] = None) -> int:
    return RUNNERS["deb"].run(argv)


def rpm_main(argv: Optional[list[str]] = None) -> int:
    return RUNNERS["rpm"].run(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """``python -m dotnet_packaging <deb|rpm> [args...]``."""
    p = argparse.ArgumentParser(prog="dotnet-packaging")
    p.add_argument("kind", choices=sorted(RUNNERS), help="Package kind to create")
    p.add_argument("args", nargs=argparse.REMAINDER, help="Arguments for dotnet-<kind>")

    args = p.parse_args(argv)
    return RUNNERS[args.kind].run(args.args)
