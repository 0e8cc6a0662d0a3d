from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Optional

from .config import PackagingConfig

# Fields that may be filled from the `defaults` section of the config file.
CONFIGURABLE = ("runtime", "framework", "configuration", "output", "version_suffix")

ECHO_LABELS = (
    ("runtime", "runtime"),
    ("framework", "framework"),
    ("configuration", "configuration"),
    ("output", "output"),
    ("version_suffix", "versionSuffix"),
    ("no_restore", "noRestore"),
    ("verbose", "verbose"),
)


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


@dataclass(frozen=True)
class InvocationRequest:
    runtime: Optional[str] = None
    framework: Optional[str] = None
    configuration: Optional[str] = None
    output: Optional[str] = None
    version_suffix: Optional[str] = None
    no_restore: bool = False
    verbose: bool = False
    project: Optional[str] = None

    @classmethod
    def from_args(cls, args: argparse.Namespace, config: Optional[PackagingConfig] = None) -> "InvocationRequest":
        """Command-line values win; the config defaults fill the gaps."""
        values = {}
        for name in CONFIGURABLE:
            value = getattr(args, name, None)
            if _blank(value) and config is not None:
                value = config.default(name)
            values[name] = None if _blank(value) else value
        return cls(
            no_restore=bool(args.no_restore),
            verbose=bool(args.verbose),
            project=args.project,
            **values,
        )

    def describe(self) -> list[str]:
        """Echo lines for verbose mode; the project is reported separately."""
        return [f"{label}: {'' if getattr(self, name) is None else getattr(self, name)}" for name, label in ECHO_LABELS]
