from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import FrozenSet, Iterable

logger = logging.getLogger(__name__)


def load_library_keys(path: str) -> FrozenSet[str]:
    """Return the keys of the ``libraries`` object of a project.assets.json file.

    Keys have the form ``<PackageId>/<Version>``. Nothing else in the lock
    file is inspected.
    """

    p = Path(path)
    data = json.loads(p.read_text(encoding="utf-8-sig"))
    if not isinstance(data, dict):
        raise ValueError(f"Lock file must contain an object: {p}")

    libraries = data.get("libraries") or {}
    if not isinstance(libraries, dict):
        raise ValueError(f"'libraries' must be an object: {p}")

    logger.debug("Read %d libraries from %s", len(libraries), str(p))
    return frozenset(libraries)


def has_library(keys: Iterable[str], package_id: str) -> bool:
    prefix = f"{package_id}/"
    return any(k.startswith(prefix) for k in keys)
