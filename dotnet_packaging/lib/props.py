from __future__ import annotations

import codecs
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


PACKAGE_REFERENCE = "PackageReference"
DEFAULT_INDENT = "  "


def _namespace(tag: str) -> str:
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return ""


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _qualified(ns: str, name: str) -> str:
    return f"{{{ns}}}{name}" if ns else name


def _line_indent(ws: Optional[str]) -> Optional[str]:
    """Indentation at the end of a whitespace run; None for inline/compact layout."""
    ws = ws or ""
    if ws.strip() or "\n" not in ws:
        return None
    return ws.rsplit("\n", 1)[1]


@dataclass
class PropsDocument:
    """A props file split into the parsed root plus the raw text around it.

    ``prolog`` (XML declaration, leading comments) and ``epilogue`` are
    written back verbatim.
    """

    root: ET.Element
    prolog: str = ""
    epilogue: str = "\n"
    bom: bool = False

    @classmethod
    def load(cls, path: Path) -> "PropsDocument":
        if not path.exists():
            return cls(root=ET.Element("Project"))

        data = path.read_bytes()
        bom = data.startswith(codecs.BOM_UTF8)
        text = data.decode("utf-8-sig")

        parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
        parser.feed(text)
        root = parser.close()
        if _local(root.tag) != "Project":
            raise ValueError(f"{path.name} is not an MSBuild project (root <{_local(root.tag)}>)")

        m = re.search(r"<(?![?!])", text)
        prolog = text[: m.start()] if m else ""
        epilogue = text[len(text.rstrip()):] or "\n"
        return cls(root=root, prolog=prolog, epilogue=epilogue, bom=bom)

    @property
    def indent_unit(self) -> str:
        return _line_indent(self.root.text) or DEFAULT_INDENT

    def save(self, path: Path) -> None:
        ns = _namespace(self.root.tag)
        body = ET.tostring(self.root, encoding="unicode", default_namespace=ns or None)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.prolog + body + self.epilogue, encoding="utf-8-sig" if self.bom else "utf-8")


def append_child(parent: ET.Element, child: ET.Element, parent_indent: Optional[str], unit: str) -> Optional[str]:
    """Append ``child`` copying the whitespace layout of its new siblings.

    Returns the indentation of the child's line, or None when the parent is
    laid out inline.
    """

    if len(parent):
        last = parent[-1]
        lead = parent[-2].tail if len(parent) > 1 else parent.text
        child.tail = last.tail
        last.tail = lead
        parent.append(child)
        return _line_indent(lead)

    parent.append(child)
    if parent_indent is None:
        return None
    parent.text = "\n" + parent_indent + unit
    child.tail = "\n" + parent_indent
    return parent_indent + unit


def find_package_reference(root: ET.Element, package_id: str) -> Optional[ET.Element]:
    for el in root.iter():
        if not isinstance(el.tag, str) or _local(el.tag) != PACKAGE_REFERENCE:
            continue
        if (el.get("Include") or "").strip().lower() == package_id.lower():
            return el
    return None


def add_package_reference(doc: PropsDocument, package_id: str, metadata: Dict[str, str]) -> ET.Element:
    """Append a PackageReference, reusing the first ItemGroup that already holds some."""

    root = doc.root
    ns = _namespace(root.tag)
    unit = doc.indent_unit

    group = None
    group_indent: Optional[str] = None
    lead = root.text
    for candidate in root:
        if (
            isinstance(candidate.tag, str)
            and _local(candidate.tag) == "ItemGroup"
            and any(isinstance(c.tag, str) and _local(c.tag) == PACKAGE_REFERENCE for c in candidate)
        ):
            group = candidate
            group_indent = _line_indent(lead)
            break
        lead = candidate.tail

    if group is None:
        group = ET.Element(_qualified(ns, "ItemGroup"))
        group_indent = append_child(root, group, "", unit)

    ref = ET.Element(_qualified(ns, PACKAGE_REFERENCE), {"Include": package_id})
    for key, value in metadata.items():
        ref.set(key, value)
    append_child(group, ref, group_indent, unit)
    return ref


def ensure_package_reference(path: str | Path, package_id: str, metadata: Dict[str, str]) -> bool:
    """Make sure ``path`` declares a PackageReference to ``package_id``.

    Creates the file if missing. Returns True when the file was written and
    False when the reference was already there (the file is not touched).
    Only the new elements are added; the rest of the text keeps its layout.
    """

    p = Path(path)
    doc = PropsDocument.load(p)

    existing = find_package_reference(doc.root, package_id)
    if existing is not None:
        logger.info("%s already references %s (%s)", p.name, package_id, existing.get("Version"))
        return False

    add_package_reference(doc, package_id, metadata)
    doc.save(p)

    logger.info("Added %s %s to %s", package_id, metadata.get("Version"), str(p))
    return True
