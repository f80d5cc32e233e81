"""Serialize sitemap documents and write them to the output directory."""

from __future__ import annotations

import logging
from pathlib import Path
from xml.etree import ElementTree as ET

LOGGER = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def render_xml(root: ET.Element) -> str:
    """Render a document tree as a UTF-8 XML document with an explicit declaration."""

    tree = ET.ElementTree(root)
    ET.indent(tree, space="  ")
    return XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"


class SitemapWriter:
    """Write rendered documents into a single output directory."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def _ensure_directory(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write_xml(self, root: ET.Element, filename: str) -> Path:
        self._ensure_directory()
        path = self.output_dir / filename
        path.write_text(render_xml(root), encoding="utf-8")
        LOGGER.info("Wrote %s", path)
        return path

    def write_text(self, content: str, filename: str) -> Path:
        self._ensure_directory()
        path = self.output_dir / filename
        path.write_text(content, encoding="utf-8")
        LOGGER.info("Wrote %s", path)
        return path
