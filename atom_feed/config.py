"""Codec configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from xml.etree import ElementTree as ET

logger = logging.getLogger(__name__)


@dataclass
class CodecOptions:
    """Options controlling how documents are parsed and rendered."""

    pretty_print: bool = True
    indent: str = "    "
    xml_declaration: bool = True
    encoding: str = "UTF-8"
    huge_tree: bool = False


def _flag(node: ET.Element, tag: str, default: bool) -> bool:
    return node.findtext(tag, "true" if default else "false").strip().lower() == "true"


def load_codec_options(path: str) -> CodecOptions:
    """Parse codec options from an XML file rooted at <codec>."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading codec configuration from %s", config_path)
    root = ET.parse(config_path).getroot()
    if root.tag != "codec":
        raise ValueError(f"Expected <codec> root element, found <{root.tag}>")

    defaults = CodecOptions()
    options = CodecOptions(
        pretty_print=_flag(root, "pretty-print", defaults.pretty_print),
        xml_declaration=_flag(root, "xml-declaration", defaults.xml_declaration),
        huge_tree=_flag(root, "huge-tree", defaults.huge_tree),
        encoding=root.findtext("encoding", defaults.encoding).strip(),
    )

    # Indent is either a number of spaces or the literal indent string.
    indent = root.findtext("indent")
    if indent is not None:
        options.indent = " " * int(indent) if indent.strip().isdigit() else indent

    logger.debug("Loaded codec options: %s", options)
    return options
