"""Typed representation of an Atom (RFC 4287) document.

The dataclasses mirror the element structure of the wire format. They carry
no behaviour beyond their shape: parsing and rendering live in
``atom_feed.codec`` and conformance checks in ``atom_feed.validation``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .checkers import parse_rfc3339

ATOM_NS = "http://www.w3.org/2005/Atom"
XML_NS = "http://www.w3.org/XML/1998/namespace"

ATOM_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Prefix (None for the default namespace) to URI, as declared on one element.
# Kept so rendering reproduces the prefixes of a parsed document; never
# part of equality.
Namespaces = Dict[Optional[str], str]


class TimeStr(str):
    """An RFC 3339 date-time kept as text, exactly as it appears on the wire."""

    @classmethod
    def from_datetime(cls, value: datetime) -> "TimeStr":
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        offset = value.utcoffset()
        if not offset:
            suffix = "Z"
        else:
            total = int(offset.total_seconds()) // 60
            sign = "-" if total < 0 else "+"
            hours, minutes = divmod(abs(total), 60)
            suffix = f"{sign}{hours:02d}:{minutes:02d}"
        return cls(value.strftime(ATOM_TIME_FORMAT) + suffix)

    def to_datetime(self) -> datetime:
        return parse_rfc3339(self)


def format_time(value: datetime) -> TimeStr:
    """Format a datetime as an Atom timestamp. Naive values are taken as UTC."""
    return TimeStr.from_datetime(value)


def parse_time(value: str) -> datetime:
    """Parse an Atom timestamp into an aware datetime."""
    return TimeStr(value).to_datetime()


@dataclass
class Common:
    """xml:base and xml:lang, allowed on every Atom element."""

    base: str = ""
    lang: str = ""


@dataclass
class Text(Common):
    """A text construct. As entry content, type may be any MIME type."""

    type: str = ""
    src: str = ""
    body: str = ""


@dataclass
class Extension:
    """A foreign element kept verbatim: Clark-notation name plus inner markup."""

    name: str = ""
    xml: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    namespaces: Namespaces = field(default_factory=dict, compare=False)


@dataclass
class Person(Common):
    """An author or contributor."""

    name: str = ""
    uri: str = ""
    email: str = ""
    extensions: List[Extension] = field(default_factory=list)


@dataclass
class Category(Common):
    term: str = ""
    scheme: str = ""
    label: str = ""


@dataclass
class Generator(Common):
    uri: str = ""
    version: str = ""
    text: str = ""


@dataclass
class Link(Common):
    href: str = ""
    rel: str = ""
    type: str = ""
    hreflang: str = ""
    title: str = ""
    length: str = ""


@dataclass
class Source:
    """Metadata of the feed an entry was copied from. The feed has no entries."""

    feed: "Feed" = field(default_factory=lambda: Feed())


@dataclass
class Entry(Common):
    """A single entry, either inside a Feed or as a standalone document."""

    authors: List[Person] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    content: Optional[Text] = None
    contributors: List[Person] = field(default_factory=list)
    id: str = ""
    links: List[Link] = field(default_factory=list)
    published: TimeStr = TimeStr("")
    rights: str = ""
    source: Optional[Source] = None
    summary: Optional[Text] = None
    title: str = ""
    updated: TimeStr = TimeStr("")
    extensions: List[Extension] = field(default_factory=list)
    namespaces: Namespaces = field(default_factory=dict, compare=False)


@dataclass
class Feed(Common):
    """The top level Atom document."""

    authors: List[Person] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    contributors: List[Person] = field(default_factory=list)
    generator: Optional[Generator] = None
    icon: str = ""
    id: str = ""
    links: List[Link] = field(default_factory=list)
    logo: str = ""
    rights: str = ""
    subtitle: str = ""
    title: str = ""
    updated: TimeStr = TimeStr("")
    entries: List[Entry] = field(default_factory=list)
    extensions: List[Extension] = field(default_factory=list)
    namespaces: Namespaces = field(default_factory=dict, compare=False)
