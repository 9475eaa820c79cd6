"""
atom_feed

Typed model, XML codec and validator for the Atom Syndication Format (RFC 4287).

Core ideas:
- Model: dataclasses for Feed, Entry and the constructs they contain
- Codec: bytes -> Feed/Entry and back, charset aware, via lxml
- Validation: every conformance issue is collected, nothing short-circuits

Example
-------
from atom_feed import parse_feed, validate

feed = parse_feed(open("feed.xml", "rb").read())
result = validate(feed)
if not result.ok:
    print(result.render())
"""
from .codec import parse_entry, parse_feed, render_entry, render_feed
from .config import CodecOptions, load_codec_options
from .exceptions import AtomError, FeedParseError, FeedRenderError, ValidationError
from .models import (
    Category,
    Common,
    Entry,
    Extension,
    Feed,
    Generator,
    Link,
    Person,
    Source,
    Text,
    TimeStr,
    format_time,
    parse_time,
)
from .validation import ValidationResult, validate, validate_entry, validate_feed

__all__ = [
    "AtomError",
    "Category",
    "CodecOptions",
    "Common",
    "Entry",
    "Extension",
    "Feed",
    "FeedParseError",
    "FeedRenderError",
    "Generator",
    "Link",
    "Person",
    "Source",
    "Text",
    "TimeStr",
    "ValidationError",
    "ValidationResult",
    "format_time",
    "load_codec_options",
    "parse_entry",
    "parse_feed",
    "parse_time",
    "render_entry",
    "render_feed",
    "validate",
    "validate_entry",
    "validate_feed",
]
