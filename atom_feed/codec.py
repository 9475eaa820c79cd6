"""Conversion between Atom XML bytes and the dataclasses in atom_feed.models."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Optional, Tuple
from xml.sax.saxutils import escape

from lxml import etree

from .config import CodecOptions
from .exceptions import FeedParseError, FeedRenderError
from .models import (
    ATOM_NS,
    XML_NS,
    Category,
    Entry,
    Extension,
    Feed,
    Generator,
    Link,
    Person,
    Source,
    Text,
    Namespaces,
    TimeStr,
)

logger = logging.getLogger(__name__)

_XML_BASE = f"{{{XML_NS}}}base"
_XML_LANG = f"{{{XML_NS}}}lang"


def _q(local: str) -> str:
    return f"{{{ATOM_NS}}}{local}"


def _parser(options: CodecOptions) -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        huge_tree=options.huge_tree,
    )


# Reading


def _children(element: etree._Element) -> Iterator[Tuple[Optional[str], etree._Element]]:
    """Yield (atom local name or None, child) for each child element."""
    for child in element:
        if not isinstance(child.tag, str):
            continue
        qname = etree.QName(child)
        local = qname.localname if qname.namespace == ATOM_NS else None
        yield local, child


def _common(element: etree._Element) -> Dict[str, str]:
    return {
        "base": element.get(_XML_BASE, ""),
        "lang": element.get(_XML_LANG, ""),
    }


def _text_of(element: etree._Element) -> str:
    return "".join(element.itertext())


def _inner_xml(element: etree._Element) -> str:
    parts = [escape(element.text or "")]
    for child in element:
        parts.append(etree.tostring(child, encoding="unicode", with_tail=True))
    return "".join(parts)


def _own_namespaces(element: etree._Element) -> Namespaces:
    """Return the namespace declarations made on element itself."""
    parent = element.getparent()
    inherited = parent.nsmap if parent is not None else {}
    return {
        prefix: uri
        for prefix, uri in element.nsmap.items()
        if inherited.get(prefix) != uri
    }


def _read_extension(element: etree._Element) -> Extension:
    return Extension(
        name=element.tag,
        xml=_inner_xml(element),
        attributes=dict(element.attrib),
        namespaces=_own_namespaces(element),
    )


def _read_text(element: etree._Element) -> Text:
    return Text(
        type=element.get("type", ""),
        src=element.get("src", ""),
        body=_inner_xml(element),
        **_common(element),
    )


def _read_person(element: etree._Element) -> Person:
    person = Person(**_common(element))
    for local, child in _children(element):
        if local == "name":
            person.name = _text_of(child)
        elif local == "uri":
            person.uri = _text_of(child)
        elif local == "email":
            person.email = _text_of(child)
        else:
            person.extensions.append(_read_extension(child))
    return person


def _read_category(element: etree._Element) -> Category:
    return Category(
        term=element.get("term", ""),
        scheme=element.get("scheme", ""),
        label=element.get("label", ""),
        **_common(element),
    )


def _read_generator(element: etree._Element) -> Generator:
    return Generator(
        uri=element.get("uri", ""),
        version=element.get("version", ""),
        text=_text_of(element),
        **_common(element),
    )


def _read_link(element: etree._Element) -> Link:
    return Link(
        href=element.get("href", ""),
        rel=element.get("rel", ""),
        type=element.get("type", ""),
        hreflang=element.get("hreflang", ""),
        title=element.get("title", ""),
        length=element.get("length", ""),
        **_common(element),
    )


def _read_entry(element: etree._Element) -> Entry:
    entry = Entry(namespaces=_own_namespaces(element), **_common(element))
    for local, child in _children(element):
        if local == "author":
            entry.authors.append(_read_person(child))
        elif local == "category":
            entry.categories.append(_read_category(child))
        elif local == "content":
            entry.content = _read_text(child)
        elif local == "contributor":
            entry.contributors.append(_read_person(child))
        elif local == "id":
            entry.id = _text_of(child)
        elif local == "link":
            entry.links.append(_read_link(child))
        elif local == "published":
            entry.published = TimeStr(_text_of(child))
        elif local == "rights":
            entry.rights = _text_of(child)
        elif local == "source":
            entry.source = Source(feed=_read_feed(child))
        elif local == "summary":
            entry.summary = _read_text(child)
        elif local == "title":
            entry.title = _text_of(child)
        elif local == "updated":
            entry.updated = TimeStr(_text_of(child))
        else:
            entry.extensions.append(_read_extension(child))
    return entry


def _read_feed(element: etree._Element) -> Feed:
    feed = Feed(namespaces=_own_namespaces(element), **_common(element))
    for local, child in _children(element):
        if local == "author":
            feed.authors.append(_read_person(child))
        elif local == "category":
            feed.categories.append(_read_category(child))
        elif local == "contributor":
            feed.contributors.append(_read_person(child))
        elif local == "generator":
            feed.generator = _read_generator(child)
        elif local == "icon":
            feed.icon = _text_of(child)
        elif local == "id":
            feed.id = _text_of(child)
        elif local == "link":
            feed.links.append(_read_link(child))
        elif local == "logo":
            feed.logo = _text_of(child)
        elif local == "rights":
            feed.rights = _text_of(child)
        elif local == "subtitle":
            feed.subtitle = _text_of(child)
        elif local == "title":
            feed.title = _text_of(child)
        elif local == "updated":
            feed.updated = TimeStr(_text_of(child))
        elif local == "entry":
            feed.entries.append(_read_entry(child))
        else:
            feed.extensions.append(_read_extension(child))
    return feed


def _parse_root(data: bytes, expected: str, options: CodecOptions) -> etree._Element:
    if not isinstance(data, bytes):
        raise TypeError(f"Expected bytes, got {type(data).__name__}")
    try:
        root = etree.fromstring(data, parser=_parser(options))
    except etree.XMLSyntaxError as exc:
        raise FeedParseError(f"Malformed XML document: {exc}") from exc

    if root.tag != _q(expected):
        raise FeedParseError(
            f"Expected element type <{expected}> but have <{etree.QName(root).localname}>"
        )
    return root


def parse_feed(data: bytes, options: Optional[CodecOptions] = None) -> Feed:
    """Parse an Atom feed document.

    The character set is taken from the XML declaration, so ``data`` must be
    the raw bytes of the document.
    """
    root = _parse_root(data, "feed", options or CodecOptions())
    feed = _read_feed(root)
    logger.debug("Parsed feed '%s' with %d entries", feed.id, len(feed.entries))
    return feed


def parse_entry(data: bytes, options: Optional[CodecOptions] = None) -> Entry:
    """Parse a standalone Atom entry document."""
    root = _parse_root(data, "entry", options or CodecOptions())
    entry = _read_entry(root)
    logger.debug("Parsed entry '%s'", entry.id)
    return entry


# Writing


def _set_attributes(element: etree._Element, *pairs: Tuple[str, str]) -> None:
    for name, value in pairs:
        if value:
            element.set(name, value)


def _set_common(element: etree._Element, common) -> None:
    _set_attributes(element, (_XML_BASE, common.base), (_XML_LANG, common.lang))


def _add_simple(
    parent: etree._Element, local: str, value: str, required: bool = False
) -> None:
    if value or required:
        etree.SubElement(parent, _q(local)).text = str(value)


def _fill_inner(element: etree._Element, markup: str) -> None:
    """Place raw inner markup inside element."""
    if not markup:
        return
    if "<" not in markup and "&" not in markup:
        element.text = markup
        return
    try:
        wrapper = etree.fromstring(
            f'<wrapper xmlns="{ATOM_NS}">{markup}</wrapper>',
            parser=etree.XMLParser(resolve_entities=False, no_network=True),
        )
    except etree.XMLSyntaxError as exc:
        raise FeedRenderError(
            f"Content of <{etree.QName(element).localname}> is not well-formed XML: {exc}"
        ) from exc
    element.text = wrapper.text
    for child in list(wrapper):
        element.append(child)


def _write_extensions(parent: etree._Element, extensions) -> None:
    for extension in extensions:
        element = etree.SubElement(
            parent,
            extension.name,
            attrib=extension.attributes,
            nsmap=extension.namespaces or None,
        )
        _fill_inner(element, extension.xml)


def _write_text(parent: etree._Element, local: str, text: Text) -> None:
    element = etree.SubElement(parent, _q(local))
    _set_common(element, text)
    _set_attributes(element, ("type", text.type), ("src", text.src))
    _fill_inner(element, text.body)


def _write_person(parent: etree._Element, local: str, person: Person) -> None:
    element = etree.SubElement(parent, _q(local))
    _set_common(element, person)
    _add_simple(element, "name", person.name, required=True)
    _add_simple(element, "uri", person.uri)
    _add_simple(element, "email", person.email)
    _write_extensions(element, person.extensions)


def _write_category(parent: etree._Element, category: Category) -> None:
    element = etree.SubElement(parent, _q("category"))
    _set_common(element, category)
    element.set("term", category.term)
    _set_attributes(element, ("scheme", category.scheme), ("label", category.label))


def _write_generator(parent: etree._Element, generator: Generator) -> None:
    element = etree.SubElement(parent, _q("generator"))
    _set_common(element, generator)
    _set_attributes(element, ("uri", generator.uri), ("version", generator.version))
    element.text = generator.text or None


def _write_link(parent: etree._Element, link: Link) -> None:
    element = etree.SubElement(parent, _q("link"))
    _set_common(element, link)
    element.set("href", link.href)
    _set_attributes(
        element,
        ("rel", link.rel),
        ("type", link.type),
        ("hreflang", link.hreflang),
        ("title", link.title),
        ("length", link.length),
    )


def _write_entry(element: etree._Element, entry: Entry) -> None:
    _set_common(element, entry)
    for author in entry.authors:
        _write_person(element, "author", author)
    for category in entry.categories:
        _write_category(element, category)
    if entry.content is not None:
        _write_text(element, "content", entry.content)
    for contributor in entry.contributors:
        _write_person(element, "contributor", contributor)
    _add_simple(element, "id", entry.id, required=True)
    for link in entry.links:
        _write_link(element, link)
    _add_simple(element, "published", entry.published)
    _add_simple(element, "rights", entry.rights)
    if entry.source is not None:
        source = entry.source.feed
        _write_feed(
            etree.SubElement(element, _q("source"), nsmap=source.namespaces or None),
            source,
        )
    if entry.summary is not None:
        _write_text(element, "summary", entry.summary)
    _add_simple(element, "title", entry.title, required=True)
    _add_simple(element, "updated", entry.updated, required=True)
    _write_extensions(element, entry.extensions)


def _write_feed(element: etree._Element, feed: Feed) -> None:
    _set_common(element, feed)
    for author in feed.authors:
        _write_person(element, "author", author)
    for category in feed.categories:
        _write_category(element, category)
    for contributor in feed.contributors:
        _write_person(element, "contributor", contributor)
    if feed.generator is not None:
        _write_generator(element, feed.generator)
    _add_simple(element, "icon", feed.icon)
    _add_simple(element, "id", feed.id, required=True)
    for link in feed.links:
        _write_link(element, link)
    _add_simple(element, "logo", feed.logo)
    _add_simple(element, "rights", feed.rights)
    _add_simple(element, "subtitle", feed.subtitle)
    _add_simple(element, "title", feed.title, required=True)
    _add_simple(element, "updated", feed.updated, required=True)
    for entry in feed.entries:
        _write_entry(
            etree.SubElement(element, _q("entry"), nsmap=entry.namespaces or None),
            entry,
        )
    _write_extensions(element, feed.extensions)


def _root_namespaces(declared: Namespaces) -> Namespaces:
    """Declarations for a document root; Atom stays the default unless rebound."""
    if ATOM_NS in declared.values():
        return dict(declared)
    if None in declared:
        return {"atom": ATOM_NS, **declared}
    return {None: ATOM_NS, **declared}


def _serialize(root: etree._Element, options: CodecOptions) -> bytes:
    if options.pretty_print:
        # Whitespace inside mixed content bodies is re-indented as well.
        etree.indent(root, space=options.indent)
    body = etree.tostring(
        root,
        xml_declaration=False,
        encoding=options.encoding,
        pretty_print=options.pretty_print,
    )
    if not options.xml_declaration:
        return body
    declaration = f'<?xml version="1.0" encoding="{options.encoding}"?>\n'
    return declaration.encode(options.encoding) + body


def render_feed(feed: Feed, options: Optional[CodecOptions] = None) -> bytes:
    """Render a feed as an Atom XML document."""
    root = etree.Element(_q("feed"), nsmap=_root_namespaces(feed.namespaces))
    _write_feed(root, feed)
    logger.debug("Rendering feed '%s' with %d entries", feed.id, len(feed.entries))
    return _serialize(root, options or CodecOptions())


def render_entry(entry: Entry, options: Optional[CodecOptions] = None) -> bytes:
    """Render a standalone entry as an Atom XML document."""
    root = etree.Element(_q("entry"), nsmap=_root_namespaces(entry.namespaces))
    _write_entry(root, entry)
    logger.debug("Rendering entry '%s'", entry.id)
    return _serialize(root, options or CodecOptions())
