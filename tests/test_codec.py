import pytest
from lxml import etree

from atom_feed import (
    CodecOptions,
    Entry,
    Extension,
    Feed,
    FeedParseError,
    FeedRenderError,
    Person,
    Source,
    Text,
    TimeStr,
    parse_entry,
    parse_feed,
    render_entry,
    render_feed,
)
from conftest import make_entry, make_feed

ATOM = "{http://www.w3.org/2005/Atom}"


def test_all_feed_elements(load_sample):
    feed = load_sample("atom_1.0_all.xml")

    assert feed.lang == "en"
    assert [(a.name, a.uri, a.email) for a in feed.authors] == [
        ("John Doe", "http://john.doe", "john@test.com"),
        ("Jane Doe", "http://jane.doe", "jane@test.com"),
    ]
    assert [(c.term, c.scheme, c.label) for c in feed.categories] == [
        ("testcat", "http://testcat.john.doe", "Test Category"),
        ("testcat2", "http://testcat2.john.doe", "Test Category 2"),
    ]
    assert [(c.name, c.uri, c.email) for c in feed.contributors] == [
        ("Contrib1", "http://contrib1", "contrib1@test.com"),
        ("Contrib2", "http://contrib2", "contrib2@test.com"),
    ]
    assert feed.generator.uri == "http://github.com/test/atom"
    assert feed.generator.version == "1.0"
    assert feed.generator.text == "Python ATOM package"
    assert feed.icon == "http://icon.test.com"
    assert feed.id == "http://www.test.com/blog"

    alternate, self_link = feed.links
    assert alternate.rel == "alternate"
    assert alternate.href == "http://www.test.com/blog2"
    assert alternate.hreflang == "de"
    assert alternate.type == "application/xml"
    assert alternate.title == "German feed"
    assert alternate.length == "10"
    assert self_link.rel == "self"
    assert self_link.href == "http://www.test.com/blog"

    assert feed.logo == "http://www.test.com/logo"
    assert feed.rights == "Test Corp TM"
    assert feed.subtitle == "Test subtitle"
    assert feed.title == "Test feed"
    assert feed.updated == "2006-11-04T09:11:03-08:00"
    assert isinstance(feed.updated, TimeStr)


def test_entry_elements(load_sample):
    (entry,) = load_sample("atom_1.0_all.xml").entries

    assert entry.id == "urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a"
    assert entry.authors == [Person(name="John Doe")]
    assert entry.categories[0].term == "entrycat"
    assert entry.content == Text(type="text/plain", body="Plain text body")
    assert entry.summary == Text(type="html", body="&lt;p&gt;A short summary&lt;/p&gt;")
    assert entry.published == "2006-11-03T10:00:00Z"
    assert entry.source.feed.title == "Origin feed"
    assert entry.source.feed.entries == []
    assert entry.extensions == [
        Extension(
            name="{http://example.org/ext}rating",
            xml="4",
            attributes={"scale": "5"},
        )
    ]


def test_round_trip_all_features(load_sample):
    feed = load_sample("atom_1.0_all.xml")

    assert parse_feed(render_feed(feed)) == feed


def test_render_is_stable(load_sample):
    rendered = render_feed(load_sample("atom_1.0_all.xml"))

    assert render_feed(parse_feed(rendered)) == rendered


@pytest.mark.parametrize("file_name", ["atom_1.0_all.xml", "atom_1.0_prefix.xml"])
def test_render_reproduces_input_bytes(sample_bytes, file_name):
    original = sample_bytes(file_name)

    assert render_feed(parse_feed(original)) == original


def test_render_keeps_declared_prefixes(load_sample):
    rendered = render_feed(load_sample("atom_1.0_all.xml"))

    assert rendered.startswith(b'<?xml version="1.0" encoding="UTF-8"?>\n')
    assert b'xmlns:ext="http://example.org/ext"' in rendered
    assert b'<ext:rating scale="5">4</ext:rating>' in rendered
    assert b"ns0" not in rendered


def test_prefixed_atom_namespace(load_sample):
    feed = load_sample("atom_1.0_prefix.xml")

    assert feed.title == "Prefixed feed"
    assert feed.authors == [Person(name="John Doe")]
    assert [entry.id for entry in feed.entries] == ["http://www.test.com/prefixed/1"]
    assert feed.extensions == []
    assert render_feed(feed).splitlines()[1].startswith(b"<atom:feed ")


def test_extension_keeps_its_own_declaration():
    data = (
        b'<feed xmlns="http://www.w3.org/2005/Atom"><id>x</id>'
        b'<g:price xmlns:g="http://base.google.com/ns/1.0">10</g:price></feed>'
    )

    feed = parse_feed(data)

    assert feed.extensions[0].namespaces == {"g": "http://base.google.com/ns/1.0"}
    assert b'<g:price xmlns:g="http://base.google.com/ns/1.0">10</g:price>' in render_feed(feed)


def test_render_uses_atom_default_namespace(valid_feed):
    rendered = render_feed(valid_feed)

    assert rendered.startswith(b"<?xml")
    root = etree.fromstring(rendered)
    assert root.tag == f"{ATOM}feed"
    assert root.nsmap[None] == "http://www.w3.org/2005/Atom"
    assert b"\n    <author>" in rendered


def test_render_element_order(load_sample):
    root = etree.fromstring(render_feed(load_sample("atom_1.0_all.xml")))
    local_names = [etree.QName(child).localname for child in root]

    assert local_names == [
        "author", "author", "category", "category", "contributor",
        "contributor", "generator", "icon", "id", "link", "link", "logo",
        "rights", "subtitle", "title", "updated", "entry",
    ]


def test_render_options():
    options = CodecOptions(pretty_print=False, xml_declaration=False)

    rendered = render_feed(make_feed(), options)

    assert not rendered.startswith(b"<?xml")
    assert b"\n" not in rendered


def test_required_elements_are_always_rendered():
    root = etree.fromstring(render_feed(Feed()))

    for local in ("id", "title", "updated"):
        assert root.find(f"{ATOM}{local}") is not None
    assert root.find(f"{ATOM}icon") is None
    assert parse_feed(render_feed(Feed())) == Feed()


def test_charset_aware_decoding(load_sample):
    feed = load_sample("atom_1.0_latin1.xml")

    assert feed.title == "Café"
    assert feed.authors[0].name == "José García"


def test_xhtml_content_round_trip():
    body = '<div xmlns="http://www.w3.org/1999/xhtml"><p>Hello <b>world</b></p></div>'
    entry = make_entry(content=Text(type="xhtml", body=body))
    options = CodecOptions(pretty_print=False)

    parsed = parse_entry(render_entry(entry, options), options)

    assert parsed == entry


def test_standalone_entry_round_trip():
    source = Source(
        feed=Feed(id="http://o", title="Origin", updated=TimeStr("2006-11-01T00:00:00Z"))
    )
    entry = make_entry(
        base="http://www.test.com/",
        lang="en",
        source=source,
        summary=Text(type="text", body="a &amp; b"),
        rights="Mine",
    )

    assert parse_entry(render_entry(entry)) == entry


def test_extensions_keep_document_order():
    feed = make_feed(
        extensions=[
            Extension(name="{http://example.org/a}first", xml="1"),
            Extension(name="{http://example.org/b}second", xml="2"),
        ]
    )

    parsed = parse_feed(render_feed(feed))

    assert [e.name for e in parsed.extensions] == [
        "{http://example.org/a}first",
        "{http://example.org/b}second",
    ]


def test_unknown_atom_elements_become_extensions():
    data = (
        b'<feed xmlns="http://www.w3.org/2005/Atom">'
        b"<id>x</id><mystery>?</mystery></feed>"
    )

    feed = parse_feed(data)

    assert feed.extensions == [Extension(name=f"{ATOM}mystery", xml="?")]


def test_malformed_xml_raises_parse_error():
    with pytest.raises(FeedParseError):
        parse_feed(b"<feed xmlns='http://www.w3.org/2005/Atom'><id>")


def test_wrong_root_raises_parse_error():
    with pytest.raises(FeedParseError, match="entry"):
        parse_feed(b"<entry xmlns='http://www.w3.org/2005/Atom'/>")

    with pytest.raises(FeedParseError):
        parse_entry(b"<entry/>")


def test_parse_requires_bytes():
    with pytest.raises(TypeError):
        parse_feed("<feed xmlns='http://www.w3.org/2005/Atom'/>")


def test_malformed_body_raises_render_error():
    entry = make_entry(content=Text(type="xhtml", body="<p>unclosed"))

    with pytest.raises(FeedRenderError):
        render_entry(entry)


def test_parsed_entry_person_extensions():
    data = (
        b'<entry xmlns="http://www.w3.org/2005/Atom" xmlns:x="http://x">'
        b"<author><name>John</name><x:nick>jd</x:nick></author>"
        b"<id>1</id><title>t</title><updated>2006-11-04T09:11:03Z</updated>"
        b"</entry>"
    )

    entry = parse_entry(data)

    assert entry == Entry(
        authors=[
            Person(name="John", extensions=[Extension(name="{http://x}nick", xml="jd")])
        ],
        id="1",
        title="t",
        updated=TimeStr("2006-11-04T09:11:03Z"),
    )
