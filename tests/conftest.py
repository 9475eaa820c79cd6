import pathlib

import pytest

from atom_feed import Entry, Feed, Person, TimeStr, parse_feed

SAMPLES = pathlib.Path(__file__).parent / "samples"


@pytest.fixture
def sample_bytes():
    """Return the raw bytes of a document under tests/samples."""

    def _read(name: str) -> bytes:
        return (SAMPLES / name).read_bytes()

    return _read


@pytest.fixture
def load_sample(sample_bytes):
    """Parse a feed document under tests/samples."""

    def _load(name: str) -> Feed:
        return parse_feed(sample_bytes(name))

    return _load


def make_entry(**overrides) -> Entry:
    fields = dict(
        id="http://www.test.com/blog/1",
        title="First post",
        updated=TimeStr("2006-11-04T09:11:03-08:00"),
        authors=[Person(name="John Doe")],
    )
    fields.update(overrides)
    return Entry(**fields)


def make_feed(**overrides) -> Feed:
    fields = dict(
        id="http://www.test.com/blog",
        title="Test feed",
        updated=TimeStr("2006-11-04T09:11:03-08:00"),
        authors=[Person(name="John Doe", email="john@test.com")],
        entries=[make_entry()],
    )
    fields.update(overrides)
    return Feed(**fields)


@pytest.fixture
def valid_entry() -> Entry:
    return make_entry()


@pytest.fixture
def valid_feed() -> Feed:
    return make_feed()
