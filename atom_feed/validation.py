"""Conformance checks for Atom feeds and entries (RFC 4287).

Validation never stops at the first problem. Each validator collects issues
into a local IssueCollector, merges the results of the validators for its
children and returns a ValidationResult describing everything it found.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from .checkers import check_email, check_uri, parse_rfc3339
from .exceptions import ValidationError
from .models import Category, Common, Entry, Feed, Generator, Link, Person, Text

logger = logging.getLogger(__name__)

REPORT_HEADER = "An ATOM validation error occurred:"

TEXT_TYPES = ("text", "html", "xhtml")

AUTHOR_REQUIRED = "Author must be present in Feed or in every Entry."
ENTRY_ID_EMPTY = "Entry.ID can't be empty."
ENTRY_TITLE_EMPTY = "Entry.Title can't be empty."
ENTRY_UPDATED_EMPTY = "Entry.Updated can't be empty."
ENTRY_SOURCE_HAS_ENTRIES = "Entry.Source can't contain any entries."
FEED_ID_EMPTY = "Feed.ID can't be empty."
FEED_TITLE_EMPTY = "Feed.Title can't be empty."
FEED_UPDATED_EMPTY = "Feed.Updated can't be empty."
DUPLICATE_ALTERNATE = 'Only one Feed.Link with rel="alternate" can exist.'
TEXT_TYPE_INVALID = "Text.Type must be either: text, html or xhtml."


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation pass: the issues found, in discovery order."""

    issues: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.issues

    def merge(self, other: Optional["ValidationResult"]) -> "ValidationResult":
        if other is None or other.ok:
            return self
        return ValidationResult(self.issues + other.issues)

    def render(self) -> str:
        """Return the multi-line report, one ``- issue`` line per issue."""
        lines = [REPORT_HEADER + "\n"]
        lines.extend(f"- {issue}\n" for issue in self.issues)
        return "".join(lines)

    def raise_for_issues(self) -> None:
        if self.issues:
            raise ValidationError(self)

    def __str__(self) -> str:
        return self.render()


SUCCESS = ValidationResult()


def merge_results(*results: Optional[ValidationResult]) -> ValidationResult:
    """Concatenate the issues of several results, keeping their order."""
    merged = SUCCESS
    for result in results:
        merged = merged.merge(result)
    return merged


class IssueCollector:
    """Accumulates issues for one validator call."""

    def __init__(self) -> None:
        self._issues: List[str] = []

    def add(self, issue: str) -> None:
        self._issues.append(issue)

    def add_error(self, error: Exception) -> None:
        self._issues.append(str(error))

    def merge(self, result: Optional[ValidationResult]) -> None:
        if result is not None:
            self._issues.extend(result.issues)

    def check(self, checker: Callable[[str], object], value: str) -> None:
        """Run a syntax checker, recording its ValueError as an issue."""
        try:
            checker(value)
        except ValueError as exc:
            self.add_error(exc)

    def finish(self) -> ValidationResult:
        if not self._issues:
            return SUCCESS
        return ValidationResult(tuple(self._issues))


def validate_common(common: Common) -> ValidationResult:
    issues = IssueCollector()
    if common.base:
        issues.check(check_uri, common.base)
    return issues.finish()


def validate_text(text: Text, is_content: bool = False) -> ValidationResult:
    """Validate a text construct.

    Entry content may carry any MIME type, so the type check only applies
    when ``is_content`` is false.
    """
    issues = IssueCollector()
    issues.merge(validate_common(text))

    if not is_content and text.type and text.type not in TEXT_TYPES:
        issues.add(TEXT_TYPE_INVALID)

    if text.src:
        issues.check(check_uri, text.src)

    return issues.finish()


def validate_person(person: Person) -> ValidationResult:
    issues = IssueCollector()
    issues.merge(validate_common(person))

    if person.uri:
        issues.check(check_uri, person.uri)
    if person.email:
        issues.check(check_email, person.email)

    return issues.finish()


def validate_time(value: str) -> ValidationResult:
    issues = IssueCollector()
    issues.check(parse_rfc3339, value)
    return issues.finish()


def validate_category(category: Category) -> ValidationResult:
    issues = IssueCollector()
    issues.merge(validate_common(category))
    if category.scheme:
        issues.check(check_uri, category.scheme)
    return issues.finish()


def validate_generator(generator: Generator) -> ValidationResult:
    issues = IssueCollector()
    issues.merge(validate_common(generator))
    if generator.uri:
        issues.check(check_uri, generator.uri)
    return issues.finish()


def validate_link(link: Link) -> ValidationResult:
    issues = IssueCollector()
    issues.merge(validate_common(link))
    # href is mandatory, so it is checked even when empty.
    issues.check(check_uri, link.href)
    return issues.finish()


def _validate_links(links: List[Link], issues: IssueCollector) -> None:
    alternates = 0
    for link in links:
        issues.merge(validate_link(link))
        if link.rel == "alternate":
            alternates += 1
            # Reported once, however many extra alternates follow.
            if alternates == 2:
                issues.add(DUPLICATE_ALTERNATE)


def validate_entry(entry: Entry) -> ValidationResult:
    """Validate an entry, including the feed embedded in its source."""
    logger.debug("Validating entry '%s'", entry.id)
    issues = IssueCollector()

    issues.merge(validate_common(entry))

    for author in entry.authors:
        issues.merge(validate_person(author))

    for category in entry.categories:
        issues.merge(validate_category(category))

    if entry.content is not None:
        issues.merge(validate_text(entry.content, is_content=True))

    for contributor in entry.contributors:
        issues.merge(validate_person(contributor))

    if not entry.id:
        issues.add(ENTRY_ID_EMPTY)

    _validate_links(entry.links, issues)

    if entry.published:
        issues.merge(validate_time(entry.published))

    if entry.source is not None:
        if entry.source.feed.entries:
            issues.add(ENTRY_SOURCE_HAS_ENTRIES)
        issues.merge(validate_feed(entry.source.feed))

    if entry.summary is not None:
        issues.merge(validate_text(entry.summary, is_content=False))

    if not entry.title:
        issues.add(ENTRY_TITLE_EMPTY)

    if entry.updated:
        issues.merge(validate_time(entry.updated))
    else:
        issues.add(ENTRY_UPDATED_EMPTY)

    result = issues.finish()
    if not result.ok:
        logger.debug(
            "Entry '%s' failed validation with %d issue(s)",
            entry.id,
            len(result.issues),
        )
    return result


def validate_feed(feed: Feed) -> ValidationResult:
    """Validate a feed and every entry in it. All issues are returned together."""
    logger.debug("Validating feed '%s' (%d entries)", feed.id, len(feed.entries))
    issues = IssueCollector()

    issues.merge(validate_common(feed))

    for author in feed.authors:
        issues.merge(validate_person(author))

    # Without feed level authors every entry needs its own.
    if not feed.authors:
        for entry in feed.entries:
            if not entry.authors:
                issues.add(AUTHOR_REQUIRED)
                break

    for category in feed.categories:
        issues.merge(validate_category(category))

    for contributor in feed.contributors:
        issues.merge(validate_person(contributor))

    if feed.generator is not None:
        issues.merge(validate_generator(feed.generator))

    if feed.icon:
        issues.check(check_uri, feed.icon)

    if not feed.id:
        issues.add(FEED_ID_EMPTY)

    _validate_links(feed.links, issues)

    if feed.logo:
        issues.check(check_uri, feed.logo)

    if not feed.title:
        issues.add(FEED_TITLE_EMPTY)

    # An empty updated is reported twice; consumers count these messages.
    if not feed.updated:
        issues.add(FEED_UPDATED_EMPTY)

    if feed.updated:
        issues.merge(validate_time(feed.updated))
    else:
        issues.add(FEED_UPDATED_EMPTY)

    for entry in feed.entries:
        issues.merge(validate_entry(entry))

    result = issues.finish()
    if not result.ok:
        logger.info(
            "Feed '%s' failed validation with %d issue(s)",
            feed.id,
            len(result.issues),
        )
    return result


def validate(document: Union[Feed, Entry]) -> ValidationResult:
    """Validate a Feed or a standalone Entry."""
    if isinstance(document, Feed):
        return validate_feed(document)
    if isinstance(document, Entry):
        return validate_entry(document)
    raise TypeError(
        f"Expected a Feed or an Entry, got {type(document).__name__}"
    )
