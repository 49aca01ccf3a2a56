"""
Declarative HTML extraction for search result pages.

An ExtractionSpec tells the generic engine where result elements live and
how to pull title, href and description out of each one. Each field uses one
of three rules:

- NoExtraction: the field is always empty
- SelectorExtraction: first match of a CSS selector inside the element
- CustomExtraction: a function over the element, for markup that selectors
  alone cannot express

Custom functions signal "present but unparsable" by raising ParseError,
which fails the whole call. Anything else that is missing just drops the
candidate.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Union

import soupsieve
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.builder import ParserRejectedMarkup
from bs4.element import PreformattedString

from serpkit.search.errors import ParseError
from serpkit.search.models import EngineResponse, FeaturedSnippet, SearchResult
from serpkit.search.url_cleaning import normalize_url
from serpkit.utils.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Field Rules
# =============================================================================


def compile_selector(selector: str) -> soupsieve.SoupSieve:
    """Compile a CSS selector, raising ValueError on bad syntax."""
    try:
        return soupsieve.compile(selector)
    except soupsieve.SelectorSyntaxError as e:
        raise ValueError(f"Invalid CSS selector {selector!r}: {e}") from e


@dataclass(frozen=True)
class NoExtraction:
    """Field is not extracted (always empty)."""


@dataclass(frozen=True)
class SelectorExtraction:
    """Take the first element matching ``selector`` inside the result."""

    selector: str
    compiled: soupsieve.SoupSieve = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "compiled", compile_selector(self.selector))


@dataclass(frozen=True)
class CustomExtraction:
    """Run ``func`` over the result element."""

    func: Callable[[Tag], str]


FieldRule = Union[NoExtraction, SelectorExtraction, CustomExtraction]
RuleLike = Union[FieldRule, str, None]


def as_rule(value: RuleLike) -> FieldRule:
    """Coerce a selector string or None into a FieldRule."""
    if value is None:
        return NoExtraction()
    if isinstance(value, str):
        return SelectorExtraction(value)
    if isinstance(value, (NoExtraction, SelectorExtraction, CustomExtraction)):
        return value
    if callable(value):
        return CustomExtraction(value)
    raise TypeError(f"Unsupported field rule: {value!r}")


@dataclass(frozen=True)
class ExtractionSpec:
    """
    Where to find results on a page and how to read each field.

    Plain strings passed for rules are treated as selectors, and callables
    as custom rules.
    """

    result: str | None = None
    title: RuleLike = None
    href: RuleLike = None
    description: RuleLike = None

    featured_snippet: str | None = None
    featured_snippet_title: RuleLike = None
    featured_snippet_href: RuleLike = None
    featured_snippet_description: RuleLike = None

    result_compiled: soupsieve.SoupSieve | None = field(
        init=False, repr=False, compare=False, default=None
    )
    featured_snippet_compiled: soupsieve.SoupSieve | None = field(
        init=False, repr=False, compare=False, default=None
    )

    def __post_init__(self) -> None:
        for name in (
            "title",
            "href",
            "description",
            "featured_snippet_title",
            "featured_snippet_href",
            "featured_snippet_description",
        ):
            object.__setattr__(self, name, as_rule(getattr(self, name)))

        if self.result is not None:
            object.__setattr__(self, "result_compiled", compile_selector(self.result))
        if self.featured_snippet is not None:
            object.__setattr__(
                self, "featured_snippet_compiled", compile_selector(self.featured_snippet)
            )


# =============================================================================
# Rule Application
# =============================================================================


def _text_of(element: Tag) -> str:
    return element.get_text().strip()


def _href_of(element: Tag) -> str:
    href = element.get("href")
    if isinstance(href, str):
        return href
    return _text_of(element)


def apply_rule(rule: FieldRule, element: Tag, *, href: bool = False) -> str:
    """
    Apply one field rule to a result element.

    Args:
        rule: The rule to apply.
        element: Result (or featured snippet) element.
        href: Selector rules read the ``href`` attribute (falling back to
            text) instead of text.

    Returns:
        Extracted string, empty when nothing matched.

    Raises:
        ParseError: If a custom rule reports a failure.
    """
    if isinstance(rule, NoExtraction):
        return ""
    if isinstance(rule, SelectorExtraction):
        match = rule.compiled.select_one(element)
        if match is None:
            return ""
        return _href_of(match) if href else _text_of(match)
    if isinstance(rule, CustomExtraction):
        return rule.func(element)
    raise TypeError(f"Unsupported field rule: {rule!r}")


# =============================================================================
# Generic Extraction Engine
# =============================================================================


def parse_document(body: str | bytes) -> BeautifulSoup:
    """Parse an HTML body leniently; rejected markup becomes an empty document."""
    try:
        return BeautifulSoup(body or "", "html.parser")
    except ParserRejectedMarkup as e:
        logger.warning("HTML parser rejected markup", error=str(e))
        return BeautifulSoup("", "html.parser")


def extract(body: str | bytes, spec: ExtractionSpec) -> EngineResponse:
    """
    Extract normalized results from an HTML body.

    Args:
        body: Raw HTML.
        spec: Extraction specification for the engine.

    Returns:
        EngineResponse with results in document order and an optional
        featured snippet.

    Raises:
        ParseError: If the spec has no result selector, or a custom rule
            fails.
    """
    if spec.result_compiled is None:
        raise ParseError("Extraction spec has no result selector")

    soup = parse_document(body)

    search_results: list[SearchResult] = []
    for element in spec.result_compiled.select(soup):
        title = apply_rule(spec.title, element)
        url = apply_rule(spec.href, element, href=True)
        description = apply_rule(spec.description, element)

        logger.debug(
            "Extracted candidate",
            url=url,
            title=title,
            description=description,
            classes=element.get("class", []),
        )

        # happens on google for things like "roll d6"
        if not description and not title:
            logger.debug("Dropped candidate", reason="empty content", url=url)
            continue

        # happens on google when the result is a featured snippet
        if not description:
            logger.debug("Dropped candidate", reason="empty description", url=url, title=title)
            continue

        search_results.append(
            SearchResult(url=normalize_url(url), title=title, description=description)
        )

    featured_snippet = None
    if spec.featured_snippet_compiled is not None:
        snippet_el = spec.featured_snippet_compiled.select_one(soup)
        if snippet_el is not None:
            featured_snippet = _extract_featured_snippet(snippet_el, spec)

    return EngineResponse(search_results=tuple(search_results), featured_snippet=featured_snippet)


def _extract_featured_snippet(element: Tag, spec: ExtractionSpec) -> FeaturedSnippet | None:
    title = apply_rule(spec.featured_snippet_title, element)
    url = apply_rule(spec.featured_snippet_href, element, href=True)
    description = apply_rule(spec.featured_snippet_description, element)

    logger.debug("Extracted featured snippet", url=url, title=title, description=description)

    # happens on google for "what's my user agent"
    if not description and not title:
        logger.debug("Dropped featured snippet", reason="empty content", url=url)
        return None

    return FeaturedSnippet(url=normalize_url(url), title=title, description=description)


# =============================================================================
# Helpers for custom rules
# =============================================================================


def select_text(element: Tag, selector: str) -> str:
    """Stripped text of the first match, or ``""``."""
    match = element.select_one(selector)
    return _text_of(match) if match is not None else ""


def select_attr(element: Tag, selector: str, attr: str) -> str:
    """Attribute of the first match, or ``""``."""
    match = element.select_one(selector)
    if match is None:
        return ""
    value = match.get(attr)
    return value if isinstance(value, str) else ""


def render_children(
    element: Tag,
    skip: Callable[[Tag], bool],
    *,
    recursive: bool = True,
) -> str:
    """
    Concatenate the text under ``element``, leaving out some subtrees.

    Args:
        element: Container to render.
        skip: Returns True for child elements (and their subtrees) to omit.
        recursive: Apply ``skip`` at every depth. When False, only direct
            children are checked and kept ones contribute their full text.

    Returns:
        Concatenated text, unstripped.
    """
    parts: list[str] = []
    for node in element.children:
        if isinstance(node, Tag):
            if skip(node):
                continue
            if recursive:
                parts.append(render_children(node, skip, recursive=True))
            else:
                parts.append(node.get_text())
        elif isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
            parts.append(str(node))
    return "".join(parts)


def render_bullets(list_element: Tag) -> str:
    """Render list items as ``• item`` lines."""
    return "".join(f"• {li.get_text()}\n" for li in list_element.select("li"))
