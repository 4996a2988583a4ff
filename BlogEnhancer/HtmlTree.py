#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
HtmlTree Module:
Small helpers over a BeautifulSoup tree shared by the link classifier, the
date resolver and the extractors: parsing, `closest`-style ancestor lookup,
text normalisation and ordered selector rule chains.
"""
import re
from typing import Callable, Iterable, Optional, Tuple, Union

import soupsieve
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString


_WHITESPACE = re.compile(r'\s+')
_INLINE_WHITESPACE = re.compile(r'[ \t\r\f\v\xa0]+')

BLOCK_TAGS = {
    'p', 'div', 'section', 'article', 'main', 'header', 'footer', 'aside',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'ul', 'ol', 'li', 'blockquote',
    'pre', 'table', 'tr', 'figure', 'figcaption', 'br', 'hr',
}


def parse_html(content: Union[bytes, str]) -> BeautifulSoup:
    """Parses raw markup with the lxml parser."""
    return BeautifulSoup(content, 'lxml')


def node_text(tag: Optional[Tag]) -> str:
    """Returns the element text with all whitespace runs collapsed to one space."""
    if tag is None:
        return ""
    return _WHITESPACE.sub(' ', tag.get_text(' ')).strip()


def block_text(tag: Optional[Tag]) -> str:
    """
    Returns the element text with one paragraph per block element, separated
    by blank lines. Whitespace inside a paragraph is collapsed.
    """
    if tag is None:
        return ""
    parts = []
    for node in tag.descendants:
        if isinstance(node, NavigableString):
            if not isinstance(node, PreformattedString):
                parts.append(str(node))
        elif node.name in BLOCK_TAGS:
            parts.append('\n')
    lines = (_INLINE_WHITESPACE.sub(' ', line).strip() for line in ''.join(parts).split('\n'))
    return '\n\n'.join(line for line in lines if line)


def closest(tag: Optional[Tag], selector: str) -> Optional[Tag]:
    """
    Returns the nearest element matching `selector`, starting with `tag`
    itself and walking up through its ancestors. None when nothing matches.
    """
    node = tag
    while isinstance(node, Tag):
        if node.name != '[document]' and soupsieve.match(selector, node):
            return node
        node = node.parent
    return None


class SelectorRule:
    """
    One step of a cascading selector chain.

    The rule selects elements with a CSS selector, turns each into a value
    (the `attribute` when given and present, otherwise the element text) and
    hands the value to `accept`. The first accepted value wins.
    """

    def __init__(self,
                 selector: str,
                 accept: Optional[Callable[[str], bool]] = None,
                 attribute: Optional[str] = None,
                 first_only: bool = True,
                 text: Callable[[Tag], str] = node_text):
        """
        :param selector: CSS selector evaluated against the search root.
        :param accept: Predicate over the candidate value, defaults to "non-empty".
        :param attribute: Attribute to read before falling back to the text.
        :param first_only: Only consider the first element the selector matches.
        :param text: How to turn an element into text, single line by default.
        """
        self.selector = selector
        self.accept = accept or bool
        self.attribute = attribute
        self.first_only = first_only
        self.text = text

    def value_of(self, tag: Tag) -> str:
        if self.attribute:
            attr_value = tag.get(self.attribute)
            if isinstance(attr_value, list):
                attr_value = ' '.join(attr_value)
            if attr_value and attr_value.strip():
                return attr_value.strip()
        return self.text(tag)

    def evaluate(self, root: Tag) -> Optional[str]:
        tags = [root.select_one(self.selector)] if self.first_only else root.select(self.selector)
        for tag in tags:
            if tag is None:
                continue
            value = self.value_of(tag)
            if value and self.accept(value):
                return value
        return None

    def __repr__(self):
        return f"SelectorRule({self.selector!r})"


def first_match(root: Optional[Tag],
                rules: Iterable[SelectorRule]) -> Tuple[Optional[str], Optional[SelectorRule]]:
    """
    Evaluates the rules in order against `root`.

    Returns:
        (value, rule) for the first rule that produced an accepted value,
        or (None, None) when every rule came up empty.
    """
    if root is None:
        return None, None
    for rule in rules:
        value = rule.evaluate(root)
        if value is not None:
            return value, rule
    return None, None
