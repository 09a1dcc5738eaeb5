"""Locate the rendered span of a token and style the elements inside it."""

from __future__ import annotations

import logging

from bs4 import Comment, PageElement, Tag

from renderlens_shared.markers import begin_data, end_data
from renderlens_shared.settings import ClientSettings

from .dom import add_class, iter_comments, remove_class

logger = logging.getLogger(__name__)


def find_marker_pair(document: PageElement, token: int) -> tuple[Comment | None, Comment | None]:
    """Return the ``BEGIN_<token>`` and ``END_<token>`` comments, if present."""
    begin, end = begin_data(token), end_data(token)
    start_node: Comment | None = None
    end_node: Comment | None = None
    for comment in iter_comments(document):
        if comment == begin:
            start_node = comment
        elif comment == end:
            end_node = comment
        if start_node is not None and end_node is not None:
            break
    return start_node, end_node


def elements_between(start_node: PageElement, end_node: PageElement) -> list[Tag]:
    """Element siblings strictly between two markers sharing a parent.

    Markers under different parents do not bound a sibling run; the result is
    empty then.
    """
    if start_node.parent is None or start_node.parent is not end_node.parent:
        return []
    elements: list[Tag] = []
    current = start_node.next_sibling
    while current is not None and current is not end_node:
        if isinstance(current, Tag):
            elements.append(current)
        current = current.next_sibling
    return elements


class HighlightState:
    """Hover and selection styling owned by one document context.

    Attributes:
        highlighted: Elements currently carrying the hover class.
        selected: Elements currently carrying the selection class.
    """

    def __init__(self, settings: ClientSettings | None = None) -> None:
        self.settings = settings or ClientSettings()
        self.highlighted: list[Tag] = []
        self.selected: list[Tag] = []

    def _category(self, select: bool) -> tuple[list[Tag], str]:
        if select:
            return self.selected, self.settings.selected_class
        return self.highlighted, self.settings.highlighted_class

    def highlight(self, document: PageElement, token: int, select: bool = False) -> list[Tag]:
        """Style every element of ``token``'s span; returns the styled elements."""
        self.unhighlight(select)
        start_node, end_node = find_marker_pair(document, token)
        if start_node is None or end_node is None:
            logger.warning(
                "Start and end node could not be found for token %s (start=%s, end=%s)",
                token,
                start_node is not None,
                end_node is not None,
            )
            return []

        nodes, class_name = self._category(select)
        for element in elements_between(start_node, end_node):
            add_class(element, class_name)
            nodes.append(element)
        return list(nodes)

    def unhighlight(self, select: bool = False) -> None:
        nodes, class_name = self._category(select)
        for element in nodes:
            remove_class(element, class_name)
        nodes.clear()

    def clear(self) -> None:
        self.unhighlight(False)
        self.unhighlight(True)
