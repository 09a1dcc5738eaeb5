"""Document helpers over BeautifulSoup trees."""

from __future__ import annotations

from collections.abc import Iterator

from bs4 import BeautifulSoup, Comment, PageElement, Tag


def parse_document(markup: str) -> BeautifulSoup:
    """Parse rendered output, keeping comments as nodes."""
    return BeautifulSoup(markup, "html.parser")


def iter_document(document: PageElement) -> Iterator[PageElement]:
    """Yield ``document`` and every node below it in document order."""
    yield document
    if isinstance(document, Tag):
        yield from document.descendants


def iter_comments(document: PageElement) -> Iterator[Comment]:
    for node in iter_document(document):
        if isinstance(node, Comment):
            yield node


def add_class(element: Tag, class_name: str) -> None:
    classes = element.get("class")
    if classes is None:
        element["class"] = [class_name]
    elif isinstance(classes, list):
        classes.append(class_name)
    else:
        element["class"] = f"{classes} {class_name}".split()


def remove_class(element: Tag, class_name: str) -> None:
    """Remove one occurrence of ``class_name``; drops an emptied attribute."""
    classes = element.get("class")
    if classes is None:
        return
    if not isinstance(classes, list):
        classes = classes.split()
    if class_name in classes:
        classes.remove(class_name)
    if classes:
        element["class"] = classes
    else:
        del element["class"]


def has_class(element: Tag, class_name: str) -> bool:
    classes = element.get("class") or []
    if not isinstance(classes, list):
        classes = classes.split()
    return class_name in classes
