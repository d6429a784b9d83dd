"""
Plone traversal paths.

Plone addresses resource bundles with ``++namespace++name`` path segments
(``++theme++mytheme``, ``++plone++static``, ``++resource++foo.js``). This
module holds the Lark grammar for such paths and a small API on top of it.
"""
from typing import NamedTuple, Optional
from urllib.parse import urlsplit

from lark import Lark, Transformer
from lark.exceptions import LarkError

from .namespace import collapse, is_absolute_url, split_query

traversal_grammar = r"""
    start: segment ("/" segment)*

    ?segment: traverser | name
    traverser: "++" NAMESPACE "++" [NAME]
    name: NAME

    NAMESPACE: /[^\/+]+/
    NAME: /[^\/+][^\/]*/
"""


class Segment(NamedTuple):
    namespace: Optional[str]
    name: Optional[str]

    def __str__(self):
        if self.namespace is None:
            return self.name or ""
        return f"++{self.namespace}++{self.name or ''}"


class TraversalBuilder(Transformer):
    """Turns the parse tree into a list of Segment tuples."""

    def start(self, items):
        return list(items)

    def traverser(self, items):
        namespace, name = items
        return Segment(str(namespace), str(name) if name is not None else None)

    def name(self, items):
        return Segment(None, str(items[0]))


_parser = Lark(traversal_grammar, parser="lalr")


def parse_traversal(path):
    """
    Split a CMS path or URL into traversal segments.

    Returns an empty list for paths that are not valid traversal paths
    (e.g. a segment starting with a single '+').
    """
    path, _ = split_query(path)
    if is_absolute_url(path):
        path = urlsplit(path).path
    path = collapse(path).strip("/")
    if not path:
        return []
    try:
        return TraversalBuilder().transform(_parser.parse(path))
    except LarkError:
        return []


def find_resource(path):
    """First ++namespace++name segment of `path`, or None."""
    for segment in parse_traversal(path):
        if segment.namespace is not None:
            return segment
    return None
