"""
Override tables: requests the resolver must treat specially.

- the module blacklist (never resolved from Plone),
- the mapping table (request -> substitute relative path),
- bundled static fallbacks for files third-party stylesheets reference
  but Plone does not ship,
- request rewrite rules applied before resolution.
"""
import os
import re
from typing import Dict, FrozenSet

from pydantic import BaseModel, ConfigDict

from .traversal import parse_traversal

STATIC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "static")

# Never served as a fallback, even though it sits in the static directory
EXCLUDED_STATIC = "LICENSE"

_SINGLE_SEGMENT = re.compile(r"^\./[^/]+$")


class OverrideTables(BaseModel):
    model_config = ConfigDict(frozen=True)

    blacklist: FrozenSet[str] = frozenset()
    mapping: Dict[str, str] = {}

    @classmethod
    def from_options(cls, options):
        return cls(blacklist=frozenset(options.resolve_blacklist),
                   mapping=dict(options.resolve_mapping))

    def is_blacklisted(self, request):
        return request in self.blacklist

    def mapped(self, request):
        """Substitute relative path for `request`, or None."""
        return self.mapping.get(request)


class StaticFallbacks:
    """
    Local replacements for files referenced but not shipped.

    query.recurrenceinput.css, bundled with CMFPlone, references next.gif,
    prev.gif and pb_close.png, which CMFPlone does not bundle.
    """

    def __init__(self, directory=STATIC_DIR):
        self.directory = directory

    def lookup(self, request):
        """Path of the bundled replacement for './name', or None."""
        if request in (EXCLUDED_STATIC, "./" + EXCLUDED_STATIC):
            return None
        if not _SINGLE_SEGMENT.match(request):
            return None
        path = os.path.join(self.directory, request[2:])
        if os.path.isfile(path):
            return path
        return None

    def names(self):
        return sorted(n for n in os.listdir(self.directory) if n != EXCLUDED_STATIC)


# ==========================================
# REQUEST REWRITES
# ==========================================

class RequestRewrite:
    """Replace a request before the resolver sees it."""
    name = None

    def matches(self, request):
        raise NotImplementedError

    def rewrite(self, request):
        raise NotImplementedError


class JqtreeCircleRewrite(RequestRewrite):
    """jqtree's stylesheet references an image Plone serves from ++plone++static."""
    name = "jqtree"
    target = "++plone++static/components/jqtree/jqtree-circle.png"

    def matches(self, request):
        return request == "./jqtree-circle.png"

    def rewrite(self, request):
        return self.target


class BrokenRelativeResourceRewrite(RequestRewrite):
    """
    '../../++resource++foo' climbs out of a resource that was itself served
    from a ++resource++ URL; drop the leading dots so it resolves as a module.
    """
    name = "brokenrelativeresource"

    def matches(self, request):
        if not request.startswith("../"):
            return False
        for segment in parse_traversal(request):
            if segment.namespace == "resource":
                return True
            # "foo++resource++x" parses as one plain name
            text = str(segment)
            index = text.find("++resource++")
            if index >= 0 and "+" not in text[:index]:
                return True
            if "+" in text:
                return False
        return False

    def rewrite(self, request):
        return re.sub(r"^[./]+", "", request)


DEFAULT_REWRITES = [
    JqtreeCircleRewrite(),
    BrokenRelativeResourceRewrite(),
]


def apply_rewrites(request, rewrites=None):
    """Run `request` through the first matching rewrite rule."""
    for rule in DEFAULT_REWRITES if rewrites is None else rewrites:
        if rule.matches(request):
            return rule.rewrite(request)
    return request
