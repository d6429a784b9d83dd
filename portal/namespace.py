"""
Namespace mapping between three coordinate systems:

- virtual filesystem paths below ``<cwd>/@/`` (the bundler sees Plone
  resources as if they lived there),
- CMS-relative resource paths (``Plone/++theme++foo/logo.png``),
- absolute CMS URLs (``http://localhost:8080/Plone/++theme++foo/logo.png``).

The virtual root is only a coordinate space for containment tests; nothing
is ever written below it.
"""
import os
import re
from urllib.parse import urljoin, urlsplit, urlunsplit

MARKER = "@"

_SLASHES = re.compile(r"/+")


def is_absolute_url(value):
    parts = urlsplit(value)
    return bool(parts.scheme and parts.netloc)


def collapse(path):
    """Collapse repeated separators, leaving a URL scheme's // alone."""
    if is_absolute_url(path):
        parts = urlsplit(path)
        return urlunsplit(parts._replace(path=_SLASHES.sub("/", parts.path)))
    path, query = split_query(path)
    return _SLASHES.sub("/", path) + query


def split_query(request):
    """Split 'foo.png?v=1' into ('foo.png', '?v=1')."""
    index = request.find("?")
    if index < 0:
        return request, ""
    return request[:index], request[index:]


class NamespaceMapper:
    """Maps requests between the virtual root, CMS paths and portal URLs."""

    def __init__(self, coordinates, cwd=None):
        self.coordinates = coordinates
        self.root = collapse(f"{cwd or os.getcwd()}/{MARKER}/")

    def virtual_path(self, tail=""):
        """Virtual filesystem path of `tail` below the namespace root."""
        return collapse(self.root + (tail or ""))

    def join(self, context, request):
        """Resolve `request` against the context directory, '.' and '..' included."""
        return collapse(urljoin(context + "/", request))

    def contains(self, path):
        """True if `path` lies in the portal or ++resource branch of the root."""
        path = collapse(path)
        return (path.startswith(self.virtual_path(self.coordinates.portal_path))
                or path.startswith(self.virtual_path("++")))

    def relative(self, path):
        """CMS-relative tail of a virtual path ('' if outside the root)."""
        path = collapse(path)
        if not path.startswith(self.root):
            return ""
        return path[len(self.root):]

    def to_remote_url(self, candidate, base=None):
        """
        Map a virtual path, CMS-relative path or segment list to a portal URL.

        Args:
            candidate: Path string or sequence of path segments
            base: Optional context directory to resolve '.'/'..' against

        Returns:
            Absolute URL. Absolute URLs are returned unchanged.
        """
        if not isinstance(candidate, str):
            candidate = "/".join(candidate)
        if is_absolute_url(candidate):
            return candidate

        candidate, query = split_query(candidate)
        path = self.join(base, candidate) if base else collapse(candidate)
        if path.startswith(self.root):
            path = path[len(self.root):]
        return urljoin(self.coordinates.portal_url, path) + query
