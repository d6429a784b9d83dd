"""
Hooks for dynamic-require contexts.

When a module does ``require('./' + name)`` the bundler enumerates the
context directory on the local filesystem, so siblings served by Plone are
never found. ContextInjectionHook adds a fixed list of extra requests to
such a context, once per context.
"""
import re
import threading

from .console import error_log
from .models import ContextItem

STRUCTURE_CONTEXT = r"mockup/structure|mockup/patterns/structure"

STRUCTURE_EXTRAS = [
    "mockup-patterns-structure-url/js/actions",
    "mockup-patterns-structure-url/js/actionmenu",
    "mockup-patterns-structure-url/js/navigation",
    "mockup-patterns-structure-url/js/collections/result",
]


def _context_of(data):
    return data.context if hasattr(data, "context") else data["context"]


def _token_of(data):
    return getattr(data, "token", None) if hasattr(data, "context") else data.get("token")


class ContextToken:
    """
    Marks one opening of a context.

    Every hook expands a given opening at most once, however many
    alternatives events the host sends for it.
    """

    def __init__(self, context):
        self.context = context
        self._expanded = set()
        self._lock = threading.Lock()

    def consume(self, hook):
        """True the first time `hook` asks for this opening, False afterwards."""
        with self._lock:
            if id(hook) in self._expanded:
                return False
            self._expanded.add(id(hook))
            return True


class ContextInjectionHook:
    """
    Append `extras` to the first alternatives expansion of every matching
    context.

    The host calls after_resolve() when it opens a context; the returned
    data carries a ContextToken for that opening. The host hands the token
    back with the items of every alternatives() call inside the context
    (on the items or as the `token` argument). State lives on the token,
    so two contexts opened on the same directory are expanded separately
    and nothing outlives the context itself.
    """

    def __init__(self, condition, extras=None):
        self.condition = re.compile(condition) if isinstance(condition, str) else condition
        self.extras = list(extras or [])

    def after_resolve(self, data):
        """A fresh context was entered; returns `data` with its token."""
        token = _token_of(data)
        if token is None:
            token = ContextToken(_context_of(data))
            if isinstance(data, dict):
                data = dict(data, token=token)
            else:
                data.token = token
        return data

    def alternatives(self, items, token=None):
        """Expand `items` with the extras on the first call for an opened context."""
        if not items:
            return items
        token = token or _token_of(items[0])
        if token is None or not token.consume(self):
            return items
        context = _context_of(items[0])
        if not self.condition.search(context):
            return items
        items.extend(ContextItem(context=context, request=extra, token=token) for extra in self.extras)
        return items


def structure_injection_hook():
    return ContextInjectionHook(STRUCTURE_CONTEXT, STRUCTURE_EXTRAS)


class ContextReplacement:
    """
    Fix the dynamic requires of mockup's structure pattern.

    Works on a mutable context request record with ``request``, ``context``,
    ``resource`` and ``reg_exp`` attributes, the way the host hands it over.
    """
    condition = re.compile(r"^\.$|mockup/structure|mockup/patterns/structure")
    structure_reg_exp = re.compile(r"^\./.*$|^mockup-patterns-structure-url/.*$")

    def applies_to(self, path):
        return bool(path and self.condition.search(path))

    def __call__(self, ob):
        request = getattr(ob, "request", None)
        context = getattr(ob, "context", None)
        resource = getattr(ob, "resource", None)
        if request and re.match(r"^\.$", request) and context and re.search("mockup/structure", context):
            # Served from Plone: the pattern's siblings can't be enumerated
            error_log("Can properly resolve structure pattern only from a file system checkout.")
        elif resource and re.search("mockup/patterns/structure", resource):
            ob.reg_exp = self.structure_reg_exp
        return ob
