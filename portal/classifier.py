"""
Request classification.

Every request the bundler asks about is assigned one strategy. File
requests run through an ordered list of rules, first match wins; module
requests are either blacklisted or looked up in the portal.
"""
import os
import re
from enum import Enum
from typing import Callable, NamedTuple, Optional

from pydantic import BaseModel

from .models import RequestKind
from .namespace import collapse, split_query
from .tables import StaticFallbacks

# webpack collapses the '//' of 'http://' in requests to a single slash
_SCHEME_SLASHES = re.compile(r":/+")


class Strategy(str, Enum):
    PASS_THROUGH = "pass-through"
    FULL_PORTAL_PATH = "full-portal-path"
    PLUS_PLUS = "plus-plus"
    STATIC_FALLBACK = "static-fallback"
    CONTEXT_RELATIVE = "context-relative"
    UNMATCHED = "unmatched"
    REMOTE_MODULE = "remote-module"

    @property
    def probes(self):
        """Strategies whose target must be checked with the prober."""
        return self in (Strategy.FULL_PORTAL_PATH, Strategy.PLUS_PLUS,
                        Strategy.CONTEXT_RELATIVE, Strategy.REMOTE_MODULE)

    @property
    def falls_through(self):
        return self in (Strategy.PASS_THROUGH, Strategy.UNMATCHED)


class Classification(BaseModel):
    strategy: Strategy
    target: Optional[str] = None
    query: str = ""


class Rule(NamedTuple):
    strategy: Strategy
    matches: Callable[[str, str], bool]
    target: Callable[[str, str], Optional[str]]


def normalize_request(request):
    return _SCHEME_SLASHES.sub("://", request, count=1)


def _no_target(request, context):
    return None


class RequestClassifier:
    """
    Assigns resolution strategies to requests.

    Args:
        coordinates: PortalCoordinates of the portal
        mapper: NamespaceMapper sharing those coordinates
        tables: OverrideTables (blacklist and mapping)
        static: StaticFallbacks, defaults to the bundled static directory
        exists: Existence check for local paths
    """

    def __init__(self, coordinates, mapper, tables, static=None, exists=os.path.exists):
        self.coordinates = coordinates
        self.mapper = mapper
        self.tables = tables
        self.static = static or StaticFallbacks()
        self.exists = exists

        # Order matters: a file on disk always wins over the portal
        self.file_rules = [
            Rule(Strategy.PASS_THROUGH, self._is_local, _no_target),
            Rule(Strategy.FULL_PORTAL_PATH, self._is_full_portal_path, self._full_portal_path),
            Rule(Strategy.PLUS_PLUS, self._is_plus_plus, self._plus_plus),
            Rule(Strategy.STATIC_FALLBACK, self._is_static, self._static),
            Rule(Strategy.CONTEXT_RELATIVE, self._in_namespace, self._context_relative),
        ]

    def classify(self, request, context="", kind=RequestKind.FILE):
        """Strategy and candidate target for one request."""
        if kind == RequestKind.MODULE:
            return self._classify_module(request)

        request, query = split_query(normalize_request(request))
        for rule in self.file_rules:
            if rule.matches(request, context):
                return Classification(strategy=rule.strategy,
                                      target=rule.target(request, context),
                                      query=query)
        return Classification(strategy=Strategy.UNMATCHED, query=query)

    def _classify_module(self, request):
        request, query = split_query(request)
        if not request or self.tables.is_blacklisted(request):
            return Classification(strategy=Strategy.PASS_THROUGH, query=query)
        return Classification(strategy=Strategy.REMOTE_MODULE,
                              target=self.coordinates.portal_url + "/" + request,
                              query=query)

    # -- rules --

    def _is_local(self, request, context):
        if not request:
            return True
        if os.path.isabs(request) or not context:
            return self.exists(request)
        return self.exists(os.path.join(context, request))

    def _is_full_portal_path(self, request, context):
        return request.startswith("./" + self.coordinates.portal_base)

    def _full_portal_path(self, request, context):
        base = self.coordinates.portal_base
        return base + collapse(request[2 + len(base):])

    def _is_plus_plus(self, request, context):
        return request.startswith("./++")

    def _plus_plus(self, request, context):
        return self.coordinates.portal_url + "/" + request[2:]

    def _is_static(self, request, context):
        return self.static.lookup(request) is not None

    def _static(self, request, context):
        return self.static.lookup(request)

    def _in_namespace(self, request, context):
        return self.mapper.contains(self.mapper.join(context, request))

    def _context_relative(self, request, context):
        mapped = self.tables.mapped(request)
        if mapped is not None:
            return self.mapper.to_remote_url(mapped, base=context)
        return self.mapper.to_remote_url(self.mapper.join(context, request))
