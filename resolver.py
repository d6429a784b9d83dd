"""
Plone resource resolver.

Bundler-facing facade: one PloneResolver per build, answering the host's
file and module resolution callbacks. Requests are classified, candidate
URLs probed, and the answer handed back as a Result:

- Ok(ResolvedLocation): resolved (local static file or portal URL)
- Ok(None): continue with the bundler's default resolution chain
- Err(ResolveError): the prober failed for this one request
"""
import asyncio

from portal.classifier import RequestClassifier, Strategy
from portal.config import PortalCoordinates, ResolverOptions
from portal.console import debug_log, set_verbose
from portal.context import ContextReplacement, structure_injection_hook
from portal.errors import ProbeFailure
from portal.models import RequestKind, ResolutionRequest, ResolvedLocation
from portal.namespace import NamespaceMapper
from portal.probers import get_prober
from portal.result import Err, ErrorKind, Ok, ResolveError
from portal.tables import DEFAULT_REWRITES, OverrideTables, apply_rewrites

__all__ = ["PloneResolver", "set_verbose"]


class PloneResolver:
    """
    Resolves bundler requests against a Plone portal.

    Handles:
    - Classification of file and module requests
    - Probing candidate URLs with the configured prober
    - Request rewrites before resolution
    - Dynamic-require context hooks

    Args:
        options: ResolverOptions, a plain options dict, or None for defaults
        prober: Prober to use instead of the one named in the options
        cwd: Directory the virtual namespace root is derived from
        static: StaticFallbacks to use instead of the bundled directory

    Raises:
        MisconfiguredPortalUrl: If the portal URL can't be split
    """

    def __init__(self, options=None, prober=None, cwd=None, static=None):
        if options is None:
            options = ResolverOptions()
        elif isinstance(options, dict):
            options = ResolverOptions.from_options(options)
        self.options = options
        self.debug = options.debug
        self.extensions = list(options.resolve_extensions)

        self.coordinates = PortalCoordinates.from_url(options.portal_url)
        self.mapper = NamespaceMapper(self.coordinates, cwd=cwd)
        self.tables = OverrideTables.from_options(options)
        self.classifier = RequestClassifier(self.coordinates, self.mapper, self.tables, static=static)
        self.prober = prober or get_prober(
            options.prober,
            root=options.prober_root,
            portal_path=self.coordinates.portal_path,
            timeout=options.timeout,
        )

        self.rewrites = list(DEFAULT_REWRITES)
        self.injection_hooks = [structure_injection_hook()]
        self.context_replacement = ContextReplacement()

    @property
    def portal_url(self):
        return self.coordinates.portal_url

    # -- host callbacks --

    def resolve_file(self, data):
        return self.resolve(self._request(data, RequestKind.FILE))

    def resolve_module(self, data):
        return self.resolve(self._request(data, RequestKind.MODULE))

    def handle(self, kind, data, callback):
        """Callback form: callback(error, location), (None, None) to continue."""
        result = self.resolve(self._request(data, RequestKind(kind)))
        if result.is_err():
            return callback(result.error, None)
        return callback(None, result.value)

    def before_resolve(self, data):
        """Apply the request rewrite rules to a host request dict."""
        request = apply_rewrites(data["request"], self.rewrites)
        if request != data["request"]:
            debug_log(f"Rewrote {data['request']!r} -> {request!r}", enabled=self.debug)
            data = dict(data, request=request)
        return data

    def after_context_resolve(self, data):
        for hook in self.injection_hooks:
            data = hook.after_resolve(data)
        return data

    def context_alternatives(self, items, token=None):
        for hook in self.injection_hooks:
            items = hook.alternatives(items, token)
        return items

    def replace_context(self, ob):
        if self.context_replacement.applies_to(getattr(ob, "request", None)) or \
                self.context_replacement.applies_to(getattr(ob, "resource", None)):
            return self.context_replacement(ob)
        return ob

    # -- resolution --

    def classify(self, request):
        classification = self.classifier.classify(request.request, request.path, request.kind)
        debug_log(
            f"{request.kind.value} {request.request!r} from {request.path or '.'}: "
            f"{classification.strategy.value}"
            + (f" -> {classification.target}" if classification.target else ""),
            enabled=self.debug,
        )
        return classification

    def resolve(self, request):
        """Resolve one ResolutionRequest; see the module docstring for results."""
        classification = self.classify(request)
        if classification.strategy.probes:
            return self._probe(request, classification)
        return self._settle(request, classification)

    async def resolve_async(self, request):
        """Like resolve(), with the probe running in a worker thread."""
        classification = self.classify(request)
        if classification.strategy.probes:
            return await asyncio.to_thread(self._probe, request, classification)
        return self._settle(request, classification)

    async def gather(self, requests):
        return await asyncio.gather(*[self.resolve_async(r) for r in requests])

    def resolve_all(self, requests):
        """
        Resolve many requests concurrently.
        Returns a list of Results in the order of `requests`.
        """
        return asyncio.run(self.gather(list(requests)))

    def _settle(self, request, classification):
        if classification.strategy == Strategy.STATIC_FALLBACK:
            return Ok(ResolvedLocation(
                path=classification.target,
                query=request.query or classification.query,
                remote=False,
            ))
        return Ok(None)

    def _probe(self, request, classification):
        try:
            location = self.prober.probe(classification.target, self.extensions, self.debug)
        except ProbeFailure as e:
            return Err(ResolveError(
                kind=ErrorKind.PROBE_FAILURE,
                message=e.message,
                request=request.request,
                url=e.url or classification.target,
                details=e.suggestion,
            ))
        if location is None:
            return Ok(None)
        return Ok(location.model_copy(update={"query": request.query or classification.query}))

    @staticmethod
    def _request(data, kind):
        if isinstance(data, ResolutionRequest):
            return data.model_copy(update={"kind": kind})
        return ResolutionRequest(
            request=data.get("request") or "",
            path=data.get("path") or "",
            query=data.get("query") or "",
            kind=kind,
        )
