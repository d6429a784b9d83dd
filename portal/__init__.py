# Plone resource resolver - core components
"""
Core modules for resolving bundler requests against a Plone portal:
- errors: Resolver exceptions
- config: Options and portal coordinates
- namespace: Virtual root / CMS path / portal URL mapping
- traversal: Lark grammar for ++namespace++name paths
- tables: Blacklist, mapping table, static fallbacks, request rewrites
- classifier: Strategy selection for file and module requests
- probers: Existence checks for candidate URLs
- context: Dynamic-require context hooks
"""

from .errors import PloneResolveError, MisconfiguredPortalUrl, ProbeFailure
from .config import ResolverOptions, PortalCoordinates, load_options
from .models import RequestKind, ResolutionRequest, ResolvedLocation
from .namespace import NamespaceMapper
from .classifier import RequestClassifier, Strategy
from .probers import Prober, get_prober
from .context import ContextInjectionHook, ContextToken

__all__ = [
    'PloneResolveError',
    'MisconfiguredPortalUrl',
    'ProbeFailure',
    'ResolverOptions',
    'PortalCoordinates',
    'load_options',
    'RequestKind',
    'ResolutionRequest',
    'ResolvedLocation',
    'NamespaceMapper',
    'RequestClassifier',
    'Strategy',
    'Prober',
    'get_prober',
    'ContextInjectionHook',
    'ContextToken',
]
