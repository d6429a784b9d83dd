# ==========================================
# CONFIGURATION
# ==========================================
"""
Resolver options and the portal coordinates derived from them.

Options are read once, when a resolver is built, and never re-read.
"""
import json
import os
from typing import Dict, List, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .errors import MisconfiguredPortalUrl

CONFIG_FILE = "plonepack.json"
USER_CONFIG_FILE = os.path.join("~", ".plonepack", CONFIG_FILE)

DEFAULT_PORTAL_URL = "http://localhost:8080/Plone"
DEFAULT_EXTENSIONS = [".js", ""]

# Module names that collide with Plone resource ids
DEFAULT_BLACKLIST = [
    "events",
    "layouts-editor",
    "plone",
    "translate",
]

DEFAULT_MAPPING = {
    "./jqtree-circle.png": "./components/jqtree/jqtree-circle.png",
}


class ResolverOptions(BaseModel):
    """Options accepted by the resolver (camelCase in JSON files)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    portal_url: str = DEFAULT_PORTAL_URL
    resolve_extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    resolve_blacklist: List[str] = Field(default_factory=lambda: list(DEFAULT_BLACKLIST))
    resolve_mapping: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_MAPPING))
    debug: bool = False
    prober: str = "http"
    prober_root: Optional[str] = None
    timeout: float = 10.0

    @classmethod
    def from_options(cls, options=None):
        """
        Build options from a plain dict of camelCase or snake_case keys.

        Falsy values fall back to the defaults, so an empty blacklist in a
        config file means "use the default blacklist".
        """
        names = {}
        for name, field in cls.model_fields.items():
            names[name] = name
            if field.alias:
                names[field.alias] = name

        clean = {}
        for key, value in (options or {}).items():
            if key not in names:
                raise ValueError(f"Unknown option '{key}'")
            if value:
                clean[names[key]] = value
        return cls.model_validate(clean)


class PortalCoordinates(BaseModel):
    """portal_url split into portal_base (scheme+host) and portal_path."""
    model_config = ConfigDict(frozen=True)

    portal_url: str
    portal_base: str
    portal_path: str

    @classmethod
    def from_url(cls, portal_url):
        try:
            parts = urlsplit(portal_url)
            parts.port  # validates the port number
        except ValueError as e:
            raise MisconfiguredPortalUrl(
                "Portal URL cannot be parsed", url=portal_url, suggestion=str(e))

        if not parts.scheme or not parts.netloc:
            raise MisconfiguredPortalUrl(
                "Portal URL needs a scheme and a host",
                url=portal_url,
                suggestion="Use an absolute URL such as http://localhost:8080/Plone")
        if parts.query or parts.fragment:
            raise MisconfiguredPortalUrl(
                "Portal URL must not carry a query or fragment", url=portal_url)

        url = portal_url.rstrip("/")
        path = parts.path.rstrip("/")
        base = url[:len(url) - len(path)]
        if base.lower() != f"{parts.scheme}://{parts.netloc}".lower():
            raise MisconfiguredPortalUrl(
                "Portal URL does not split into base and path", url=portal_url)
        return cls(portal_url=url, portal_base=base, portal_path=path)


def load_options(path=None, **overrides):
    """
    Load resolver options from a JSON file and apply overrides.

    Without an explicit path, the first existing of ./plonepack.json and
    ~/.plonepack/plonepack.json is used; with neither present, the defaults.
    Overrides set to None are ignored.

    Raises:
        FileNotFoundError: If an explicit path doesn't exist
        pydantic.ValidationError: If an option has the wrong type
    """
    if path is not None and not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    paths = [path] if path else [CONFIG_FILE, os.path.expanduser(USER_CONFIG_FILE)]
    data = {}
    for p in paths:
        if os.path.exists(p):
            with open(p, "r") as f:
                data = json.load(f)
            break

    merged = ResolverOptions.from_options(data).model_dump()
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return ResolverOptions.from_options(merged)


def write_defaults(path=CONFIG_FILE):
    """Write the default options as camelCase JSON."""
    with open(path, "w") as f:
        json.dump(ResolverOptions().model_dump(by_alias=True), f, indent=2)
    return path
