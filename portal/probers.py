# ==========================================
# EXTENSION PROBERS
# ==========================================
"""
Existence checks for candidate resource URLs.

The resolver hands a prober a candidate URL plus the ordered list of
extensions to try; the prober answers with the first variant that exists,
None when none does, or raises ProbeFailure when it cannot tell.

HttpProber sends one HEAD request per candidate (GET when the server
refuses HEAD), follows redirects, waits `timeout` seconds per request and
never retries.
"""
import os
import posixpath
from abc import ABC, abstractmethod
from typing import List, Optional
from urllib.parse import unquote, urlsplit

import requests

from .console import debug_log
from .errors import ProbeFailure
from .models import ResolvedLocation
from .traversal import find_resource


def has_extension(url):
    path = urlsplit(url).path
    return bool(posixpath.splitext(posixpath.basename(path))[1])


def candidate_urls(url, extensions) -> List[str]:
    """Literal URL first when it already has an extension, then url + ext."""
    candidates = [url] if has_extension(url) else []
    for ext in extensions:
        candidate = url + ext
        if candidate not in candidates:
            candidates.append(candidate)
    return candidates


class Prober(ABC):
    """Abstract base class for existence checks."""

    @abstractmethod
    def exists(self, url: str) -> bool:
        pass

    def probe(self, url: str, extensions, debug: bool = False) -> Optional[ResolvedLocation]:
        for candidate in candidate_urls(url, extensions):
            debug_log(f"Probing {candidate}", enabled=debug)
            if self.exists(candidate):
                debug_log(f"Found {candidate}", enabled=debug)
                resource = find_resource(candidate)
                return ResolvedLocation(
                    path=candidate,
                    resource=str(resource) if resource else None,
                )
        debug_log(f"Not found: {url}", enabled=debug)
        return None


class HttpProber(Prober):
    """Asks the portal over HTTP."""

    def __init__(self, timeout=10.0, session=None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def exists(self, url: str) -> bool:
        try:
            resp = self.session.head(url, allow_redirects=True, timeout=self.timeout)
            if resp.status_code == 405:
                resp = self.session.get(url, allow_redirects=True, timeout=self.timeout, stream=True)
                resp.close()
        except requests.exceptions.Timeout:
            raise ProbeFailure(
                f"Portal request timed out ({self.timeout}s)", url=url,
                suggestion="Check that the Plone site is running or raise 'timeout'.")
        except requests.exceptions.ConnectionError:
            raise ProbeFailure(
                "Failed to connect to the portal", url=url,
                suggestion="Check 'portalUrl' and that the Plone site is running.")
        except requests.exceptions.RequestException as e:
            raise ProbeFailure(f"Portal request failed: {e}", url=url)

        status = resp.status_code
        if 200 <= status < 300:
            return True
        if status >= 500:
            raise ProbeFailure(f"Portal server error ({status})", url=url)
        return False


class FileSystemProber(Prober):
    """Looks candidates up in a local mirror of the portal's resource tree."""

    def __init__(self, root, portal_path=""):
        self.root = root
        self.portal_path = portal_path.rstrip("/")

    def local_path(self, url):
        path = unquote(urlsplit(url).path)
        if self.portal_path and (path == self.portal_path or path.startswith(self.portal_path + "/")):
            path = path[len(self.portal_path):]
        return os.path.join(self.root, *[p for p in path.split("/") if p])

    def exists(self, url: str) -> bool:
        if not os.path.isdir(self.root):
            raise ProbeFailure(
                "Mirror directory does not exist", url=self.root,
                suggestion="Set 'proberRoot' to a checkout of the portal resources.")
        return os.path.isfile(self.local_path(url))


def get_prober(prober_type="http", root=None, portal_path="", timeout=10.0):
    """Factory function to get the appropriate prober."""
    if prober_type == "filesystem":
        if not root:
            raise ValueError("The filesystem prober needs 'proberRoot'")
        return FileSystemProber(root, portal_path)
    if prober_type == "http":
        return HttpProber(timeout=timeout)
    raise ValueError(f"Unknown prober '{prober_type}' (expected 'http' or 'filesystem')")
