"""
Error types for the Plone resource resolver.
"""


class PloneResolveError(Exception):
    """Base exception for resolver failures, with an optional hint."""
    def __init__(self, message, url=None, suggestion=None):
        self.message = message
        self.url = url
        self.suggestion = suggestion  # How to fix it
        super().__init__(self._format_error())

    def _format_error(self):
        """Format the error message with the offending URL and suggestion."""
        lines = [self.message]
        if self.url:
            lines.append(f"   > {self.url}")
        if self.suggestion:
            lines.append(f"   Hint: {self.suggestion}")
        return "\n".join(lines)


class MisconfiguredPortalUrl(PloneResolveError):
    """Portal URL cannot be split into scheme+host and path."""


class ProbeFailure(PloneResolveError):
    """A prober hit a transport or filesystem error (not a clean not-found)."""
