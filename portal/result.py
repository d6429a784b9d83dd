# ==========================================
# ERROR HANDLING: Result<T, E> Model
# ==========================================
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ErrorKind(str, Enum):
    """Categorizes resolution failures handed back to the host."""
    PROBE_FAILURE = "ProbeFailure"


class ResolveError(BaseModel):
    """Rich error context for a failed resolution."""
    kind: ErrorKind
    message: str
    request: str
    url: Optional[str] = None
    details: Optional[str] = None

    def __str__(self):
        result = "❌ " + self.kind.value + ": " + self.message
        if self.url:
            result = result + "\n   URL: " + self.url
        if self.details:
            result = result + "\n   Details: " + self.details
        return result


class Result:
    """Base class for Result<T, E> (Ok or Err)."""

    def is_ok(self) -> bool:
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        return isinstance(self, Err)

    def unwrap(self):
        """Get value or raise error."""
        if isinstance(self, Ok):
            return self.value
        else:
            raise RuntimeError(f"Called unwrap() on Err: {self.error.message}")


class Ok(Result):
    """Success case. Ok(None) means: continue the default chain."""

    def __init__(self, value=None):
        self.value = value

    def __repr__(self):
        return f"Ok({self.value!r})"

    def __eq__(self, other):
        return isinstance(other, Ok) and other.value == self.value


class Err(Result):
    """Error case: Err<ResolveError>."""

    def __init__(self, error):
        self.error = error

    def __repr__(self):
        return str(self.error)

    def __str__(self):
        return str(self.error)
