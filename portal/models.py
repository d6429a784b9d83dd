"""
Request and location records passed between the host and the resolver.
"""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RequestKind(str, Enum):
    FILE = "file"
    MODULE = "module"


class ResolutionRequest(BaseModel):
    """One resolver callback invocation: raw request plus issuing context."""
    model_config = ConfigDict(frozen=True)

    request: str
    path: str = ""
    query: str = ""
    kind: RequestKind = RequestKind.FILE


class ResolvedLocation(BaseModel):
    """Terminal answer for one request: a local path or a remote URL."""
    path: str
    query: str = ""
    file: bool = True
    resolved: bool = True
    remote: bool = True
    resource: Optional[str] = None  # ++namespace++name that addresses it

    def __str__(self):
        return self.path + self.query


class ContextItem(BaseModel):
    """One candidate of a dynamic-require context enumeration."""
    context: str
    request: str
    token: Optional[Any] = Field(default=None, exclude=True)  # ContextToken of the opening
