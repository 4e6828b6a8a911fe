# ============================================================================
# CLAUDE CONTEXT - GOLQUERY ERRORS
# ============================================================================
# STATUS: Foundation - closed error family for the facade
# PURPOSE: Distinguish path, open, query and materialize failures by type
# EXPORTS: GolQueryError, InvalidPath, OpenFailure, QueryFailure, MaterializeFailure
# DEPENDENCIES: typing
# PATTERNS: Exception hierarchy, error-dict serialization
# ENTRY_POINTS: from golquery.errors import QueryFailure
# ============================================================================

"""
Error family raised by the feature store facade.

Callers branch on the exception class rather than message content:

    GolQueryError
    ├── InvalidPath          path cannot be handed to the engine
    ├── OpenFailure          missing file, format mismatch, corruption
    ├── QueryFailure         malformed query or engine-side rejection
    └── MaterializeFailure   copy/I-O failure while realizing matches

None of these leave partial state behind: a failed open constructs no
store, a failed query leaves the store usable, and a failed materialize
may simply be retried.
"""

from typing import Any, Dict, Optional


class GolQueryError(Exception):
    """Base class for every failure surfaced by golquery."""

    error_type = "GolQueryError"

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        query: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.path = path
        self.query = query

    def to_dict(self) -> Dict[str, Any]:
        """Error dict in the shape used for logged failures."""
        result: Dict[str, Any] = {
            'error': self.message,
            'error_type': self.error_type
        }
        if self.path is not None:
            result['path'] = self.path
        if self.query is not None:
            result['query'] = self.query
        return result


class InvalidPath(GolQueryError):
    """The store path cannot be represented as a UTF-8 string."""

    error_type = "InvalidPath"


class OpenFailure(GolQueryError):
    """The engine could not open the store."""

    error_type = "OpenFailure"


class QueryFailure(GolQueryError):
    """The engine rejected a query or its bounding box."""

    error_type = "QueryFailure"


class MaterializeFailure(GolQueryError):
    """Copying matched records out of the engine failed."""

    error_type = "MaterializeFailure"
