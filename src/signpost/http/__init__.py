"""Immutable request-side mappings used by request descriptors."""

from signpost.http.headers import Headers
from signpost.http.query import QueryParams

__all__ = ["Headers", "QueryParams"]
