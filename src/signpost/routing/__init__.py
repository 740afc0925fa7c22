"""Routing — compiled route table with priority-ordered matching.

Routes are registered during setup and compiled into an immutable
lookup structure when the collection freezes.
"""

from signpost.routing.collection import RouteCollection
from signpost.routing.generator import Generator, ReferenceType
from signpost.routing.matcher import Matcher
from signpost.routing.route import MatchResult, RequestDescriptor, RouteDefinition
from signpost.routing.router import Router

__all__ = [
    "Generator",
    "MatchResult",
    "Matcher",
    "ReferenceType",
    "RequestDescriptor",
    "RouteCollection",
    "RouteDefinition",
    "Router",
]
