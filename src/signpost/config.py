"""Router configuration.

RouterConfig and RequestContext are frozen dataclasses — immutable after
creation, IDE-autocompletable, no string-key dict lookups.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from signpost.routing.route import RequestDescriptor


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Where generated URLs are anchored.

    The generator compares a route's host and schemes against this context
    to decide whether a bare path is enough or a host-qualified URL is
    needed::

        ctx = RequestContext(host="example.com", scheme="https")
    """

    base_url: str = ""  # Prefix for every generated path (e.g. "/app.php")
    host: str = "localhost"
    scheme: str = "http"
    http_port: int = 80
    https_port: int = 443

    @classmethod
    def from_request(cls, request: RequestDescriptor, base_url: str = "") -> RequestContext:
        """Build a context from an incoming request descriptor.

        A ``host:port`` value is split so the port lands on the field for
        the request's scheme.
        """
        host, _, port = request.host.partition(":")
        scheme = request.scheme.lower() or "http"
        kwargs: dict[str, int] = {}
        if port.isdigit():
            kwargs["https_port" if scheme == "https" else "http_port"] = int(port)
        return cls(
            base_url=base_url.rstrip("/"),
            host=host.lower() or "localhost",
            scheme=scheme,
            **kwargs,
        )


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(default_locale="en", strict_requirements=False)
    """

    # Localized routes
    default_locale: str | None = None

    # URL generation
    context: RequestContext = field(default_factory=RequestContext)
    # True: raise ParameterDoesNotMatch. False: log and return "". None: skip the check.
    strict_requirements: bool | None = True

    # Logging ("debug", "info", ...); None leaves the "signpost" logger alone
    log_level: str | None = None
