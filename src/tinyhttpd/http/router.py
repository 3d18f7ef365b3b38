"""
=============================================================================
ROUTE TABLE
=============================================================================

Dynamic routes are consulted BEFORE the filesystem:

    GET /health ──► Router.match("/health") ──► Route(handler=health)
    GET /app.js ──► Router.match("/app.js") ──► None ──► static files

Matching is an exact string comparison on the path. There are no
prefixes, no patterns and no path parameters:

    registered "/about"    matches "/about"
                           does NOT match "/about/", "/About", "/about/team"

The query string plays no part in matching ("/hello?name=x" matches the
"/hello" route).

=============================================================================
HANDLERS
=============================================================================

A handler is anything with a handle(request) -> HTTPResponse method.
Plain functions are wrapped in FunctionHandler, so both styles work:

    @router.get("/health")
    def health(request):
        return ok({"status": "ok"})

    router.add_route("/about", AboutPage())   # object with .handle()

=============================================================================
THREAD SAFETY
=============================================================================

Routes are registered at startup, then the table is frozen. After that
it is only ever read, so every connection thread can match against it
without a lock. Registering a route on a frozen table raises.

Duplicate paths are a programming error. The first registration wins and
later ones are never reached; nothing checks for this at runtime.

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Union, runtime_checkable

from .request import HTTPRequest
from .response import HTTPResponse


@runtime_checkable
class RouteHandler(Protocol):
    """Anything that can answer a request."""

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        ...


# A plain function with the same signature as RouteHandler.handle
HandlerFunc = Callable[[HTTPRequest], HTTPResponse]


class FunctionHandler:
    """Adapts a plain function to the RouteHandler protocol."""

    def __init__(self, func: HandlerFunc):
        self.func = func

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        return self.func(request)

    def __repr__(self) -> str:
        return f"FunctionHandler({getattr(self.func, '__name__', self.func)!r})"


@dataclass(frozen=True)
class Route:
    """
    An exact-match path bound to a handler.

        Route(path="/health", handler=FunctionHandler(health))
    """

    path: str
    handler: RouteHandler


class Router:
    """
    Ordered table of exact-match routes.

    Usage:
        router = Router()

        @router.get("/")
        def home(request):
            return ResponseBuilder().html("<h1>Home</h1>").build()

        router.freeze()
        route = router.match("/")
    """

    def __init__(self):
        self._routes: List[Route] = []
        self._index: Dict[str, Route] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add_route(self, path: str, handler: Union[RouteHandler, HandlerFunc]) -> Route:
        """
        Register a route.

        Args:
            path: Exact path to match; must start with "/".
            handler: A RouteHandler, or a function taking a request.

        Returns:
            The registered Route.

        Raises:
            RuntimeError: If the table has been frozen.
            ValueError: If path does not start with "/".
        """
        if self._frozen:
            raise RuntimeError("Route table is frozen; register routes before serving")
        if not path.startswith("/"):
            raise ValueError(f"Route path must start with '/': {path!r}")

        if not isinstance(handler, RouteHandler):
            handler = FunctionHandler(handler)

        route = Route(path=path, handler=handler)
        self._routes.append(route)
        # First registration wins, same as a linear scan would
        self._index.setdefault(path, route)
        return route

    def route(self, path: str) -> Callable[[HandlerFunc], HandlerFunc]:
        """
        Decorator for registering a function as a route.

        The function is returned unchanged so it can still be called
        directly (and decorators can be stacked).
        """
        def decorator(func: HandlerFunc) -> HandlerFunc:
            self.add_route(path, func)
            return func
        return decorator

    def get(self, path: str) -> Callable[[HandlerFunc], HandlerFunc]:
        """Register a GET route. Every route is GET-only, so this is route()."""
        return self.route(path)

    def freeze(self) -> "Router":
        """Make the table read-only. Returns self."""
        self._frozen = True
        return self

    def match(self, path: str) -> Optional[Route]:
        """
        Find the route registered for exactly this path.

        Returns:
            The matching Route, or None if the path is not a dynamic route.
        """
        return self._index.get(path)

    def routes(self) -> List[Route]:
        """All registered routes, in registration order."""
        return list(self._routes)

    def __len__(self) -> int:
        return len(self._routes)
