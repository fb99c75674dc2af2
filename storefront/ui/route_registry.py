"""Route Registry.

Central registry for the storefront's screens.  The shell queries it to
build the sidebar and to look up the access level each route needs
before it renders anything.

Adding a screen = one ``register()`` call + one view class.
"""

from __future__ import annotations

from typing import Callable

import customtkinter as ctk

from storefront.access import role_grants_admin
from storefront.logger import StructuredLogger
from storefront.models.auth_models import AuthSnapshot
from storefront.models.enums import RouteAccess

ViewFactory = Callable[[ctk.CTkFrame], ctk.CTkFrame]


class RouteEntry:
    """Metadata for a single registered route.

    Attributes
    ----------
    route_id:
        Unique string identifier (e.g. ``'shop'``).
    display_name:
        Label shown in the sidebar.
    icon:
        Unicode character used as the sidebar icon.
    factory:
        Callable that receives the content container and returns the
        route's root frame.  Called lazily on first activation.
    access:
        Who may open the route.
    """

    __slots__ = ("route_id", "display_name", "icon", "factory", "access")

    def __init__(
        self,
        route_id: str,
        display_name: str,
        icon: str,
        factory: ViewFactory,
        access: RouteAccess,
    ) -> None:
        self.route_id = route_id
        self.display_name = display_name
        self.icon = icon
        self.factory = factory
        self.access = access


class RouteRegistry:
    """Ordered collection of routes.

    Parameters
    ----------
    logger:
        Structured logger for registration events.
    """

    def __init__(self, logger: StructuredLogger) -> None:
        self._entries: dict[str, RouteEntry] = {}
        self._logger = logger
        self._default_route_id: str = ""

    def register(
        self,
        route_id: str,
        display_name: str,
        icon: str,
        factory: ViewFactory,
        access: RouteAccess = RouteAccess.PUBLIC,
        *,
        default: bool = False,
    ) -> None:
        """Register a route with the shell.

        The first route registered, or the one flagged ``default``, is
        shown at startup.
        """
        if route_id in self._entries:
            self._logger.warning("Route '%s' already registered; overwriting.", route_id)
        self._entries[route_id] = RouteEntry(
            route_id=route_id,
            display_name=display_name,
            icon=icon,
            factory=factory,
            access=access,
        )
        if default or not self._default_route_id:
            self._default_route_id = route_id
        self._logger.info("Route registered: %s (%s)", route_id, access)

    def get_route(self, route_id: str) -> RouteEntry:
        """Return a route entry by ID.

        Raises
        ------
        KeyError
            If *route_id* is not registered.
        """
        if route_id not in self._entries:
            raise KeyError(f"Route '{route_id}' is not registered.")
        return self._entries[route_id]

    def get_routes_for(self, snapshot: AuthSnapshot) -> list[RouteEntry]:
        """Routes worth listing in the sidebar for *snapshot*.

        Visibility only: the shell still runs the guard when a route is
        opened.
        """
        visible: list[RouteEntry] = []
        for entry in self._entries.values():
            if entry.access is RouteAccess.ADMIN and not role_grants_admin(snapshot.role):
                continue
            if entry.access is RouteAccess.AUTHENTICATED and not snapshot.is_authenticated:
                continue
            visible.append(entry)
        return visible

    @property
    def default_route_id(self) -> str:
        return self._default_route_id
