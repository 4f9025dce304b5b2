"""
Route storage service.

Writes a route and its stops within the caller's transaction. Nothing here
commits; the caller commits once everything is in place or rolls back.
"""

from typing import List
from sqlalchemy.orm import Session
from app.core.logging_config import logger
from app.models.route import Route, RouteStop


class RouteStorage:
    """Stages a route and its stops in the database session."""

    def __init__(self, db: Session):
        self.db = db

    def store_route(self, route: Route, stops: List[RouteStop]) -> Route:
        """
        Insert a route and its stops.

        The route row is flushed first so the stops can reference its ID, then
        each stop is written on its own.

        Args:
            route: New route (not yet added to the session)
            stops: New stops with final sequence order

        Returns:
            The flushed route
        """
        self.db.add(route)
        self.db.flush()
        logger.debug(f"Route {route.id} staged")

        for stop in sorted(stops, key=lambda s: s.sequence_order):
            stop.route_id = route.id
            self._add_stop(stop)

        logger.info(f"Staged route {route.id} with {len(stops)} stops")
        return route

    def _add_stop(self, stop: RouteStop) -> None:
        self.db.add(stop)
        self.db.flush()
