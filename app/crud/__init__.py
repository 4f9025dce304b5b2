from app.crud.base import CRUDBase
from .user import user
from .vehicle import vehicle
from .parking_zone import parking_zone
from .route import route, route_stop
from .route_generation_request import route_generation_request

__all__ = ["CRUDBase", "user", "vehicle", "parking_zone", "route", "route_stop", "route_generation_request"]
