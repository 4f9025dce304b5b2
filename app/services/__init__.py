from app.services.vehicle import vehicle_service
from app.services.route import route_service
from .route_stop import route_stop_service
from .route_generation import route_generation_service

__all__ = ["vehicle_service", "route_service", "route_stop_service", "route_generation_service"]
