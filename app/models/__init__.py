from .user import User, UserRole
from .zone import Zone
from .parking_zone import ParkingZone
from .vehicle import Vehicle
from .route import Route, RouteStop, RouteStatus, RouteStopStatus
from .route_generation_request import RouteGenerationRequest, GenerationStatus
