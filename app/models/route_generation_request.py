import enum
from sqlalchemy import Column, Integer, ForeignKey, Date, DateTime, Text, Enum, JSON
from app.database import Base, TimestampMixin


class GenerationStatus(str, enum.Enum):
    """Status of a background route generation request."""
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class RouteGenerationRequest(Base, TimestampMixin):
    """
    Background route generation job.
    
    Stores the request parameters, status and outcome of a route generation
    run executed by an RQ worker. On success route_id points to the created
    Route.
    """
    __tablename__ = "route_generation_request"

    id = Column(Integer, primary_key=True, index=True)
    requested_by_user_id = Column(Integer, ForeignKey("user.id"), nullable=True)

    # Request parameters
    swapper_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    zone_id = Column(Integer, ForeignKey("zone.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    target_duration_minutes = Column(Integer, nullable=False)
    battery_threshold = Column(Integer, nullable=False, default=25)
    vehicle_ids = Column(JSON, nullable=True)  # explicit selection, else low battery lookup

    # Status tracking
    status = Column(Enum(GenerationStatus), nullable=False, default=GenerationStatus.QUEUED, index=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Outcome
    error_message = Column(Text, nullable=True)
    route_id = Column(Integer, ForeignKey("route.id"), nullable=True)
