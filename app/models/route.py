import enum
from sqlalchemy import (
    Column, Integer, Float, ForeignKey, Date, DateTime, Enum, Interval,
    CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from app.database import Base, TimestampMixin

class RouteStatus(str, enum.Enum):
    suggested = "suggested"
    confirmed = "confirmed"
    in_progress = "in_progress"
    completed = "completed"

class RouteStopStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"
    skipped = "skipped"

class Route(Base, TimestampMixin):
    __tablename__ = "route"
    __table_args__ = (
        CheckConstraint(
            "target_duration_minutes >= 60 AND target_duration_minutes <= 1440",
            name="ck_route_target_duration",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    assigned_swapper_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    created_by_user_id = Column(Integer, ForeignKey("user.id"), nullable=True)
    zone_id = Column(Integer, ForeignKey("zone.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    target_duration_minutes = Column(Integer, nullable=False)
    status = Column(Enum(RouteStatus), nullable=False, default=RouteStatus.suggested, index=True)
    estimated_duration_minutes = Column(Integer, nullable=True)
    estimated_distance_km = Column(Float, nullable=True)
    total_vehicle_count = Column(Integer, nullable=False, default=0)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    assigned_swapper = relationship("User", foreign_keys=[assigned_swapper_id])
    zone = relationship("Zone")
    stops = relationship(
        "RouteStop",
        back_populates="route",
        cascade="all, delete-orphan",
        order_by="RouteStop.sequence_order",
    )

    @property
    def assigned_swapper_name(self):
        return self.assigned_swapper.full_name if self.assigned_swapper else None

    @property
    def zone_name(self):
        return self.zone.name if self.zone else None

class RouteStop(Base, TimestampMixin):
    __tablename__ = "route_stop"
    __table_args__ = (
        UniqueConstraint("route_id", "sequence_order", name="uq_route_stop_route_order"),
        CheckConstraint("sequence_order >= 1", name="ck_route_stop_sequence_order"),
    )

    id = Column(Integer, primary_key=True, index=True)
    route_id = Column(Integer, ForeignKey("route.id", ondelete="CASCADE"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicle.id"), nullable=False)
    sequence_order = Column(Integer, nullable=False)
    status = Column(Enum(RouteStopStatus), nullable=False, default=RouteStopStatus.pending)
    estimated_arrival_offset = Column(Interval, nullable=False)
    estimated_duration_at_stop = Column(Interval, nullable=False)
    actual_arrival_time = Column(DateTime(timezone=True), nullable=True)
    actual_departure_time = Column(DateTime(timezone=True), nullable=True)

    route = relationship("Route", back_populates="stops")
    vehicle = relationship("Vehicle")
