import enum
from sqlalchemy import Column, Integer, String, Boolean, Enum
from app.database import Base, TimestampMixin

class UserRole(str, enum.Enum):
    admin = "admin"
    fleet_manager = "fleet_manager"
    battery_swapper = "battery_swapper"

class User(Base, TimestampMixin):
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.battery_swapper)
    is_active = Column(Boolean, default=True)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()
