from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.models import User, Zone, ParkingZone, Vehicle, Route, RouteStop, RouteGenerationRequest  # noqa: F401
from app.routers import auth, vehicle, route, route_stop, optimization
from app.core.config import settings
from app.core.logging_config import logger

# Schema is managed by Alembic migrations

app = FastAPI(
    title="SwapRoute Battery Swap Planning API",
    version="1.0.0",
    redirect_slashes=False  # Disable automatic redirects to prevent POST data loss
)

# Configure CORS for the mobile and web clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(vehicle.router, prefix="/api/vehicles", tags=["Vehicles"])
app.include_router(route.router, prefix="/api/routes", tags=["Routes"])
app.include_router(route_stop.router, prefix="/api/route-stops", tags=["Route Stops"])
app.include_router(optimization.router, prefix="/api/optimization", tags=["Optimization"])


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "database": "connected"
        }
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unhealthy"
        )
