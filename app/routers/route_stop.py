from fastapi import APIRouter, Depends, status, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.core.permissions import Permission
from app.dependencies import require_permission
from app.models.user import User
from app.schemas.route import RouteStopActionResponse
from app.services.route_stop import route_stop_service

router = APIRouter()


@router.post("/{route_stop_id}/complete", response_model=RouteStopActionResponse)
def complete_route_stop(
    route_stop_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_permission(Permission.EXECUTE_ROUTES))
):
    """
    Mark a stop as completed after the battery swap.

    Raises:
        HTTPException 404: If the stop does not exist or is not pending
    """
    if not route_stop_service.complete_route_stop(db=db, route_stop_id=route_stop_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Route stop not found or not pending"
        )
    return RouteStopActionResponse(message="Route stop completed")


@router.post("/{route_stop_id}/skip", response_model=RouteStopActionResponse)
def skip_route_stop(
    route_stop_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_permission(Permission.EXECUTE_ROUTES))
):
    if not route_stop_service.skip_route_stop(db=db, route_stop_id=route_stop_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Route stop not found or not pending"
        )
    return RouteStopActionResponse(message="Route stop skipped")
