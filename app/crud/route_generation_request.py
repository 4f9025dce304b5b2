from typing import Optional, Dict, Any
from sqlalchemy.orm import Session
from datetime import datetime
from app.crud.base import CRUDBase
from app.models.route_generation_request import RouteGenerationRequest, GenerationStatus
from app.schemas.route_generation import RouteGenerationRequestCreate


class CRUDRouteGenerationRequest(CRUDBase[RouteGenerationRequest, RouteGenerationRequestCreate, Dict[str, Any]]):
    """
    CRUD operations for RouteGenerationRequest model.
    
    Extends base CRUD with status updates used by the background worker.
    """
    
    def update_status(
        self,
        db: Session,
        *,
        request_id: int,
        status: GenerationStatus,
        started_at: Optional[datetime] = None,
        completed_at: Optional[datetime] = None,
        error_message: Optional[str] = None,
        route_id: Optional[int] = None
    ) -> Optional[RouteGenerationRequest]:
        """
        Update the status of a route generation request.
        
        Args:
            db: Database session
            request_id: Route generation request ID
            status: New status
            started_at: Optional start timestamp
            completed_at: Optional completion timestamp
            error_message: Optional error message for failed requests
            route_id: Optional ID of the created route
            
        Returns:
            Updated RouteGenerationRequest or None if not found
        """
        request = self.get(db=db, id=request_id)
        if not request:
            return None
        
        request.status = status
        if started_at:
            request.started_at = started_at
        if completed_at:
            request.completed_at = completed_at
        if error_message:
            request.error_message = error_message
        if route_id:
            request.route_id = route_id
        
        db.add(request)
        db.commit()
        db.refresh(request)
        return request


# Create singleton instance
route_generation_request = CRUDRouteGenerationRequest(RouteGenerationRequest)
