import asyncio
import threading
from fastapi import APIRouter, Depends, status, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from app.database import get_db, get_session_factory
from app.core.config import settings
from app.core.logging_config import logger
from app.core.permissions import Permission
from app.dependencies import require_permission
from app.models.route import RouteStatus
from app.models.user import User
from app.schemas.route import (
    RouteCreate,
    RouteResponse,
    RouteStopResponse,
    RouteSuggestRequest,
    RouteSuggestResponse,
)
from app.schemas.route_generation import RouteGenerationRequestCreate, RouteGenerationRequestResponse
from app.services.route import RouteGenerationCancelled, RouteGenerationError, route_service
from app.services.route_generation import route_generation_service
from app.services.route_stop import route_stop_service

router = APIRouter()


async def _run_with_timeout(session_factory, func, serialize, **kwargs):
    """
    Run a blocking route generation call in a worker thread.

    The worker opens its own session and serializes the result before
    closing it. On timeout the cancel event is set and the worker is awaited:
    a cancelled run answers 504, a run that already committed is returned.
    """
    cancel_event = threading.Event()

    def run():
        db = session_factory()
        try:
            return serialize(func(db=db, cancel_event=cancel_event, **kwargs))
        finally:
            db.close()

    worker = asyncio.ensure_future(asyncio.to_thread(run))
    try:
        return await asyncio.wait_for(
            asyncio.shield(worker),
            timeout=settings.ROUTE_GENERATION_TIMEOUT_SECONDS
        )
    except asyncio.TimeoutError:
        cancel_event.set()
        logger.warning(
            f"Route generation exceeded {settings.ROUTE_GENERATION_TIMEOUT_SECONDS}s, cancelling"
        )

    try:
        result = await worker
    except RouteGenerationCancelled:
        logger.error(
            f"Route generation timed out after {settings.ROUTE_GENERATION_TIMEOUT_SECONDS}s"
        )
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Route generation timed out"
        )

    logger.info("Route generation committed before the cancellation was seen")
    return result


def _suggest_response(result) -> RouteSuggestResponse:
    return RouteSuggestResponse(
        success=result.success,
        message=result.message,
        route=RouteResponse.model_validate(result.route) if result.route else None,
        total_vehicles=result.total_vehicles,
        estimated_duration_minutes=result.estimated_duration_minutes,
        total_distance_km=result.total_distance_km
    )


@router.post("", response_model=RouteResponse, status_code=status.HTTP_201_CREATED)
async def create_route(
    route_data: RouteCreate,
    session_factory=Depends(get_session_factory),
    current_user: User = Depends(require_permission(Permission.PLAN_ROUTES))
):
    """
    Create an optimized route for the selected vehicles.

    Vehicles outside the zone are left out. The route starts as suggested.

    Example:
        ```json
        {
            "swapper_id": 3,
            "zone_id": 7,
            "date": "2025-06-01",
            "target_duration_minutes": 120,
            "vehicle_ids": [10, 11, 12]
        }
        ```
    """
    try:
        logger.info(
            f"Creating route: zone_id={route_data.zone_id}, swapper_id={route_data.swapper_id}, "
            f"vehicles={len(route_data.vehicle_ids)}"
        )
        result = await _run_with_timeout(
            session_factory,
            route_service.create_optimized_route,
            RouteResponse.model_validate,
            swapper_id=route_data.swapper_id,
            zone_id=route_data.zone_id,
            route_date=route_data.date,
            target_duration_minutes=route_data.target_duration_minutes,
            vehicle_ids=route_data.vehicle_ids,
            created_by_user_id=current_user.id
        )
        logger.info(f"Route created successfully: id={result.id}")
        return result
    except RouteGenerationError as e:
        logger.warning(f"Route creation failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating route: {type(e).__name__}: {str(e)}")
        raise


@router.post("/suggest", response_model=RouteSuggestResponse)
async def suggest_route(
    request_data: RouteSuggestRequest,
    session_factory=Depends(get_session_factory),
    current_user: User = Depends(require_permission(Permission.PLAN_ROUTES))
):
    """
    Generate a suggested route covering the low battery vehicles of a zone.

    Returns 400 with a readable message when no route can be generated.
    """
    try:
        response = await _run_with_timeout(
            session_factory,
            route_service.generate_route,
            _suggest_response,
            swapper_id=request_data.swapper_id,
            zone_id=request_data.zone_id,
            target_duration_minutes=request_data.target_duration_minutes,
            battery_threshold=request_data.battery_threshold,
            route_date=request_data.date,
            created_by_user_id=current_user.id
        )
    except RouteGenerationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    if not response.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=response.message
        )

    return response


@router.get("", response_model=List[RouteResponse])
def get_routes(
    zone_id: Optional[int] = None,
    status: Optional[RouteStatus] = None,
    db: Session = Depends(get_db),
    _user: User = Depends(require_permission(Permission.VIEW_ROUTES))
):
    """
    List routes of a zone, optionally filtered by status.

    Without a zone, a status filter is required.
    """
    if zone_id is not None:
        return route_service.get_routes_by_zone(db=db, zone_id=zone_id, status=status)
    if status is not None:
        return route_service.get_routes_by_status(db=db, status=status)
    raise HTTPException(
        status_code=422,
        detail="Provide zone_id or status"
    )


@router.get("/suggestions", response_model=List[RouteResponse])
def get_route_suggestions(
    zone_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_permission(Permission.VIEW_ROUTES))
):
    return route_service.get_route_suggestions(db=db, zone_id=zone_id)


@router.get("/today", response_model=RouteResponse)
def get_todays_route(
    swapper_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.VIEW_ROUTES))
):
    """
    Get today's route for a swapper (the caller when swapper_id is omitted).
    """
    route = route_service.get_todays_route_for_swapper(
        db=db,
        swapper_id=swapper_id if swapper_id is not None else current_user.id
    )
    if route is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No route for today"
        )
    return route


@router.post(
    "/generation-requests",
    response_model=RouteGenerationRequestResponse,
    status_code=status.HTTP_201_CREATED
)
def create_generation_request(
    request_data: RouteGenerationRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.PLAN_ROUTES))
):
    """
    Queue a route generation request for a background worker.

    The client should poll GET /routes/generation-requests/{id} to check status.

    Status progression:
    - queued: Request is waiting to be processed
    - processing: Worker is planning the route
    - completed: Route created (see route_id)
    - failed: No route could be created (see error_message)
    """
    try:
        result = route_generation_service.create_generation_request(
            db=db,
            request_data=request_data,
            requested_by_user_id=current_user.id
        )
        logger.info(f"Route generation request created: id={result.id}, status={result.status}")
        return result
    except Exception as e:
        logger.error(f"Error creating route generation request: {type(e).__name__}: {str(e)}")
        raise


@router.get("/generation-requests/{request_id}", response_model=RouteGenerationRequestResponse)
def get_generation_request(
    request_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_permission(Permission.PLAN_ROUTES))
):
    return route_generation_service.get_generation_request(db=db, request_id=request_id)


@router.get("/{route_id}", response_model=RouteResponse)
def get_route(
    route_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_permission(Permission.VIEW_ROUTES))
):
    return route_service.get_route(db=db, route_id=route_id)


@router.get("/{route_id}/stops", response_model=List[RouteStopResponse])
def get_route_stops(
    route_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_permission(Permission.VIEW_ROUTES))
):
    route_service.get_route(db=db, route_id=route_id)
    return route_stop_service.get_route_stops(db=db, route_id=route_id)


@router.post("/{route_id}/confirm", response_model=RouteResponse)
def confirm_route(
    route_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_permission(Permission.PLAN_ROUTES))
):
    route = route_service.confirm_route(db=db, route_id=route_id)
    if route is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Route not found or not in suggested status"
        )
    return route


@router.post("/{route_id}/start", response_model=RouteResponse)
def start_route(
    route_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_permission(Permission.EXECUTE_ROUTES))
):
    route = route_service.start_route(db=db, route_id=route_id)
    if route is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Route not found or not in confirmed status"
        )
    return route


@router.post("/{route_id}/complete", response_model=RouteResponse)
def complete_route(
    route_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_permission(Permission.EXECUTE_ROUTES))
):
    route = route_service.complete_route(db=db, route_id=route_id)
    if route is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Route not found or cannot be completed"
        )
    return route
