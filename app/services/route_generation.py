from datetime import datetime, timezone
from typing import Optional
import traceback
import redis
from rq import Queue
from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.logging_config import logger
from app.crud import route_generation_request as generation_crud
from app.models.route_generation_request import RouteGenerationRequest, GenerationStatus
from app.schemas.route_generation import RouteGenerationRequestCreate


class RouteGenerationService:
    """
    Service layer for background route generation.

    Requests are stored as queued and handed to an RQ worker, which plans
    the route with its own database session and records the outcome.
    """

    def __init__(self, queue: Optional[Queue] = None):
        """
        Initialize the service with a Redis Queue.

        Args:
            queue: Queue to submit jobs to; built from settings when omitted
        """
        self.crud = generation_crud
        self.queue = queue

        if self.queue is None:
            try:
                self.queue = self._connect()
                logger.info(
                    f"RouteGenerationService initialized with queue '{settings.ROUTE_GENERATION_QUEUE_NAME}'"
                )
            except Exception as e:
                logger.error(f"Failed to connect to Redis: {e}")
                self.queue = None

    @staticmethod
    def _connect() -> Queue:
        redis_conn = redis.from_url(settings.REDIS_URL)
        return Queue(settings.ROUTE_GENERATION_QUEUE_NAME, connection=redis_conn)

    def create_generation_request(
        self,
        db: Session,
        request_data: RouteGenerationRequestCreate,
        requested_by_user_id: Optional[int] = None
    ) -> RouteGenerationRequest:
        """
        Store a route generation request and submit it to the worker queue.

        Args:
            db: Database session
            request_data: Generation parameters
            requested_by_user_id: Planner submitting the request

        Returns:
            Created RouteGenerationRequest with status=queued

        Raises:
            HTTPException 503: If the queue is unavailable
        """
        logger.info(
            f"Creating route generation request: zone={request_data.zone_id}, "
            f"swapper={request_data.swapper_id}, target={request_data.target_duration_minutes}min"
        )

        data = request_data.model_dump()
        data["requested_by_user_id"] = requested_by_user_id
        generation_request = self.crud.create(db=db, obj_in=data)

        from app.database import DATABASE_URL

        def enqueue():
            return self.queue.enqueue(
                run_route_generation_worker,
                request_id=generation_request.id,
                database_url=DATABASE_URL,
                job_timeout=settings.ROUTE_GENERATION_JOB_TIMEOUT
            )

        try:
            if self.queue is None:
                self.queue = self._connect()
            try:
                job = enqueue()
            except redis.exceptions.RedisError as e:
                # Try to reconnect once if the connection went away
                logger.warning(f"Redis enqueue failed, reconnecting: {e}")
                self.queue = self._connect()
                job = enqueue()
        except redis.exceptions.RedisError as e:
            logger.error(f"Cannot submit route generation request {generation_request.id}: {e}")
            self.crud.update_status(
                db=db,
                request_id=generation_request.id,
                status=GenerationStatus.FAILED,
                completed_at=datetime.now(timezone.utc),
                error_message="Route generation queue unavailable"
            )
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Route generation service is currently unavailable (Redis down)"
            )

        logger.info(f"Route generation request {generation_request.id} queued, job_id={job.id}")
        return generation_request

    def get_generation_request(
        self,
        db: Session,
        request_id: int
    ) -> RouteGenerationRequest:
        """
        Get a route generation request by ID.

        Raises:
            HTTPException 404: If request not found
        """
        generation_request = self.crud.get(db=db, id=request_id)

        if not generation_request:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Route generation request not found"
            )

        return generation_request


def process_generation_request(db: Session, request_id: int, route_service=None) -> RouteGenerationRequest:
    """
    Run one route generation request to completion.

    Explicit vehicle selections are planned as given; otherwise all low
    battery vehicles of the zone are used. The request ends up completed
    with a route_id, or failed with an error message.

    Args:
        db: Database session
        request_id: Route generation request ID
        route_service: RouteService to plan with (defaults to the shared one)

    Returns:
        The updated RouteGenerationRequest
    """
    from app.crud.route_generation_request import route_generation_request
    from app.services.route import RouteGenerationError

    if route_service is None:
        from app.services.route import route_service

    generation_request = route_generation_request.update_status(
        db=db,
        request_id=request_id,
        status=GenerationStatus.PROCESSING,
        started_at=datetime.now(timezone.utc)
    )
    if generation_request is None:
        raise ValueError(f"Route generation request {request_id} not found")

    logger.info(
        f"Generating route for request {request_id}: zone={generation_request.zone_id}, "
        f"vehicles={generation_request.vehicle_ids or 'low battery'}"
    )

    try:
        if generation_request.vehicle_ids:
            route = route_service.create_optimized_route(
                db=db,
                swapper_id=generation_request.swapper_id,
                zone_id=generation_request.zone_id,
                route_date=generation_request.date,
                target_duration_minutes=generation_request.target_duration_minutes,
                vehicle_ids=generation_request.vehicle_ids,
                created_by_user_id=generation_request.requested_by_user_id
            )
        else:
            result = route_service.generate_route(
                db=db,
                swapper_id=generation_request.swapper_id,
                zone_id=generation_request.zone_id,
                target_duration_minutes=generation_request.target_duration_minutes,
                battery_threshold=generation_request.battery_threshold,
                route_date=generation_request.date,
                created_by_user_id=generation_request.requested_by_user_id
            )
            if not result.success:
                raise RouteGenerationError(result.message)
            route = result.route
    except RouteGenerationError as e:
        logger.warning(f"Route generation request {request_id} failed: {e}")
        return route_generation_request.update_status(
            db=db,
            request_id=request_id,
            status=GenerationStatus.FAILED,
            completed_at=datetime.now(timezone.utc),
            error_message=str(e)
        )

    logger.info(f"Route generation request {request_id} completed, route_id={route.id}")
    return route_generation_request.update_status(
        db=db,
        request_id=request_id,
        status=GenerationStatus.COMPLETED,
        completed_at=datetime.now(timezone.utc),
        route_id=route.id
    )


def run_route_generation_worker(request_id: int, database_url: str):
    """
    Worker function executed by RQ.

    Creates its own database session, runs the request and records any
    unexpected error on the request before closing the session.

    Args:
        request_id: Route generation request ID
        database_url: Database connection URL
    """
    from sqlalchemy.orm import sessionmaker
    from app.database import build_engine
    from app.crud.route_generation_request import route_generation_request

    # Import all models so every mapper is configured in the worker process
    import app.models  # noqa: F401

    engine = build_engine(database_url)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = SessionLocal()

    try:
        logger.info(f"Worker started for route generation request {request_id}")
        process_generation_request(db, request_id)
    except Exception as e:
        logger.error(f"Route generation request {request_id} crashed: {str(e)}")
        logger.error(traceback.format_exc())
        db.rollback()

        try:
            route_generation_request.update_status(
                db=db,
                request_id=request_id,
                status=GenerationStatus.FAILED,
                completed_at=datetime.now(timezone.utc),
                error_message=str(e)
            )
        except Exception as update_error:
            logger.error(f"Failed to update error status: {str(update_error)}")
    finally:
        db.close()
        engine.dispose()


# Create singleton instance
route_generation_service = RouteGenerationService()
