import logging
import sys

def setup_logging():
    """
    Configure logging for the application.
    
    Sets up logging to stdout so it is picked up by the container runtime.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    
    # Reduce SQLAlchemy and solver worker noise in logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("rq.worker").setLevel(logging.WARNING)
    
    return logging.getLogger("swaproute")


# Create global logger instance
logger = setup_logging()
