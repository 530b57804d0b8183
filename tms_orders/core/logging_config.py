import logging
import sys

def setup_logging():
    """
    Configure structured logging for the application.
    
    Sets up logging to stdout with timestamps, log levels, and module names.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    
    # Reduce SQLAlchemy and httpx noise in logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    
    return logging.getLogger("tms_orders")


# Create global logger instance
logger = setup_logging()
