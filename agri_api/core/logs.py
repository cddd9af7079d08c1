import logging

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

def configure_logging(level: str = 'INFO') -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(level.upper())
    logging.getLogger('httpx').setLevel(logging.WARNING)

def log_routes(app, logger: logging.Logger) -> None:
    for route in app.routes:
        if hasattr(route, "methods") and hasattr(route, "path"):
            logger.info("%s %s", sorted(route.methods), route.path)
