import logging

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

def configure_logging(level: str = 'INFO') -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(level.upper())
    # outbound API calls are logged by AgriApi itself
    logging.getLogger('httpx').setLevel(logging.WARNING)
