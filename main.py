"""Prompt Analyzer - Entry Point"""

import os
import sys
import logging
import signal

from app_modules.app_factory import create_app
from config import Config

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
ENVIRONMENT = os.getenv('ENVIRONMENT', 'development')

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

app = None

def signal_handler(signum, frame):
    logger.info(f"Received signal {signum}, shutting down gracefully...")
    sys.exit(0)

def initialize_application():
    global app
    logger.info("Initializing application...")
    app = create_app(Config)
    logger.info("Application ready")
    return True

def main():
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    logger.info("=" * 50)
    logger.info(f"Prompt Analyzer - {ENVIRONMENT.upper()}")
    logger.info("=" * 50)

    if not initialize_application():
        logger.error("Initialization failed")
        sys.exit(1)

    server = Config.get_server_config()
    debug_mode = os.getenv('FLASK_DEBUG', 'False').lower() == 'true' and ENVIRONMENT != 'production'

    if ENVIRONMENT == 'production' and debug_mode:
        logger.warning("Debug mode disabled in production")
        debug_mode = False

    logger.info(f"Starting on {server['host']}:{server['port']} (debug={debug_mode})")

    try:
        app.run(host=server['host'], port=server['port'], debug=debug_mode)
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        sys.exit(1)

if __name__ == '__main__':
    main()
else:
    logger.info(f"Initializing for WSGI (Gunicorn) - {ENVIRONMENT}")
    try:
        if not initialize_application():
            raise RuntimeError("Initialization failed")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise
    application = app
