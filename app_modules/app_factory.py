"""
App Factory Module
Creates and configures the Flask application that hosts the prompt analyzer.
Implements the application factory pattern for better testing and modularity.
"""

import logging
import sys
from flask import Flask
from flask_cors import CORS

from config import Config
from prompt_analyzer import Lexicons, PromptAnalyzer
from .api_routes import setup_routes, setup_error_handlers

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    """Create and configure Flask application using the application factory pattern."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    setup_logging(app)

    CORS(app)

    analyzer = initialize_analyzer(app.config)

    setup_routes(app, analyzer)
    setup_error_handlers(app)

    setattr(app, 'analyzer', analyzer)

    logger.info(f"Prompt analyzer ready (max_workers={analyzer.max_workers}, "
                f"max_text_length={app.config.get('MAX_TEXT_LENGTH')})")
    return app


def setup_logging(app):
    """Attach a stdout handler to the Flask logger at the configured level."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)

    if not app.logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
        app.logger.addHandler(handler)
    app.logger.setLevel(level)

    logging.getLogger('werkzeug').setLevel(logging.INFO)


def initialize_analyzer(config) -> PromptAnalyzer:
    """Load lexicons and build the shared analyzer."""
    lexicon_path = config.get('LEXICON_PATH')
    if lexicon_path:
        logger.info(f"Loading lexicons from {lexicon_path}")
        Lexicons.load(lexicon_path)

    return PromptAnalyzer(max_workers=int(config.get('MAX_WORKERS', 4)))
