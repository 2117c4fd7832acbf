"""
Configuration for the Prompt Analyzer service.
"""

import os
from dotenv import load_dotenv
from typing import Dict, Any

# Load environment variables (optional - only if .env file exists)
load_dotenv()

class Config:
    """Application configuration."""

    DEBUG = os.environ.get('FLASK_ENV', 'production') == 'development'
    TESTING = False

    # Server
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', 8080))

    # Analysis
    MAX_WORKERS = int(os.environ.get('MAX_WORKERS', 4))
    MAX_TEXT_LENGTH = int(os.environ.get('MAX_TEXT_LENGTH', 100000))
    LEXICON_PATH = os.environ.get('LEXICON_PATH')  # None -> bundled lexicons.yaml

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    @classmethod
    def get_analysis_config(cls) -> Dict[str, Any]:
        """Get prompt analysis configuration."""
        return {
            'max_workers': cls.MAX_WORKERS,
            'max_text_length': cls.MAX_TEXT_LENGTH,
            'lexicon_path': cls.LEXICON_PATH
        }

    @classmethod
    def get_server_config(cls) -> Dict[str, Any]:
        """Get HTTP server configuration."""
        return {
            'host': cls.HOST,
            'port': cls.PORT,
            'debug': cls.DEBUG
        }


# For testing only
class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    MAX_WORKERS = 2
    MAX_TEXT_LENGTH = 2000
