"""
API Routes Module
Contains the Flask route handlers that expose the prompt analyzer over HTTP.
Handles text processing requests, supported-operation discovery, and health checks.
"""

import logging
from flask import request, jsonify

from prompt_analyzer import SUPPORTED_OPERATIONS, process_text

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('operation', 'text')


def setup_routes(app, analyzer):
    """Setup all API routes for the Flask application."""

    @app.before_request
    def log_request_info():
        """Log incoming requests, skipping health probes."""
        if request.path == '/health':
            return
        logger.debug(f"Incoming request: {request.method} {request.path} "
                     f"(content_length={request.content_length})")

    @app.route('/api/process', methods=['POST'])
    def process():
        """Run one operation over the posted text."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({'success': False, 'error': 'No JSON data provided'}), 400

        for field in REQUIRED_FIELDS:
            if field not in data:
                return jsonify({'success': False, 'error': f'Missing required field: {field}'}), 400

        text = data['text']
        max_length = app.config.get('MAX_TEXT_LENGTH')
        if isinstance(text, str) and max_length and len(text) > max_length:
            return jsonify({
                'success': False,
                'error': f'Text too long. Maximum length is {max_length} characters.'
            }), 400

        result = process_text(data['operation'], text, analyzer=analyzer)
        if not result['success']:
            logger.warning(f"Processing failed for operation '{data['operation']}': {result['error']}")
        return jsonify(result), 200 if result['success'] else 400

    @app.route('/api/operations')
    def operations():
        """List the operations accepted by /api/process."""
        return jsonify({'operations': list(SUPPORTED_OPERATIONS)})

    @app.route('/health')
    def health_check():
        """Simple health check endpoint for container probes."""
        return jsonify({'status': 'ok'}), 200


def setup_error_handlers(app):
    """Return JSON bodies for routing and server errors."""

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'success': False, 'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return jsonify({'success': False, 'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {error}")
        return jsonify({'success': False, 'error': 'Internal server error'}), 500
