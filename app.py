"""
Bluffdict - A multiplayer bluffing game where players invent fake definitions for rare words.
Main Flask application entry point focusing on app creation, dependency injection, and service wiring.
"""

from flask import Flask
from flask_socketio import SocketIO
import os
import logging
import sys
import yaml

from bluffdict.content_manager import ContentValidationError
from container import configure_container
from config_factory import load_config

# Initialize Flask app
app = Flask(__name__)

# Load and apply configuration
app_config = load_config()
app.config.update(SECRET_KEY=app_config.secret_key, DEBUG=app_config.debug)

# Initialize Socket.IO with environment-aware CORS
# In production, restrict to explicitly allowed origins from env var SOCKETIO_CORS_ALLOWED_ORIGINS (comma-separated)
allowed_origins_env = os.environ.get('SOCKETIO_CORS_ALLOWED_ORIGINS', '')
if app_config.is_production:
    _cors_allowed = [o.strip() for o in allowed_origins_env.split(',') if o.strip()]
    socketio = SocketIO(app, cors_allowed_origins=_cors_allowed or [], async_mode=app_config.socketio_async_mode)
else:
    # Development/testing: permissive for local workflows
    socketio = SocketIO(app, cors_allowed_origins="*", async_mode=app_config.socketio_async_mode)

# Configure logging
logging.basicConfig(level=getattr(logging, app_config.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


def wire_services(socketio_instance):
    """
    Build the service graph, load the word corpus and start broadcasting
    store commits to Socket.IO clients.

    Returns:
        The configured container
    """
    container = configure_container(socketio=socketio_instance)

    content_manager = container.get('ContentManager')
    content_manager.load_words_from_yaml()
    logger.info(f"Loaded {content_manager.get_word_count()} words from YAML")

    container.get('BroadcastService').attach(container.get('DocumentStore'))
    return container


# Load words on startup
try:
    container = wire_services(socketio)
except (FileNotFoundError, yaml.YAMLError, ContentValidationError) as e:
    logger.critical(f"FATAL: Word file validation failed, which is critical for game play. Server shutting down. Error: {e}")
    sys.exit(1)

# Register REST endpoints
from bluffdict.routes.api import create_api_blueprint
app.register_blueprint(create_api_blueprint())

# Register Socket.IO handlers
from bluffdict.handlers.socket_handlers import register_socket_handlers
register_socket_handlers(socketio)

if __name__ == '__main__':
    logger.info(f"Starting Bluffdict server on {app_config.host}:{app_config.port}")
    try:
        socketio.run(app, host=app_config.host, port=app_config.port, debug=app_config.debug)
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
