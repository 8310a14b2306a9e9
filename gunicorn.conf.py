"""
Gunicorn configuration for Bluffdict application.
Optimized for Socket.IO with eventlet workers.
"""

import sys
import logging
import yaml
from bluffdict.content_manager import ContentManager, ContentValidationError


def on_starting(server):
    """
    Server hook that runs when the master process is starting.
    We use this to validate the words YAML file before workers are forked.
    If validation fails, we exit, preventing the server from starting.
    """
    logger = logging.getLogger(__name__)
    logger.info(f"Validating {app_config.words_file} before starting workers...")
    try:
        content_manager = ContentManager(app_config.words_file)
        content_manager.load_words_from_yaml()
        logger.info(f"Successfully validated and loaded {content_manager.get_word_count()} words.")
    except (FileNotFoundError, yaml.YAMLError, ContentValidationError) as e:
        logger.critical(f"FATAL: Word file validation failed. Server shutting down. Error: {e}")
        sys.exit(1)


from config_factory import load_config

# Load configuration (renamed to avoid conflicts with gunicorn's internal 'config')
app_config = load_config()

# Server socket
bind = f"{app_config.host}:{app_config.port}"
backlog = 2048

# Worker processes
workers = 1  # Rooms live in process memory, so a single eventlet worker
worker_class = "eventlet"
worker_connections = app_config.worker_connections
timeout = app_config.timeout
keepalive = app_config.keepalive

# Logging
accesslog = "-"
errorlog = "-"
loglevel = app_config.log_level
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'

# Process naming
proc_name = "bluffdict"

# Server mechanics
preload_app = False  # Don't preload for Socket.IO
daemon = False
pidfile = None
