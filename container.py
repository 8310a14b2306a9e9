"""
Service container for Bluffdict.

Every game service is a singleton inside one container. Handlers and REST
routes look services up by name, so a test can rebuild the whole graph
over a fresh store with configure_container().
"""

from typing import Any, Callable, Dict, List, Optional
import logging
import os

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


class CircularDependencyError(Exception):
    pass


class ServiceNotFoundError(Exception):
    pass


class ServiceContainer:
    """
    Named services built on first use.

    A service's factory receives its dependencies positionally, in the
    declared order, followed by its config as keyword arguments.
    """

    def __init__(self):
        self._factories: Dict[str, Callable] = {}
        self._dependencies: Dict[str, List[str]] = {}
        self._config: Dict[str, Dict[str, Any]] = {}
        self._instances: Dict[str, Any] = {}
        self._creating: List[str] = []

    def register(
        self,
        name: str,
        factory: Callable,
        dependencies: Optional[List[str]] = None,
        config: Optional[Dict[str, Any]] = None
    ) -> 'ServiceContainer':
        if name in self._factories:
            raise ValueError(f"Service '{name}' is already registered")
        if not callable(factory):
            raise ValueError(f"Factory for '{name}' must be callable")

        self._factories[name] = factory
        self._dependencies[name] = list(dependencies or [])
        self._config[name] = dict(config or {})
        return self

    def set_external_dependency(self, name: str, instance: Any) -> 'ServiceContainer':
        """Add an object built outside the container, such as the SocketIO server."""
        self._instances[name] = instance
        return self

    def configure_services(self) -> 'ServiceContainer':
        """Register the Bluffdict service graph."""
        from bluffdict.config.game_settings import GameSettings
        from bluffdict.content_manager import ContentManager
        from bluffdict.core.random_source import RandomSource
        from bluffdict.game_manager import GameManager
        from bluffdict.services.broadcast_service import BroadcastService
        from bluffdict.services.error_response_factory import ErrorResponseFactory
        from bluffdict.services.session_service import SessionService
        from bluffdict.store import InMemoryDocumentStore
        from config_factory import get_config

        app_config = get_config()
        self.set_external_dependency('AppConfig', app_config)

        # Relative word files live next to the application
        words_file = app_config.words_file
        if not os.path.isabs(words_file):
            words_file = os.path.join(BASE_DIR, words_file)

        self.register('GameSettings', GameSettings, dependencies=['AppConfig'])
        self.register('ContentManager', ContentManager, config={'yaml_file_path': words_file})
        self.register('DocumentStore', InMemoryDocumentStore,
                      config={'max_attempts': app_config.transaction_max_attempts})
        self.register('RandomSource', RandomSource)
        self.register('SessionService', SessionService)
        self.register('ErrorResponseFactory', ErrorResponseFactory)

        # Every game service shares the one store
        self.register('GameManager', GameManager,
                      dependencies=['ContentManager', 'DocumentStore', 'RandomSource', 'GameSettings'])
        self.register('BroadcastService', BroadcastService,
                      dependencies=['socketio', 'GameManager', 'SessionService'])

        return self

    def get(self, name: str) -> Any:
        """
        The service instance, built with its dependencies on first use.

        Raises:
            ServiceNotFoundError: If nothing is registered under the name
            CircularDependencyError: If the service depends on itself
        """
        if name in self._instances:
            return self._instances[name]
        if name not in self._factories:
            raise ServiceNotFoundError(f"Service '{name}' is not registered")
        if name in self._creating:
            cycle = ' -> '.join(self._creating + [name])
            raise CircularDependencyError(f"Circular dependency detected: {cycle}")

        self._creating.append(name)
        try:
            dependencies = [self.get(dep_name) for dep_name in self._dependencies[name]]
            instance = self._factories[name](*dependencies, **self._config[name])
        finally:
            self._creating.remove(name)

        self._instances[name] = instance
        logger.debug(f"Created service {name}")
        return instance

    def has_service(self, name: str) -> bool:
        return name in self._factories or name in self._instances

    def get_service_names(self) -> List[str]:
        return list(self._factories)

    def clear(self) -> 'ServiceContainer':
        """Drop every registration and instance."""
        self._factories.clear()
        self._dependencies.clear()
        self._config.clear()
        self._instances.clear()
        self._creating.clear()
        return self


_app_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """The application's container, created on first use."""
    global _app_container
    if _app_container is None:
        _app_container = ServiceContainer()
    return _app_container


def configure_container(socketio=None) -> ServiceContainer:
    """
    Rebuild the application's container with the Bluffdict services.

    Args:
        socketio: Flask-SocketIO server the broadcasts are sent through
    """
    container = get_container()
    container.clear()

    if socketio is not None:
        container.set_external_dependency('socketio', socketio)

    container.configure_services()
    return container
