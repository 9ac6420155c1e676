"""
Dependency Injection Container

Holds the process-wide services (storage backend, identity provider,
application services) so Celery tasks and request handlers share the
instances built by the application factory.
"""

import logging
import threading
from typing import Any, Dict, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyNotFoundError(LookupError):
    """Raised when resolving a type nothing was registered for."""
    pass


class DependencyContainer:
    """Type-keyed service registry. Thread-safe."""

    def __init__(self):
        self._instances: Dict[Type, Any] = {}
        self._lock = threading.Lock()

    def register(self, interface: Type[T], instance: T) -> None:
        with self._lock:
            self._instances[interface] = instance
        logger.debug(f"Registered {interface.__name__}: {type(instance).__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Return the service registered for interface.

        Raises:
            DependencyNotFoundError: If nothing is registered for interface
        """
        with self._lock:
            try:
                return self._instances[interface]
            except KeyError:
                raise DependencyNotFoundError(
                    f"Nothing registered for {interface.__name__}"
                ) from None

    def is_registered(self, interface: Type) -> bool:
        with self._lock:
            return interface in self._instances
