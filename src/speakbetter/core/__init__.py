"""Core: controllers, services, collaborator interfaces"""

from .services import ConfigService, EventBus, Events

__all__ = ["ConfigService", "EventBus", "Events"]
