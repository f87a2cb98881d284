"""Service container

Minimal singleton registry that wires the coaching core from one
``ConfigService``. Hosts that want their own capture device, host
environment or capability descriptor pass them to ``create_container``.
"""

from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar

from ..utils import app_logger, logger
from .interfaces import ForegroundHost, ICaptureDevice, IHostEnvironment

T = TypeVar("T")


class Lifetime(Enum):
    SINGLETON = "singleton"
    TRANSIENT = "transient"


class ServiceContainer:
    """Registration, singleton caching and resolution

    Usage:
        container = create_container(ConfigService("settings.json"))
        controller = container.resolve(RecordingController)
        ...
        container.shutdown()
    """

    def __init__(self):
        self._registrations: Dict[Type, Tuple[Callable[[], Any], Lifetime]] = {}
        self._singletons: Dict[Type, Any] = {}

    @classmethod
    def create(
        cls,
        config=None,
        capture_device: Optional[ICaptureDevice] = None,
        host: Optional[IHostEnvironment] = None,
        capabilities=None,
    ) -> "ServiceContainer":
        return create_container(config, capture_device, host, capabilities)

    def register_singleton(
        self, interface: Type[T], factory: Callable[[], T]
    ) -> "ServiceContainer":
        self._registrations[interface] = (factory, Lifetime.SINGLETON)
        return self

    def register_instance(self, interface: Type[T], instance: T) -> "ServiceContainer":
        self._registrations[interface] = (lambda: instance, Lifetime.SINGLETON)
        self._singletons[interface] = instance
        return self

    def register_transient(
        self, interface: Type[T], factory: Callable[[], T]
    ) -> "ServiceContainer":
        self._registrations[interface] = (factory, Lifetime.TRANSIENT)
        return self

    def resolve(self, interface: Type[T]) -> T:
        """Resolve a service instance

        Raises:
            ValueError: service not registered
        """
        if interface not in self._registrations:
            raise ValueError(f"Service {interface.__name__} not registered")

        factory, lifetime = self._registrations[interface]
        if lifetime is Lifetime.SINGLETON:
            if interface not in self._singletons:
                self._singletons[interface] = factory()
            return self._singletons[interface]
        return factory()

    def is_registered(self, interface: Type) -> bool:
        return interface in self._registrations

    def is_created(self, interface: Type) -> bool:
        return interface in self._singletons

    def shutdown(self) -> None:
        """Stop created services in reverse creation order, then clear"""
        for interface, instance in reversed(list(self._singletons.items())):
            stop = getattr(instance, "shutdown", None) or getattr(instance, "stop", None)
            if stop is None:
                continue
            try:
                stop()
            except Exception as e:
                app_logger.log_error(e, "container_shutdown", {"service": interface.__name__})
        self.clear()

    def clear(self) -> None:
        self._registrations.clear()
        self._singletons.clear()


def create_container(
    config=None,
    capture_device: Optional[ICaptureDevice] = None,
    host: Optional[IHostEnvironment] = None,
    capabilities=None,
) -> ServiceContainer:
    """Build a container with every core service registered

    Args:
        config: ConfigService; defaults are used when omitted
        capture_device: microphone backend; PyAudio when omitted
        host: foreground/background oracle; always-foreground when omitted
        capabilities: DeviceCapabilities; probed with psutil when omitted

    The context manager is started when first resolved, so its idle sweep
    and memory polling run until ``shutdown()``.
    """
    from ..analysis import MetricsEngine
    from ..audio import PyAudioCaptureDevice
    from ..visualization import (
        DeviceCapabilities,
        MemoryPressureMonitor,
        VisualizationPipeline,
    )
    from .controllers import RecordingController
    from .services import ConfigService, EventBus
    from .services.context_lifecycle_manager import ContextLifecycleManager

    config = config or ConfigService()
    logger.configure(config)

    container = ServiceContainer()
    container.register_instance(ConfigService, config)
    container.register_instance(IHostEnvironment, host or ForegroundHost())
    container.register_singleton(EventBus, EventBus)
    container.register_singleton(
        ICaptureDevice, lambda: capture_device or PyAudioCaptureDevice()
    )
    container.register_singleton(
        DeviceCapabilities, lambda: capabilities or DeviceCapabilities.detect()
    )
    container.register_singleton(MetricsEngine, lambda: MetricsEngine.from_config(config))
    container.register_singleton(
        VisualizationPipeline,
        lambda: VisualizationPipeline.from_config(
            config, capabilities=container.resolve(DeviceCapabilities)
        ),
    )
    container.register_singleton(
        RecordingController,
        lambda: RecordingController.from_config(
            config,
            container.resolve(ICaptureDevice),
            host=container.resolve(IHostEnvironment),
            event_service=container.resolve(EventBus),
        ),
    )

    def context_manager():
        manager = ContextLifecycleManager.from_config(
            config,
            pipeline=container.resolve(VisualizationPipeline),
            event_service=container.resolve(EventBus),
            memory_monitor=MemoryPressureMonitor.from_config(config),
        )
        manager.start()
        return manager

    container.register_singleton(ContextLifecycleManager, context_manager)

    app_logger.log_lifecycle_event("Service container created")
    return container
