"""Base plugin architecture for the eventing operator."""

from abc import ABC, abstractmethod
import logging

logger = logging.getLogger(__name__)


class PluginBase(ABC):
    """Base class for all eventing plugins."""

    def __init__(self):
        self._initialized = False

    @property
    @abstractmethod
    def name(self):
        """Unique name for this plugin."""
        pass

    @property
    @abstractmethod
    def version(self):
        pass

    @property
    @abstractmethod
    def description(self):
        pass

    @property
    @abstractmethod
    def models(self):
        """Return list of CRD models this plugin provides."""
        pass

    @property
    def initialized(self):
        return self._initialized

    def initialize(self):
        """Initialize the plugin. Called once during operator startup.

        Returns:
            bool: True if initialization successful, False otherwise
        """
        if self._initialized:
            logger.warning(f"Plugin {self.name} already initialized")
            return True

        try:
            logger.info(f"Initializing plugin: {self.name} v{self.version}")
            self._check_models()
            self._initialized = True
            logger.info(f"Plugin {self.name} initialized successfully")
            return True

        except Exception as e:
            logger.error(f"Failed to initialize plugin {self.name}: {e}")
            return False

    def _check_models(self):
        """Every model must be registered with a condition set for its kind."""
        from eventing.crd.registry import CRDRegistry

        registry = CRDRegistry()
        for model in self.models:
            if not hasattr(model, "_crd_group"):
                raise ValueError(
                    f"Model {model.__name__} not decorated with @CRDRegistry.register"
                )
            info = registry.get_model_by_key(
                model._crd_group, model._crd_version, model._crd_kind
            )
            if info is None or info["condition_set"] is None:
                raise ValueError(f"No condition set registered for {model._crd_kind}")
            logger.debug(f"Model {model.__name__} provided by plugin {self.name}")

    def shutdown(self):
        """Cleanup plugin resources. Called during operator shutdown."""
        if not self._initialized:
            return

        logger.info(f"Shutting down plugin: {self.name}")
        self._initialized = False

    @abstractmethod
    def register_handlers(self):
        """Import the kopf handlers for the CRDs managed by this plugin."""
        pass

    def get_health_status(self):
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "initialized": self._initialized,
            "models_count": len(self.models),
            "status": "healthy" if self._initialized else "not_initialized",
        }
