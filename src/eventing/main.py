import kopf
import logging
import kubernetes

from eventing import config
from eventing.plugins.registry import PluginRegistry

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format=config.LOG_FORMAT,
)
logger = logging.getLogger(__name__)


def load_kubernetes_config():
    try:
        kubernetes.config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config")
    except kubernetes.config.ConfigException:
        try:
            kubernetes.config.load_kube_config()
            logger.info("Loaded local Kubernetes config")
        except Exception as e:
            logger.warning(f"Could not load Kubernetes config: {e}")


def load_plugins():
    """Discover, initialize and register handlers for every plugin.

    Raises RuntimeError when no plugin is usable.
    """
    plugin_registry = PluginRegistry()

    if plugin_registry.discover_plugins() == 0:
        logger.error("No plugins discovered - operator will have no functionality")
        raise RuntimeError("No plugins available")

    init_results = plugin_registry.initialize_all_plugins()
    if not any(init_results.values()):
        logger.error("No plugins initialized successfully")
        raise RuntimeError("Plugin initialization failed")

    plugin_registry.register_all_handlers()
    return plugin_registry


@kopf.on.startup()
def startup_fn(settings: kopf.OperatorSettings, **kwargs):
    """Configure the operator from the environment."""
    logger.info("Eventing operator is starting up...")

    load_kubernetes_config()

    settings.batching.worker_limit = config.WORKER_LIMIT
    settings.posting.enabled = config.POSTING_ENABLED
    settings.watching.server_timeout = config.SERVER_TIMEOUT

    logger.info(f"Worker limit: {settings.batching.worker_limit}")
    logger.info(f"Posting enabled: {settings.posting.enabled}")
    logger.info("Eventing operator startup complete")


@kopf.on.cleanup()
def cleanup_fn(**kwargs):
    logger.info("Eventing operator is shutting down...")
    PluginRegistry().shutdown_all_plugins()
    logger.info("Eventing operator shutdown complete")


def main():
    # Handlers must be registered before kopf starts watching.
    plugin_registry = load_plugins()
    logger.info(f"Initialized plugins: {plugin_registry.list_plugin_names()}")

    try:
        kopf.run(clusterwide=True)
    except KeyboardInterrupt:
        logger.info("Operator stopped by user")
    except Exception as e:
        logger.error(f"Operator failed: {e}")
        raise


if __name__ == "__main__":
    main()
