"""Channels plugin for the eventing operator."""

import logging

from .base import PluginBase

logger = logging.getLogger(__name__)


class ChannelsPlugin(PluginBase):
    """Plugin reconciling Channel CRDs and their readiness conditions."""

    @property
    def name(self):
        return "channels"

    @property
    def version(self):
        return "1.0.0"

    @property
    def description(self):
        return "Reconciles Channels and aggregates their Provisioned, Sinkable and Subscribable conditions"

    @property
    def models(self):
        from eventing.models.channel import ChannelSpec

        return [ChannelSpec]

    def register_handlers(self):
        """Import the Channel handlers so their kopf decorators register."""
        logger.info("Registering channel handlers...")

        from eventing.handlers import channel_handler  # noqa: F401

        logger.info("Channel handlers registered successfully")
