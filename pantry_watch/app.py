"""Wiring of the engine from configuration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .channels import ConsoleAlertSender, EmailJSSender
from .coordinator import SyncCoordinator
from .dispatcher import Channel, Dispatcher, LocalAlertChannel, RemoteMessageChannel

if TYPE_CHECKING:
    from .config import PantryConfig
    from .db import RecipientDB
    from .sources import ItemSource

logger = logging.getLogger(__name__)


def create_dispatcher(
    config: PantryConfig, recipients: RecipientDB | None = None
) -> Dispatcher:
    """Build the channel list enabled in ``config.notify``.

    Email recipients are the configured addresses plus those registered in
    ``recipients``.
    """
    channels: list[Channel] = []

    if config.notify.local:
        channels.append(LocalAlertChannel(ConsoleAlertSender().send))

    if config.notify.email:
        ejs = config.notify.emailjs
        if not ejs.configured:
            logger.warning("Email alerts enabled but EmailJS is not configured")
        else:
            sender = EmailJSSender(
                ejs.service_id,
                ejs.template_id,
                ejs.user_id,
                access_token=ejs.access_token,
                endpoint=ejs.endpoint,
                timeout=ejs.timeout,
            )

            def _addresses() -> list[str]:
                addresses = list(config.notify.recipients)
                if recipients is not None:
                    addresses.extend(recipients.get_all())
                return list(dict.fromkeys(addresses))

            channels.append(RemoteMessageChannel(sender.send, _addresses))

    return Dispatcher(channels)


def create_coordinator(
    config: PantryConfig,
    source: ItemSource,
    recipients: RecipientDB | None = None,
    **kwargs,
) -> SyncCoordinator:
    return SyncCoordinator(
        source,
        create_dispatcher(config, recipients),
        soon_days=config.engine.soon_days,
        **kwargs,
    )
