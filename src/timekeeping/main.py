from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv

from .config import get_settings_module
from .container import Container, build_container
from .core.session import SessionContext

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = logging.INFO) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_clock_app(*, start_sync: bool = False, settings_module: Optional[str] = None) -> Container:
    load_dotenv(override=False)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(settings=settings)
    if getattr(settings, "DEBUG", False):
        logger.debug("settings=%s api=%s", settings_module, container.client.base_url)

    if start_sync:
        container.sync_service.start_auto_sync(container.sync_interval)
    return container


def use_session(container: Container, session: SessionContext) -> None:
    """Send the signed-in user's token with every API request."""
    if session.token:
        container.client.set_auth_token(session.token)
    else:
        container.client.remove_auth_token()
