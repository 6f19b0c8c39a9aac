"""Core initialization logic for the registry client."""

import logging
from typing import Optional

from dotenv import load_dotenv

from core.config import RegistrySettings

load_dotenv()

logger = logging.getLogger(__name__)


# --- Initialization State --- #
_INITIALIZED = False
_SETTINGS: Optional[RegistrySettings] = None


def initialize_system() -> RegistrySettings:
    """Validate registry settings from the environment once per process.

    Returns:
        The validated RegistrySettings.

    Raises:
        pydantic.ValidationError: If the environment holds invalid settings.
    """
    global _INITIALIZED, _SETTINGS

    if _INITIALIZED and _SETTINGS is not None:
        logger.debug("Initialization function already called.")
        return _SETTINGS

    logger.info("Running system initialization checks...")
    try:
        _SETTINGS = RegistrySettings.from_env()
        _INITIALIZED = True
        logger.info(
            f"System initialization checks complete. Registry: {_SETTINGS.url}"
        )
        return _SETTINGS
    except Exception:
        logger.exception("System initialization check failed.")
        _INITIALIZED = False
        _SETTINGS = None
        raise
