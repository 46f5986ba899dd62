import logging
import os


class Logger:
    """Utility class for standardized logging configuration."""

    @staticmethod
    def get(name: str) -> logging.Logger:
        """
        Get a standardized logger for the application.
        Configures logging with basic setup if not already configured.
        The root level can be overridden with JUPYTER_FACTORY_LOG_LEVEL.
        """
        if not logging.getLogger().hasHandlers():
            level = os.environ.get("JUPYTER_FACTORY_LOG_LEVEL", "INFO").upper()
            logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        return logging.getLogger(name)
