from src.shared.logger import Logger
from src.shared.protocols import ClosingServiceProtocol

logger = Logger.get(__name__)


class Application:
    """Tracks the services that have to be finished before the process quits."""

    def __init__(self):
        self._closing_services: list[ClosingServiceProtocol] = []
        self._quit_result: bool | None = None
        self._quitting = False

    def register_closing_service(self, service: ClosingServiceProtocol) -> None:
        self._closing_services.append(service)

    async def quit(self) -> bool:
        """
        Finish every registered closing service once.

        Returns:
            True if all services finished cleanly.
        """
        if self._quit_result is not None:
            return self._quit_result
        if self._quitting:
            logger.warning("Application shutdown already in progress")
            return False
        self._quitting = True

        logger.info(f"Shutting down {len(self._closing_services)} closing service(s)")
        result = True
        for service in self._closing_services:
            try:
                finished = await service.finished()
            except Exception as e:
                logger.error(f"Closing service {type(service).__name__} failed: {e}")
                finished = False
            result = result and finished is not False

        self._quit_result = result
        return result
