from typing import Optional

from src.frameworks_drivers.factory_item import FactoryItem
from src.shared.error_utils import ErrorUtils
from src.shared.errors import EnvironmentSelectionCancelled
from src.shared.logger import Logger
from src.shared.protocols import PathPrompt, ServerStartedDTO
from src.use_cases.start_server import StartServer
from src.use_cases.stop_server import StopServer

logger = Logger.get(__name__)


class ServerFactoryController:
    """Translates remote server requests into factory calls and factory results into responses."""

    def __init__(self, start_server_use_case: StartServer, stop_server_use_case: StopServer):
        self.start_server_use_case = start_server_use_case
        self.stop_server_use_case = stop_server_use_case

    async def request_server_start(self) -> ServerStartedDTO:
        try:
            item = await self.start_server_use_case.execute()
        except Exception as e:
            return self._error_to_ipc(e)
        return self._factory_to_ipc(item)

    async def request_server_start_path(self, caller: Optional[str] = None,
                                        prompt: Optional[PathPrompt] = None) -> Optional[ServerStartedDTO]:
        try:
            item = await self.start_server_use_case.execute_with_chosen_path(caller, prompt)
        except EnvironmentSelectionCancelled:
            # The user closed the picker, there is nothing to report
            return None
        except Exception as e:
            return self._error_to_ipc(e)
        return self._factory_to_ipc(item)

    async def request_server_stop(self, factory_id: int) -> None:
        await self.stop_server_use_case.execute(factory_id)

    @staticmethod
    def _factory_to_ipc(item: FactoryItem) -> ServerStartedDTO:
        info = item.server.info
        return {
            "factory_id": item.factory_id,
            "url": info.url,
            "token": info.token,
        }

    @staticmethod
    def _error_to_ipc(error: Exception) -> ServerStartedDTO:
        logger.warning(f"Server start request failed: {error}")
        return {
            "factory_id": -1,
            "url": None,
            "token": None,
            **ErrorUtils.format_error_response(str(error), ErrorUtils.error_type_for(error)),
        }
