from typing import Optional

from src.frameworks_drivers.factory_item import FactoryItem
from src.frameworks_drivers.jupyter_server import ServerOptions
from src.frameworks_drivers.server_factory import JupyterServerFactory
from src.shared.protocols import EventEmitterProtocol, PathPrompt, RegistryProtocol
from src.shared.remote_methods import PATH_SELECTED_EVENT


class StartServer:
    def __init__(self, server_factory: JupyterServerFactory, registry: RegistryProtocol, events: EventEmitterProtocol):
        self.server_factory = server_factory
        self.registry = registry
        self.events = events

    async def execute(self) -> FactoryItem:
        """Start (or reuse) a server for the default environment."""
        return await self.server_factory.create_server(ServerOptions())

    async def execute_with_chosen_path(self, caller: Optional[str] = None, prompt: Optional[PathPrompt] = None) -> FactoryItem:
        """Let the user pick an environment, notify the caller, then start a server for it."""
        environment = await self.registry.get_user_jupyter_path(prompt)
        # Only the requesting caller is told, an anonymous request notifies nobody
        if caller is not None:
            self.events.emit_remote_event(PATH_SELECTED_EVENT, None, caller)
        return await self.server_factory.create_server(ServerOptions(environment=environment))
