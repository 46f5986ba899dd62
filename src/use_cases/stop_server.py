from src.frameworks_drivers.server_factory import JupyterServerFactory


class StopServer:
    def __init__(self, server_factory: JupyterServerFactory):
        self.server_factory = server_factory

    async def execute(self, factory_id: int) -> None:
        await self.server_factory.stop_server(factory_id)
