import os
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn

from src.frameworks_drivers.application import Application
from src.frameworks_drivers.config import Config
from src.frameworks_drivers.environment_registry import EnvironmentRegistry
from src.frameworks_drivers.event_channel import EventChannel
from src.frameworks_drivers.jupyter_server import ServerOptions
from src.frameworks_drivers.server_factory import JupyterServerFactory
from src.interface_adapters.api import API
from src.interface_adapters.health_controller import HealthController
from src.interface_adapters.server_factory_controller import ServerFactoryController
from src.shared.logger import Logger
from src.shared.remote_methods import SERVER_ERROR_EVENT
from src.use_cases.get_health import GetHealth
from src.use_cases.start_server import StartServer
from src.use_cases.stop_server import StopServer

logger = Logger.get(__name__)


def build_api(config: Config) -> API:
    application = Application()
    registry = EnvironmentRegistry(config.environments)
    events = EventChannel()

    def report_server_error(factory_id: int, message: str) -> None:
        events.emit_remote_event(SERVER_ERROR_EVENT, {"factory_id": factory_id, "message": message})

    server_factory = JupyterServerFactory(application, registry, config.jupyter, on_runtime_error=report_server_error)

    @asynccontextmanager
    async def lifespan(app):
        if config.factory.prewarm_on_startup:
            await server_factory.create_free_server(ServerOptions())
        yield
        await application.quit()

    # Instantiate use cases
    start_server = StartServer(server_factory, registry, events)
    stop_server = StopServer(server_factory)
    get_health = GetHealth(server_factory)

    # Instantiate controllers
    server_factory_controller = ServerFactoryController(start_server, stop_server)
    health_controller = HealthController(get_health)

    return API(server_factory_controller, health_controller, events, lifespan=lifespan)


if __name__ == "__main__":
    try:
        config_path = os.environ.get("JUPYTER_FACTORY_CONFIG", "config.json")
        config = Config.load(config_path) if Path(config_path).exists() else Config()

        # Override the Jupyter port if set in environment
        if "JUPYTER_FACTORY_PORT" in os.environ:
            config.jupyter.port = int(os.environ["JUPYTER_FACTORY_PORT"])

        api = build_api(config)

        logger.info("Starting Jupyter Server Factory...")
        uvicorn.run(api.app, host=config.server.host, port=config.server.port)
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        raise
