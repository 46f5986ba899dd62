from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from src.frameworks_drivers.event_channel import EventChannel
from src.interface_adapters.health_controller import HealthController
from src.interface_adapters.server_factory_controller import ServerFactoryController
from src.shared.error_utils import ErrorUtils
from src.shared.errors import InvalidServerIdError
from src.shared.remote_methods import REQUEST_SERVER_START, REQUEST_SERVER_START_PATH, REQUEST_SERVER_STOP


class StartPathRequest(BaseModel):
    """Body of a start request for a user-chosen environment.

    Attributes:
        caller: Identifier of the caller that receives the path-selected event.
        python_path: The chosen interpreter; empty means the user cancelled.
    """

    caller: Optional[str] = Field(None, description="Identifier of the caller that receives the path-selected event")
    python_path: Optional[str] = Field(None, description="The chosen interpreter; empty means the user cancelled")


class API:
    def __init__(self, server_factory_controller: ServerFactoryController, health_controller: HealthController,
                 events: EventChannel, lifespan=None):
        self.server_factory_controller = server_factory_controller
        self.health_controller = health_controller
        self.events = events
        self.app = FastAPI(title="Jupyter Server Factory", version="0.1.0", lifespan=lifespan)

        self._register_routes()

    def _register_routes(self):
        controller = self.server_factory_controller

        async def start_handler() -> dict:
            return await controller.request_server_start()

        async def start_path_handler(request: StartPathRequest) -> Optional[dict]:
            async def prompt() -> Optional[str]:
                return request.python_path

            return await controller.request_server_start_path(request.caller, prompt)

        async def stop_handler(factory_id: int) -> None:
            try:
                await controller.request_server_stop(factory_id)
            except InvalidServerIdError as e:
                raise HTTPException(status_code=404, detail=str(e))
            except Exception as e:
                raise HTTPException(
                    status_code=500,
                    detail=ErrorUtils.format_error_response(f"Failed to stop server: {str(e)}", ErrorUtils.error_type_for(e)),
                )

        def events_handler(caller: str) -> dict:
            return {"events": self.events.drain(caller)}

        async def health_handler():
            return await self.health_controller.health()

        self.app.post("/servers", operation_id=REQUEST_SERVER_START)(start_handler)
        self.app.post("/servers/path", operation_id=REQUEST_SERVER_START_PATH)(start_path_handler)
        self.app.delete("/servers/{factory_id}", status_code=204, operation_id=REQUEST_SERVER_STOP)(stop_handler)
        self.app.get("/events/{caller}")(events_handler)
        self.app.get("/health")(health_handler)
