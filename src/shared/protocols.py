from typing import Any, Awaitable, Callable, Optional, Protocol, TypedDict, TYPE_CHECKING

if TYPE_CHECKING:
    from src.entities.environment import PythonEnvironment


# Returns the chosen interpreter path, or None when the user dismissed the picker
PathPrompt = Callable[[], Awaitable[Optional[str]]]


class ErrorDTO(TypedDict):
    message: str
    type: str


class ServerStartedDTO(TypedDict, total=False):
    factory_id: int
    url: Optional[str]
    token: Optional[str]
    error: ErrorDTO


class FactoryItemDTO(TypedDict):
    factory_id: int
    used: bool
    closing: bool
    url: Optional[str]
    version: Optional[str]
    pid: Optional[int]
    environment: Optional[str]


class RegistryProtocol(Protocol):
    async def get_default_environment(self) -> 'PythonEnvironment': ...

    async def get_user_jupyter_path(self, prompt: Optional[PathPrompt] = None) -> 'PythonEnvironment': ...

    def get_additional_path_includes_for_python_path(self, python_path: str) -> str: ...


class ClosingServiceProtocol(Protocol):
    async def finished(self) -> bool: ...


class ApplicationProtocol(Protocol):
    def register_closing_service(self, service: ClosingServiceProtocol) -> None: ...


class EventEmitterProtocol(Protocol):
    def emit_remote_event(self, event_id: str, payload: Any, caller: Optional[str] = None) -> None: ...
