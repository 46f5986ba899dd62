class ServerFactoryError(Exception):
    """Base class for all server factory errors."""


class EnvironmentNotFoundError(ServerFactoryError):
    """The Python executable of an environment does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Environment not found at: {path}")
        self.path = path


class EnvironmentSelectionCancelled(ServerFactoryError):
    """The user aborted the environment selection."""

    def __init__(self, message: str = "cancel"):
        super().__init__(message)


class ProcessLaunchError(ServerFactoryError):
    """The server process could not be spawned or its output could not be read."""


class PrematureExitError(ServerFactoryError):
    """The server process exited before it reported readiness."""

    def __init__(self, returncode: int | None = None):
        super().__init__("Jupyter Server process terminated before the initialization completed")
        self.returncode = returncode


class StartupTimeoutError(ServerFactoryError):
    """The server process did not report readiness within the configured timeout."""

    def __init__(self, timeout: float):
        super().__init__(f"Jupyter Server did not become ready within {timeout} seconds")
        self.timeout = timeout


class InvalidServerIdError(ServerFactoryError):
    def __init__(self, factory_id: int):
        super().__init__(f"Invalid server id: {factory_id}")
        self.factory_id = factory_id


class ServerStopError(ServerFactoryError):
    """One or more servers failed to stop during a bulk shutdown."""

    def __init__(self, failures: list[BaseException]):
        super().__init__(f"{len(failures)} server(s) failed to stop")
        self.failures = failures
