import json
import os
import secrets
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class JupyterConfig(BaseModel):
    """Configuration shared by every launched Jupyter server.

    Attributes:
        port: Fixed port passed to the server (--ServerApp.port).
        token: Security token exported as JUPYTER_TOKEN.
        home_dir: Working directory of the server process.
        config_dir: Directory exported as JUPYTER_CONFIG_DIR.
        start_timeout: Seconds to wait for readiness (None = wait indefinitely).
    """

    port: int = Field(8888, ge=1, le=65535, description="Fixed port passed to the server")
    token: str = Field(default_factory=lambda: secrets.token_hex(24), description="Security token exported as JUPYTER_TOKEN")
    home_dir: Optional[str] = Field(None, description="Working directory of the server process")
    config_dir: Optional[str] = Field(None, description="Directory exported as JUPYTER_CONFIG_DIR")
    start_timeout: Optional[float] = Field(None, gt=0, description="Seconds to wait for readiness (None = wait indefinitely)")

    @property
    def effective_home_dir(self) -> str:
        """Get the working directory, preferring the JLAB_DESKTOP_HOME override."""
        return os.environ.get("JLAB_DESKTOP_HOME") or self.home_dir or str(Path.home())

    @property
    def effective_config_dir(self) -> str:
        """Get the Jupyter config directory, preferring the JLAB_DESKTOP_CONFIG_DIR override."""
        return (
            os.environ.get("JLAB_DESKTOP_CONFIG_DIR")
            or self.config_dir
            or str(Path.home() / ".jupyter-server-factory")
        )


class EnvironmentsConfig(BaseModel):
    """Configuration for environment discovery.

    Attributes:
        default_python_path: Interpreter used when a request names no environment.
    """

    default_python_path: Optional[str] = Field(None, description="Interpreter used when a request names no environment (defaults to the running one)")


class ServerConfig(BaseModel):
    """Configuration for the request bridge HTTP server.

    Attributes:
        host: Host for the bridge server.
        port: Port for the bridge server.
    """

    host: str = Field("127.0.0.1", description="Host for the bridge server")
    port: int = Field(8000, description="Port for the bridge server")


class FactoryConfig(BaseModel):
    """Configuration for the server factory.

    Attributes:
        prewarm_on_startup: Whether to start a free server when the bridge starts.
    """

    prewarm_on_startup: bool = Field(False, description="Whether to start a free server when the bridge starts")


class Config(BaseModel):
    """Main configuration class.

    Attributes:
        jupyter: Settings applied to every launched Jupyter server.
        environments: Environment discovery settings.
        server: Request bridge settings.
        factory: Server factory settings.
    """

    jupyter: JupyterConfig = Field(default_factory=JupyterConfig)
    environments: EnvironmentsConfig = Field(default_factory=EnvironmentsConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    factory: FactoryConfig = Field(default_factory=FactoryConfig)

    @classmethod
    def load(cls, config_path: str = "config.json") -> "Config":
        """Load and validate configuration from JSON file."""
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path) as f:
            data = json.load(f)

        return cls(**data)
