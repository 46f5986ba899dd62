from typing import Optional

from pydantic import BaseModel

from .environment import PythonEnvironment


class ServerInfo(BaseModel):
    """Connection details of a Jupyter server, filled in while it starts."""

    url: Optional[str] = None
    token: Optional[str] = None
    environment: Optional[PythonEnvironment] = None
    version: Optional[str] = None
