from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from src.frameworks_drivers.jupyter_server import JupyterServer


@dataclass
class FactoryItem:
    """A Jupyter server tracked by the server factory.

    Attributes:
        factory_id: The factory ID. Used to keep track of the server.
        server: The actual Jupyter server object.
        used: Whether the server has been handed out to a caller.
        closing: The stop outcome, created when the server starts closing.
    """

    factory_id: int
    server: JupyterServer
    used: bool = False
    closing: Optional[asyncio.Future[None]] = None
