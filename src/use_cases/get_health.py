from typing import Any

from src.frameworks_drivers.jupyter_server import ServerState
from src.frameworks_drivers.server_factory import JupyterServerFactory
from src.shared.health_checker import HealthChecker


class GetHealth:
    def __init__(self, server_factory: JupyterServerFactory, probe_timeout: float = 2.0):
        self.server_factory = server_factory
        self.probe_timeout = probe_timeout

    async def execute(self) -> dict[str, Any]:
        status = self.server_factory.get_factory_status()

        for entry in status["servers"]:
            item = self.server_factory.get_server(entry["factory_id"])
            if item is None:
                # Retired while we were probing the previous servers
                entry["state"] = ServerState.STOPPED.value
                entry["responding"] = False
                continue

            server = item.server
            entry["state"] = server.state.value
            # Only servers that reported readiness are worth an HTTP round trip
            if server.state == ServerState.READY:
                entry["responding"] = await HealthChecker.check_server_health(
                    server.info.url, server.process, "/api", self.probe_timeout
                )
            else:
                entry["responding"] = False

        status["status"] = "ok"
        return status
