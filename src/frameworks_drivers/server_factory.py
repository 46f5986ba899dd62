from __future__ import annotations

import asyncio
from functools import partial
from typing import Any, Callable, Optional

from src.entities.environment import PythonEnvironment
from src.frameworks_drivers.config import JupyterConfig
from src.frameworks_drivers.factory_item import FactoryItem
from src.frameworks_drivers.jupyter_server import JupyterServer, ServerOptions
from src.shared.errors import InvalidServerIdError, ServerStopError
from src.shared.logger import Logger
from src.shared.protocols import ApplicationProtocol, FactoryItemDTO, RegistryProtocol

logger = Logger.get(__name__)


class JupyterServerFactory:
    """
    Creates, hands out and stops local Jupyter servers.

    Free servers can be started ahead of demand with create_free_server();
    create_server() prefers such an idle server over launching a new one.
    Items leave the factory exactly once: when their start fails, when their
    stop completes, or when kill_all_servers() takes them all.
    """

    def __init__(self, app: Optional[ApplicationProtocol], registry: RegistryProtocol, config: JupyterConfig,
                 on_runtime_error: Optional[Callable[[int, str], None]] = None):
        self._registry = registry
        self._config = config
        self._on_runtime_error = on_runtime_error
        self._servers: list[FactoryItem] = []
        self._next_id = 1
        if app is not None:
            app.register_closing_service(self)

    @property
    def servers(self) -> tuple[FactoryItem, ...]:
        return tuple(self._servers)

    def get_server(self, factory_id: int) -> Optional[FactoryItem]:
        for item in self._servers:
            if item.factory_id == factory_id:
                return item
        return None

    async def resolve_environment(self, environment: Optional[PythonEnvironment]) -> PythonEnvironment:
        """Use the requested environment, or ask the registry for the default one."""
        if environment is not None:
            return environment
        return await self._registry.get_default_environment()

    async def create_free_server(self, opts: ServerOptions) -> Optional[FactoryItem]:
        """
        Create and start a 'free' server. The server created will be returned
        in the next call to create_server() for the same environment.

        This is a way to pre-launch Jupyter servers to improve load times, so
        the item is returned as soon as its start has been initiated and start
        failures are only logged.

        Args:
            opts: The Jupyter server options.

        Returns:
            The factory item, or None if no environment could be resolved.
        """
        try:
            environment = await self.resolve_environment(opts.environment)
        except Exception as e:
            logger.warning(f"Could not resolve an environment for a free server: {e}")
            return None

        item = self._create_server(ServerOptions(environment=environment))
        item.server.start().add_done_callback(partial(self._free_server_started, item.factory_id))
        logger.info(f"Pre-launching free Jupyter server {item.factory_id} with {environment.path}")
        return item

    async def create_server(self, opts: ServerOptions, force_new_server: bool = False) -> FactoryItem:
        """
        Create a Jupyter server.

        If a free server is available, it is preferred over server creation.

        Args:
            opts: The Jupyter server options.
            force_new_server: Force the creation of a new server over a free server.

        Returns:
            The started factory item.
        """
        environment = await self.resolve_environment(opts.environment)
        options = ServerOptions(environment=environment)

        if force_new_server:
            item = self._create_server(options)
        else:
            item = self._find_unused_server(options, opts.environment is None) or self._create_server(options)
        item.used = True

        try:
            await item.server.start()
        except asyncio.CancelledError:
            logger.warning(f"Start of Jupyter server {item.factory_id} was cancelled, stopping it")
            if self.get_server(item.factory_id) is item:
                self.stop_server(item.factory_id)
            raise
        except Exception as e:
            logger.error(f"Jupyter server {item.factory_id} failed to start: {e}")
            self._retire_item(item.factory_id)
            raise

        return item

    def stop_server(self, factory_id: int) -> asyncio.Future[None]:
        """
        Stop a Jupyter server.

        Args:
            factory_id: The factory item id.

        Returns:
            An awaitable resolved once the server was asked to terminate. Every
            call for the same item shares one stop, and cancelling the returned
            awaitable does not cancel that stop.
        """
        item = self.get_server(factory_id)
        if item is None:
            raise InvalidServerIdError(factory_id)

        if item.closing is None:
            item.closing = asyncio.ensure_future(self._close_item(item))
        return asyncio.shield(item.closing)

    def kill_all_servers(self) -> asyncio.Future[list[Any]]:
        """
        Kill all currently running servers.

        The factory is emptied before this returns; the returned awaitable is
        fulfilled once every server was asked to stop.
        """
        stops = [item.server.stop() for item in self._servers]
        self._servers = []
        return asyncio.ensure_future(self._wait_for_stops(stops))

    async def finished(self) -> bool:
        """
        Close all servers before the application quits.

        Returns:
            True if every server stopped cleanly, False otherwise.
        """
        try:
            await self.kill_all_servers()
        except Exception as e:
            logger.error(f"Failed to shut down Jupyter servers: {e}")
            return False
        return True

    def get_factory_status(self) -> dict[str, Any]:
        """
        Get the current status of the server factory.

        Returns:
            Dict with factory information.
        """
        items: list[FactoryItemDTO] = [
            {
                "factory_id": item.factory_id,
                "used": item.used,
                "closing": item.closing is not None,
                "url": item.server.info.url,
                "version": item.server.info.version,
                "pid": item.server.process.pid if item.server.process else None,
                "environment": item.server.info.environment.path if item.server.info.environment else None,
            }
            for item in self._servers
        ]
        return {
            "total_servers": len(items),
            "free_servers": sum(1 for item in self._servers if not item.used and item.closing is None),
            "servers": items,
        }

    def _create_server(self, opts: ServerOptions) -> FactoryItem:
        factory_id = self._next_id
        self._next_id += 1
        server = JupyterServer(opts, self._registry, self._config,
                               on_runtime_error=partial(self._report_runtime_error, factory_id))
        item = FactoryItem(factory_id=factory_id, server=server)
        self._servers.append(item)
        return item

    def _find_unused_server(self, opts: ServerOptions, used_default: bool) -> Optional[FactoryItem]:
        for item in self._servers:
            if not item.used and item.closing is None and item.server.info.environment.path == opts.environment.path:
                return item

        # A default request may claim a free server of any environment
        if used_default:
            for item in self._servers:
                if not item.used and item.closing is None:
                    return item

        return None

    async def _close_item(self, item: FactoryItem) -> None:
        try:
            await item.server.stop()
        except Exception as e:
            logger.error(f"Failed to stop Jupyter server {item.factory_id}: {e}")
            raise
        finally:
            self._retire_item(item.factory_id)
        logger.info(f"Stopped Jupyter server {item.factory_id}")

    def _free_server_started(self, factory_id: int, start: asyncio.Future) -> None:
        if start.cancelled():
            error: Optional[BaseException] = asyncio.CancelledError()
        else:
            error = start.exception()
        if error is not None:
            # The server failed to start, remove it from the factory
            logger.warning(f"Free Jupyter server {factory_id} failed to start: {error}")
            self._retire_item(factory_id)

    def _retire_item(self, factory_id: int) -> None:
        for idx, item in enumerate(self._servers):
            if item.factory_id == factory_id:
                del self._servers[idx]
                return

    def _report_runtime_error(self, factory_id: int, message: str) -> None:
        logger.error(f"Jupyter server {factory_id}: {message}")
        if self._on_runtime_error is not None:
            self._on_runtime_error(factory_id, message)

    @staticmethod
    async def _wait_for_stops(stops: list[asyncio.Future[None]]) -> list[Any]:
        results = await asyncio.gather(*stops, return_exceptions=True)
        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            for failure in failures:
                logger.error(f"Jupyter server failed to stop: {failure}")
            raise ServerStopError(failures)
        return results
