from __future__ import annotations

import asyncio
import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from src.entities.environment import PythonEnvironment
from src.entities.server_info import ServerInfo
from src.frameworks_drivers.config import JupyterConfig
from src.shared.errors import (
    EnvironmentNotFoundError,
    PrematureExitError,
    ProcessLaunchError,
    StartupTimeoutError,
)
from src.shared.logger import Logger
from src.shared.output_scanner import ScanResult, StartupOutputScanner
from src.shared.protocols import RegistryProtocol

logger = Logger.get(__name__)

READ_CHUNK_SIZE = 4096


class ServerState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    READY = "ready"
    START_FAILED = "start-failed"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass
class ServerOptions:
    """Options for creating a Jupyter server.

    Attributes:
        environment: The environment to run the server with; None means the default one.
    """

    environment: Optional[PythonEnvironment] = None


class JupyterServer:
    """
    Wraps a single local Jupyter server process.

    start() and stop() may be called any number of times: the first call
    creates a task and every call returns a shielded view of that task, so the
    process is spawned at most once and terminated at most once. Cancelling
    one caller leaves the shared outcome running for the others.
    """

    def __init__(self, options: ServerOptions, registry: RegistryProtocol, config: JupyterConfig,
                 on_runtime_error: Optional[Callable[[str], None]] = None):
        if options.environment is None:
            raise ValueError("JupyterServer requires a resolved environment")
        self._info = ServerInfo(environment=options.environment)
        self._registry = registry
        self._config = config
        self._on_runtime_error = on_runtime_error or logger.error

        self._process: Optional[asyncio.subprocess.Process] = None
        self._scanner: Optional[StartupOutputScanner] = None
        self._ready: Optional[asyncio.Future[ServerInfo]] = None
        self._output_task: Optional[asyncio.Task[None]] = None
        self._spawn_attempted = asyncio.Event()
        self._started = False
        self._start_failed = False

        self._start_task: Optional[asyncio.Future[ServerInfo]] = None
        self._stop_task: Optional[asyncio.Future[None]] = None

    @property
    def info(self) -> ServerInfo:
        return self._info

    @property
    def process(self) -> Optional[asyncio.subprocess.Process]:
        return self._process

    @property
    def state(self) -> ServerState:
        if self._start_failed:
            return ServerState.START_FAILED
        if self._stop_task is not None:
            return ServerState.STOPPED if self._stop_task.done() else ServerState.STOPPING
        if self._started:
            return ServerState.READY
        if self._start_task is not None:
            return ServerState.STARTING
        return ServerState.IDLE

    def start(self) -> asyncio.Future[ServerInfo]:
        """
        Start the local Jupyter server. This method can be called multiple
        times without initiating multiple starts.

        Returns:
            An awaitable resolved with the server info once the server reports
            its URL, or failed if the process cannot start.
        """
        if self._start_task is None:
            self._start_task = asyncio.ensure_future(self._start())
        return asyncio.shield(self._start_task)

    def stop(self) -> asyncio.Future[None]:
        """
        Stop the Jupyter server process.

        Returns:
            An awaitable resolved once termination has been requested. It does
            not wait for the process to exit.
        """
        if self._stop_task is None:
            self._stop_task = asyncio.ensure_future(self._stop())
        return asyncio.shield(self._stop_task)

    async def _start(self) -> ServerInfo:
        python_path = self._info.environment.path
        try:
            if not os.path.exists(python_path):
                self._server_start_failed()
                raise EnvironmentNotFoundError(python_path)

            self._info.url = f"http://localhost:{self._config.port}"
            self._info.token = self._config.token

            cmd, env = self._prepare_cmd_params(python_path)
            try:
                self._process = await asyncio.create_subprocess_exec(
                    *cmd,
                    cwd=self._config.effective_home_dir,
                    env=env,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.DEVNULL,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as e:
                self._server_start_failed()
                raise ProcessLaunchError(f"Failed to launch Jupyter Server with {python_path}: {e}") from e
        finally:
            self._spawn_attempted.set()

        logger.info(f"Launched Jupyter Server (pid {self._process.pid}) with {python_path}")
        self._ready = asyncio.get_running_loop().create_future()
        self._scanner = StartupOutputScanner()
        self._output_task = asyncio.ensure_future(self._watch_output(self._process))

        timeout = self._config.start_timeout
        try:
            await asyncio.wait_for(asyncio.shield(self._ready), timeout)
        except asyncio.TimeoutError:
            logger.error(f"Jupyter Server (pid {self._process.pid}) did not report readiness within {timeout}s")
            self._ready.cancel()
            self._server_start_failed()
            await self._terminate_process(self._process)
            raise StartupTimeoutError(timeout) from None

        logger.info(f"Jupyter Server ready at {self._info.url} (version {self._info.version})")
        return self._info

    async def _stop(self) -> None:
        # A stop issued while starting must not miss a process that is being spawned
        if self._start_task is not None and not self._start_task.done():
            await self._spawn_attempted.wait()

        if self._process is None:
            return

        logger.info(f"Stopping Jupyter Server (pid {self._process.pid})")
        await self._terminate_process(self._process)

    async def _watch_output(self, process: asyncio.subprocess.Process) -> None:
        try:
            while True:
                chunk = await process.stderr.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                if self._scanner is None:
                    logger.debug(f"Jupyter Server output: {chunk.decode(errors='replace').rstrip()}")
                    continue
                self._apply_scan(self._scanner.feed(chunk))

            if self._scanner is not None:
                self._apply_scan(self._scanner.flush())

            returncode = await process.wait()
        except Exception as e:
            self._process_errored(e)
            return

        self._process_exited(returncode)

    def _apply_scan(self, result: ScanResult) -> None:
        if result.version is not None:
            self._info.version = result.version
        if result.ready:
            self._server_ready()

    def _server_ready(self) -> None:
        self._started = True
        self._cleanup_listeners()
        if self._ready is not None and not self._ready.done():
            self._ready.set_result(self._info)

    def _process_exited(self, returncode: Optional[int]) -> None:
        if self._started:
            if self._stop_task is not None:
                logger.info(f"Jupyter Server exited with code {returncode}")
            else:
                self._on_runtime_error(f"Jupyter Server process terminated (exit code {returncode})")
            return

        self._server_start_failed()
        if self._ready is not None and not self._ready.done():
            self._ready.set_exception(PrematureExitError(returncode))

    def _process_errored(self, error: Exception) -> None:
        if self._started:
            self._on_runtime_error(f"Jupyter Server process errored: {error}")
            return

        self._server_start_failed()
        if self._ready is not None and not self._ready.done():
            launch_error = ProcessLaunchError(f"Jupyter Server process errored: {error}")
            launch_error.__cause__ = error
            self._ready.set_exception(launch_error)

    def _server_start_failed(self) -> None:
        self._start_failed = True
        self._cleanup_listeners()
        # The server never started, so there is nothing left to stop
        if self._stop_task is None:
            self._stop_task = asyncio.get_running_loop().create_future()
            self._stop_task.set_result(None)

    def _cleanup_listeners(self) -> None:
        if self._scanner is None:
            return
        self._scanner = None
        logger.debug("Detached Jupyter Server startup output listeners")

    def _prepare_cmd_params(self, python_path: str) -> tuple[list[str], dict[str, str]]:
        cmd = [
            python_path,
            "-m", "jupyterlab",
            "--no-browser",
            # do not use any config file
            '--JupyterApp.config_file_name=""',
            f"--ServerApp.port={self._config.port}",
            # use our token rather than any pre-configured password
            '--ServerApp.password=""',
            '--ServerApp.allow_origin="*"',
            # let the user decide whether to display hidden files
            "--ContentsManager.allow_hidden=True",
        ]

        env = os.environ.copy()
        env["PATH"] = self._registry.get_additional_path_includes_for_python_path(python_path)
        env["JUPYTER_TOKEN"] = self._config.token
        env["JUPYTER_CONFIG_DIR"] = self._config.effective_config_dir
        return cmd, env

    @staticmethod
    async def _terminate_process(process: asyncio.subprocess.Process) -> None:
        """Request termination of a server process and its children."""
        if sys.platform == "win32":
            # terminate() would leave the kernels spawned by the server running
            killer = await asyncio.create_subprocess_exec(
                "taskkill", "/PID", str(process.pid), "/T", "/F",
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            await killer.wait()
        else:
            try:
                process.terminate()
            except ProcessLookupError:
                logger.debug(f"Jupyter Server (pid {process.pid}) already exited")
