import asyncio
from typing import Optional

import requests

from src.shared.logger import Logger

logger = Logger.get(__name__)


class HealthChecker:
    """
    Utility class for performing health checks on Jupyter server processes.
    """

    @staticmethod
    async def check_http_endpoint(base_url: str, endpoint: str = "/api", timeout: float = 5.0) -> bool:
        """
        Check if an HTTP endpoint is responding with a successful status code.

        Args:
            base_url: The server base URL (e.g. "http://localhost:8888")
            endpoint: The path to probe (default: "/api", which needs no token)
            timeout: Request timeout in seconds

        Returns:
            True if the endpoint responds with 200 status, False otherwise
        """
        url = f"{base_url.rstrip('/')}{endpoint}"
        try:
            response = await asyncio.to_thread(
                requests.get, url, timeout=timeout,
            )
            if response.status_code == 200:
                logger.debug(f"Health check passed for {url}")
                return True
            else:
                logger.warning(f"Health check failed for {url}: status {response.status_code}")
                return False
        except Exception as e:
            logger.debug(f"Health check failed for {url}: {e}")
            return False

    @staticmethod
    def check_process_running(process: Optional[asyncio.subprocess.Process]) -> bool:
        """
        Check if a subprocess is still running.

        Args:
            process: The subprocess to check

        Returns:
            True if the process is running, False otherwise
        """
        if process is None:
            return False

        return_code = process.returncode
        if return_code is not None:
            logger.warning(f"Process has terminated with return code {return_code}")
            return False

        return True

    @staticmethod
    async def check_server_health(base_url: Optional[str], process: Optional[asyncio.subprocess.Process],
                                  endpoint: str = "/api", timeout: float = 5.0) -> bool:
        """
        Perform a comprehensive health check on a server instance.
        Checks both process status and HTTP endpoint availability.

        Args:
            base_url: The server base URL, None if not assigned yet
            process: The subprocess to check
            endpoint: The path to probe
            timeout: Request timeout in seconds

        Returns:
            True if both process is running and HTTP endpoint responds, False otherwise
        """
        if not HealthChecker.check_process_running(process):
            return False

        if base_url is None:
            return False

        return await HealthChecker.check_http_endpoint(base_url, endpoint, timeout)
