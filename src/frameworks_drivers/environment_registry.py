import os
import sys
from pathlib import Path
from typing import Optional

from src.entities.environment import EnvironmentType, PythonEnvironment
from src.frameworks_drivers.config import EnvironmentsConfig
from src.shared.errors import EnvironmentNotFoundError, EnvironmentSelectionCancelled
from src.shared.logger import Logger
from src.shared.protocols import PathPrompt

logger = Logger.get(__name__)


class EnvironmentRegistry:
    """
    Supplies the Python environments Jupyter servers are launched with.

    The default environment comes from the configuration, falling back to the
    interpreter running this process. A user-chosen environment is obtained
    through a prompt callable standing in for the environment picker.
    """

    def __init__(self, config: EnvironmentsConfig, prompt: Optional[PathPrompt] = None):
        self.config = config
        self.prompt = prompt

    async def get_default_environment(self) -> PythonEnvironment:
        python_path = self.config.default_python_path or sys.executable
        env_type = EnvironmentType.USER_SET if self.config.default_python_path else EnvironmentType.PATH
        return self._validated_environment(python_path, env_type)

    async def get_user_jupyter_path(self, prompt: Optional[PathPrompt] = None) -> PythonEnvironment:
        """
        Ask the user for the Python environment to use.

        Raises:
            EnvironmentSelectionCancelled: No prompt is available or the user dismissed it.
            EnvironmentNotFoundError: The chosen executable does not exist.
        """
        prompt = prompt or self.prompt
        if prompt is None:
            raise EnvironmentSelectionCancelled()

        python_path = await prompt()
        if not python_path:
            logger.info("Environment selection was cancelled")
            raise EnvironmentSelectionCancelled()

        return self._validated_environment(python_path, EnvironmentType.USER_SET)

    def get_additional_path_includes_for_python_path(self, python_path: str) -> str:
        """Build the PATH for a server so that tools installed next to the interpreter are found."""
        env_dir = os.path.dirname(python_path)
        current_path = os.environ.get("PATH", "")

        if sys.platform == "win32":
            includes = [
                env_dir,
                os.path.join(env_dir, "Library", "mingw-w64", "bin"),
                os.path.join(env_dir, "Library", "usr", "bin"),
                os.path.join(env_dir, "Library", "bin"),
                os.path.join(env_dir, "Scripts"),
                os.path.join(env_dir, "bin"),
            ]
        else:
            env_root = os.path.normpath(os.path.join(env_dir, os.pardir))
            includes = [env_root, os.path.join(env_root, "bin")]

        return os.pathsep.join(includes + [current_path])

    @staticmethod
    def _validated_environment(python_path: str, env_type: EnvironmentType) -> PythonEnvironment:
        if not os.path.exists(python_path):
            raise EnvironmentNotFoundError(python_path)
        path = Path(python_path)
        # <env>/bin/python -> "env"
        name = path.parent.parent.name if path.parent.name in ("bin", "Scripts") else path.parent.name
        return PythonEnvironment(path=str(path), name=name, type=env_type)
