"""
Test configuration and fixtures for the Jupyter server factory tests.
"""
import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.entities.environment import PythonEnvironment
from src.frameworks_drivers.config import JupyterConfig
from tests.shared.fake_process import FakeProcess


def pytest_configure(config):
    """Configure pytest warnings."""
    config.addinivalue_line("filterwarnings", "ignore::PendingDeprecationWarning")


@pytest.fixture
def spawned():
    """Patch process creation; every spawned process is recorded as a FakeProcess."""
    processes = []
    killers = []

    async def fake_exec(*cmd, **kwargs):
        process = FakeProcess(cmd, kwargs, pid=1000 + len(processes) + len(killers))
        if cmd[0] == "taskkill":
            process.exit(0)
            killers.append(process)
        else:
            processes.append(process)
        return process

    with patch("asyncio.create_subprocess_exec", new=AsyncMock(side_effect=fake_exec)) as mock_exec:
        yield SimpleNamespace(processes=processes, killers=killers, exec=mock_exec)


@pytest.fixture
def settle():
    """Let pending tasks run for a few event loop iterations."""

    async def _settle(iterations: int = 10):
        for _ in range(iterations):
            await asyncio.sleep(0)

    return _settle


def _make_python(root, name):
    executable = root / name / "bin" / "python"
    executable.parent.mkdir(parents=True)
    executable.write_text("#!/bin/sh\n")
    return executable


@pytest.fixture
def python_executable(tmp_path):
    return _make_python(tmp_path, "env-a")


@pytest.fixture
def other_python_executable(tmp_path):
    return _make_python(tmp_path, "env-b")


@pytest.fixture
def environment(python_executable):
    return PythonEnvironment(path=str(python_executable), name="env-a")


@pytest.fixture
def other_environment(other_python_executable):
    return PythonEnvironment(path=str(other_python_executable), name="env-b")


@pytest.fixture
def jupyter_config(tmp_path, monkeypatch):
    monkeypatch.delenv("JLAB_DESKTOP_HOME", raising=False)
    monkeypatch.delenv("JLAB_DESKTOP_CONFIG_DIR", raising=False)
    return JupyterConfig(port=8888, token="secret-token", home_dir=str(tmp_path), config_dir=str(tmp_path / "jupyter-config"))


@pytest.fixture
def registry(environment):
    mock_registry = MagicMock()
    mock_registry.get_default_environment = AsyncMock(return_value=environment)
    mock_registry.get_user_jupyter_path = AsyncMock(return_value=environment)
    mock_registry.get_additional_path_includes_for_python_path.return_value = "/env-a:/env-a/bin:/usr/bin"
    return mock_registry


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        "jupyter": {"port": 9999, "token": "abc123", "home_dir": "/home/user", "start_timeout": 60},
        "environments": {"default_python_path": "/opt/conda/bin/python"},
        "server": {"host": "127.0.0.1", "port": 8100},
        "factory": {"prewarm_on_startup": True},
    }


@pytest.fixture
def config_file(tmp_path, sample_config_data):
    """Create a temporary config file."""
    config_path = tmp_path / "config.json"
    with open(config_path, "w") as f:
        json.dump(sample_config_data, f, indent=2)
    return str(config_path)
