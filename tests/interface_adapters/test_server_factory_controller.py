from unittest.mock import AsyncMock, MagicMock

import pytest

from src.interface_adapters.server_factory_controller import ServerFactoryController
from src.shared.errors import EnvironmentNotFoundError, EnvironmentSelectionCancelled, InvalidServerIdError


@pytest.fixture
def started_item():
    item = MagicMock()
    item.factory_id = 4
    item.server.info.url = "http://localhost:8888"
    item.server.info.token = "secret-token"
    return item


@pytest.fixture
def mock_start_use_case(started_item):
    use_case = MagicMock()
    use_case.execute = AsyncMock(return_value=started_item)
    use_case.execute_with_chosen_path = AsyncMock(return_value=started_item)
    return use_case


@pytest.fixture
def mock_stop_use_case():
    use_case = MagicMock()
    use_case.execute = AsyncMock()
    return use_case


@pytest.fixture
def controller(mock_start_use_case, mock_stop_use_case):
    return ServerFactoryController(mock_start_use_case, mock_stop_use_case)


class TestServerFactoryController:
    @pytest.mark.asyncio
    async def test_request_server_start(self, controller):
        result = await controller.request_server_start()

        assert result == {"factory_id": 4, "url": "http://localhost:8888", "token": "secret-token"}

    @pytest.mark.asyncio
    async def test_request_server_start_failure_is_reported(self, controller, mock_start_use_case):
        mock_start_use_case.execute.side_effect = EnvironmentNotFoundError("/missing/python")

        result = await controller.request_server_start()

        assert result["factory_id"] == -1
        assert result["url"] is None
        assert result["token"] is None
        assert result["error"] == {
            "message": "Environment not found at: /missing/python",
            "type": "environment_not_found",
        }

    @pytest.mark.asyncio
    async def test_request_server_start_path(self, controller, mock_start_use_case):
        prompt = AsyncMock()

        result = await controller.request_server_start_path("window-1", prompt)

        mock_start_use_case.execute_with_chosen_path.assert_awaited_once_with("window-1", prompt)
        assert result["factory_id"] == 4

    @pytest.mark.asyncio
    async def test_request_server_start_path_cancelled(self, controller, mock_start_use_case):
        mock_start_use_case.execute_with_chosen_path.side_effect = EnvironmentSelectionCancelled()

        assert await controller.request_server_start_path("window-1") is None

    @pytest.mark.asyncio
    async def test_request_server_stop(self, controller, mock_stop_use_case):
        await controller.request_server_stop(4)

        mock_stop_use_case.execute.assert_awaited_once_with(4)

    @pytest.mark.asyncio
    async def test_request_server_stop_propagates(self, controller, mock_stop_use_case):
        mock_stop_use_case.execute.side_effect = InvalidServerIdError(9)

        with pytest.raises(InvalidServerIdError):
            await controller.request_server_stop(9)
