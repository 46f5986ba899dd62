from src.shared.errors import (
    EnvironmentNotFoundError,
    EnvironmentSelectionCancelled,
    InvalidServerIdError,
    PrematureExitError,
    ProcessLaunchError,
    StartupTimeoutError,
)


class ErrorUtils:
    _ERROR_TYPES = {
        EnvironmentNotFoundError: "environment_not_found",
        EnvironmentSelectionCancelled: "cancelled",
        InvalidServerIdError: "invalid_server_id",
        PrematureExitError: "premature_exit",
        ProcessLaunchError: "process_launch_error",
        StartupTimeoutError: "startup_timeout",
    }

    @staticmethod
    def format_error_response(message: str, error_type: str) -> dict:
        """
        Formats a consistent error response dictionary.

        Args:
            message: The error message to include in the response.
            error_type: The type of error (e.g., "internal_error", "premature_exit").

        Returns:
            A dictionary with the error details.
        """
        return {
            "error": {
                "message": message,
                "type": error_type
            }
        }

    @staticmethod
    def error_type_for(error: BaseException) -> str:
        """Map an exception to the error type reported to remote callers."""
        for error_class, error_type in ErrorUtils._ERROR_TYPES.items():
            if isinstance(error, error_class):
                return error_type
        return "internal_error"
