from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EnvironmentType(str, Enum):
    PATH = "path"
    CONDA_ROOT = "conda-root"
    CONDA_ENV = "conda-env"
    VIRTUAL_ENV = "venv"
    USER_SET = "user-set"


class PythonEnvironment(BaseModel):
    """A Python interpreter able to run JupyterLab.

    Attributes:
        path: Absolute path of the Python executable.
        name: Display name of the environment.
        type: How the environment was discovered.
        versions: Versions of the relevant packages installed in it.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Absolute path of the Python executable")
    name: str = Field("", description="Display name of the environment")
    type: EnvironmentType = Field(EnvironmentType.PATH, description="How the environment was discovered")
    versions: dict[str, str] = Field(default_factory=dict, description="Versions of the relevant packages")
