import pytest

from cr_controller.adapters.container_engine import ContainerEngine
from cr_controller.models.config import ProjectConfig
from cr_controller.models.naming import RunNames
from tests.helpers.fake_runner import ScriptedRunner


class FakeClock:
    """Monotonic clock advanced only by the fake sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def runner() -> ScriptedRunner:
    return ScriptedRunner()


@pytest.fixture
def engine(runner: ScriptedRunner) -> ContainerEngine:
    return ContainerEngine(runner, "docker")


@pytest.fixture
def names() -> RunNames:
    return RunNames("shop", "ab12")


@pytest.fixture
def project() -> ProjectConfig:
    return ProjectConfig()
