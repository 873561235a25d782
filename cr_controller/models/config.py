"""Run options and project configuration (pydantic models)."""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from cr_common.errors import ConfigurationError

PROJECT_CONFIG_NAME = "cirunner.yml"


def _new_build_id() -> str:
    return uuid.uuid4().hex[:8]


class ServiceSpec(BaseModel):
    """A backing service container (shared database or per-shard service)."""

    name: str = Field(description="Short name, used as container name suffix")
    image: str = Field(description="Container image to run")
    alias: str = Field(description="Link alias seen by the sandbox")
    env: Dict[str, str] = Field(default_factory=dict, description="Container environment")
    warmup: float = Field(default=10.0, ge=0, description="Seconds to wait (or poll) for readiness")
    probe: Optional[List[str]] = Field(
        default=None, description="Command run via exec; exit 0 means ready"
    )
    poll_interval: float = Field(default=1.0, gt=0, description="Seconds between probe attempts")

    @model_validator(mode="after")
    def validate_name_not_empty(self) -> "ServiceSpec":
        if not self.name.strip():
            raise ValueError("ServiceSpec: 'name' must be non-empty")
        return self


class SuiteSpec(BaseModel):
    """Test command and report locations for one suite."""

    name: str = Field(description="Run identifier used in reports")
    command: List[str] = Field(description="Test runner argument template")
    report_src: str = Field(description="Report directory inside the sandbox, relative to app_dir")
    report_dest: str = Field(description="Local directory receiving the copied reports")


DEFAULT_DATABASE = ServiceSpec(
    name="db",
    image="mariadb:latest",
    alias="db",
    env={"MYSQL_ROOT_PASSWORD": "jenkins"},
    warmup=60.0,
    probe=["healthcheck.sh", "--connect", "--innodb_initialized"],
)

DEFAULT_SERVICES = [
    ServiceSpec(name="redis", image="redis", alias="redis", warmup=10.0, probe=["redis-cli", "ping"])
]

DEFAULT_SHARD_SUITE = SuiteSpec(
    name="features",
    command=[
        "bundle", "exec", "cucumber",
        "-r", "features",
        "--format", "progress",
        "--format", "junit",
        "--out", "features/reports",
        "--color", "--no-drb",
    ],
    report_src="features/reports",
    report_dest="features/reports",
)

DEFAULT_BASELINE_SUITE = SuiteSpec(
    name="rspec",
    command=[
        "bundle", "exec", "rspec",
        "--format", "progress",
        "--format", "RspecJunitFormatter",
        "--out", "spec/reports/rspec.xml",
        "--color", "--no-drb",
    ],
    report_src="spec/reports",
    report_dest="spec",
)


class ProjectConfig(BaseModel):
    """What the runner launches for a project; defaults match a Rails app."""

    app_dir: str = Field(default="/app", description="Project path inside the sandbox image")
    features_dir: str = Field(default="features", description="Root of the scenario tree")
    feature_suffix: str = Field(default=".feature", description="Scenario file suffix")
    renames: Dict[str, str] = Field(
        default_factory=lambda: {
            "config/database.ci.yml": "config/database.yml",
            "config/redis.ci.yml": "config/redis.yml",
        },
        description="Config templates renamed in place before the image build",
    )
    clean_dirs: List[str] = Field(
        default_factory=lambda: ["spec/reports", "features/reports"],
        description="Report directories removed before the image build",
    )
    database: ServiceSpec = Field(default_factory=lambda: DEFAULT_DATABASE.model_copy())
    services: List[ServiceSpec] = Field(
        default_factory=lambda: [spec.model_copy() for spec in DEFAULT_SERVICES]
    )
    env: Dict[str, str] = Field(default_factory=lambda: {"RAILS_ENV": "test"})
    database_env_var: str = Field(default="DBNAME", description="Env var carrying the shard database name")
    migration_command: str = Field(
        default="bundle exec rake db:create db:schema:load db:migrate",
        description="Schema preparation, run through sh -c",
    )
    shard_suite: SuiteSpec = Field(default_factory=lambda: DEFAULT_SHARD_SUITE.model_copy())
    baseline_suite: Optional[SuiteSpec] = Field(
        default_factory=lambda: DEFAULT_BASELINE_SUITE.model_copy(),
        description="Non-sharded suite run alongside the shards; null disables it",
    )

    @model_validator(mode="after")
    def validate_names(self) -> "ProjectConfig":
        names = [spec.name for spec in self.services]
        if len(names) != len(set(names)):
            raise ValueError("ProjectConfig: service names must be unique")
        if self.baseline_suite is not None and self.baseline_suite.name.isdigit():
            raise ValueError("ProjectConfig: baseline suite name must not be numeric")
        return self


def load_project_config(path: Path | None = None, workdir: Path | None = None) -> ProjectConfig:
    """Load a project config from ``path`` or ``workdir/cirunner.yml``.

    Falls back to built-in defaults when no explicit path is given and the
    working directory holds no config file.
    """
    if path is None:
        candidate = (workdir or Path.cwd()) / PROJECT_CONFIG_NAME
        if not candidate.exists():
            return ProjectConfig()
        path = candidate
    try:
        raw: Any = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(
            f"Cannot read project config {path}: {exc}", context={"path": path}, cause=exc
        ) from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Project config {path} must be a mapping", context={"path": path}
        )
    try:
        return ProjectConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid project config {path}: {exc}", context={"path": path}, cause=exc
        ) from exc


class RunOptions(BaseModel):
    """Per-invocation options threaded through every component."""

    path: Path = Field(default=Path("./"), description="Directory to execute the build in")
    build_name: str = Field(description="Name for this build (lower-cased)")
    build_id: str = Field(default_factory=_new_build_id, description="Identifier for this build")
    tags: List[str] = Field(default_factory=list, description="Tag selectors; '~' prefix rejects")
    slow_tags: List[str] = Field(default_factory=list, description="Tags that double a file's weight")
    verbose: bool = Field(default=False)
    commit: bool = Field(default=False, description="Commit failed sandboxes for postmortem")
    max_runs: int = Field(default=0, ge=0, description="Maximum concurrent shards; 0 means CPU count")
    engine: str = Field(default="docker", description="Container engine CLI (docker or podman)")
    config_path: Optional[Path] = Field(default=None, description="Explicit project config file")

    @field_validator("build_name")
    @classmethod
    def normalize_build_name(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("Must specify build name")
        return value

    @field_validator("build_id", mode="before")
    @classmethod
    def default_build_id(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return _new_build_id()
        return value

    @property
    def concurrency(self) -> int:
        return self.max_runs or os.cpu_count() or 1
