"""Scenario discovery, parsing, filtering and weighting."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from cr_common.errors import DiscoveryError, ParseError
from cr_catalog.models import ScenarioDefinition, ScenarioFile
from cr_catalog.parser import GherkinParser, ScenarioParser
from cr_catalog.tags import TagRuleSet
from cr_catalog.weights import file_weight

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = ".feature"


class FeatureCatalog:
    """Builds the immutable list of scenario files for a run.

    Any discovery or parse failure aborts the whole selection; a partial
    catalog is never returned.
    """

    def __init__(
        self,
        root: Path | str,
        *,
        suffix: str = DEFAULT_SUFFIX,
        parser: ScenarioParser | None = None,
    ) -> None:
        self.root = Path(root)
        self.suffix = suffix
        self._parser = parser or GherkinParser()

    def discover(self) -> list[Path]:
        """Recursively list files under the root that end with the suffix."""

        def _raise(exc: OSError) -> None:
            raise exc

        found: list[Path] = []
        try:
            for dirpath, _dirnames, filenames in os.walk(self.root, onerror=_raise):
                for name in filenames:
                    if name.endswith(self.suffix):
                        found.append(Path(dirpath) / name)
        except OSError as exc:
            raise DiscoveryError(
                f"Cannot scan {self.root}: {exc}",
                context={"root": self.root, "suffix": self.suffix},
                cause=exc,
            ) from exc
        return sorted(found)

    def parse(self, path: Path) -> ScenarioDefinition:
        try:
            return self._parser.parse(path)
        except ParseError:
            raise
        except Exception as exc:
            raise ParseError(
                f"Parser failed on {path}: {exc}", context={"path": path}, cause=exc
            ) from exc

    def select(self, rules: TagRuleSet) -> list[ScenarioFile]:
        """Discover, parse, filter and weight every scenario file."""
        selected: list[ScenarioFile] = []
        for path in self.discover():
            definition = self.parse(path)
            if not rules.include(definition.tags):
                logger.debug("Skipping %s (tags %s)", path, sorted(definition.tags))
                continue
            selected.append(
                ScenarioFile(
                    path=path.as_posix(),
                    tags=definition.tags,
                    weight=file_weight(definition, rules),
                )
            )
        logger.info("Selected %d of the scenario files under %s", len(selected), self.root)
        return selected
