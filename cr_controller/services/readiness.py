"""Wait for a freshly started service container to accept work."""

from __future__ import annotations

import logging
import time
from typing import Callable

from cr_controller.adapters.container_engine import ContainerEngine
from cr_controller.models.config import ServiceSpec

logger = logging.getLogger(__name__)


def wait_until_ready(
    engine: ContainerEngine,
    container: str,
    spec: ServiceSpec,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """Return True once ``container`` is ready, False on timeout.

    Without a probe this is a fixed ``warmup`` wait. With a probe, the probe
    is exec'd every ``poll_interval`` seconds until it exits 0 or ``warmup``
    seconds have elapsed; it always runs at least once.
    """
    if not spec.probe:
        if spec.warmup > 0:
            logger.debug("Waiting %.1fs for %s to boot", spec.warmup, container)
            sleep(spec.warmup)
        return True

    deadline = clock() + spec.warmup
    attempt = 0
    while True:
        attempt += 1
        result = engine.exec(container, spec.probe)
        if result.ok:
            logger.debug("%s ready after %d probe(s)", container, attempt)
            return True
        if clock() >= deadline:
            logger.warning(
                "%s not ready after %d probe(s): %s", container, attempt, result.stderr.strip()
            )
            return False
        sleep(spec.poll_interval)
