"""Shadow runtime detection.

Every known runtime is probed in its own throwaway container. A runtime that
answers with a parseable version and is not tracked by any installed package
is reported as a shadow binary.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Collection, Sequence
from dataclasses import dataclass
from typing import Optional

from .docker import Docker
from .errors import InfrastructureError
from .models import BinariesAnalysis, DetectedBinary
from .version_parsers import parse_node_version, parse_openjdk_version

logger = logging.getLogger(__name__)

VersionParser = Callable[[str, str], Optional[DetectedBinary]]


@dataclass(frozen=True)
class RuntimeSpec:
    name: str
    probe_command: str
    probe_args: tuple[str, ...]
    package_aliases: frozenset[str]
    parser: VersionParser


@dataclass(frozen=True)
class ProbeResult:
    runtime: RuntimeSpec
    stdout: str
    stderr: str


RUNTIMES: tuple[RuntimeSpec, ...] = (
    RuntimeSpec(
        name="node",
        probe_command="node",
        probe_args=("--version",),
        package_aliases=frozenset({"node", "nodejs"}),
        parser=parse_node_version,
    ),
    RuntimeSpec(
        name="openjdk",
        probe_command="java",
        probe_args=("-version",),
        package_aliases=frozenset(
            {
                "openjdk-jre",
                "openjdk-8-jre-headless",
                "openjdk-11-jre-headless",
                "openjdk-17-jre-headless",
                "openjdk-21-jre-headless",
                "openjdk8-jre",
                "openjdk11-jre",
                "openjdk17-jre",
                "openjdk21-jre",
            }
        ),
        parser=parse_openjdk_version,
    ),
)


async def probe(
    image: str, runtime: RuntimeSpec, *, docker: Docker | None = None
) -> ProbeResult:
    docker = docker or Docker()
    res = await docker.run(image, [runtime.probe_command, *runtime.probe_args])
    if res.returncode != 0:
        logger.debug(
            "%s: %s probe exited %d", image, runtime.name, res.returncode
        )
    return ProbeResult(runtime=runtime, stdout=res.stdout, stderr=res.stderr)


def is_owned_by_package_manager(
    runtime: RuntimeSpec, installed: Collection[str]
) -> bool:
    return any(alias in installed for alias in runtime.package_aliases)


async def analyze_binaries(
    image: str,
    installed: Collection[str],
    *,
    docker: Docker | None = None,
    runtimes: Sequence[RuntimeSpec] = RUNTIMES,
) -> BinariesAnalysis:
    docker = docker or Docker()
    installed_set = frozenset(installed)

    outcomes = await asyncio.gather(
        *(probe(image, rt, docker=docker) for rt in runtimes),
        return_exceptions=True,
    )

    for outcome in outcomes:
        if isinstance(outcome, InfrastructureError) or (
            isinstance(outcome, BaseException) and not isinstance(outcome, Exception)
        ):
            raise outcome

    found: list[DetectedBinary] = []
    for runtime, outcome in zip(runtimes, outcomes):
        if isinstance(outcome, BaseException):
            logger.warning(
                "%s: %s probe failed: %s: %s",
                image,
                runtime.name,
                type(outcome).__name__,
                outcome,
            )
            continue
        binary = runtime.parser(outcome.stdout, outcome.stderr)
        if binary is None:
            continue
        if is_owned_by_package_manager(runtime, installed_set):
            logger.debug(
                "%s: %s %s is owned by a package manager",
                image,
                binary.name,
                binary.version,
            )
            continue
        found.append(binary)

    return BinariesAnalysis(image=image, analysis=found)
