"""Image analysis entry points."""

from __future__ import annotations

import asyncio
import logging

from . import apk, apt, image_id, os_release, rpm
from .binaries import analyze_binaries
from .docker import Docker
from .errors import PackageDetectionError
from .models import AnalysisResult, PackageAnalysis, ScanResult

logger = logging.getLogger(__name__)


async def detect_installed_packages(
    image: str, *, docker: Docker
) -> list[PackageAnalysis]:
    try:
        results = await asyncio.gather(
            apk.analyze(image, docker=docker),
            apt.analyze(image, docker=docker),
            rpm.analyze(image, docker=docker),
        )
    except Exception as err:
        logger.debug("Error while running analyzer: %s: %s", type(err).__name__, err)
        raise PackageDetectionError() from err
    return list(results)


async def _analyze_results(image: str, *, docker: Docker) -> list[AnalysisResult]:
    package_results = await detect_installed_packages(image, docker=docker)
    installed: set[str] = set()
    for res in package_results:
        installed |= res.package_names()
    binaries = await analyze_binaries(image, installed, docker=docker)
    return [*package_results, binaries]


async def analyze(image: str, *, docker: Docker | None = None) -> ScanResult:
    docker = docker or Docker()
    detected_id, release, results = await asyncio.gather(
        image_id.detect(image, docker=docker),
        os_release.detect(image, docker=docker),
        _analyze_results(image, docker=docker),
    )
    return ScanResult(image_id=detected_id, os_release=release, results=results)


def analyze_sync(image: str, *, docker: Docker | None = None) -> ScanResult:
    return asyncio.run(analyze(image, docker=docker))
