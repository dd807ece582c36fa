"""dpkg status database analysis."""

from __future__ import annotations

import asyncio
import re

from .docker import Docker
from .models import InstalledPackage, PackageAnalysis

DPKG_STATUS_PATH = "/var/lib/dpkg/status"
APT_EXTENDED_STATES_PATH = "/var/lib/apt/extended_states"

_SOURCE_VERSION_RE = re.compile(r"\s*\(.*\)\s*$")


def _iter_stanzas(text: str) -> list[dict[str, str]]:
    stanzas: list[dict[str, str]] = []
    current: dict[str, str] = {}
    last_key: str | None = None
    for line in text.splitlines():
        if not line.strip():
            if current:
                stanzas.append(current)
            current = {}
            last_key = None
            continue
        if line[0] in " \t":
            if last_key is not None:
                current[last_key] += "\n" + line.strip()
            continue
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        last_key = key.strip()
        current[last_key] = value.strip()
    if current:
        stanzas.append(current)
    return stanzas


def _relation_names(value: str) -> list[str]:
    names: list[str] = []
    for clause in value.split(","):
        # `a (>= 1) | b` keeps only the first alternative.
        first = clause.split("|")[0].strip()
        name = first.split(" ")[0].split("(")[0].split(":")[0].strip()
        if name and name not in names:
            names.append(name)
    return names


def parse_extended_states(text: str) -> set[str]:
    auto: set[str] = set()
    for stanza in _iter_stanzas(text):
        name = stanza.get("Package")
        if name and stanza.get("Auto-Installed") == "1":
            auto.add(name)
    return auto


def parse_dpkg_status(
    text: str, auto_installed: set[str] | None = None
) -> list[InstalledPackage]:
    packages: list[InstalledPackage] = []
    for stanza in _iter_stanzas(text):
        name = stanza.get("Package")
        if not name:
            continue
        status = stanza.get("Status", "")
        if status and not status.endswith(" installed"):
            continue

        source_raw = stanza.get("Source", "")
        source = _SOURCE_VERSION_RE.sub("", source_raw) or None

        deps = _relation_names(stanza.get("Pre-Depends", ""))
        for dep in _relation_names(stanza.get("Depends", "")):
            if dep not in deps:
                deps.append(dep)

        packages.append(
            InstalledPackage(
                name=name,
                version=stanza.get("Version", ""),
                source=source,
                provides=_relation_names(stanza.get("Provides", "")),
                deps=deps,
                auto_installed=(
                    name in auto_installed if auto_installed is not None else None
                ),
            )
        )
    return packages


async def analyze(image: str, *, docker: Docker | None = None) -> PackageAnalysis:
    docker = docker or Docker()
    status_text, states_text = await asyncio.gather(
        docker.cat(image, DPKG_STATUS_PATH),
        docker.cat(image, APT_EXTENDED_STATES_PATH),
    )
    packages: list[InstalledPackage] = []
    if status_text:
        auto = parse_extended_states(states_text) if states_text else None
        packages = parse_dpkg_status(status_text, auto)
    return PackageAnalysis(image=image, analyze_type="Apt", analysis=packages)
