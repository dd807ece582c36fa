"""OS release detection from well-known release files inside the image."""

from __future__ import annotations

import re
from collections.abc import Callable

from .docker import Docker
from .errors import OsReleaseError
from .models import OsRelease

_VERSION_RE = re.compile(r"\d+(?:\.\d+)*")


def _parse_key_values(text: str) -> dict[str, str]:
    out: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        out[key.strip()] = value.strip().strip("\"'")
    return out


def parse_os_release(text: str) -> OsRelease | None:
    fields = _parse_key_values(text)
    name = fields.get("ID", "")
    if not name:
        return None
    version = fields.get("VERSION_ID") or "unstable"
    return OsRelease(name=name, version=version)


def parse_lsb_release(text: str) -> OsRelease | None:
    fields = _parse_key_values(text)
    name = fields.get("DISTRIB_ID", "").lower()
    version = fields.get("DISTRIB_RELEASE", "")
    if not name or not version:
        return None
    return OsRelease(name=name, version=version)


def parse_debian_version(text: str) -> OsRelease | None:
    raw = text.strip()
    if not raw:
        return None
    m = _VERSION_RE.match(raw)
    if not m:
        # e.g. "bookworm/sid"
        return OsRelease(name="debian", version="unstable")
    return OsRelease(name="debian", version=m.group(0).split(".")[0])


def parse_alpine_release(text: str) -> OsRelease | None:
    raw = text.strip()
    if not raw:
        return None
    return OsRelease(name="alpine", version=raw)


def parse_redhat_release(text: str) -> OsRelease | None:
    raw = text.strip()
    if not raw:
        return None
    m = _VERSION_RE.search(raw)
    if not m:
        return None
    name = "centos" if "centos" in raw.lower() else "rhel"
    return OsRelease(name=name, version=m.group(0))


_RELEASE_FILES: tuple[tuple[str, Callable[[str], OsRelease | None]], ...] = (
    ("/etc/os-release", parse_os_release),
    ("/etc/lsb-release", parse_lsb_release),
    ("/etc/debian_version", parse_debian_version),
    ("/etc/alpine-release", parse_alpine_release),
    ("/etc/redhat-release", parse_redhat_release),
)


async def detect(image: str, *, docker: Docker | None = None) -> OsRelease:
    docker = docker or Docker()
    for path, parser in _RELEASE_FILES:
        text = await docker.cat(image, path)
        if text is None:
            continue
        release = parser(text)
        if release is not None:
            return release
    raise OsReleaseError()
