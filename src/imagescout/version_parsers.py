from __future__ import annotations

import re

from .models import DetectedBinary

NODE_BINARY_NAME = "node"
OPENJDK_BINARY_NAME = "openjdk-jre"

_NODE_VERSION_RE = re.compile(
    r"^v(\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?)(?:\s|$)"
)
_JAVA_BUILD_RE = re.compile(r"\(build ([^),]+)")


def parse_node_version(stdout: str, stderr: str) -> DetectedBinary | None:
    _ = stderr
    m = _NODE_VERSION_RE.match(stdout.strip())
    if not m:
        return None
    return DetectedBinary(name=NODE_BINARY_NAME, version=m.group(1))


def parse_openjdk_version(stdout: str, stderr: str) -> DetectedBinary | None:
    # `java -version` prints to stderr; stdout is checked first for wrappers
    # that redirect it.
    for text in (stdout, stderr):
        for line in text.splitlines():
            m = _JAVA_BUILD_RE.search(line.strip())
            if not m:
                continue
            build = m.group(1).strip()
            if build:
                return DetectedBinary(name=OPENJDK_BINARY_NAME, version=build)
    return None
