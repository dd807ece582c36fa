from __future__ import annotations

from .docker import Docker
from .models import InstalledPackage, PackageAnalysis

APK_DB_PATH = "/lib/apk/db/installed"


def parse_apk_db(text: str) -> list[InstalledPackage]:
    packages: list[InstalledPackage] = []
    for stanza in text.split("\n\n"):
        fields: dict[str, str] = {}
        for line in stanza.splitlines():
            if len(line) < 2 or line[1] != ":":
                continue
            # Single-letter keys are case sensitive (`P` name, `p` provides).
            fields[line[0]] = line[2:].strip()
        name = fields.get("P")
        if not name:
            continue
        packages.append(
            InstalledPackage(
                name=name,
                version=fields.get("V", ""),
                source=fields.get("o") or None,
                provides=fields.get("p", "").split(),
                deps=fields.get("D", "").split(),
            )
        )
    return packages


async def analyze(image: str, *, docker: Docker | None = None) -> PackageAnalysis:
    docker = docker or Docker()
    text = await docker.cat(image, APK_DB_PATH)
    packages = parse_apk_db(text) if text else []
    return PackageAnalysis(image=image, analyze_type="Apk", analysis=packages)
