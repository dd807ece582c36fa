from __future__ import annotations

from .docker import Docker
from .models import InstalledPackage, PackageAnalysis

RPM_QUERY_FORMAT = "%{NAME}\t%{VERSION}-%{RELEASE}\t%{SIZE}\n"


def parse_rpm_query(text: str) -> list[InstalledPackage]:
    packages: list[InstalledPackage] = []
    for line in text.splitlines():
        parts = line.strip().split("\t")
        if len(parts) < 2 or not parts[0]:
            continue
        # gpg-pubkey entries are imported signing keys, not packages.
        if parts[0] == "gpg-pubkey":
            continue
        packages.append(InstalledPackage(name=parts[0], version=parts[1]))
    return packages


async def analyze(image: str, *, docker: Docker | None = None) -> PackageAnalysis:
    docker = docker or Docker()
    res = await docker.run(image, ["rpm", "-qa", "--qf", RPM_QUERY_FORMAT])
    packages = parse_rpm_query(res.stdout) if res.returncode == 0 else []
    return PackageAnalysis(image=image, analyze_type="Rpm", analysis=packages)
