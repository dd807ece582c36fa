from __future__ import annotations

import asyncio
from collections.abc import Callable

import pytest

from _fakes import FakeDockerCli, FakeHandler, container_command, failed, ok
from imagescout.analyzer import analyze, analyze_sync
from imagescout.errors import (
    DockerError,
    ImageNotFoundError,
    OsReleaseError,
    PackageDetectionError,
)
from imagescout.models import BinariesAnalysis, DetectedBinary, PackageAnalysis
from imagescout.sub_process import ExecResult

InstallFake = Callable[[FakeHandler], FakeDockerCli]

_DPKG_STATUS = """Package: nodejs
Status: install ok installed
Version: 18.19.0+dfsg-6~deb12u1

Package: curl
Status: install ok installed
Version: 7.88.1-10+deb12u5
"""

_JAVA_11 = """openjdk version "11.0.21" 2023-10-17
OpenJDK Runtime Environment (build 11.0.21+9-post-Debian-1deb12u1)
OpenJDK 64-Bit Server VM (build 11.0.21+9-post-Debian-1deb12u1, mixed mode)"""


def _image(
    *,
    image_id: ExecResult | None = None,
    files: dict[str, str] | None = None,
    rpm_result: ExecResult | None = None,
    node: ExecResult | None = None,
    java: ExecResult | None = None,
) -> FakeHandler:
    files = files or {}

    def handler(_program: str, args: list[str]) -> ExecResult:
        if args[:2] == ["image", "inspect"]:
            return image_id or ok("sha256:feedface\n")
        cmd = container_command(args)
        assert cmd is not None, args
        if cmd[0] == "cat":
            if cmd[1] in files:
                return ok(files[cmd[1]])
            return failed(1)
        if cmd[:2] == ["rpm", "-qa"]:
            return rpm_result or failed(127)
        if cmd == ["node", "--version"]:
            return node or failed(127)
        if cmd == ["java", "-version"]:
            return java or failed(127)
        raise AssertionError(f"unexpected docker args: {args}")

    return handler


def test_analyze_aggregates_all_branches(fake_docker: InstallFake) -> None:
    _ = fake_docker(
        _image(
            files={
                "/etc/os-release": "ID=debian\nVERSION_ID=\"12\"\n",
                "/var/lib/dpkg/status": _DPKG_STATUS,
            },
            node=ok("v18.19.0\n"),
            java=ok("", _JAVA_11),
        )
    )

    out = asyncio.run(analyze("debian-with-java:12"))

    assert out.image_id == "sha256:feedface"
    assert out.os_release.name == "debian"
    assert out.os_release.version == "12"
    assert [r.analyze_type for r in out.results] == ["Apk", "Apt", "Rpm", "binaries"]

    apt_result = out.results[1]
    assert isinstance(apt_result, PackageAnalysis)
    assert apt_result.package_names() == {"nodejs", "curl"}

    binaries = out.results[-1]
    assert isinstance(binaries, BinariesAnalysis)
    # nodejs comes from dpkg, java does not
    assert binaries.analysis == [
        DetectedBinary(name="openjdk-jre", version="11.0.21+9-post-Debian-1deb12u1")
    ]


def test_analyze_json_shape(fake_docker: InstallFake) -> None:
    _ = fake_docker(
        _image(
            files={"/etc/alpine-release": "3.19.1\n"},
            node=ok("v6.15.1"),
        )
    )

    payload = analyze_sync("node:6.15.1-alpine").to_json_dict()

    assert payload["imageId"] == "sha256:feedface"
    assert payload["osRelease"] == {"name": "alpine", "version": "3.19.1"}
    results = payload["results"]
    assert isinstance(results, list)
    assert results[-1] == {
        "Image": "node:6.15.1-alpine",
        "AnalyzeType": "binaries",
        "Analysis": [{"name": "node", "version": "6.15.1"}],
    }


def test_package_manager_failure_is_normalized(fake_docker: InstallFake) -> None:
    _ = fake_docker(
        _image(
            files={"/etc/os-release": "ID=centos\nVERSION_ID=\"7\"\n"},
            rpm_result=failed(125, "error during connect"),
        )
    )

    with pytest.raises(PackageDetectionError) as exc:
        _ = asyncio.run(analyze("centos:7"))

    assert str(exc.value) == "failed to detect installed OS packages"
    assert exc.value.token == "PACKAGE_DETECTION_FAILED"
    assert isinstance(exc.value.__cause__, DockerError)


def test_image_id_failure_is_not_wrapped(fake_docker: InstallFake) -> None:
    _ = fake_docker(
        _image(
            image_id=failed(1, "Error: No such image: ghost"),
            files={"/etc/os-release": "ID=debian\nVERSION_ID=\"12\"\n"},
        )
    )

    with pytest.raises(ImageNotFoundError):
        _ = asyncio.run(analyze("ghost"))


def test_binaries_infrastructure_failure_is_not_wrapped(
    fake_docker: InstallFake,
) -> None:
    _ = fake_docker(
        _image(
            files={"/etc/os-release": "ID=debian\nVERSION_ID=\"12\"\n"},
            java=failed(125, "Cannot connect to the Docker daemon"),
        )
    )

    with pytest.raises(DockerError) as exc:
        _ = asyncio.run(analyze("debian:12"))
    assert not isinstance(exc.value, PackageDetectionError)


def test_os_release_failure_is_not_wrapped(fake_docker: InstallFake) -> None:
    _ = fake_docker(_image(files={"/var/lib/dpkg/status": _DPKG_STATUS}))

    with pytest.raises(OsReleaseError) as exc:
        _ = asyncio.run(analyze("scratch-with-dpkg"))
    assert not isinstance(exc.value, PackageDetectionError)
    assert str(exc.value) == "failed to detect OS release"
