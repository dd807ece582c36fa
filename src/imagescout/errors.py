from __future__ import annotations


class ImageScoutError(Exception):
    def __init__(self, token: str, message: str) -> None:
        super().__init__(message)
        self.token: str = token


class InfrastructureError(ImageScoutError):
    """The sandboxed execution itself could not run."""


class CommandExecutionError(InfrastructureError):
    def __init__(self, program: str, message: str) -> None:
        super().__init__("COMMAND_NOT_LAUNCHED", message)
        self.program: str = program


class CommandTimeoutError(InfrastructureError):
    def __init__(self, program: str, timeout_s: float) -> None:
        super().__init__(
            "COMMAND_TIMEOUT", f"{program} timed out after {timeout_s:.1f}s"
        )
        self.program: str = program
        self.timeout_s: float = timeout_s


class DockerError(InfrastructureError):
    def __init__(self, message: str, *, stderr: str = "") -> None:
        super().__init__("DOCKER_FAILED", message)
        self.stderr: str = stderr


class ImageNotFoundError(DockerError):
    def __init__(self, image: str, *, stderr: str = "") -> None:
        super().__init__(f"failed to inspect image {image!r}", stderr=stderr)
        self.token = "IMAGE_NOT_FOUND"
        self.image: str = image


class OsReleaseError(ImageScoutError):
    def __init__(self, message: str = "failed to detect OS release") -> None:
        super().__init__("OS_RELEASE_UNKNOWN", message)


class PackageDetectionError(ImageScoutError):
    def __init__(
        self, message: str = "failed to detect installed OS packages"
    ) -> None:
        super().__init__("PACKAGE_DETECTION_FAILED", message)
