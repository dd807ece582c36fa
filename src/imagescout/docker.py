from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from . import sub_process
from .config import Settings
from .errors import DockerError, ImageNotFoundError
from .sub_process import ExecResult

logger = logging.getLogger(__name__)

# `docker run` reserves 125 for failures of the daemon itself (unreachable,
# pull failed, invalid flags). 126/127 come from the container command.
DOCKER_DAEMON_EXIT_CODE = 125


@dataclass(frozen=True)
class Docker:
    binary: str = "docker"
    timeout_s: float | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Docker:
        return cls(binary=settings.docker_binary, timeout_s=settings.timeout_s)

    def run_args(self, image: str, command: Sequence[str]) -> list[str]:
        return [
            "run",
            "--rm",
            "--entrypoint",
            "",
            "--network",
            "none",
            image,
            *command,
        ]

    async def run(self, image: str, command: Sequence[str]) -> ExecResult:
        """Run a one-shot, network-less container from `image`.

        The image entrypoint is cleared so only `command` executes.
        """
        res = await sub_process.execute(
            self.binary, self.run_args(image, command), timeout_s=self.timeout_s
        )
        if res.returncode == DOCKER_DAEMON_EXIT_CODE:
            raise DockerError(
                f"docker run failed for image {image!r}: {res.stderr.strip()}",
                stderr=res.stderr,
            )
        return res

    async def cat(self, image: str, path: str) -> str | None:
        res = await self.run(image, ["cat", path])
        if res.returncode != 0:
            logger.debug("%s: %s not readable (exit %d)", image, path, res.returncode)
            return None
        return res.stdout

    async def inspect_image_id(self, image: str) -> str:
        res = await sub_process.execute(
            self.binary,
            ["image", "inspect", "--format", "{{.Id}}", image],
            timeout_s=self.timeout_s,
        )
        image_id = res.stdout.strip()
        if res.returncode != 0 or not image_id:
            raise ImageNotFoundError(image, stderr=res.stderr)
        return image_id
