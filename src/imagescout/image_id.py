from __future__ import annotations

from .docker import Docker


async def detect(image: str, *, docker: Docker | None = None) -> str:
    docker = docker or Docker()
    return await docker.inspect_image_id(image)
