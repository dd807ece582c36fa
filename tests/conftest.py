from __future__ import annotations

from collections.abc import Callable

import pytest

from _fakes import FakeDockerCli, FakeHandler


@pytest.fixture
def fake_docker(
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[[FakeHandler], FakeDockerCli]:
    def install(handler: FakeHandler) -> FakeDockerCli:
        fake = FakeDockerCli(handler)
        monkeypatch.setattr("imagescout.sub_process.execute", fake)
        return fake

    return install
