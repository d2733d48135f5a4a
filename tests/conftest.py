"""Shared test fixtures."""

from __future__ import annotations

import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from models import SpoolConfig
from storage import Storage


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture()
def config(tmp_path: Path) -> SpoolConfig:
    cfg = SpoolConfig(root=tmp_path / "spool", machine="hostA")
    for d in cfg.static_dirs:
        d.mkdir(parents=True)
    return cfg


@pytest.fixture()
def storage(config: SpoolConfig) -> Storage:
    return Storage(config)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 10, 0, 0))


@pytest.fixture()
def make_job(config: SpoolConfig):
    """Drop an executable shell script into the incoming directory."""

    def _make(name: str, body: str = "echo hello", executable: bool = True) -> Path:
        path = config.incoming_dir / name
        path.write_text(f"#!/bin/sh\n{body}\n")
        if executable:
            os.chmod(path, 0o755)
        return path

    return _make
