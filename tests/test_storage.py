from __future__ import annotations

import shutil
import threading
from pathlib import Path

import pytest

from errors import ClaimLostError, SpoolLayoutError
from models import SpoolConfig
from storage import Storage


def test_empty_queue(storage: Storage) -> None:
    assert storage.list_candidates() == []


def test_list_candidates_skips_hidden_files_and_directories(storage: Storage, config: SpoolConfig) -> None:
    (config.incoming_dir / "job1").write_text("x")
    (config.incoming_dir / ".partial").write_text("x")
    (config.incoming_dir / "nested").mkdir()
    (config.incoming_dir / "nested" / "job2").write_text("x")
    assert storage.list_candidates() == [config.incoming_dir / "job1"]


def test_claim_moves_job(storage: Storage, config: SpoolConfig) -> None:
    src = config.incoming_dir / "job1"
    src.write_text("payload")
    dest = storage.claim(src, config.work_dir, "20240101_100000_hostA_job1")
    assert dest == config.work_dir / "20240101_100000_hostA_job1"
    assert dest.read_text() == "payload"
    assert not src.exists()


def test_second_claim_loses_the_race(storage: Storage, config: SpoolConfig) -> None:
    src = config.incoming_dir / "job1"
    src.write_text("payload")
    storage.claim(src, config.work_dir, "20240101_100000_hostA_job1")
    with pytest.raises(ClaimLostError):
        storage.claim(src, config.work_dir, "20240101_100000_hostB_job1")
    assert [p.name for p in config.work_dir.iterdir()] == ["20240101_100000_hostA_job1"]
    assert list(config.incoming_dir.iterdir()) == []


def test_concurrent_claims_have_one_winner(config: SpoolConfig) -> None:
    src = config.incoming_dir / "job1"
    src.write_text("payload")
    barrier = threading.Barrier(2)
    outcomes = {}

    def attempt(machine: str) -> None:
        db = Storage(config)
        barrier.wait()
        try:
            db.claim(src, config.work_dir, f"20240101_100000_{machine}_job1")
            outcomes[machine] = "won"
        except ClaimLostError:
            outcomes[machine] = "lost"

    threads = [threading.Thread(target=attempt, args=(m,)) for m in ("hostA", "hostB")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes.values()) == ["lost", "won"]
    assert len(list(config.work_dir.iterdir())) == 1
    assert not src.exists()


def test_claim_into_missing_directory_is_a_layout_error(storage: Storage, config: SpoolConfig) -> None:
    src = config.incoming_dir / "job1"
    src.write_text("payload")
    with pytest.raises(SpoolLayoutError):
        storage.claim(src, config.root / "nowhere", "x")
    assert src.exists()
    assert not (config.root / "nowhere").exists()


def test_check_layout(tmp_path: Path) -> None:
    cfg = SpoolConfig(root=tmp_path, machine="hostA")
    (tmp_path / "incoming").mkdir()
    (tmp_path / "work").mkdir()
    with pytest.raises(SpoolLayoutError) as exc:
        Storage(cfg).check_layout()
    assert "out" in str(exc.value)
    assert "results" in str(exc.value)


def test_check_layout_passes(storage: Storage) -> None:
    storage.check_layout()


def test_list_jobs_parses_stamps_and_skips_foreign_files(storage: Storage, config: SpoolConfig) -> None:
    (config.out_dir / "20240101_100005_hostA_20240101_100000_hostA_job1").write_text("x")
    (config.out_dir / "20240101_090000_hostB_20240101_085959_hostB_job0").write_text("x")
    (config.out_dir / "README").write_text("x")
    jobs = storage.list_jobs("out")
    assert [j.origin_name for j in jobs] == ["job0", "job1"]
    assert [j.elapsed_seconds for j in jobs] == [1.0, 5.0]


def test_read_log(storage: Storage, config: SpoolConfig) -> None:
    (config.results_dir / "20240101_100000_hostA_job1.log").write_text("hello\n")
    assert storage.read_log("20240101_100000_hostA_job1") == "hello\n"
    assert storage.read_log("20240101_100000_hostA_job2") is None
    assert storage.read_log("../results/20240101_100000_hostA_job1") is None


def test_missing_incoming_directory_propagates(storage: Storage, config: SpoolConfig) -> None:
    shutil.rmtree(config.incoming_dir)
    with pytest.raises(FileNotFoundError):
        storage.list_candidates()
