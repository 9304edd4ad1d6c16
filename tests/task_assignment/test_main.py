from __future__ import annotations

import pandas as pd
import pytest

import task_assignment.main as main_mod

from task_assignment.config import Config
from task_assignment.errors import InvalidOrder, InvalidStrategy, NoWorkersAvailable
from task_assignment.generate.history import HistoryGenConfig, seed_history
from task_assignment.main import AssignmentService, main, open_store, run_assignment
from task_assignment.reporting import plots


@pytest.fixture
def seeded_store(sql_store, now):
    seed_history(sql_store.engine, HistoryGenConfig(seed=4), now=now)
    return sql_store


@pytest.fixture
def service(seeded_store, quiet_cfg) -> AssignmentService:
    return AssignmentService(seeded_store, quiet_cfg)


@pytest.fixture(autouse=True)
def no_plot_windows(monkeypatch):
    monkeypatch.setattr(plots, "_save_and_show", lambda fig, name, out_dir: None)


def test_stats_reports_catalog_and_workers(service) -> None:
    stats = service.stats()
    assert stats["available_tasks"] == 6
    assert stats["total_workers"] == 15
    assert {"worker_id", "name", "department"} == set(stats["available_workers"][0])


def test_optimize_accepts_breakdown_payload(service) -> None:
    payload = service.breakdown({"orderId": "ORD-A", "itemCount": 150}).to_dict()
    res = service.optimize(payload)
    assert res.order_id == "ORD-A"
    assert len(res.predictions) == 5
    assert res.workers_considered == 15
    assert res.max_possible_fines == 1700


def test_simulate_and_compare(service) -> None:
    bd = service.breakdown({"orderId": "ORD-B", "itemCount": 12})
    assert service.simulate(bd, "random").strategy == "random"
    with pytest.raises(InvalidStrategy):
        service.simulate(bd, "sideways")
    frame = service.compare(bd)
    assert list(frame.index) == ["optimized", "random", "worst"]


def test_worker_profiles(service) -> None:
    profile = service.worker_profile("sarah789")
    assert profile.worker_id == "sarah789"
    pairs = service.workers_with_profiles()
    assert len(pairs) == 15
    assert all(w.worker_id == p.worker_id for w, p in pairs)


def test_empty_store_has_no_workers(sql_store, quiet_cfg) -> None:
    service = AssignmentService(sql_store, quiet_cfg)
    bd = service.breakdown({"orderId": "ORD-E", "itemCount": 3})
    with pytest.raises(NoWorkersAvailable):
        service.optimize(bd)
    assert service.stats()["total_workers"] == 0


def test_run_assignment_without_reporting(seeded_store, quiet_cfg) -> None:
    res = run_assignment(
        {"orderId": "ORD-R", "itemCount": 60, "specialRequirements": ["retail"]},
        config=quiet_cfg,
        store=seeded_store,
        enable_reporting=False,
    )
    assert res.strategy == "optimized"
    assert res.predictions[-1].task_type == "UPC_VERIFICATION"
    assert not (quiet_cfg.OUTPUT_DIR / "report.pdf").exists()


def test_run_assignment_validates_order_and_config(seeded_store, quiet_cfg) -> None:
    with pytest.raises(InvalidOrder):
        run_assignment({"orderId": "ORD-Q", "itemCount": 0}, config=quiet_cfg, store=seeded_store)
    with pytest.raises(ValueError, match="HISTORY_WINDOW_DAYS"):
        run_assignment(
            {"orderId": "ORD-Q", "itemCount": 1},
            config=Config(HISTORY_WINDOW_DAYS=0),
            store=seeded_store,
        )


def test_cli_seeds_store_and_writes_report(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    db = f"sqlite:///{tmp_path / 'cli.db'}"
    res = main(
        ["--order-id", "ORD-CLI", "--items", "80", "--require", "fragile",
         "--db", db, "--seed", "2", "--no-plots"]
    )
    out = capsys.readouterr().out
    assert "Seeded 15 demo workers" in out
    assert res.order_id == "ORD-CLI"
    assert (tmp_path / "outputs" / "report.pdf").exists()

    again = main(["--order-id", "ORD-CLI", "--items", "80", "--db", db, "--no-plots"])
    assert "Seeded" not in capsys.readouterr().out
    assert again.max_possible_fines == res.max_possible_fines


def test_cli_compare_returns_frame(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    db = f"sqlite:///{tmp_path / 'cmp.db'}"
    frame = main(["--order-id", "ORD-CMP", "--items", "20", "--strategy", "compare", "--db", db])
    assert isinstance(frame, pd.DataFrame)
    assert (tmp_path / "outputs" / "strategy_comparison.pdf").exists()


def test_quick_start_seeds_fresh_default_store(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    res = run_assignment(
        {"orderId": "ORD-1001", "itemCount": 150, "specialRequirements": ["fragile"]},
        config=Config(SEED=7),
    )
    assert res.workers_considered == 15
    assert 0 <= res.risk_reduction_percentage <= 100
    assert (tmp_path / "compliance.db").exists()
    assert (tmp_path / "outputs" / "report.pdf").exists()


def test_open_store_seeds_only_once(tmp_path) -> None:
    config = Config(DATABASE_URL=f"sqlite:///{tmp_path / 'open.db'}")
    store, seeded = open_store(config)
    assert len(seeded) == 15
    again, reseeded = open_store(config)
    assert reseeded == []
    assert len(again.list_workers()) == 15


def test_cli_passes_zero_seed_through(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    seeds = []
    real_seed_history = main_mod.seed_history

    def recording_seed_history(engine, gen_cfg=None, now=None):
        seeds.append(gen_cfg.seed)
        return real_seed_history(engine, gen_cfg, now=now)

    monkeypatch.setattr(main_mod, "seed_history", recording_seed_history)
    db = f"sqlite:///{tmp_path / 'zero.db'}"
    main(["--order-id", "ORD-0", "--items", "5", "--seed", "0", "--db", db, "--no-plots"])
    assert seeds == [0]
