from __future__ import annotations

import argparse
import logging
from typing import Any, Mapping, Sequence

import pandas as pd

from task_assignment.catalog import catalog_stats
from task_assignment.config import Config, cfg
from task_assignment.errors import NoWorkersAvailable
from task_assignment.generate.history import HistoryGenConfig, seed_history
from task_assignment.history import HistoryStore, SqlHistoryStore
from task_assignment.optimizer import AssignmentOptimizer
from task_assignment.order import Order, OrderBreakdown, breakdown, breakdown_from_dict
from task_assignment.profiles import SkillProfile, SkillProfiler
from task_assignment.reporting import Reporter
from task_assignment.result_types import OptimizationResult
from task_assignment.simulate import Strategy, compare_strategies, simulate
from task_assignment.workers import WorkerRecord

logger = logging.getLogger(__name__)

OrderLike = Order | Mapping[str, Any]
BreakdownLike = OrderBreakdown | Mapping[str, Any]


class AssignmentService:
    """
    The operations an API layer exposes: breakdown, optimize, simulate,
    worker-profile and stats. Every call is independent and stateless.
    """

    def __init__(
        self,
        store: HistoryStore,
        config: Config | None = None,
        profiler: SkillProfiler | None = None,
    ) -> None:
        self.cfg = config or cfg
        self.store = store
        self.profiler = profiler or SkillProfiler(store, self.cfg)
        self.optimizer = AssignmentOptimizer(self.profiler, self.cfg)

    def breakdown(self, order: OrderLike) -> OrderBreakdown:
        return breakdown(order)

    def list_workers(self) -> list[WorkerRecord]:
        try:
            return self.store.list_workers()
        except Exception:
            logger.warning("Failed to list workers; treating pool as empty", exc_info=True)
            return []

    def _pool(self, workers: Sequence[WorkerRecord] | None) -> list[WorkerRecord]:
        pool = list(workers) if workers is not None else self.list_workers()
        if not pool:
            raise NoWorkersAvailable("No workers found in the system.")
        return pool

    def optimize(
        self,
        order: BreakdownLike,
        workers: Sequence[WorkerRecord] | None = None,
    ) -> OptimizationResult:
        return self.optimizer.optimize(_as_breakdown(order), self._pool(workers))

    def simulate(
        self,
        order: BreakdownLike,
        strategy: Strategy | str = Strategy.OPTIMIZED,
        workers: Sequence[WorkerRecord] | None = None,
    ) -> OptimizationResult:
        return simulate(
            self.optimizer, _as_breakdown(order), self._pool(workers), strategy
        )

    def compare(
        self,
        order: BreakdownLike,
        workers: Sequence[WorkerRecord] | None = None,
    ) -> pd.DataFrame:
        return compare_strategies(
            self.optimizer, _as_breakdown(order), self._pool(workers)
        )

    def worker_profile(self, worker_id: str) -> SkillProfile:
        return self.profiler.get_skill_profile(worker_id)

    def workers_with_profiles(self) -> list[tuple[WorkerRecord, SkillProfile]]:
        workers = self.list_workers()
        return list(zip(workers, self.optimizer.fetch_profiles(workers)))

    def stats(self) -> dict[str, Any]:
        workers = self.list_workers()
        return {
            **catalog_stats(),
            "total_workers": len(workers),
            "available_workers": [w.to_dict() for w in workers],
        }


def _as_breakdown(order: BreakdownLike) -> OrderBreakdown:
    if isinstance(order, OrderBreakdown):
        return order
    return breakdown_from_dict(order)


def open_store(
    config: Config, seed: int | None = None
) -> tuple[SqlHistoryStore, list[WorkerRecord]]:
    """
    Open the store at `config.DATABASE_URL`, creating its tables and seeding the
    demo roster with synthetic scans when it holds no workers. Returns the
    store and the newly seeded workers (empty when nothing was written).
    """
    store = SqlHistoryStore(config.DATABASE_URL)
    gen_cfg = HistoryGenConfig(seed=7 if seed is None else seed)
    seeded = seed_history(store.engine, gen_cfg)
    if seeded:
        logger.info("Seeded %d demo workers into %s", len(seeded), config.DATABASE_URL)
    return store, seeded


def run_assignment(
    order: OrderLike,
    config: Config | None = None,
    store: HistoryStore | None = None,
    strategy: Strategy | str = Strategy.OPTIMIZED,
    reporter: Reporter | None = None,
    validate_config: bool = True,
    enable_reporting: bool = True,
) -> OptimizationResult:
    """
    Break down, optimize, and optionally report on one order.

    Parameters
    ----------
    order:
        An `Order` or an order payload mapping.
    config:
        The configuration for the run. Defaults to `task_assignment.config.cfg`.
    store:
        Historical performance store. When omitted the store at
        `config.DATABASE_URL` is opened with `open_store()`, which seeds it
        with demo data if it has no workers.
    strategy:
        Worker-pool ordering passed to the simulator; "optimized" leaves the
        pool as the store returns it.
    reporter:
        Custom reporter instance. When `enable_reporting` is True and none is
        provided, the default `Reporter` is used.
    validate_config:
        Toggle to run `Config.validate()` first.
    enable_reporting:
        When False, skips all reporting even if a reporter is provided.

    Returns
    -------
    OptimizationResult
    """
    cfg_obj = config or cfg
    if validate_config:
        cfg_obj.validate()

    if store is None:
        store, _ = open_store(cfg_obj, cfg_obj.SEED)

    service = AssignmentService(store, cfg_obj)
    order_breakdown = service.breakdown(order)
    result = service.simulate(order_breakdown, strategy)

    active_reporter = reporter if enable_reporting else None
    if active_reporter is None and enable_reporting:
        active_reporter = Reporter(cfg_obj)
    if active_reporter is not None:
        active_reporter.post_optimize(result, order_breakdown)

    return result


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="task-assignment",
        description="Assign compliance tasks of an order to the lowest-risk workers.",
    )
    p.add_argument("--order-id", required=True)
    p.add_argument("--items", type=int, required=True, help="item count")
    p.add_argument("--order-type", default="Standard")
    p.add_argument("--retailer", default="Dick's Sporting Goods")
    p.add_argument(
        "--require",
        action="append",
        default=[],
        metavar="REQ",
        help="special requirement (repeatable), e.g. fragile, retail",
    )
    p.add_argument(
        "--strategy",
        default="optimized",
        choices=[s.value for s in Strategy] + ["compare"],
    )
    p.add_argument("--db", default=None, help="SQLAlchemy URL of the history store")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--no-plots", action="store_true")
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> OptimizationResult | pd.DataFrame:
    """CLI entry point. Seeds demo history when the store is empty."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    run_cfg = Config(SEED=args.seed)
    if args.db:
        run_cfg.DATABASE_URL = args.db
    run_cfg.validate()

    store, seeded = open_store(run_cfg, args.seed)
    if seeded:
        print(f"Seeded {len(seeded)} demo workers into {run_cfg.DATABASE_URL}")

    order = Order(
        order_id=args.order_id,
        item_count=args.items,
        order_type=args.order_type,
        retailer=args.retailer,
        special_requirements=args.require,
    )
    reporter = Reporter(run_cfg, enable_plots=not args.no_plots)

    if args.strategy == "compare":
        service = AssignmentService(store, run_cfg)
        frame = service.compare(service.breakdown(order))
        reporter.compare(frame)
        return frame

    return run_assignment(
        order,
        config=run_cfg,
        store=store,
        strategy=args.strategy,
        reporter=reporter,
        validate_config=False,
    )


if __name__ == "__main__":
    main()
