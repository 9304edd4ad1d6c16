from .config import Config, cfg
from .main import AssignmentService, open_store, run_assignment
from .order import Order, OrderBreakdown, breakdown
from .optimizer import AssignmentOptimizer
from .profiles import SkillProfiler
from .simulate import Strategy, simulate

__all__ = [
    "Config",
    "cfg",
    "Order",
    "OrderBreakdown",
    "breakdown",
    "AssignmentOptimizer",
    "AssignmentService",
    "SkillProfiler",
    "Strategy",
    "simulate",
    "open_store",
    "run_assignment",
]
