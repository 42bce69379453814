from __future__ import annotations
import os, json, pathlib, random


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


REJECT_DEPENDENCY_CYCLES: bool = True
TIMELINE_ENABLED: bool = True
EXPORT_ENABLED: bool = True

SEED_ASSESSMENTS: int = 3
SEED_QUESTIONS_PER_ASSESSMENT: int = 12
SEED_OPTIONS_RANGE: tuple[int, int] = (3, 6)
SEED_NUMERIC_MIN_RANGE: tuple[int, int] = (0, 10)
SEED_NUMERIC_SPAN_RANGE: tuple[int, int] = (5, 100)
SEED_MAX_LENGTH_RANGE: tuple[int, int] = (50, 1000)
SEED_CONDITIONAL_RATIO: float = 0.25
SEED_CANDIDATES: int = 40
SEED_ASSIGNMENTS_RANGE: tuple[int, int] = (5, 20)

DEBUG_TRACE: bool = False
DEBUG_SEED: int | None = None
TRACE_FIELDS: tuple[str, ...] = (
    "question_id",
    "type",
    "required",
    "visible",
    "errors",
)
# // env overrides for staging/ops; defaults remain conservative.
REJECT_DEPENDENCY_CYCLES = _env_bool("REJECT_DEPENDENCY_CYCLES", REJECT_DEPENDENCY_CYCLES)
TIMELINE_ENABLED = _env_bool("TIMELINE_ENABLED", TIMELINE_ENABLED)
EXPORT_ENABLED = _env_bool("EXPORT_ENABLED", EXPORT_ENABLED)
SEED_ASSESSMENTS = _env_int("SEED_ASSESSMENTS", SEED_ASSESSMENTS)
SEED_QUESTIONS_PER_ASSESSMENT = _env_int("SEED_QUESTIONS_PER_ASSESSMENT", SEED_QUESTIONS_PER_ASSESSMENT)
SEED_CANDIDATES = _env_int("SEED_CANDIDATES", SEED_CANDIDATES)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", False)
DEBUG_SEED = _env_int("DEBUG_SEED", 0) if os.getenv("DEBUG_SEED") else None


def load_config() -> dict:
    cfg = {}
    p = pathlib.Path("config.json")
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except Exception: cfg = {}
    e = os.environ
    if e.get("DATA_DIR"): cfg["DATA_DIR"] = e.get("DATA_DIR")
    if e.get("SEED"): cfg["SEED"] = int(e.get("SEED"))
    return cfg


def make_rng(cfg: dict | None = None, seed: int | None = None) -> random.Random:
    """Explicit generator for mock data; never touches the module-level ``random`` state."""
    if seed is None and cfg:
        seed = cfg.get("SEED")
    if seed is None:
        seed = DEBUG_SEED
    return random.Random(seed)
