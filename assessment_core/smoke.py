from __future__ import annotations

import json
import logging
from typing import List

from .audit_schema import audit_assessment
from .codec import response_to_dict
from .collector import ResponseCollector
from .config import DEBUG_SEED, DEBUG_TRACE, TRACE_FIELDS, load_config, make_rng
from .seed import generate_answers, generate_assessments
from .types import Response, TimelineEvent


def _maybe_enable_trace() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    if DEBUG_TRACE:
        logging.getLogger("assessment_core.collector").setLevel(logging.INFO)


def _trace_fields() -> str:
    return ", ".join(TRACE_FIELDS)


def run_smoke_session(seed: int | None = None) -> List[Response]:
    _maybe_enable_trace()
    cfg = load_config()
    if seed is None:
        seed = cfg.get("SEED", DEBUG_SEED)
    logging.info("Starting synthetic fill with seed=%s", seed)
    logging.info("Trace fields: %s", _trace_fields())

    rng = make_rng(cfg, seed=seed or 0)
    stored: List[Response] = []
    events: List[TimelineEvent] = []

    def _save(resp: Response) -> Response:
        stored.append(resp)
        return resp

    for assessment in generate_assessments(seed or 0):
        summary = audit_assessment(assessment)
        logging.info(
            "Assessment %s: questions=%s conditional=%s warnings=%d",
            assessment.id,
            summary["totals"]["questions"],  # type: ignore[index]
            summary["totals"]["conditional"],  # type: ignore[index]
            len(summary["warnings"]),  # type: ignore[arg-type]
        )
        answers = generate_answers(assessment, rng)
        collector = ResponseCollector(assessment, candidate_id=f"smoke-{assessment.job_id[:8]}")
        collector.update(answers)
        logging.info("  visible=%d answered=%d", len(collector.visible_questions()), len(answers))
        resp = collector.submit(_save, notify=events.append)
        logging.info("  submitted %s", json.dumps(response_to_dict(resp))[:200])

    logging.info("Run complete: responses=%d timeline_events=%d", len(stored), len(events))
    return stored


if __name__ == "__main__":  # pragma: no cover
    run_smoke_session()
