from __future__ import annotations

import json
import sys
import warnings
from pathlib import Path
from typing import Dict, List

from .codec import assessment_from_dict
from .errors import DependencyCycleWarning
from .types import OPERATORS, QUESTION_TYPES, Assessment, _is_number


def _blank_coverage() -> dict[str, int]:
    return {qtype: 0 for qtype in QUESTION_TYPES}


def find_dependency_cycles(assessment: Assessment) -> List[List[str]]:
    """Cycles in the conditional-logic graph, each as the list of ids on the loop.

    Every question depends on at most one other, so each walk is a simple chain.
    """
    depends_on: Dict[str, str] = {
        q.id: q.conditional_logic.question_id
        for q in assessment.questions()
        if q.conditional_logic is not None
    }
    cycles: List[List[str]] = []
    settled: set[str] = set()
    for start in depends_on:
        path: List[str] = []
        on_path: set[str] = set()
        node = start
        while node in depends_on and node not in settled and node not in on_path:
            path.append(node)
            on_path.add(node)
            node = depends_on[node]
        if node in on_path:
            cycles.append(path[path.index(node):])
        settled.update(path)
    return cycles


def warn_on_cycles(assessment: Assessment) -> List[List[str]]:
    cycles = find_dependency_cycles(assessment)
    for loop in cycles:
        warnings.warn(
            f"conditional logic cycle: {' -> '.join(loop + loop[:1])}",
            DependencyCycleWarning,
            stacklevel=2,
        )
    return cycles


def audit_assessment(assessment: Assessment) -> dict[str, object]:
    coverage = _blank_coverage()
    totals = {"sections": len(assessment.sections), "questions": 0, "required": 0, "conditional": 0}
    warnings_out: list[str] = []
    ids = {q.id for q in assessment.questions()}

    for sec in assessment.sections:
        if not sec.questions:
            warnings_out.append(f"section {sec.id} has no questions")

    for q in assessment.questions():
        totals["questions"] += 1
        if q.required:
            totals["required"] += 1
        if q.type in coverage:
            coverage[q.type] += 1
        else:
            coverage[q.type] = coverage.get(q.type, 0) + 1
            warnings_out.append(f"question {q.id} has unsupported type {q.type!r} (validated as free text)")

        logic = q.conditional_logic
        if logic is None:
            continue
        totals["conditional"] += 1
        if logic.question_id == q.id:
            warnings_out.append(f"question {q.id} depends on itself")
        elif logic.question_id not in ids:
            warnings_out.append(f"question {q.id} depends on missing question {logic.question_id}")
        if logic.operator not in OPERATORS:
            warnings_out.append(f"question {q.id} uses unknown operator {logic.operator!r} (always shown)")
        elif logic.operator in ("greater-than", "less-than") and not _is_number(logic.value):
            try:
                float(logic.value)
            except (TypeError, ValueError):
                warnings_out.append(f"question {q.id} compares against non-numeric value {logic.value!r}")

    cycles = find_dependency_cycles(assessment)
    for loop in cycles:
        if len(loop) > 1:
            warnings_out.append(f"conditional logic cycle: {' -> '.join(loop + loop[:1])}")

    return {"coverage": coverage, "warnings": warnings_out, "totals": totals, "cycles": cycles}


def print_report(summary: dict[str, object]) -> None:
    coverage: dict[str, int] = summary["coverage"]  # type: ignore[assignment]
    print("=== Assessment Coverage ===")
    for qtype in sorted(coverage):
        print(f"  {qtype:<14}{coverage[qtype]:3d}")

    warnings_list: list[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings_list:
        print("\nWarnings:")
        for msg in warnings_list:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")

    print("\nTotals:", summary["totals"])


def write_summary(summary: dict[str, object], path: Path) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    return text


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print("usage: python -m assessment_core.audit_schema ASSESSMENT.json [SUMMARY.json]")
        return 1
    raw = json.loads(Path(args[0]).read_text(encoding="utf-8"))
    summary = audit_assessment(assessment_from_dict(raw))
    print_report(summary)
    if len(args) > 1:
        write_summary(summary, Path(args[1]))
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
