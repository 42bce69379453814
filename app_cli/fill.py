from __future__ import annotations
import datetime, json, os, sys
from assessment_core.codec import assessment_from_dict, response_to_dict
from assessment_core.collector import ResponseCollector
from assessment_core.errors import SubmissionRejected
from assessment_core.visibility import should_show
def ask(prompt: str, options=None) -> str:
    if options:
        print(prompt)
        for i,opt in enumerate(options): print(f"  [{i}] {opt}")
        while True:
            v = input("Your choice (index): ").strip()
            if v == "" or v.isdigit(): return v
            print("Enter a number index.")
    else:
        return input(prompt + " ").strip()
def ask_many(prompt: str, options) -> str:
    print(prompt)
    for i,opt in enumerate(options): print(f"  [{i}] {opt}")
    return input("Your choices (comma-separated indexes): ").strip()
def to_value(q, raw: str):
    if raw == "": return None
    if q.type == "numeric":
        try: return int(raw)
        except ValueError: pass
        try: return float(raw)
        except ValueError: return raw
    if q.type == "single-choice":
        return q.options[int(raw)] if int(raw) < len(q.options) else raw
    if q.type == "multi-choice":
        picks = [p.strip() for p in raw.split(",") if p.strip().isdigit()]
        return [q.options[int(p)] for p in picks if int(p) < len(q.options)]
    return raw
def fill(collector: ResponseCollector, only=None):
    for q in collector.assessment.questions():
        if only is not None and q.id not in only: continue
        if not should_show(q, collector.answers):
            collector.clear_answer(q.id); continue
        label = f"{q.title}{' *' if q.required else ''}"
        if q.type == "multi-choice": raw = ask_many(label, q.options)
        elif q.type == "single-choice": raw = ask(label, q.options)
        else: raw = ask(f"{label} [{q.type}]")
        v = to_value(q, raw)
        if v is None: collector.clear_answer(q.id)
        else: collector.set_answer(q.id, v)
def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print("usage: python -m app_cli.fill ASSESSMENT.json [CANDIDATE_ID]"); return 1
    with open(args[0], encoding="utf-8") as f: assessment = assessment_from_dict(json.load(f))
    candidate = args[1] if len(args) > 1 else "cli"
    print(assessment.title)
    if assessment.description: print(assessment.description)
    collector = ResponseCollector(assessment, candidate)
    fill(collector)
    os.makedirs("responses", exist_ok=True)
    ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    path = os.path.join("responses", f"response_{ts}.json")
    def save(resp):
        with open(path, "w", encoding="utf-8") as f: json.dump(response_to_dict(resp), f, indent=2)
        return resp
    while True:
        try:
            collector.submit(save); break
        except SubmissionRejected as e:
            print("\nPlease fix the following:")
            for err in e.errors: print(f"  - {err.question_id}: {err.message}")
            fill(collector, only={err.question_id for err in e.errors})
    print(f"Done. Response saved to: {path}")
    return 0
if __name__ == "__main__": raise SystemExit(main())
