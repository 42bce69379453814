# tools/seed_data.py
from __future__ import annotations
import argparse, json, os, sys

def main(argv=None) -> int:
    from assessment_core.config import load_config
    cfg = load_config()
    ap = argparse.ArgumentParser(description="Write seeded sample assessments into the JSON store.")
    ap.add_argument("--seed", type=int, default=cfg.get("SEED", 42))
    ap.add_argument("--count", type=int, default=None, help="number of assessments (default: SEED_ASSESSMENTS)")
    ap.add_argument("--data-dir", default=None, help="storage root (default: $DATA_DIR or ./data)")
    ap.add_argument("--print", dest="print_only", action="store_true", help="print JSON instead of storing")
    args = ap.parse_args(argv)

    if args.data_dir:
        os.environ["DATA_DIR"] = args.data_dir

    from assessment_core.codec import assessment_to_dict
    from assessment_core.config import make_rng
    from assessment_core.seed import generate_assessments, generate_assignments

    assessments = generate_assessments(args.seed, count=args.count)
    if args.print_only:
        json.dump([assessment_to_dict(a) for a in assessments], sys.stdout, indent=2)
        print()
        return 0

    from api import storage
    stored_all = []
    for a in assessments:
        stored = storage.save_assessment(a)
        stored_all.append(stored)
        print(f"job={stored.job_id} assessment={stored.id} questions={len(stored.questions())}")
    assignments = generate_assignments(stored_all, make_rng(cfg, seed=args.seed))
    for asg in assignments:
        storage.save_assignment(asg)
    print(f"Seeded {len(assessments)} assessment(s) and {len(assignments)} assignment(s) into {storage.DATA_ROOT}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
