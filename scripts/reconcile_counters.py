"""
Recompute Job.applications_count from the applications table.
Run: python -m scripts.reconcile_counters [--job-id 42]
"""
import argparse
import logging
import sys

from app.db.models.job import Job
from app.db.session import SessionLocal
from app.services.job_service import reconcile_applications_count

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def reconcile(job_id: int = None) -> int:
    """Returns the number of jobs whose counter drifted."""
    db = SessionLocal()
    drifted = 0
    try:
        if job_id is not None:
            job_ids = [job_id]
        else:
            job_ids = [row[0] for row in db.query(Job.id).order_by(Job.id).all()]
        for current_id in job_ids:
            previous, actual = reconcile_applications_count(db, current_id)
            if previous != actual:
                drifted += 1
        logger.info(f"Checked {len(job_ids)} jobs, fixed {drifted}")
        return drifted
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Reconcile job application counters")
    parser.add_argument("--job-id", type=int, default=None)
    args = parser.parse_args()

    try:
        fixed = reconcile(args.job_id)
    except Exception as e:
        logger.error(f"Reconciliation failed: {e}", exc_info=True)
        sys.exit(1)
    print(f"\n[DONE] {fixed} counter(s) corrected")
