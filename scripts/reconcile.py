#!/usr/bin/env python3
"""
Reconciliation Script

Recounts every job offer's application counter and rejects in-progress
applications left behind in rounds that were already closed.
Safe to run repeatedly; a clean database reports no changes.

Usage: python scripts/reconcile.py
"""
import logging
import sys
sys.path.insert(0, '.')

from placement_pipeline.core.config import get_settings
from placement_pipeline.db.postgres import get_db_session
from placement_pipeline.services.reconciliation_service import ReconciliationService


def main():
    logging.basicConfig(
        level=getattr(logging, get_settings().log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    with get_db_session() as db:
        results = ReconciliationService(db).reconcile_all()

    changed = 0
    for r in results:
        drift = r.previous_application_count != r.application_count
        if drift or r.stragglers_rejected:
            changed += 1
            print(
                f"Job offer {r.job_offer_id}: count {r.previous_application_count} -> {r.application_count}, "
                f"{r.stragglers_rejected} straggler(s) rejected"
            )

    print(f"\nReconciled {len(results)} job offer(s), {changed} corrected.")


if __name__ == "__main__":
    main()
