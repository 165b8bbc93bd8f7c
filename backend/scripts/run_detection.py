import sys
import os
sys.path.append(os.getcwd())

from satguard.db.session import SessionLocal, init_db
from satguard.services.conjunction import detect_collisions
from satguard.services.predictions import list_active
import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

def run():
    init_db()
    db = SessionLocal()
    try:
        summary = detect_collisions(db)
        print(summary.message)
        for p in list_active(db):
            print(f"  {p.risk_level.value:8} {p.satellite1.name} <-> {p.satellite2.name}: "
                  f"{p.minimum_distance:.3f} km ({p.probability_score:.1f}%)")
        for failure in summary.skipped:
            print(f"  skipped: {failure}")
    finally:
        db.close()

if __name__ == "__main__":
    run()
