import sys
import os
sys.path.append(os.getcwd())

from satguard.db.session import SessionLocal, init_db
from satguard.services.ingestion import fetch_feed_data, load_backup_data
import logging

logging.basicConfig(level=logging.INFO)

def run(use_backup: bool):
    print("Starting ingestion...")
    init_db()
    db = SessionLocal()
    try:
        message = load_backup_data(db) if use_backup else fetch_feed_data(db)
        print(message)
    except Exception as e:
        print(f"Ingestion failed: {e}")
        import traceback
        traceback.print_exc()
    finally:
        db.close()

if __name__ == "__main__":
    # python scripts/run_ingestion.py [--backup]
    run(use_backup="--backup" in sys.argv[1:])
