import sys
import os
sys.path.append(os.getcwd())

from satguard.db.session import engine
from satguard.db.base import Base

def reset_db():
    print("Dropping all tables...")
    Base.metadata.drop_all(bind=engine)

    print("Creating all tables...")
    Base.metadata.create_all(bind=engine)
    print("Database reset complete.")

if __name__ == "__main__":
    reset_db()
