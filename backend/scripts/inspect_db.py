import sys
import os
sys.path.append(os.getcwd())

from sqlalchemy import create_engine, inspect, text
from satguard.core.config import settings

engine = create_engine(settings.SQLALCHEMY_DATABASE_URI)
inspector = inspect(engine)
tables = inspector.get_table_names()

print("Tables:", tables)

for table in ("satellite", "collisionprediction", "alert"):
    if table not in tables:
        print(f"'{table}' table not found!")
        continue
    print(f"\nColumns in '{table}':")
    for col in inspector.get_columns(table):
        print(f"- {col['name']} ({col['type']})")

with engine.connect() as conn:
    if "satellite" in tables:
        cnt = conn.execute(text("SELECT count(*) FROM satellite WHERE is_active")).scalar()
        print(f"\nActive Satellites: {cnt}")
    if "collisionprediction" in tables:
        rows = conn.execute(text(
            "SELECT risk_level, count(*) FROM collisionprediction WHERE status = 'ACTIVE' GROUP BY risk_level"
        )).all()
        print("Active predictions:", {level: n for level, n in rows})
    if "alert" in tables:
        cnt = conn.execute(text("SELECT count(*) FROM alert WHERE NOT acknowledged")).scalar()
        print(f"Unacknowledged Alerts: {cnt}")
