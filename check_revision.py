import os

from sqlalchemy import create_engine, inspect, text

DB_URL = os.getenv("DATABASE_URL", "sqlite:///./belfius_importer.db")
engine = create_engine(DB_URL)

with engine.begin() as conn:
    exists = inspect(conn).has_table("alembic_version")

    print("alembic_version table exists:", bool(exists))

    if exists:
        v = conn.execute(text("select version_num from alembic_version")).scalar()
        print("DB says current revision:", v)
