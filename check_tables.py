import os

from sqlalchemy import create_engine, inspect

DB_URL = os.getenv("DATABASE_URL", "sqlite:///./belfius_importer.db")
engine = create_engine(DB_URL)

tables = set(inspect(engine).get_table_names())
for name in ("transactions", "import_logs"):
    print(f"{name} exists:", name in tables)
