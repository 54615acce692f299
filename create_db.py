# create_db.py - Create database tables
from sqlalchemy import inspect

from scriptboard.db.base import Base
from scriptboard.db.session import engine
from scriptboard import models  # noqa: F401  (registers tables)


if __name__ == "__main__":
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("Database tables created.")

    inspector = inspect(engine)
    tables = inspector.get_table_names()
    print(f"\nCreated {len(tables)} tables:")
    for table in tables:
        print(f"   - {table}")
