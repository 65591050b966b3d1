"""CLI script to seed demo roles, users and courses into the backend DB.
Usage: python scripts/seed.py
"""
import sys
import pathlib
# Ensure `backend/` is on sys.path so `nuredu` package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from nuredu.database import engine, create_db_and_tables
from nuredu import services


def main():
    """Create tables if needed and insert the demo data set.

    Running the script twice leaves the database unchanged the second
    time. Results are printed to stdout for a quick CLI feedback loop.
    """
    create_db_and_tables()
    with Session(engine) as session:
        summary = services.seed_demo_data(session)
    if summary is None:
        print('Demo data already present, nothing to do')
        return
    print(f"Seeded {summary['roles']} roles, {summary['users']} users, {summary['courses']} courses")


if __name__ == '__main__':
    main()
