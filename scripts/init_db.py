"""
Database initialization script.

Creates all tables and optionally inserts a sample catalogue tender for
verification (pass --verify).
"""
import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from tender_search.db.models import Base, CatalogueTender
from tender_search.db.session import SessionLocal, get_engine


def init_database():
    """Create all database tables."""
    print("Creating database tables...")
    Base.metadata.create_all(get_engine())
    print("Tables created successfully.")


def verify_with_test_insert():
    """Insert and query a sample catalogue tender to verify the setup."""
    db = SessionLocal()
    try:
        existing = db.query(CatalogueTender).filter_by(tender_id="verify-001").first()

        if existing:
            print(f"Sample tender already exists: {existing.title}")
            return True

        sample = CatalogueTender(
            tender_id="verify-001",
            reference="VERIFY-001",
            title="Maintenance du parc informatique - vérification",
            description="Tender inserted to verify the database setup.",
            organization="Commune de Test",
            location="Rennes",
            country="France",
            budget=45000.0,
            deadline=datetime.utcnow() + timedelta(days=30),
            cpv_codes=["72000000"],
            tender_type="service",
            status="open",
        )
        db.add(sample)
        db.commit()
        print(f"Sample tender inserted with ID: {sample.id}")

        queried = db.query(CatalogueTender).filter_by(id=sample.id).first()
        print(f"Queried back: {queried.title}")
        print(f"CPV codes: {queried.cpv_codes}")

        return True
    except Exception as e:
        print(f"Error during verification: {e}")
        db.rollback()
        return False
    finally:
        db.close()


if __name__ == "__main__":
    init_database()
    if "--verify" in sys.argv:
        ok = verify_with_test_insert()
        sys.exit(0 if ok else 1)
