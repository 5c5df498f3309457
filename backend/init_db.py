"""
Database initialization script
Run this to create tables and seed the default admin account
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from ems.core.config import settings
from ems.core.database import SessionLocal
from ems.core.seed import create_tables, seed_admin


def init_db():
    """Initialize database with tables"""
    print("Creating database tables...")
    create_tables()
    print("✓ Tables created successfully")


def seed_data():
    """Seed initial data"""
    db = SessionLocal()

    try:
        print("\nSeeding initial data...")
        admin = seed_admin(db)
        print(f"✓ Admin user ready (email: {admin.email}, id: {admin.employee_identifier})")
        print("\n✓ Database seeded successfully!")

    except Exception as e:
        print(f"\n✗ Error seeding data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    print("=" * 60)
    print(f"{settings.APP_NAME} - Database Initialization")
    print("=" * 60)

    init_db()
    seed_data()

    print("\n" + "=" * 60)
    print("Initialization complete!")
    print("=" * 60)
    print("\nYou can now access:")
    print("  - API: http://localhost:8000/api/v1")
    print("  - API Docs: http://localhost:8000/docs")
    print("\nDefault credentials:")
    print(f"  Admin - email: {settings.SEED_ADMIN_EMAIL}, password: {settings.SEED_ADMIN_PASSWORD}")
    print("=" * 60)
