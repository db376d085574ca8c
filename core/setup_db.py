# core/setup_db.py

from core.database import init_db


def main():
    print("Creating database tables...")

    # Create all SQLAlchemy tables
    init_db()

    print("Database initialized successfully.")


if __name__ == "__main__":
    main()
