"""Create the emotion store tables from ORM models."""

from core.config import AppSettings
from db.models import Base
from db.session import create_db_engine

if __name__ == "__main__":
    settings = AppSettings.from_env()
    Base.metadata.create_all(bind=create_db_engine(settings.database_url))
    print(f"DB schema created at {settings.database_url}")
