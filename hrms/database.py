# hrms/database.py

from sqlmodel import SQLModel, create_engine, Session

from hrms.config import get_settings

settings = get_settings()

engine = create_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO, pool_pre_ping=True)


def init_db(bind=None):
    # Register every table on the metadata before create_all
    import hrms.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def get_engine():
    return engine


def get_session():
    """Provide DB session"""
    with Session(engine) as session:
        yield session
