from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.db import enable_sqlite_foreign_keys, get_db
from app.main import app
from app.models import Base, Customer, Invoice, InvoiceStatusEnum
from app.services.revalidation import InMemoryViewCache, get_view_cache


@pytest.fixture()
def engine(tmp_path):
    db_path = tmp_path / "test.db"
    engine = create_engine(
        f"sqlite+pysqlite:///{db_path}", connect_args={"check_same_thread": False}
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture()
def SessionLocal(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(SessionLocal):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def views():
    return InMemoryViewCache()


@pytest.fixture()
def client(SessionLocal, views):
    def override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_view_cache] = lambda: views
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def customers(db_session):
    lee = Customer(id="c1", name="Lee Robinson", email="lee@robinson.com")
    steph = Customer(id="c2", name="Steph Dietz", email="steph@dietz.com")
    db_session.add_all([lee, steph])
    db_session.commit()
    return {"lee": lee, "steph": steph}


@pytest.fixture()
def invoice(db_session, customers):
    record = Invoice(
        customer_id="c1",
        amount=15795,
        status=InvoiceStatusEnum.PENDING,
        date=date(2026, 1, 15),
    )
    db_session.add(record)
    db_session.commit()
    return record
