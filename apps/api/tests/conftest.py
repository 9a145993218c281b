"""
Test configuration and fixtures.

Provides:
- A fresh in-memory SQLite database per test (with or without the optional
  zone lookup table)
- Record factories for clinics, cases, files, follow-ups and feed posts
- Capability detectors pinned to the joined or fallback path
- HTTPX AsyncClient wired to the test database
"""
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import AsyncGenerator, Generator

# Settings are read at import time; keep tests off the developer database.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["QUERY_TIMEOUT_SECONDS"] = "10"
os.environ["STORAGE_BACKEND"] = "local"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from oncoshare.core.deps import get_capabilities, get_session_factory
from oncoshare.db.base import Base
from oncoshare.db.enums import FeedStatus, FileKind
from oncoshare.db.models import (
    AnatomicalSite,
    Case,
    CaseFile,
    Clinic,
    FeedPost,
    FollowUp,
    TumourType,
)
from oncoshare.db.models.geo import ensure_zone_table
from oncoshare.db.session import build_engine
from oncoshare.domain.case_numbers import next_case_number
from oncoshare.main import app
from oncoshare.services.capability_service import ResettableCapabilityDetector
from oncoshare.services.case_query_service import CaseQueryEngine


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class StaticCapabilities:
    """Detector stand-in that always reports the given answer."""

    def __init__(self, present: bool):
        self.present = present
        self.table_name = "ng_states"

    async def has_zone_table(self) -> bool:
        return self.present

    def has_zone_table_sync(self) -> bool:
        return self.present


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite with the core tables; the zone table is opt-in."""
    test_engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture(scope="function")
def zone_table(engine: Engine) -> None:
    """Create and load the optional zone lookup table."""
    with engine.begin() as connection:
        ensure_zone_table(connection)


@pytest.fixture(scope="function")
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="function")
def sql_statements(engine: Engine) -> Generator[list[str], None, None]:
    """Every SQL statement the engine executes while the test runs."""
    statements: list[str] = []

    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):  # type: ignore[no-untyped-def]
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", before_cursor_execute)
    yield statements
    event.remove(engine, "before_cursor_execute", before_cursor_execute)


# =============================================================================
# Factories
# =============================================================================

@dataclass
class Factory:
    """Creates committed rows in the test database."""

    db: Session

    def clinic(self, name: str = "Test Clinic", state: str | None = "Lagos") -> Clinic:
        clinic = Clinic(name=name, state=state)
        self.db.add(clinic)
        self.db.commit()
        return clinic

    def tumour_type(self, name: str = "Lymphoma", is_system: bool = True) -> TumourType:
        tumour_type = TumourType(name=name, is_system=is_system)
        self.db.add(tumour_type)
        self.db.commit()
        return tumour_type

    def anatomical_site(self, name: str = "Skin") -> AnatomicalSite:
        site = AnatomicalSite(name=name, is_system=True)
        self.db.add(site)
        self.db.commit()
        return site

    def case(
        self,
        clinic: Clinic,
        state: str | None = None,
        diagnosis_date: datetime | None = None,
        **fields,
    ) -> Case:
        diagnosis_date = diagnosis_date or datetime(2025, 3, 10, tzinfo=timezone.utc)
        case = Case(
            case_number=fields.pop("case_number", None)
            or next_case_number(self.db, diagnosis_date.year),
            clinic_id=clinic.id,
            state=clinic.state if state is None else state,
            species=fields.pop("species", "Canine"),
            diagnosis_date=diagnosis_date,
            **fields,
        )
        self.db.add(case)
        self.db.commit()
        return case

    def file(
        self,
        case: Case,
        kind: FileKind = FileKind.IMAGE,
        created_at: datetime | None = None,
        deleted: bool = False,
        key: str | None = None,
    ) -> CaseFile:
        now = datetime.now(timezone.utc)
        case_file = CaseFile(
            case_id=case.id,
            kind=kind.value,
            filename="scan.jpg" if kind == FileKind.IMAGE else "report.pdf",
            storage_key=key or f"cases/{case.id}/{uuid.uuid4().hex}",
            created_at=created_at or now,
            deleted_at=now if deleted else None,
        )
        self.db.add(case_file)
        self.db.commit()
        return case_file

    def follow_up(
        self,
        case: Case,
        scheduled_for: datetime,
        is_completed: bool = False,
    ) -> FollowUp:
        follow_up = FollowUp(
            case_id=case.id,
            title="Recheck",
            scheduled_for=scheduled_for,
            is_completed=is_completed,
        )
        self.db.add(follow_up)
        self.db.commit()
        return follow_up

    def post(
        self,
        created_at: datetime,
        clinic: Clinic | None = None,
        status: FeedStatus = FeedStatus.PUBLISHED,
        title: str = "Update",
    ) -> FeedPost:
        post = FeedPost(
            title=title,
            body="Body",
            status=status.value,
            clinic_id=clinic.id if clinic else None,
            created_at=created_at,
        )
        self.db.add(post)
        self.db.commit()
        return post


@pytest.fixture(scope="function")
def factory(db: Session) -> Factory:
    return Factory(db)


# =============================================================================
# Engine Fixtures
# =============================================================================

@pytest.fixture
def static_capabilities() -> type[StaticCapabilities]:
    return StaticCapabilities


@pytest.fixture(scope="function")
def detector(session_factory: sessionmaker[Session]) -> ResettableCapabilityDetector:
    return ResettableCapabilityDetector(session_factory)


@pytest.fixture(scope="function")
def joined_engine(session_factory, zone_table) -> CaseQueryEngine:
    return CaseQueryEngine(session_factory, StaticCapabilities(True))


@pytest.fixture(scope="function")
def fallback_engine(session_factory) -> CaseQueryEngine:
    return CaseQueryEngine(session_factory, StaticCapabilities(False))


@pytest.fixture(params=["joined", "fallback"])
def case_engine(request, session_factory) -> CaseQueryEngine:
    """The case engine on each zone derivation path."""
    if request.param == "joined":
        request.getfixturevalue("zone_table")
    return CaseQueryEngine(session_factory, StaticCapabilities(request.param == "joined"))


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(
    session_factory: sessionmaker[Session],
    detector: ResettableCapabilityDetector,
) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient whose engines read the per-test database."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_capabilities] = lambda: detector

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
