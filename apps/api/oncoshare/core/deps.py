"""FastAPI dependencies for database access and the query engines."""

from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker

from oncoshare.db.session import SessionLocal
from oncoshare.services.capability_service import (
    CapabilityDetector,
    get_capability_detector,
)
from oncoshare.services.case_query_service import CaseQueryEngine
from oncoshare.services.feed_query_service import FeedQueryEngine
from oncoshare.services.stats_service import StatsAggregator


def get_session_factory() -> sessionmaker[Session]:
    """Session factory for engines that open their own sessions per query."""
    return SessionLocal


def get_db(
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
) -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def get_capabilities() -> CapabilityDetector:
    return get_capability_detector()


def get_case_engine(
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
    capabilities: CapabilityDetector = Depends(get_capabilities),
) -> CaseQueryEngine:
    return CaseQueryEngine(session_factory, capabilities)


def get_feed_engine(
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
) -> FeedQueryEngine:
    return FeedQueryEngine(session_factory)


def get_stats_aggregator(
    case_engine: CaseQueryEngine = Depends(get_case_engine),
) -> StatsAggregator:
    return StatsAggregator(case_engine)
