"""
Real SQLAlchemy-backed claims store, used when DATABASE_URL is set.
Implements the same interface as src.database.postgres (in-memory stub).
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker

from src.database.models import Base, Claim

_IMMUTABLE = ("id", "created_at")


def _normalize_connection_string(s: str) -> str:
    """Strip common mistakes: 'psql \'...\'', extra quotes, whitespace."""
    s = s.strip()
    if re.match(r"^psql\s+", s, re.IGNORECASE):
        s = re.sub(r"^psql\s+", "", s, flags=re.IGNORECASE).strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        s = s[1:-1].strip()
    if s.startswith("postgres://"):
        s = "postgresql://" + s[len("postgres://"):]
    return s


class PostgresDB:
    """
    Claims data access using SQLAlchemy. Any SQLAlchemy URL works; pool
    sizing is only applied to server databases (not SQLite).
    """

    def __init__(self, connection_string: str) -> None:
        connection_string = _normalize_connection_string(connection_string)
        engine_kwargs: Dict[str, Any] = {"pool_pre_ping": True}
        if not connection_string.startswith("sqlite"):
            engine_kwargs.update(pool_size=5, max_overflow=10)
        self.engine = create_engine(connection_string, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine, expire_on_commit=False)

    def create_tables(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def _session(self) -> Session:
        s = self.SessionLocal()
        try:
            yield s
            s.commit()
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    def add_claim(self, data: Dict[str, Any]) -> Claim:
        with self._session() as s:
            values = {k: v for k, v in data.items() if k not in _IMMUTABLE}
            c = Claim(id=str(uuid4()), **values)
            s.add(c)
            s.flush()
            s.refresh(c)
            return c

    def get_claim(self, claim_id: str) -> Optional[Claim]:
        with self._session() as s:
            return s.get(Claim, claim_id)

    def get_claim_by_number(self, claim_number: str) -> Optional[Claim]:
        with self._session() as s:
            stmt = select(Claim).where(Claim.claim_number == claim_number)
            return s.execute(stmt).scalars().first()

    def list_claims(
        self,
        policy_number: Optional[str] = None,
        status: Optional[str] = None,
        claim_type: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Claim]:
        with self._session() as s:
            stmt = select(Claim)
            if policy_number is not None:
                stmt = stmt.where(Claim.policy_number == policy_number)
            if status is not None:
                stmt = stmt.where(Claim.status == status)
            if claim_type is not None:
                stmt = stmt.where(Claim.type == claim_type)
            stmt = stmt.order_by(Claim.created_at, Claim.claim_number).offset(offset)
            if limit is not None:
                stmt = stmt.limit(limit)
            return list(s.execute(stmt).scalars().all())

    def count_claims(self, policy_number: Optional[str] = None) -> int:
        with self._session() as s:
            stmt = select(func.count()).select_from(Claim)
            if policy_number is not None:
                stmt = stmt.where(Claim.policy_number == policy_number)
            return s.execute(stmt).scalar_one()

    def update_claim(self, claim_id: str, data: Dict[str, Any]) -> Optional[Claim]:
        with self._session() as s:
            c = s.get(Claim, claim_id)
            if c is None:
                return None
            for key, value in data.items():
                if key not in _IMMUTABLE and hasattr(Claim, key):
                    setattr(c, key, value)
            s.flush()
            s.refresh(c)
            return c

    def delete_claim(self, claim_id: str) -> bool:
        with self._session() as s:
            c = s.get(Claim, claim_id)
            if c is None:
                return False
            s.delete(c)
            return True
