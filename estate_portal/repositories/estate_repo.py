# estate_portal/repositories/estate_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from estate_portal.models.estate import Estate
from estate_portal.models.user import utcnow


class EstateRepository:
    """
    Data access layer for Estate.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, estate_id: uuid.UUID) -> Estate | None:
        return session.get(Estate, estate_id)

    def list(self, session: Session, skip: int = 0, limit: int = 50) -> list[Estate]:
        stmt = (
            select(Estate)
            .order_by(Estate.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def count(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Estate)
        return session.exec(stmt).one()

    def create(self, session: Session, estate: Estate) -> Estate:
        session.add(estate)
        session.commit()
        session.refresh(estate)
        return estate

    def update(self, session: Session, estate: Estate) -> Estate:
        estate.updated_at = utcnow()
        session.add(estate)
        session.commit()
        session.refresh(estate)
        return estate

    def delete(self, session: Session, estate: Estate) -> None:
        session.delete(estate)
        session.commit()
