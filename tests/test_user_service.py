# tests/test_user_service.py
import pytest
from fastapi import HTTPException

from estate_portal.repositories.user_repo import UserRepository
from estate_portal.schemas.user import UserCreate, UserNameUpdate
from estate_portal.services.user_service import UserService


@pytest.fixture
def racing_service(monkeypatch) -> UserService:
    """A service whose up-front name check always passes, as if a concurrent
    request inserted the same name right after the check."""
    service = UserService(UserRepository())
    monkeypatch.setattr(service, "_ensure_name_free", lambda *args, **kwargs: None)
    return service


def test_duplicate_create_is_409_not_500(racing_service, db_session, make_user) -> None:
    make_user("alice", "pw")

    with pytest.raises(HTTPException) as exc:
        racing_service.create_user(db_session, UserCreate(name="alice", password="pw2"))
    assert exc.value.status_code == 409

    # The session was rolled back and is still usable.
    created = racing_service.create_user(db_session, UserCreate(name="bob", password="pw"))
    assert created.name == "bob"
    assert racing_service.count_users(db_session) == 2


def test_duplicate_rename_is_409_not_500(racing_service, db_session, make_user) -> None:
    make_user("alice", "pw")
    bob = make_user("bob", "pw")

    with pytest.raises(HTTPException) as exc:
        racing_service.update_name(db_session, bob.id, UserNameUpdate(name="alice"))
    assert exc.value.status_code == 409

    assert racing_service.get_user(db_session, bob.id).name == "bob"
