import pytest
from sqlalchemy.exc import OperationalError

from hrdesk.models.user import User, UserRole
from hrdesk.services.accounts import AccountService

pytestmark = pytest.mark.unit


def test_register_forces_defaults(client, db):
    response = client.post(
        "/users",
        json={
            "email": "a@x.com",
            "name": "Ann",
            "bankAccount": "DE00 1234",
            "role": "admin",
            "isVerified": True,
            "isFired": True,
            "salary": 5000,
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "employee"
    assert body["isVerified"] is False
    assert body["isFired"] is False
    assert body["salary"] == 0
    assert body["bankAccount"] == "DE00 1234"

    stored = db.query(User).filter(User.email == "a@x.com").one()
    assert stored.role == "employee"
    assert stored.is_verified is False


def test_register_duplicate_is_conflict(client, db):
    assert client.post("/users", json={"email": "a@x.com"}).status_code == 201

    response = client.post("/users", json={"email": "a@x.com"})

    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"
    assert db.query(User).count() == 1


def test_register_rejects_oversized_extra_map(client):
    extra = {f"k{i}": "v" for i in range(17)}

    response = client.post("/users", json={"email": "a@x.com", "extra": extra})

    assert response.status_code == 400


def test_register_rejects_malformed_email(client):
    assert client.post("/users", json={"email": "not-an-email"}).status_code == 400


def test_get_user_requires_identity(client, make_user):
    make_user("a@x.com")
    assert client.get("/users/a@x.com").status_code == 401


def test_get_user_returns_record(client, login, make_user):
    make_user("a@x.com", name="Ann", extra={"team": "blue"})
    login("a@x.com")

    response = client.get("/users/a@x.com")

    assert response.status_code == 200
    assert response.json()["name"] == "Ann"
    assert response.json()["extra"] == {"team": "blue"}


def test_get_unknown_user_is_not_found(client, login):
    login("a@x.com")
    assert client.get("/users/ghost@x.com").status_code == 404


def test_projections_for_unknown_user(client, login):
    login("a@x.com")

    assert client.get("/users/role/ghost@x.com").json() == {"role": None}
    assert client.get("/users/admin/ghost@x.com").json() == {"admin": False}
    assert client.get("/users/fired/ghost@x.com").json() == {"fired": False}


def test_admin_projection(client, login, make_user):
    make_user("root@x.com", role=UserRole.ADMIN)
    login("root@x.com")

    assert client.get("/users/admin/root@x.com").json() == {"admin": True}


def test_self_update(client, login, make_user):
    make_user("a@x.com", name="Ann")
    login("a@x.com")

    response = client.patch("/users/a@x.com", json={"designation": "Engineer"})

    assert response.status_code == 200
    assert response.json()["modified"] is True
    assert response.json()["user"]["designation"] == "Engineer"


def test_noop_update_is_reported_separately(client, login, make_user):
    make_user("a@x.com", name="Ann")
    login("a@x.com")

    response = client.patch("/users/a@x.com", json={"name": "Ann"})

    assert response.status_code == 200
    assert response.json()["modified"] is False


def test_update_unknown_user_is_not_found(client, login, make_user):
    make_user("hr@x.com", role=UserRole.HR)
    login("hr@x.com")

    assert client.patch("/users/ghost@x.com", json={"name": "G"}).status_code == 404


def test_update_other_user_requires_privilege(client, login, make_user):
    make_user("a@x.com")
    make_user("b@x.com")
    login("a@x.com")

    assert client.patch("/users/b@x.com", json={"name": "Hacked"}).status_code == 403


def test_employee_cannot_change_own_salary(client, login, make_user):
    make_user("a@x.com")
    login("a@x.com")

    assert client.patch("/users/a@x.com", json={"salary": 99999}).status_code == 403


def test_hr_can_change_salary(client, login, make_user):
    make_user("a@x.com")
    make_user("hr@x.com", role=UserRole.HR)
    login("hr@x.com")

    response = client.patch("/users/a@x.com", json={"salary": 4200})

    assert response.status_code == 200
    assert response.json()["user"]["salary"] == 4200


@pytest.mark.parametrize("field", ["role", "isVerified", "isFired", "email"])
def test_update_rejects_protected_fields(client, login, make_user, field):
    make_user("a@x.com")
    login("a@x.com")

    response = client.patch("/users/a@x.com", json={field: "admin"})

    assert response.status_code == 400


def test_verify_user(client, login, make_user, db):
    make_user("a@x.com")
    login("a@x.com")

    assert client.patch("/users/verify/a@x.com").status_code == 200
    assert client.patch("/users/verify/a@x.com").status_code == 200

    db.expire_all()
    assert db.query(User).filter(User.email == "a@x.com").one().is_verified is True


def test_verify_requires_identity(client, make_user):
    make_user("a@x.com")
    assert client.patch("/users/verify/a@x.com").status_code == 401


def test_fire_requires_admin(client, login, make_user):
    make_user("a@x.com")
    make_user("hr@x.com", role=UserRole.HR)
    login("hr@x.com")

    assert client.patch("/users/fired/a@x.com").status_code == 403
    assert client.get("/users/fired/a@x.com").json() == {"fired": False}


def test_fire_without_cookie_is_unauthenticated(client, make_user):
    make_user("a@x.com")
    assert client.patch("/users/fired/a@x.com").status_code == 401


def test_admin_fires_user_idempotently(client, login, make_user):
    make_user("a@x.com")
    make_user("root@x.com", role=UserRole.ADMIN)
    login("root@x.com")

    assert client.patch("/users/fired/a@x.com").status_code == 200
    assert client.patch("/users/fired/a@x.com").status_code == 200
    assert client.get("/users/fired/a@x.com").json() == {"fired": True}


def test_admin_changes_role(client, login, make_user):
    make_user("a@x.com")
    make_user("root@x.com", role=UserRole.ADMIN)
    login("root@x.com")

    response = client.patch("/users/role/a@x.com", json={"role": "hr"})

    assert response.status_code == 200
    assert response.json()["role"] == "hr"
    assert client.get("/users/role/a@x.com").json() == {"role": "hr"}


def test_role_change_rejects_unknown_role(client, login, make_user):
    make_user("root@x.com", role=UserRole.ADMIN)
    login("root@x.com")

    assert client.patch("/users/role/root@x.com", json={"role": "owner"}).status_code == 400


def test_hr_lists_users_by_role(client, login, make_user):
    make_user("a@x.com")
    make_user("hr@x.com", role=UserRole.HR)
    login("hr@x.com")

    response = client.get("/users", params={"role": "employee"})

    assert response.status_code == 200
    assert [u["email"] for u in response.json()] == ["a@x.com"]


def test_employee_cannot_list_users(client, login, make_user):
    make_user("a@x.com")
    login("a@x.com")

    assert client.get("/users").status_code == 403


def test_store_failure_is_transient_without_driver_text(client, login, monkeypatch):
    login("a@x.com")

    def broken(self, email):
        raise OperationalError("SELECT", {}, Exception("Lost connection to MySQL server"))

    monkeypatch.setattr(AccountService, "resolve", broken)
    response = client.get("/users/a@x.com")

    assert response.status_code == 500
    body = response.json()
    assert body["code"] == "TRANSIENT"
    assert "MySQL" not in body["detail"]


def test_hr_cannot_change_own_salary(client, login, make_user, db):
    make_user("hr@x.com", role=UserRole.HR, salary=3000)
    login("hr@x.com")

    assert client.patch("/users/hr@x.com", json={"salary": 1000000}).status_code == 403

    db.expire_all()
    assert db.query(User).filter(User.email == "hr@x.com").one().salary == 3000


def test_hr_cannot_change_other_hr_salary(client, login, make_user):
    make_user("hr@x.com", role=UserRole.HR)
    make_user("hr2@x.com", role=UserRole.HR)
    login("hr@x.com")

    assert client.patch("/users/hr2@x.com", json={"salary": 9000}).status_code == 403


def test_admin_can_change_hr_salary(client, login, make_user):
    make_user("hr@x.com", role=UserRole.HR)
    make_user("root@x.com", role=UserRole.ADMIN)
    login("root@x.com")

    response = client.patch("/users/hr@x.com", json={"salary": 5100})

    assert response.status_code == 200
    assert response.json()["user"]["salary"] == 5100


def test_register_drops_empty_extra_values(client):
    response = client.post("/users", json={"email": "a@x.com", "extra": {"team": "blue", "floor": None}})

    assert response.status_code == 201
    assert response.json()["extra"] == {"team": "blue"}


def test_unrecognised_stored_role_degrades(client, login, monkeypatch):
    login("bob@x.com")
    legacy = User(email="bob@x.com", role="Admin", is_verified=False, is_fired=False, salary=0, extra={})
    monkeypatch.setattr(AccountService, "resolve", lambda self, email: legacy)

    assert client.get("/users/role/bob@x.com").json() == {"role": None}
    assert client.get("/users/admin/bob@x.com").json() == {"admin": False}
    assert client.get("/users/verified").status_code == 403

    response = client.get("/users/bob@x.com")
    assert response.status_code == 200
    assert response.json()["role"] is None
