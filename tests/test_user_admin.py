import pytest

from src.commonUtils.enumUtils import Role
from src.commonUtils.errors import NotFoundError, ValidationError
from src.crud.userService import UserService
from src.models.userModel import User
from src.schemas.userSchema import UserAdminUpdate


async def test_only_admins_manage_users(client_as, shopper):
    async with client_as(shopper) as client:
        listing = await client.get("/api/v1/users")
        detail = await client.get(f"/api/v1/users/{shopper.id}")

    assert listing.status_code == 403
    assert detail.status_code == 403


async def test_list_users_filters_by_role(client_as, admin, shopper):
    async with client_as(admin) as client:
        everyone = (await client.get("/api/v1/users")).json()
        admins = (await client.get("/api/v1/users", params={"role": "admin"})).json()

    assert everyone["meta"]["total"] == 2
    assert [u["email"] for u in admins["users"]] == [admin.email]
    assert all("hashed_password" not in u for u in everyone["users"])


async def test_cart_paths_are_not_taken_for_user_ids(client_as, admin):
    async with client_as(admin) as client:
        response = await client.get("/api/v1/users/cart")

    assert response.status_code == 200
    assert "cart" in response.json()


async def test_get_user(client_as, admin, shopper):
    async with client_as(admin) as client:
        found = await client.get(f"/api/v1/users/{shopper.id}")
        missing = await client.get("/api/v1/users/65a000000000000000000000")

    assert found.json()["data"]["email"] == shopper.email
    assert missing.status_code == 404


async def test_promote_user_to_admin(client_as, admin, shopper):
    async with client_as(admin) as client:
        response = await client.put(f"/api/v1/users/{shopper.id}", json={"roles": ["admin"]})

    data = response.json()["data"]
    assert response.status_code == 200
    assert data["roles"] == ["user", "admin"]
    assert data["is_superuser"] is True

    stored = await User.get(shopper.id)
    assert stored.is_admin


async def test_unknown_role_is_rejected(client_as, admin, shopper):
    async with client_as(admin) as client:
        response = await client.put(f"/api/v1/users/{shopper.id}", json={"roles": ["owner"]})

    assert response.status_code == 400


async def test_demote_and_rename(db, admin, make_user):
    other_admin = await make_user("second@example.com", roles=["user", "admin"])

    updated = await UserService.update_user(
        other_admin.id, UserAdminUpdate(roles=[Role.USER], full_name="Second")
    )

    assert updated.roles == ["user"]
    assert updated.is_superuser is False
    assert updated.full_name == "Second"


async def test_email_must_stay_unique(db, admin, shopper):
    with pytest.raises(ValidationError):
        await UserService.update_user(shopper.id, UserAdminUpdate(email=admin.email))

    updated = await UserService.update_user(shopper.id, UserAdminUpdate(email="new@example.com"))
    assert updated.email == "new@example.com"


async def test_admin_cannot_delete_themselves(client_as, admin):
    async with client_as(admin) as client:
        response = await client.delete(f"/api/v1/users/{admin.id}")

    assert response.status_code == 400
    assert response.json()["message"] == "Admin cannot delete themselves"
    assert await User.get(admin.id) is not None


async def test_delete_user(client_as, admin, shopper):
    async with client_as(admin) as client:
        response = await client.delete(f"/api/v1/users/{shopper.id}")

    assert response.json() == {"success": True, "message": "User removed"}
    assert await User.get(shopper.id) is None

    with pytest.raises(NotFoundError):
        await UserService.get_user(shopper.id)
