import asyncio

import pytest

from services import admin_service
from services.admin_service import ProtectedAccountError


@pytest.fixture
def accounts(db):
    db.seed(
        "users",
        {"id": "u-admin", "auth_user_id": "auth-admin", "role": "admin", "status": "active"},
        {"id": "u-student", "auth_user_id": "auth-student", "role": "student", "status": "active"},
        {"id": "u-vendor", "auth_user_id": "auth-vendor", "role": "vendor", "status": "active"},
        {"id": "u-newvendor", "auth_user_id": "auth-newvendor", "role": "vendor", "status": "active"},
    )
    db.seed("vendors", {"id": "u-vendor", "business_name": "Warung Bee", "status": "pending"})
    db.auth.admin.metadata["auth-newvendor"] = {
        "canteenName": "Kopi Hive",
        "canteenLocation": "Canteen B",
        "phone": "0812",
    }
    return db


def _vendor(db, vendor_id):
    return next(row for row in db.tables["vendors"] if row["id"] == vendor_id)


def _user(db, user_id):
    return next(row for row in db.tables["users"] if row["id"] == user_id)


def test_approve_existing_vendor(accounts, clock):
    row = asyncio.run(admin_service.approve_vendor(accounts, clock, "u-vendor"))
    assert row["status"] == "approved"
    assert _vendor(accounts, "u-vendor")["approved_at"] == clock.now().isoformat()


def test_approve_builds_vendor_from_signup_metadata(accounts, clock):
    row = asyncio.run(admin_service.approve_vendor(accounts, clock, "u-newvendor"))
    assert row["business_name"] == "Kopi Hive"
    assert row["location"] == "Canteen B"
    assert row["contact_phone"] == "0812"
    assert _vendor(accounts, "u-newvendor")["status"] == "approved"


def test_approve_unknown_vendor(accounts, clock):
    with pytest.raises(ValueError):
        asyncio.run(admin_service.approve_vendor(accounts, clock, "nobody"))


def test_reject_and_suspend(accounts, clock):
    asyncio.run(admin_service.reject_vendor(accounts, clock, "u-vendor"))
    assert _vendor(accounts, "u-vendor")["status"] == "rejected"
    asyncio.run(admin_service.suspend_vendor(accounts, clock, "u-vendor"))
    assert _vendor(accounts, "u-vendor")["status"] == "suspended"
    with pytest.raises(ValueError):
        asyncio.run(admin_service.suspend_vendor(accounts, clock, "missing"))


def test_suspending_vendor_user_mirrors_to_vendor(accounts, clock):
    asyncio.run(admin_service.update_user_status(accounts, clock, "u-vendor", "suspended"))
    assert _user(accounts, "u-vendor")["status"] == "suspended"
    assert _vendor(accounts, "u-vendor")["status"] == "suspended"

    asyncio.run(admin_service.update_user_status(accounts, clock, "u-vendor", "active"))
    assert _vendor(accounts, "u-vendor")["status"] == "approved"


def test_student_status_does_not_touch_vendors(accounts, clock):
    asyncio.run(admin_service.update_user_status(accounts, clock, "u-student", "suspended"))
    assert _user(accounts, "u-student")["status"] == "suspended"
    assert ("vendors", "update") not in accounts.calls


def test_admins_are_protected(accounts, clock):
    with pytest.raises(ProtectedAccountError):
        asyncio.run(admin_service.update_user_status(accounts, clock, "u-admin", "suspended"))
    with pytest.raises(ProtectedAccountError):
        asyncio.run(admin_service.delete_user(accounts, clock, "u-admin"))
    assert _user(accounts, "u-admin")["status"] == "active"


def test_delete_is_a_soft_delete(accounts, clock):
    asyncio.run(admin_service.delete_user(accounts, clock, "u-vendor"))
    assert _user(accounts, "u-vendor")["status"] == "inactive"
    assert _vendor(accounts, "u-vendor")["status"] == "suspended"
    assert ("users", "delete") not in accounts.calls


def test_list_filters(accounts):
    vendors = asyncio.run(admin_service.list_users(accounts, "vendor"))
    assert {row["id"] for row in vendors} == {"u-vendor", "u-newvendor"}
    pending = asyncio.run(admin_service.list_vendors(accounts, "pending"))
    assert [row["id"] for row in pending] == ["u-vendor"]
