"""
Tests for the role gate (PermissionChecker) and bearer token resolution.

Covers:
1. Role hierarchy USER < DRIVER < ADMIN
2. Missing role -> 401, insufficient role -> 403
3. Several accepted roles: the least privileged one is the threshold
4. Token problems over HTTP: missing, malformed, expired, anonymized user
5. The account lookup runs in the worker threadpool, off the event loop
"""

import asyncio
from datetime import timedelta

import pytest
from fastapi import HTTPException

from app.crud.account import profile_crud
from common_utils.auth.permission_checker import ROLE_HIERARCHY, PermissionChecker, required_level
from common_utils.auth.utils import create_access_token


def check(roles, user_role):
    checker = PermissionChecker(roles)
    return checker(user_data={"user_id": "u-1", "role": user_role})


class TestRoleHierarchy:
    """Test the numeric role mapping"""

    def test_levels(self):
        assert ROLE_HIERARCHY == {"USER": 1, "DRIVER": 2, "ADMIN": 3}

    def test_threshold_is_minimum_of_listed_roles(self):
        assert required_level(["ADMIN", "DRIVER"]) == 2
        assert required_level(["ADMIN", "USER"]) == 1
        assert required_level(["ADMIN"]) == 3

    def test_empty_role_list_is_a_programming_error(self):
        with pytest.raises(ValueError):
            PermissionChecker([])


class TestPermissionChecker:
    """Test PermissionChecker.__call__"""

    @pytest.mark.parametrize("role", ["DRIVER", "ADMIN"])
    def test_role_at_or_above_threshold_passes(self, role):
        user_data = check(["DRIVER"], role)

        assert user_data == {"user_id": "u-1", "role": role}

    def test_role_below_threshold_is_forbidden(self):
        with pytest.raises(HTTPException) as exc_info:
            check(["DRIVER"], "USER")

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail["error"]["code"] == "FORBIDDEN"

    def test_missing_role_is_unauthorized(self):
        with pytest.raises(HTTPException) as exc_info:
            check(["USER"], None)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["error"]["code"] == "UNAUTHORIZED"

    def test_unknown_role_is_unauthorized(self):
        with pytest.raises(HTTPException) as exc_info:
            check(["USER"], "SUPERUSER")

        assert exc_info.value.status_code == 401

    def test_multiple_roles_use_least_privileged(self):
        """["ADMIN", "DRIVER"] admits a DRIVER, not only an ADMIN"""
        assert check(["ADMIN", "DRIVER"], "DRIVER")["role"] == "DRIVER"

        with pytest.raises(HTTPException) as exc_info:
            check(["ADMIN", "DRIVER"], "USER")
        assert exc_info.value.status_code == 403


class TestTokenResolution:
    """Bearer tokens over HTTP, resolved against the live account"""

    def test_missing_token(self, client):
        response = client.get("/api/v1/trips")

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "UNAUTHORIZED"

    def test_garbage_token(self, client):
        response = client.get("/api/v1/trips", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    def test_expired_token(self, client, rider):
        token = create_access_token(user_id=rider.id, expires_delta=timedelta(minutes=-5))

        response = client.get("/api/v1/trips", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_token_for_unknown_user(self, client):
        token = create_access_token(user_id="nobody")

        response = client.get("/api/v1/trips", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_token_of_anonymized_user(self, client, test_db, rider, rider_headers):
        profile_crud.anonymize(test_db, profile=rider)
        test_db.commit()

        response = client.get("/api/v1/trips", headers=rider_headers)

        assert response.status_code == 401

    def test_user_below_role_gets_403(self, client, rider_headers, vehicle):
        response = client.post(
            "/api/v1/trips",
            json={
                "departure_at": "2025-06-15T08:30:00Z",
                "distance_km": 465,
                "seats": 2,
                "departure_city": "Paris",
                "arrival_city": "Lyon",
                "vehicle_id": vehicle.id,
            },
            headers=rider_headers,
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    def test_role_is_read_from_account_not_token(self, client, test_db, rider, rider_headers):
        """An upgrade applies to tokens issued before it"""
        from app.crud.account import account_crud
        from app.models.account import RoleEnum

        assert client.get("/api/v1/vehicles", headers=rider_headers).status_code == 403

        account_crud.update_role(test_db, account_ref_id=rider.account_ref_id, role=RoleEnum.ADMIN)
        test_db.commit()

        assert client.get("/api/v1/vehicles", headers=rider_headers).status_code == 200

    def test_account_lookup_runs_off_the_event_loop(self, client, rider, rider_headers, monkeypatch):
        """A slow lookup must not block the loop serving other requests"""
        original = profile_crud.get_active
        seen = []

        def record_thread(db, *, user_id):
            try:
                asyncio.get_running_loop()
                seen.append("event_loop")
            except RuntimeError:
                seen.append("threadpool")
            return original(db, user_id=user_id)

        monkeypatch.setattr(profile_crud, "get_active", record_thread)

        response = client.get("/api/v1/users/me", headers=rider_headers)

        assert response.status_code == 200
        assert seen
        assert set(seen) == {"threadpool"}
