"""HTTP surface: status codes, bodies and headers."""

import pytest

pytestmark = pytest.mark.anyio


async def _register(client, payload) -> int:
    response = await client.post("/patients", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def _login(client, id_card="1234567890123", password="secret-pass"):
    return await client.post(
        "/auth/login", json={"id_card": id_card, "password": password}
    )


def _without_timestamp(body: dict) -> dict:
    return {k: v for k, v in body.items() if k != "timestamp"}


class TestPatients:
    async def test_register_and_read_profile(self, client, patient_payload):
        response = await client.post("/patients", json=patient_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Patient and user created successfully"

        profile = (await client.get(f"/patients/{body['id']}")).json()
        assert profile["id_card"] == "1-2345-67890-12-3"
        assert profile["phone"] == "081-234-5678"
        assert profile["bmi"] == 22.86
        assert "password" not in profile

    async def test_duplicate_is_conflict(self, client, patient_payload):
        await _register(client, patient_payload)
        response = await client.post("/patients", json=patient_payload)

        assert response.status_code == 409
        assert response.json()["error"] == "DUPLICATE_IDENTITY"

    async def test_invalid_id_card_is_unprocessable(self, client, patient_payload):
        response = await client.post(
            "/patients", json={**patient_payload, "id_card": "12345"}
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "VALIDATION_FAILURE"
        assert "id_card" in body["message"]

    async def test_zero_height_is_unprocessable(self, client, patient_payload):
        response = await client.post("/patients", json={**patient_payload, "height": 0})
        assert response.status_code == 422

    async def test_profile_read_does_not_use_hasher(self, client, patient_payload):
        from main import app

        patient_id = await _register(client, patient_payload)
        app.state.password_hasher = None

        response = await client.get(f"/patients/{patient_id}")
        assert response.status_code == 200

    async def test_missing_profile(self, client):
        response = await client.get("/patients/999")

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    async def test_update_health(self, client, patient_payload):
        patient_id = await _register(client, patient_payload)
        response = await client.put(
            f"/patients/{patient_id}/health",
            json={"weight": 60, "height": 160, "waist": 72},
        )

        assert response.status_code == 200
        assert response.json()["bmi"] == 23.44
        assert response.json()["waist_to_height_ratio"] == 0.45

    async def test_change_password(self, client, patient_payload):
        patient_id = await _register(client, patient_payload)
        response = await client.put(
            f"/patients/{patient_id}/password", json={"password": "brand-new"}
        )

        assert response.status_code == 200
        assert (await _login(client, password="brand-new")).status_code == 200
        assert (await _login(client)).status_code == 401

    async def test_update_profile_changes_login_id(self, client, patient_payload):
        patient_id = await _register(client, patient_payload)
        update = {**patient_payload, "id_card": "3210987654321"}
        del update["password"]

        response = await client.put(f"/patients/{patient_id}", json=update)

        assert response.status_code == 200
        assert (await _login(client, id_card="3210987654321")).status_code == 200
        assert (await _login(client)).status_code == 401


class TestAuth:
    async def test_login(self, client, patient_payload):
        patient_id = await _register(client, patient_payload)
        response = await _login(client, id_card="1-2345-67890-12-3")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == str(patient_id)
        assert body["first_name"] == "สมศรี"
        assert isinstance(body["user_id"], int)

    async def test_failures_are_indistinguishable(self, client, patient_payload):
        await _register(client, patient_payload)
        wrong_password = await _login(client, password="nope")
        unknown_identity = await _login(client, id_card="9999999999999")

        assert wrong_password.status_code == unknown_identity.status_code == 401
        assert _without_timestamp(wrong_password.json()) == _without_timestamp(
            unknown_identity.json()
        )
        assert wrong_password.json()["message"] == "Invalid ID Card or Password"


class TestAppointments:
    async def _user_id(self, client, patient_payload) -> int:
        await _register(client, patient_payload)
        return (await _login(client)).json()["user_id"]

    async def test_schedule_list_and_delete(self, client, patient_payload):
        user_id = await self._user_id(client, patient_payload)

        created = await client.post(
            "/appointments",
            json={
                "user_id": user_id,
                "program_name": "ตรวจสุขภาพ",
                "appointment_date": "15/07/2025",
            },
        )
        assert created.status_code == 201
        appointment_id = created.json()["id"]

        evaluation = await client.post(
            "/appointments/evaluations",
            json={
                "user_id": user_id,
                "program_name": "ตรวจสุขภาพ",
                "result_program": {"score": 3},
            },
        )
        assert evaluation.status_code == 201

        upcoming = (await client.get(f"/appointments/upcoming/{user_id}")).json()
        assert [a["appointment_date"] for a in upcoming] == ["2025-07-15"]

        for_user = (await client.get(f"/appointments/user/{user_id}")).json()
        assert len(for_user) == 1

        overview_response = await client.get("/appointments")
        assert "sql;dur=" in overview_response.headers["Server-Timing"]
        overview = overview_response.json()
        assert overview[0]["id_card"] == "1-2345-67890-12-3"

        details = await client.get(f"/appointments/{appointment_id}")
        assert details.status_code == 200
        assert details.json()["bmi"] == 22.86

        deleted = await client.delete(f"/appointments/{appointment_id}")
        assert deleted.status_code == 200
        assert (await client.get(f"/appointments/{appointment_id}")).status_code == 404

    async def test_schedule_with_result(self, client, patient_payload):
        user_id = await self._user_id(client, patient_payload)
        response = await client.post(
            "/appointments/with-result",
            json={
                "user_id": user_id,
                "program_name": "ตรวจสุขภาพ",
                "appointment_date": "2025-08-01",
                "result_program": {"score": 9},
            },
        )
        assert response.status_code == 201

    async def test_upcoming_empty(self, client, patient_payload):
        user_id = await self._user_id(client, patient_payload)
        response = await client.get(f"/appointments/upcoming/{user_id}")

        assert response.status_code == 200
        assert response.json() == []

    async def test_delete_missing_succeeds(self, client):
        response = await client.delete("/appointments/987654")

        assert response.status_code == 200
        assert response.json()["message"] == "Appointment deleted successfully"

    async def test_unknown_user(self, client):
        response = await client.post(
            "/appointments",
            json={"user_id": 77, "program_name": "x", "appointment_date": "2025-07-01"},
        )
        assert response.status_code == 404

    async def test_bad_date(self, client, patient_payload):
        user_id = await self._user_id(client, patient_payload)
        response = await client.post(
            "/appointments",
            json={
                "user_id": user_id,
                "program_name": "x",
                "appointment_date": "31/02/2025",
            },
        )
        assert response.status_code == 422


class TestReferenceAndOps:
    async def test_reference_lookups(self, client):
        provinces = (await client.get("/reference/provinces")).json()["provinces"]
        assert "เชียงใหม่" in provinces

        districts = await client.get(
            "/reference/districts", params={"province": "กรุงเทพมหานคร"}
        )
        assert districts.json()["districts"] == sorted(["เขตพระนคร", "เขตดุสิต"])

        subdistricts = await client.get(
            "/reference/subdistricts", params={"district": "เขตดุสิต"}
        )
        assert subdistricts.json()["subdistricts"][0] == "ดุสิต"

    async def test_unknown_province(self, client):
        response = await client.get("/reference/districts", params={"province": "x"})
        assert response.status_code == 404

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"]["healthy"] is True
        assert "X-Request-ID" in response.headers

    async def test_request_id_is_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    async def test_metrics(self, client):
        response = await client.get("/metrics")

        assert response.status_code == 200
        database = response.json()["database"]
        assert "pool_status" in database
        assert database["url"].startswith("sqlite+aiosqlite://")
        assert "total_calls" in response.json()["logger"]
