"""Template authoring endpoint tests."""

import json

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.requests import Request

from stepform.middleware.exceptions import database_unavailable_handler, integrity_exception_handler
from stepform.seeds import NEW_CLIENT_INTAKE

TEMPLATE_BODY = {
    "name": "Event Registration",
    "category": "events",
    "steps": [
        {
            "title": "Attendee",
            "fields": [
                {"label": "Name", "name": "name", "type": "TEXT", "is_required": True},
                {"label": "Email", "name": "email", "type": "EMAIL", "is_required": True},
            ],
        },
        {
            "title": "Dietary needs",
            "condition": {"fieldId": "name", "operator": "notEmpty"},
            "fields": [
                {
                    "label": "Diet",
                    "name": "diet",
                    "type": "SELECT",
                    "options": [{"label": "None", "value": "none"}, {"label": "Vegan", "value": "vegan"}],
                },
            ],
        },
    ],
}


@pytest.mark.api
@pytest.mark.asyncio
class TestWizardTemplates:
    async def test_create_template(self, client: AsyncClient):
        resp = await client.post("/api/wizards/", json=TEMPLATE_BODY)
        assert resp.status_code == 201
        data = resp.json()
        assert data["slug"] == "event-registration"
        assert data["status"] == "DRAFT"
        assert [s["sort_order"] for s in data["steps"]] == [0, 1]
        assert data["steps"][1]["condition"]["field_id"] == "name"

    async def test_duplicate_slug_conflicts(self, client: AsyncClient):
        await client.post("/api/wizards/", json=TEMPLATE_BODY)
        resp = await client.post("/api/wizards/", json=TEMPLATE_BODY)
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "DUPLICATE_RECORD"

    async def test_invalid_field_name_is_rejected(self, client: AsyncClient):
        body = {
            "name": "Broken",
            "steps": [{"title": "One", "fields": [{"label": "Bad", "name": "has space"}]}],
        }
        resp = await client.post("/api/wizards/", json=body)
        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert [e["field"] for e in error["details"]["errors"]] == ["steps.0.fields.0.name"]

    async def test_unknown_route_uses_error_envelope(self, client: AsyncClient):
        resp = await client.get("/api/nothing-here")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "HTTP_404"

    async def test_get_missing_template(self, client: AsyncClient):
        resp = await client.get("/api/wizards/nope")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    async def test_publish_and_list(self, client: AsyncClient):
        created = (await client.post("/api/wizards/", json=TEMPLATE_BODY)).json()

        resp = await client.post(f"/api/wizards/{created['id']}/publish")
        assert resp.status_code == 200
        assert resp.json()["status"] == "PUBLISHED"

        resp = await client.get("/api/wizards/", params={"status": "PUBLISHED"})
        data = resp.json()
        assert data["total"] == 1
        assert data["items"][0]["step_count"] == 2
        assert data["limit"] == 20

    async def test_publish_reports_integrity_problems(self, client: AsyncClient):
        body = {
            "name": "Forward Reference",
            "steps": [
                {
                    "title": "One",
                    "fields": [
                        {
                            "label": "A",
                            "name": "a",
                            "condition": {"fieldId": "b", "operator": "notEmpty"},
                        },
                        {"label": "Pick", "name": "pick", "type": "SELECT"},
                    ],
                },
                {"title": "Two", "fields": [{"label": "B", "name": "b"}]},
            ],
        }
        created = (await client.post("/api/wizards/", json=body)).json()

        resp = await client.post(f"/api/wizards/{created['id']}/publish")

        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "TEMPLATE_INTEGRITY_ERROR"
        assert len(error["details"]["problems"]) == 2

    async def test_archive(self, client: AsyncClient):
        created = (await client.post("/api/wizards/", json=TEMPLATE_BODY)).json()
        resp = await client.post(f"/api/wizards/{created['id']}/archive")
        assert resp.json()["status"] == "ARCHIVED"

    async def test_duplicate(self, client: AsyncClient):
        created = (await client.post("/api/wizards/", json=TEMPLATE_BODY)).json()

        resp = await client.post(f"/api/wizards/{created['id']}/duplicate")

        assert resp.status_code == 201
        copy = resp.json()
        assert copy["name"] == "Event Registration (copy)"
        assert copy["status"] == "DRAFT"
        assert copy["id"] != created["id"]
        assert copy["steps"][1]["condition"] == created["steps"][1]["condition"]
        assert copy["steps"][0]["fields"][0]["id"] != created["steps"][0]["fields"][0]["id"]

    async def test_seed_template_round_trips_through_api(self, client: AsyncClient):
        resp = await client.post("/api/wizards/", json=NEW_CLIENT_INTAKE.model_dump(mode="json"))
        assert resp.status_code == 201
        resp = await client.post(f"/api/wizards/{resp.json()['id']}/publish")
        assert resp.status_code == 200


def _request(path: str = "/api/wizards/") -> Request:
    return Request({"type": "http", "method": "POST", "path": path, "headers": [], "query_string": b""})


@pytest.mark.unit
@pytest.mark.asyncio
class TestDatabaseErrorMapping:
    async def test_slug_race_is_a_conflict(self):
        exc = IntegrityError(
            "INSERT", {}, Exception('duplicate key value violates unique constraint "ix_wizard_templates_slug"')
        )

        resp = await integrity_exception_handler(_request(), exc)

        assert resp.status_code == 409
        assert json.loads(resp.body)["error"]["code"] == "DUPLICATE_RECORD"

    async def test_other_constraint_failures_are_unprocessable(self):
        exc = IntegrityError("INSERT", {}, Exception("null value in column violates not-null constraint"))

        resp = await integrity_exception_handler(_request(), exc)

        assert resp.status_code == 422
        assert json.loads(resp.body)["error"]["code"] == "INTEGRITY_ERROR"

    async def test_lost_connection_is_retriable(self):
        exc = OperationalError("SELECT", {}, ConnectionError("connection lost"))

        resp = await database_unavailable_handler(_request("/api/wizards/abc"), exc)

        assert resp.status_code == 503
        assert json.loads(resp.body)["error"]["details"] == {"retriable": True}
