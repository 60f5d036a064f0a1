"""Schedule routes — prompt-driven creation, queries, update and delete.

Invariants:
    - POST stores only validated extractions; extraction errors write nothing
    - Anonymous callers see every schedule; authenticated callers only their own
    - Date-range and type listings ordered by date then time
    - Unknown / foreign schedule ids → 404
"""

import json
from uuid import UUID, uuid4

from sqlalchemy import func, select

from app.models.schedule import Schedule

REMINDER = json.dumps({
    "type": "reminder", "title": "Call Sarah",
    "date": "2024-01-15", "time": "09:00",
})


def _reply(**fields) -> str:
    record = {
        "type": "meeting", "title": "Sync",
        "date": "2024-02-01", "time": "10:00",
    }
    record.update(fields)
    return json.dumps(record)


async def _count(test_db) -> int:
    return await test_db.scalar(select(func.count()).select_from(Schedule))


async def _create(client, fake_model, reply, prompt="plan it", headers=None):
    fake_model.queue(reply)
    resp = await client.post(
        "/api/v1/schedules", json={"prompt": prompt}, headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


# -- POST ----------------------------------------------------------------------


async def test_create_applies_relative_override(client, fake_model):
    fake_model.queue(f"Sure! {REMINDER}")
    resp = await client.post(
        "/api/v1/schedules",
        json={"prompt": "remind me to call Sarah in 30 minutes"},
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["time"] == "09:20"
    assert data["date"] == "2024-01-15"
    assert data["formatted_date_time"] == "2024-01-15 at 09:20"
    assert data["ai_prompt"] == "remind me to call Sarah in 30 minutes"
    assert data["user_id"] is None


async def test_create_defaults_priority_to_medium(client, fake_model):
    data = await _create(client, fake_model, REMINDER)
    assert data["priority"] == "medium"


async def test_create_stores_accepted_extraction(client, fake_model, test_db):
    data = await _create(client, fake_model, _reply(
        duration=30, participants=["Ana"], metadata={"room": "4B"},
    ))
    schedule = await test_db.get(Schedule, UUID(data["id"]))
    assert schedule.participants == ["Ana"]
    assert schedule.metadata_ == {"room": "4B"}
    assert json.loads(schedule.ai_response)["title"] == "Sync"


async def test_create_with_token_owns_schedule(
    client, fake_model, registered_user, auth_headers,
):
    data = await _create(client, fake_model, REMINDER, headers=auth_headers)
    assert data["user_id"] == registered_user["user"]["id"]


async def test_no_structured_reply_returns_422(client, fake_model, test_db):
    fake_model.queue("I could not understand that.")
    resp = await client.post("/api/v1/schedules", json={"prompt": "???"})
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "NO_STRUCTURED_REPLY"
    assert await _count(test_db) == 0


async def test_malformed_reply_returns_422(client, fake_model):
    fake_model.queue("{'type': 'task'}")
    resp = await client.post("/api/v1/schedules", json={"prompt": "x"})
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "MALFORMED_REPLY"


async def test_schema_invalid_returns_422(client, fake_model, test_db):
    fake_model.queue(_reply(time="9:00"))
    resp = await client.post(
        "/api/v1/schedules", json={"prompt": "meet at nine"},
    )
    assert resp.status_code == 422
    error = resp.json()["error"]
    assert error["code"] == "SCHEMA_INVALID"
    assert "Invalid time format: 9:00" in error["message"]
    assert await _count(test_db) == 0


async def test_model_failure_returns_503(client, fake_model):
    fake_model.queue(ConnectionError("unreachable"))
    resp = await client.post("/api/v1/schedules", json={"prompt": "x"})
    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "MODEL_CALL_FAILED"


async def test_empty_prompt_rejected_before_model(client, fake_model):
    resp = await client.post("/api/v1/schedules", json={"prompt": "   "})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
    assert fake_model.prompts == []


async def test_invalid_token_rejected(client, fake_model):
    resp = await client.post(
        "/api/v1/schedules", json={"prompt": "x"},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert resp.status_code == 401
    assert fake_model.prompts == []


# -- GET list / date-range / type ----------------------------------------------


async def test_list_paginates(client, fake_model):
    for i in range(3):
        await _create(client, fake_model, _reply(title=f"Sync {i}"))
    resp = await client.get("/api/v1/schedules?limit=2&offset=0")
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["schedules"]) == 2
    assert body["pagination"] == {"limit": 2, "offset": 0, "total": 3}


async def test_list_limit_bounds(client):
    resp = await client.get("/api/v1/schedules?limit=101")
    assert resp.status_code == 400


async def test_list_scoped_to_authenticated_user(
    client, fake_model, auth_headers,
):
    await _create(client, fake_model, _reply(title="Mine"), headers=auth_headers)
    await _create(client, fake_model, _reply(title="Anonymous"))

    own = await client.get("/api/v1/schedules", headers=auth_headers)
    assert [s["title"] for s in own.json()["schedules"]] == ["Mine"]

    everyone = await client.get("/api/v1/schedules")
    assert everyone.json()["pagination"]["total"] == 2


async def test_date_range_inclusive_and_ordered(client, fake_model):
    await _create(client, fake_model, _reply(title="B", date="2024-02-02", time="08:00"))
    await _create(client, fake_model, _reply(title="A", date="2024-02-01", time="15:00"))
    await _create(client, fake_model, _reply(title="A0", date="2024-02-01", time="07:30"))
    await _create(client, fake_model, _reply(title="Out", date="2024-03-01"))

    resp = await client.get(
        "/api/v1/schedules/date-range",
        params={"start_date": "2024-02-01", "end_date": "2024-02-02"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert [s["title"] for s in body["schedules"]] == ["A0", "A", "B"]
    assert body["count"] == 3


async def test_date_range_requires_valid_dates(client):
    resp = await client.get(
        "/api/v1/schedules/date-range",
        params={"start_date": "Feb 1", "end_date": "2024-02-02"},
    )
    assert resp.status_code == 400


async def test_list_by_type(client, fake_model):
    await _create(client, fake_model, REMINDER)
    await _create(client, fake_model, _reply())
    resp = await client.get("/api/v1/schedules/type/reminder")
    assert resp.status_code == 200
    assert [s["type"] for s in resp.json()["schedules"]] == ["reminder"]


async def test_list_by_unknown_type(client):
    resp = await client.get("/api/v1/schedules/type/birthday")
    assert resp.status_code == 400


# -- GET / PUT / DELETE by id --------------------------------------------------


async def test_get_one(client, fake_model):
    created = await _create(client, fake_model, REMINDER)
    resp = await client.get(f"/api/v1/schedules/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["title"] == "Call Sarah"


async def test_get_unknown_returns_404(client):
    resp = await client.get(f"/api/v1/schedules/{uuid4()}")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_foreign_schedule_hidden_from_user(
    client, fake_model, auth_headers,
):
    created = await _create(client, fake_model, REMINDER)
    resp = await client.get(
        f"/api/v1/schedules/{created['id']}", headers=auth_headers,
    )
    assert resp.status_code == 404


async def test_update_partial(client, fake_model):
    created = await _create(client, fake_model, _reply(location="Room 1"))
    resp = await client.put(
        f"/api/v1/schedules/{created['id']}",
        json={"time": "11:30", "priority": "high", "metadata": {"k": "v"}},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["time"] == "11:30"
    assert data["priority"] == "high"
    assert data["metadata"] == {"k": "v"}
    assert data["location"] == "Room 1"
    assert data["formatted_date_time"] == "2024-02-01 at 11:30"


async def test_update_rejects_bad_format(client, fake_model):
    created = await _create(client, fake_model, REMINDER)
    resp = await client.put(
        f"/api/v1/schedules/{created['id']}", json={"time": "11.30"},
    )
    assert resp.status_code == 400


async def test_update_unknown_returns_404(client):
    resp = await client.put(
        f"/api/v1/schedules/{uuid4()}", json={"title": "x"},
    )
    assert resp.status_code == 404


async def test_delete(client, fake_model, test_db):
    created = await _create(client, fake_model, REMINDER)
    resp = await client.delete(f"/api/v1/schedules/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == {
        "message": "Schedule deleted successfully", "id": created["id"],
    }
    assert await _count(test_db) == 0

    again = await client.delete(f"/api/v1/schedules/{created['id']}")
    assert again.status_code == 404


# -- Column widths -------------------------------------------------------------


async def test_overlong_model_title_returns_422(client, fake_model, test_db):
    fake_model.queue(_reply(title="t" * 600))
    resp = await client.post("/api/v1/schedules", json={"prompt": "x"})
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "SCHEMA_INVALID"
    assert await _count(test_db) == 0


async def test_update_overlong_category_returns_400(client, fake_model):
    created = await _create(client, fake_model, REMINDER)
    resp = await client.put(
        f"/api/v1/schedules/{created['id']}", json={"category": "c" * 200},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
