def test_state_requires_api_key(client, profile):
    response = client.get("/api/v1/journal/state")
    assert response.status_code == 401
    assert response.json()["error"] == "Missing X-API-Key header."


def test_invalid_api_key_is_rejected(client, profile):
    response = client.get("/api/v1/journal/state", headers={"X-API-Key": "wrong"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid API key."


def test_read_state_uses_camel_case(authorized_client):
    response = authorized_client.get("/api/v1/journal/state")
    assert response.status_code == 200
    data = response.json()
    assert data["darkMode"] is False
    assert [t["name"] for t in data["templates"]] == ["Morning Reflection", "Evening Reflection"]
    assert data["entries"][0]["templateId"] == "1"
    assert data["entries"][0]["answers"]["1-1"]["kind"] == "text"


def test_create_template_and_filter_by_type(authorized_client):
    response = authorized_client.post("/api/v1/journal/templates", json={
        "name": "Quick Morning",
        "type": "morning",
        "questions": [
            {"text": "Did you stretch?", "type": "yesno"},
            {"text": "Energy?", "type": "slider"},
        ],
    })
    assert response.status_code == 201
    template = response.json()
    assert [q["order"] for q in template["questions"]] == [0, 1]
    assert template["questions"][0]["id"] == f"{template['id']}-0"

    mornings = authorized_client.get("/api/v1/journal/templates", params={"type": "morning"}).json()
    assert {t["name"] for t in mornings} == {"Morning Reflection", "Quick Morning"}


def test_replace_missing_template_is_404(authorized_client):
    response = authorized_client.put("/api/v1/journal/templates/nope", json={"name": "x", "type": "evening"})
    assert response.status_code == 404
    assert response.json()["error"] == "Template not found."


def test_reorder_template_questions(authorized_client):
    response = authorized_client.post(
        "/api/v1/journal/templates/2/reorder",
        json={"questionIds": ["2-2", "2-3", "2-1"]},
    )
    assert response.status_code == 200
    questions = response.json()["questions"]
    assert [q["id"] for q in questions] == ["2-2", "2-3", "2-1"]
    assert [q["order"] for q in questions] == [0, 1, 2]


def test_delete_template_keeps_entries(authorized_client, store):
    assert authorized_client.delete("/api/v1/journal/templates/1").status_code == 204
    assert authorized_client.get("/api/v1/journal/templates/1").status_code == 404
    assert authorized_client.get("/api/v1/journal/entries/1").status_code == 200


def test_create_entry_generates_rating_ids(authorized_client, store):
    response = authorized_client.post("/api/v1/journal/entries", json={
        "templateId": "1",
        "answers": {
            "1-1": {"kind": "text", "text": "How did you sleep last night?", "value": "Fine"},
        },
        "ratings": [{"category": "energy", "value": 8}],
    })
    assert response.status_code == 201
    entry = response.json()
    assert entry["templateId"] == "1"
    assert entry["ratings"][0]["value"] == 8
    assert entry["ratings"][0]["id"]
    assert len(store.state.entries) == 3


def test_create_entry_rejects_out_of_range_rating(authorized_client, store):
    response = authorized_client.post("/api/v1/journal/entries", json={
        "templateId": "1",
        "ratings": [{"category": "energy", "value": 12}],
    })
    assert response.status_code == 422
    assert len(store.state.entries) == 2


def test_update_entry_and_missing_entry(authorized_client):
    response = authorized_client.put("/api/v1/journal/entries/2", json={
        "answers": {"2-1": {"kind": "text", "value": "Shipped the release"}},
        "ratings": [{"category": "3", "value": 9}],
    })
    assert response.status_code == 200
    assert response.json()["answers"]["2-1"]["value"] == "Shipped the release"
    assert [r["value"] for r in response.json()["ratings"]] == [9]

    missing = authorized_client.put("/api/v1/journal/entries/nope", json={"answers": {}, "ratings": []})
    assert missing.status_code == 404


def test_bulk_delete_and_undo(authorized_client, store):
    response = authorized_client.post("/api/v1/journal/entries/delete", json={"ids": ["1", "2", "missing"]})
    assert response.status_code == 204
    assert store.state.entries == ()

    assert authorized_client.post("/api/v1/journal/undo").json() == {"undone": True}
    assert [e.id for e in store.state.entries] == ["1", "2"]


def test_entries_filtered_by_type(authorized_client):
    evening = authorized_client.get("/api/v1/journal/entries", params={"type": "evening"}).json()
    assert [e["id"] for e in evening] == ["2"]


def test_timeline_and_by_date(authorized_client):
    timeline = authorized_client.get("/api/v1/journal/timeline").json()
    assert timeline[0]["label"] == "May 2025"
    assert [e["id"] for e in timeline[0]["entries"]] == ["1", "2"]

    by_date = authorized_client.get("/api/v1/journal/by-date").json()
    assert list(by_date) == ["2025-05-06", "2025-05-05"]


def test_calendar_day(authorized_client):
    day = authorized_client.get("/api/v1/journal/calendar/2025-05-06").json()
    assert day["on"] == "2025-05-06"
    assert [e["id"] for e in day["morning"]] == ["1"]
    assert day["evening"] == []


def test_categories_and_tags(authorized_client):
    created = authorized_client.post("/api/v1/journal/categories", json={"name": "Focus", "type": "morning"})
    assert created.status_code == 201
    morning = authorized_client.get("/api/v1/journal/categories", params={"type": "morning"}).json()
    assert "Focus" in [c["name"] for c in morning]

    tag = authorized_client.post("/api/v1/journal/tags", json={"name": "travel", "color": "#123456"}).json()
    assert authorized_client.delete(f"/api/v1/journal/tags/{tag['id']}").status_code == 204
    assert tag["id"] not in [t["id"] for t in authorized_client.get("/api/v1/journal/tags").json()]


def test_preferences_round_trip(authorized_client):
    assert authorized_client.get("/api/v1/preferences").json() == {
        "darkMode": False,
        "notifications": {"journal": True, "insights": False},
    }

    response = authorized_client.patch("/api/v1/preferences", json={
        "darkMode": True,
        "notifications": {"journal": False, "insights": True},
    })
    assert response.json()["darkMode"] is True
    assert response.json()["notifications"] == {"journal": False, "insights": True}

    toggled = authorized_client.post("/api/v1/preferences/dark-mode/toggle").json()
    assert toggled == {"darkMode": False}
    assert authorized_client.get("/api/v1/journal/state").json()["darkMode"] is False
