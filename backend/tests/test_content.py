import pytest


async def test_preferences_default_until_saved(client):
    response = await client.get("/api/v1/user-preferences/user_carol")
    assert response.status_code == 200
    assert response.json() == {
        "id": None,
        "user_id": "user_carol",
        "preferred_subject": "math",
        "preferred_difficulty": 2,
        "preferred_language": "en",
        "learning_style": "visual",
        "daily_goal_minutes": 30,
        "updated_at": None,
    }

    saved = await client.post(
        "/api/v1/user-preferences",
        json={"user_id": "user_carol", "preferred_language": "zu", "daily_goal_minutes": 45},
    )
    assert saved.status_code == 200
    assert saved.json()["id"] is not None

    fetched = (await client.get("/api/v1/user-preferences/user_carol")).json()
    assert fetched["preferred_language"] == "zu"
    assert fetched["daily_goal_minutes"] == 45
    assert fetched["preferred_subject"] == "math"


async def test_preferences_reject_out_of_range_difficulty(client):
    response = await client.post(
        "/api/v1/user-preferences", json={"user_id": "user_carol", "preferred_difficulty": 9}
    )
    assert response.status_code == 400


async def test_progress_upsert_overwrites_every_counter(client):
    seeded = await client.post(
        "/api/v1/user-progress",
        json={
            "user_id": "user_dave",
            "subject": "math",
            "grade": "matric",
            "total_attempted": 10,
            "total_correct": 7,
            "streak_days": 3,
        },
    )
    assert seeded.status_code == 200

    response = await client.post(
        "/api/v1/user-progress",
        json={"user_id": "user_dave", "subject": "math", "grade": "matric", "total_attempted": 11},
    )
    row = response.json()
    assert (row["total_attempted"], row["total_correct"], row["streak_days"]) == (11, 0, 0)

    rows = (await client.get("/api/v1/user-progress/user_dave")).json()
    assert len(rows) == 1


async def test_progress_filters(client):
    for subject, grade in (("math", "matric"), ("math", "grade7-9"), ("physics", "matric")):
        await client.post(
            "/api/v1/user-progress",
            json={"user_id": "user_dave", "subject": subject, "grade": grade, "total_attempted": 1},
        )

    all_rows = (await client.get("/api/v1/user-progress/user_dave")).json()
    assert len(all_rows) == 3

    math_rows = (await client.get("/api/v1/user-progress/user_dave", params={"subject": "math"})).json()
    assert {r["grade"] for r in math_rows} == {"matric", "grade7-9"}

    matric_physics = (
        await client.get("/api/v1/user-progress/user_dave", params={"subject": "physics", "grade": "matric"})
    ).json()
    assert len(matric_physics) == 1


async def test_achievements_listed_newest_first(client):
    for badge in ("First Steps", "Streak Master"):
        response = await client.post(
            "/api/v1/user-achievements",
            json={"user_id": "user_bob", "badge_name": badge, "points": 10},
        )
        assert response.status_code == 201

    badges = (await client.get("/api/v1/user-achievements/user_bob")).json()
    assert [b["badge_name"] for b in badges] == ["Streak Master", "First Steps"]
    assert (await client.get("/api/v1/user-achievements/user_alice")).json() == []


async def test_shared_content_capped_and_newest_first(client):
    for i in range(22):
        response = await client.post(
            "/api/v1/shared-content",
            json={
                "user_id": "user_alice",
                "content_type": "story",
                "content_title": f"Story {i}",
                "share_url": f"https://edusphere.example/s/{i}",
            },
        )
        assert response.status_code == 201

    items = (await client.get("/api/v1/shared-content")).json()
    assert len(items) == 20
    assert items[0]["content_title"] == "Story 21"
    assert items[-1]["content_title"] == "Story 2"


# ─── Authored content ────────────────────────────────────────────────────────

CONTENT_CASES = [
    (
        "/api/v1/tutor-scripts",
        [
            {"tone": "friendly", "script": "Hi!", "grade": "matric", "subject": "math", "topic": "Algebra"},
            {"tone": "formal", "script": "Good day.", "grade": "matric", "subject": "math", "topic": "Limits"},
        ],
        {"tone": "formal"},
        "topic",
        "Limits",
    ),
    (
        "/api/v1/coding-problems",
        [
            {"title": "FizzBuzz", "description": "Classic", "difficulty": "easy", "language": "python"},
            {"title": "Two Sum", "description": "Hash map", "difficulty": "medium", "language": "javascript"},
        ],
        {"language": "javascript"},
        "title",
        "Two Sum",
    ),
    (
        "/api/v1/ar-problems",
        [
            {"title": "Cube volume", "description": "Measure it", "subject": "math", "grade": "grade7-9"},
            {"title": "Orbit", "description": "Watch it", "subject": "physics", "grade": "matric"},
        ],
        {"subject": "physics", "grade": "matric"},
        "title",
        "Orbit",
    ),
    (
        "/api/v1/stories",
        [
            {"title": "The Lion", "content": "Once...", "language": "en", "grade_level": "grade1-6"},
            {"title": "Unogwaja", "content": "Kudala...", "language": "zu", "grade_level": "grade1-6"},
        ],
        {"language": "zu"},
        "title",
        "Unogwaja",
    ),
    (
        "/api/v1/voice-quizzes",
        [
            {"question": "2 + 2?", "answer": "4", "difficulty": "easy", "subject": "math"},
            {"question": "Capital of Kenya?", "answer": "Nairobi", "difficulty": "medium", "subject": "geography"},
        ],
        {"difficulty": "medium", "subject": "geography"},
        "answer",
        "Nairobi",
    ),
]


@pytest.mark.parametrize("url,items,filters,field,expected", CONTENT_CASES)
async def test_authored_content_create_and_filter(client, url, items, filters, field, expected):
    for item in items:
        response = await client.post(url, json=item)
        assert response.status_code == 201, response.text

    everything = (await client.get(url)).json()
    assert len(everything) == 2
    assert everything[0][field] == items[1][field]

    filtered = (await client.get(url, params=filters)).json()
    assert [row[field] for row in filtered] == [expected]


async def test_story_defaults(client):
    response = await client.post("/api/v1/stories", json={"title": "Short", "content": "The end."})
    body = response.json()
    assert body["language"] == "en"
    assert body["is_premium"] is False


async def test_authored_content_requires_fields(client):
    response = await client.post("/api/v1/coding-problems", json={"title": "Missing bits"})
    assert response.status_code == 400
    assert response.json()["kind"] == "INVALID_REQUEST"
