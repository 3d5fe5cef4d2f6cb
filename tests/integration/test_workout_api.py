"""
Integration tests for the Plates API endpoints.

Tests cover:
- Exercise list, detail, chart and suggestions
- Set logging, editing and deleting
- Exercise field edits (pinned note, PR reps, goals)
- Workout history
- Body weight
- Cache status and refresh
- Error mapping (404, 401, 422, 502, 503)

The app is built with create_app() around a WorkoutDataStore backed by the
in-memory FakeWorkoutRemote.
"""
import pytest
from datetime import datetime, timezone
from fastapi.testclient import TestClient

from backend.core.workout_data_store import WorkoutDataStore
from backend.main import create_app
from backend.settings import Settings
from tests.fakes import create_workout_remote


# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def settings():
    return Settings(environment="test", _env_file=None)


@pytest.fixture
def remote():
    """Bench, squat, pull-ups and a run with sets over the last three days."""
    return create_workout_remote(today=datetime.now(timezone.utc))


@pytest.fixture
def client(settings, remote):
    """Create test client with a store over the fake remote."""
    store = WorkoutDataStore(remote, stale_threshold=settings.cache_stale_seconds)
    app = create_app(settings=settings, store=store)
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# Health & Cache
# =============================================================================


@pytest.mark.integration
class TestHealthAndCache:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_cache_status_before_fetch(self, client):
        data = client.get("/cache/status").json()

        assert data["is_stale"] is True
        assert data["last_fetched_at"] is None
        assert data["exercise_count"] == 0

    def test_refresh_loads_everything(self, client, remote):
        response = client.post("/refresh")

        assert response.status_code == 200
        data = response.json()
        assert data["is_stale"] is False
        assert data["exercise_count"] == 4
        assert data["set_count"] == 6
        assert data["error_message"] is None
        assert remote.calls["fetch_body_weight_logs"] == 1

    def test_refresh_bypasses_ttl(self, client, remote):
        client.get("/exercises")
        client.post("/refresh")

        assert remote.calls["fetch_exercises"] == 2

    def test_refresh_failure_reported(self, client, remote):
        remote.fail("fetch_all_sets", "database offline")

        data = client.post("/refresh").json()

        assert data["error_message"] == "Failed to load workout data: database offline"

    def test_store_not_configured(self, settings):
        """Without Supabase credentials (and no lifespan run) the store is missing."""
        app = create_app(settings=settings)
        response = TestClient(app).get("/exercises")

        assert response.status_code == 503


# =============================================================================
# Exercises
# =============================================================================


@pytest.mark.integration
class TestExerciseEndpoints:
    def test_list_exercises(self, client):
        response = client.get("/exercises")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 4
        assert [e["name"] for e in data["exercises"]] == ["Bench Press", "Pull-Up", "Run", "Squat"]

    def test_list_is_cached(self, client, remote):
        client.get("/exercises")
        client.get("/exercises")

        assert remote.calls["fetch_exercises"] == 1

    def test_filter_by_muscle_group(self, client):
        data = client.get("/exercises", params={"muscle_group": "Legs"}).json()
        assert [e["name"] for e in data["exercises"]] == ["Squat"]

    def test_search(self, client):
        data = client.get("/exercises", params={"search": "bench"}).json()
        assert [e["id"] for e in data["exercises"]] == ["bench"]

    def test_invalid_muscle_group(self, client):
        response = client.get("/exercises", params={"muscle_group": "Neck"})
        assert response.status_code == 422

    def test_suggestions(self, client):
        data = client.get("/exercises/suggestions", params={"q": "pu"}).json()
        assert [e["name"] for e in data["exercises"]] == ["Pull-Up"]

    def test_suggestions_short_query(self, client):
        data = client.get("/exercises/suggestions", params={"q": "p"}).json()
        assert data["total"] == 0

    def test_strength_detail(self, client):
        response = client.get("/exercises/bench")

        assert response.status_code == 200
        data = response.json()
        assert data["exercise"]["effective_pr_reps"] == 5
        assert data["set_count"] == 3
        assert data["last_set"]["weight"] == 190
        assert data["last_session"]["weight"] == 190
        assert data["current_pr"]["label"] == "5RM"
        assert data["current_pr"]["weight"] == 190
        assert [(r["reps"], r["weight"]) for r in data["personal_records"]] == [
            (1, 195), (3, 195), (5, 190),
        ]
        assert data["best_pace"] is None

    def test_cardio_detail(self, client):
        data = client.get("/exercises/run").json()

        assert data["best_distance"] == 3.1
        assert data["best_pace"]["pace_display"] == "9:01"
        assert data["average_pace"] == "9:01"
        assert data["last_set"]["display_text"] == "3.10 mi • 28 min"
        assert data["personal_records"] == []

    def test_unknown_exercise(self, client):
        response = client.get("/exercises/nope")
        assert response.status_code == 404

    def test_weight_chart(self, client):
        data = client.get("/exercises/bench/chart", params={"rep_filter": 5}).json()

        assert data["metric"] == "weight"
        assert data["rep_filter"] == 5
        assert [p["value"] for p in data["points"]] == [185, 190]

    def test_body_weight_rep_chart(self, client):
        data = client.get("/exercises/pullup/chart").json()

        assert data["metric"] == "reps"
        assert [p["value"] for p in data["points"]] == [12]

    def test_add_exercise(self, client):
        response = client.post("/exercises", json={
            "name": "Face Pull",
            "muscle_group": "Shoulders",
            "default_pr_reps": 10,
        })

        assert response.status_code == 201
        assert response.json()["name"] == "Face Pull"
        assert client.get("/exercises").json()["total"] == 5

    def test_add_exercise_twice_is_idempotent(self, client):
        first = client.post("/exercises", json={"name": "Face Pull", "muscle_group": "Shoulders"})
        second = client.post("/exercises", json={"name": "face pull", "muscle_group": "Shoulders"})

        assert first.json()["id"] == second.json()["id"]
        assert client.get("/exercises").json()["total"] == 5

    def test_add_exercise_rejects_all(self, client):
        response = client.post("/exercises", json={"name": "Anything", "muscle_group": "All"})
        assert response.status_code == 422

    def test_add_exercise_with_initial_set(self, client):
        """A strength exercise can be added together with its first set."""
        response = client.post("/exercises", json={
            "name": "Face Pull",
            "muscle_group": "Shoulders",
            "pr_weight": 50,
            "pr_reps": 12,
        })

        assert response.status_code == 201
        sets = client.get(f"/exercises/{response.json()['id']}/sets").json()
        assert sets["total"] == 1
        assert sets["sets"][0]["display_text"] == "50 lbs × 12"

    def test_add_cardio_exercise_is_normalized(self, client):
        """Cardio is always filed under Cardio with a 1-rep target and no body weight."""
        response = client.post("/exercises", json={
            "name": "Rowing Machine",
            "exercise_type": "cardio",
            "muscle_group": "Chest",
            "default_pr_reps": 5,
            "uses_body_weight": True,
            "pr_distance": 2.0,
            "pr_duration": 16,
        })

        assert response.status_code == 201
        data = response.json()
        assert data["muscle_group"] == "Cardio"
        assert data["default_pr_reps"] == 1
        assert data["uses_body_weight"] is False

        sets = client.get(f"/exercises/{data['id']}/sets").json()
        assert sets["sets"][0]["display_text"] == "2.00 mi • 16 min"

    def test_add_cardio_without_muscle_group(self, client):
        response = client.post("/exercises", json={"name": "Stair Climber", "exercise_type": "cardio"})

        assert response.status_code == 201
        assert response.json()["muscle_group"] == "Cardio"

    def test_add_strength_requires_muscle_group(self, client):
        response = client.post("/exercises", json={"name": "Face Pull"})
        assert response.status_code == 422

    @pytest.mark.parametrize("extra", [
        {"pr_weight": 50},
        {"pr_reps": 12},
        {"pr_distance": 2.0, "pr_duration": 16},
        {"exercise_type": "cardio", "pr_distance": 2.0},
        {"exercise_type": "cardio", "pr_weight": 50, "pr_reps": 12},
    ])
    def test_add_exercise_rejects_partial_or_mismatched_initial_set(self, client, remote, extra):
        """Initial set fields come in pairs that match the exercise type."""
        response = client.post("/exercises", json={
            "name": "Face Pull",
            "muscle_group": "Shoulders",
            **extra,
        })

        assert response.status_code == 422
        assert remote.calls["add_exercise"] == 0

    @pytest.mark.parametrize("reps,status", [(50, 201), (51, 422), (0, 422)])
    def test_default_pr_reps_range(self, client, reps, status):
        response = client.post("/exercises", json={
            "name": "Face Pull",
            "muscle_group": "Shoulders",
            "default_pr_reps": reps,
        })
        assert response.status_code == status

    def test_added_exercise_is_suggested(self, client):
        """Suggestions include an exercise created after the catalogue was loaded."""
        assert client.get("/exercises/suggestions", params={"q": "bent"}).json()["total"] == 0

        client.post("/exercises", json={"name": "Bent Row", "muscle_group": "Back"})

        data = client.get("/exercises/suggestions", params={"q": "bent"}).json()
        assert [e["name"] for e in data["exercises"]] == ["Bent Row"]

    def test_add_exercise_requires_user(self, client, remote):
        remote.authenticated = False

        response = client.post("/exercises", json={"name": "Face Pull", "muscle_group": "Shoulders"})

        assert response.status_code == 401
        assert response.json()["detail"] == "User not authenticated"


# =============================================================================
# Sets
# =============================================================================


@pytest.mark.integration
class TestSetEndpoints:
    def test_list_sets_newest_first(self, client):
        data = client.get("/exercises/bench/sets").json()

        assert data["total"] == 3
        assert data["sets"][0]["id"] == "b3"
        assert data["sets"][0]["display_text"] == "190 lbs × 5"

    def test_body_weight_display(self, client):
        data = client.get("/exercises/pullup/sets").json()
        assert data["sets"][0]["display_text"] == "BW × 12"

    def test_log_set(self, client, remote):
        response = client.post("/exercises/bench/sets", json={"weight": 200, "reps": 2})

        assert response.status_code == 201
        data = response.json()
        assert data["total"] == 4
        assert data["sets"][0]["weight"] == 200
        assert remote.calls["fetch_sets"] == 1

    def test_log_set_invalid_shape(self, client, remote):
        response = client.post("/exercises/bench/sets", json={
            "weight": 200, "reps": 2, "distance": 1.0, "duration": 10,
        })

        assert response.status_code == 422
        assert remote.calls["log_set"] == 0

    def test_log_set_unknown_exercise(self, client):
        response = client.post("/exercises/nope/sets", json={"weight": 200, "reps": 2})
        assert response.status_code == 404

    def test_log_set_remote_failure(self, client, remote):
        remote.fail("log_set", "insert rejected")

        response = client.post("/exercises/bench/sets", json={"weight": 200, "reps": 2})

        assert response.status_code == 502
        assert response.json()["detail"] == "insert rejected"

    def test_update_set(self, client, remote):
        response = client.patch("/exercises/squat/sets/s1", json={"distance": 1.0, "duration": 9})

        assert response.status_code == 200
        updated = response.json()["sets"][0]
        assert updated["distance"] == 1.0
        assert updated["weight"] is None
        assert remote.get_set_row("s1")["reps"] is None

    def test_delete_set(self, client):
        response = client.delete("/exercises/bench/sets/b2")

        assert response.status_code == 200
        assert [s["id"] for s in response.json()["sets"]] == ["b3", "b1"]


# =============================================================================
# Exercise Fields
# =============================================================================


@pytest.mark.integration
class TestExerciseFieldEndpoints:
    def test_pinned_note(self, client, remote):
        client.get("/exercises")

        response = client.put("/exercises/bench/pinned-note", json={"note": "  Pause at chest "})

        assert response.status_code == 200
        assert response.json()["pinned_note"] == "Pause at chest"
        assert remote.calls["fetch_exercises"] == 1

    def test_clear_pinned_note(self, client):
        client.put("/exercises/bench/pinned-note", json={"note": "x"})
        response = client.put("/exercises/bench/pinned-note", json={"note": "   "})

        assert response.json()["pinned_note"] is None

    def test_pr_reps(self, client):
        response = client.put("/exercises/bench/pr-reps", json={"reps": 3})

        assert response.json()["effective_pr_reps"] == 3
        detail = client.get("/exercises/bench").json()
        assert detail["current_pr"]["label"] == "3RM"
        assert detail["current_pr"]["weight"] == 195

    def test_pr_reps_validation(self, client):
        response = client.put("/exercises/bench/pr-reps", json={"reps": 0})
        assert response.status_code == 422

    def test_goals(self, client):
        assert client.put("/exercises/squat/goal-weight", json={"goal_weight": 315}).json()["goal_weight"] == 315
        assert client.put("/exercises/squat/goal-reps", json={"goal_reps": 5}).json()["goal_reps"] == 5

    def test_unknown_exercise(self, client):
        response = client.put("/exercises/nope/goal-reps", json={"goal_reps": 5})
        assert response.status_code == 404


# =============================================================================
# History
# =============================================================================


@pytest.mark.integration
class TestHistoryEndpoint:
    def test_labelled_days(self, client):
        data = client.get("/history").json()

        assert data["total"] == 3
        assert [d["label"] for d in data["days"]] == ["Cardio & Chest", "Back & Legs", "Chest"]
        assert data["days"][0]["exercise_count"] == 2

    def test_set_names(self, client):
        data = client.get("/history").json()
        names = {s["exercise_name"] for s in data["days"][1]["sets"]}
        assert names == {"Squat", "Pull-Up"}

    def test_limit(self, client):
        data = client.get("/history", params={"limit": 1}).json()
        assert data["total"] == 1


# =============================================================================
# Body Weight
# =============================================================================


@pytest.mark.integration
class TestBodyWeightEndpoints:
    def test_empty(self, client):
        data = client.get("/body-weight").json()

        assert data["logs"] == []
        assert data["current_weight"] is None

    def test_log_and_summary(self, client):
        client.post("/body-weight", json={
            "weight": 184.0, "date": "2026-01-01T07:00:00+00:00",
        })
        response = client.post("/body-weight", json={"weight": 181.5, "notes": "morning"})

        assert response.status_code == 201
        data = response.json()
        assert [log["weight"] for log in data["logs"]] == [181.5, 184.0]
        assert data["starting_weight"] == 184.0
        assert data["current_weight"] == 181.5
        assert data["total_change"] == pytest.approx(-2.5)
        assert len(data["chart"]) == 2

    def test_goal(self, client):
        client.post("/body-weight", json={"weight": 181.5})

        data = client.put("/body-weight/goal", json={"goal_weight": 175}).json()

        assert data["goal_weight"] == 175
        assert data["remaining_to_goal"] == pytest.approx(-6.5)

    def test_delete(self, client):
        log_id = client.post("/body-weight", json={"weight": 181.5}).json()["logs"][0]["id"]

        data = client.delete(f"/body-weight/{log_id}").json()

        assert data["logs"] == []

    def test_invalid_weight(self, client):
        assert client.post("/body-weight", json={"weight": 0}).status_code == 422
