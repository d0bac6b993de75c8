"""Tests for the plan and step endpoints."""

from lawn_care_api.app.core.db import get_connection
from tests.helpers import add_step, create_plan


def _count_steps(plan_id: int) -> int:
    conn = get_connection()
    try:
        row = conn.execute(
            "SELECT COUNT(*) AS n FROM PlanSteps WHERE user_plan_id = ?", (plan_id,)
        ).fetchone()
        return row["n"]
    finally:
        conn.close()


# --- Create / read -----------------------------------------------------------


def test_create_plan_starts_active_and_empty(client, alice):
    plan = create_plan(client, alice, grassSpeciesId=1, planType="new_lawn", establishmentType="sod_plugs")
    assert plan["userId"] == alice.user_id
    assert plan["grassSpeciesName"] == "Kentucky Bluegrass"
    assert plan["establishmentType"] == "sod_plugs"
    assert plan["isCompleted"] is False
    assert plan["isArchived"] is False
    assert plan["completedAt"] is None

    resp = client.get(f"/api/plans/{plan['userPlanId']}", headers=alice.headers)
    assert resp.status_code == 200
    assert resp.json()["steps"] == []


def test_lawn_improvement_plan_has_no_establishment_type(client, alice):
    plan = create_plan(client, alice, planType="lawn_improvement", establishmentType="seed")
    assert plan["planType"] == "lawn_improvement"
    assert plan["establishmentType"] is None


def test_create_plan_unknown_species(client, alice):
    resp = client.post(
        "/api/plans/new",
        json={"grassSpeciesId": 999, "planType": "new_lawn"},
        headers=alice.headers,
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Unknown grass species"}


def test_create_plan_rejects_unknown_plan_type(client, alice):
    resp = client.post(
        "/api/plans/new",
        json={"grassSpeciesId": 1, "planType": "xeriscape"},
        headers=alice.headers,
    )
    assert resp.status_code == 422


def test_plan_endpoints_require_token(client, plan):
    resp = client.get(f"/api/plans/{plan['userPlanId']}")
    assert resp.status_code == 401
    resp = client.get(f"/api/plans/{plan['userPlanId']}", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401


def test_get_plan_orders_steps_by_due_date(client, alice, plan):
    plan_id = plan["userPlanId"]
    add_step(client, alice, plan_id, "Fertilize", "2024-06-01")
    add_step(client, alice, plan_id, "Mow", "2024-05-01")
    add_step(client, alice, plan_id, "Seed", "2024-04-15")

    steps = client.get(f"/api/plans/{plan_id}", headers=alice.headers).json()["steps"]
    assert [s["stepDescription"] for s in steps] == ["Seed", "Mow", "Fertilize"]
    assert [s["dueDate"] for s in steps] == sorted(s["dueDate"] for s in steps)


def test_foreign_plan_looks_missing(client, alice, bob, plan):
    resp = client.get(f"/api/plans/{plan['userPlanId']}", headers=bob.headers)
    missing = client.get("/api/plans/9999", headers=bob.headers)
    assert resp.status_code == missing.status_code == 404
    assert resp.json() == missing.json() == {"error": "Plan not found"}


# --- Steps -------------------------------------------------------------------


def test_first_step_gets_order_one(client, alice, plan):
    step = add_step(client, alice, plan["userPlanId"], "Mow", "2024-05-01")
    assert step["stepOrder"] == 1
    assert step["templateId"] is None
    assert step["completed"] is False
    assert step["userPlanId"] == plan["userPlanId"]


def test_step_order_keeps_increasing(client, alice, plan):
    plan_id = plan["userPlanId"]
    first = add_step(client, alice, plan_id, "Seed", "2024-04-15")
    second = add_step(client, alice, plan_id, "Water", "2024-04-16")
    third = add_step(client, alice, plan_id, "Mow", "2024-05-01")
    assert [first["stepOrder"], second["stepOrder"], third["stepOrder"]] == [1, 2, 3]

    client.delete(f"/api/plans/{plan_id}/steps/{second['planStepId']}", headers=alice.headers)
    fourth = add_step(client, alice, plan_id, "Fertilize", "2024-06-01")
    assert fourth["stepOrder"] == 4


def test_add_step_to_foreign_plan(client, bob, plan):
    resp = client.post(
        f"/api/plans/{plan['userPlanId']}/steps",
        json={"stepDescription": "Mow", "dueDate": "2024-05-01"},
        headers=bob.headers,
    )
    assert resp.status_code == 404
    assert _count_steps(plan["userPlanId"]) == 0


def test_complete_step_stamps_time_when_missing(client, alice, plan):
    step = add_step(client, alice, plan["userPlanId"], "Mow", "2024-05-01")
    resp = client.put(
        f"/api/plans/{plan['userPlanId']}/steps/{step['planStepId']}",
        json={"completed": True},
        headers=alice.headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["completed"] is True
    assert body["completedAt"] is not None


def test_complete_step_keeps_given_time_and_reopen_clears_it(client, alice, plan):
    plan_id = plan["userPlanId"]
    step = add_step(client, alice, plan_id, "Mow", "2024-05-01")
    url = f"/api/plans/{plan_id}/steps/{step['planStepId']}"

    resp = client.put(url, json={"completed": True, "completedAt": "2024-05-02T10:00:00Z"}, headers=alice.headers)
    assert resp.json()["completedAt"].startswith("2024-05-02T10:00:00")

    resp = client.put(url, json={"completed": False, "completedAt": "2024-05-02T10:00:00Z"}, headers=alice.headers)
    assert resp.json()["completed"] is False
    assert resp.json()["completedAt"] is None


def test_complete_step_not_found(client, alice, plan):
    other_plan = create_plan(client, alice)
    step = add_step(client, alice, other_plan["userPlanId"], "Mow", "2024-05-01")

    resp = client.put(
        f"/api/plans/{plan['userPlanId']}/steps/{step['planStepId']}",
        json={"completed": True},
        headers=alice.headers,
    )
    assert resp.status_code == 404
    assert resp.json() == {"error": "Step not found"}


def test_complete_step_on_foreign_plan(client, alice, bob, plan):
    step = add_step(client, alice, plan["userPlanId"], "Mow", "2024-05-01")
    resp = client.put(
        f"/api/plans/{plan['userPlanId']}/steps/{step['planStepId']}",
        json={"completed": True},
        headers=bob.headers,
    )
    assert resp.status_code == 404
    assert resp.json() == {"error": "Plan not found"}


def test_delete_step(client, alice, plan):
    plan_id = plan["userPlanId"]
    step = add_step(client, alice, plan_id, "Mow", "2024-05-01")
    url = f"/api/plans/{plan_id}/steps/{step['planStepId']}"

    resp = client.delete(url, headers=alice.headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Step deleted successfully"}

    resp = client.delete(url, headers=alice.headers)
    assert resp.status_code == 404


# --- Complete / delete plan --------------------------------------------------


def test_complete_plan_closes_all_open_steps(client, alice, plan):
    plan_id = plan["userPlanId"]
    for description, due in [("Seed", "2024-04-15"), ("Water", "2024-04-16"), ("Mow", "2024-05-01")]:
        add_step(client, alice, plan_id, description, due)

    resp = client.put(f"/api/plans/{plan_id}/complete", headers=alice.headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["isCompleted"] is True
    assert body["completedAt"] is not None
    assert len(body["steps"]) == 3
    assert all(s["completed"] and s["completedAt"] for s in body["steps"])


def test_complete_plan_keeps_earlier_step_completion(client, alice, plan):
    plan_id = plan["userPlanId"]
    step = add_step(client, alice, plan_id, "Seed", "2024-04-15")
    client.put(
        f"/api/plans/{plan_id}/steps/{step['planStepId']}",
        json={"completed": True, "completedAt": "2024-04-15T08:00:00Z"},
        headers=alice.headers,
    )
    body = client.put(f"/api/plans/{plan_id}/complete", headers=alice.headers).json()
    assert body["steps"][0]["completedAt"].startswith("2024-04-15T08:00:00")


def test_complete_foreign_plan(client, alice, bob, plan):
    plan_id = plan["userPlanId"]
    add_step(client, alice, plan_id, "Mow", "2024-05-01")
    resp = client.put(f"/api/plans/{plan_id}/complete", headers=bob.headers)
    assert resp.status_code == 404

    body = client.get(f"/api/plans/{plan_id}", headers=alice.headers).json()
    assert body["isCompleted"] is False
    assert body["steps"][0]["completed"] is False


def test_delete_plan_removes_steps(client, alice, plan):
    plan_id = plan["userPlanId"]
    add_step(client, alice, plan_id, "Mow", "2024-05-01")

    resp = client.delete(f"/api/plans/{plan_id}", headers=alice.headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Plan deleted successfully"}
    assert client.get(f"/api/plans/{plan_id}", headers=alice.headers).status_code == 404
    assert _count_steps(plan_id) == 0


def test_delete_foreign_plan_leaves_everything(client, alice, bob, plan):
    plan_id = plan["userPlanId"]
    add_step(client, alice, plan_id, "Mow", "2024-05-01")
    add_step(client, alice, plan_id, "Edge", "2024-05-02")

    resp = client.delete(f"/api/plans/{plan_id}", headers=bob.headers)
    assert resp.status_code == 404
    assert _count_steps(plan_id) == 2
    assert client.get(f"/api/plans/{plan_id}", headers=alice.headers).status_code == 200


# --- Update ------------------------------------------------------------------


def _update_payload(plan: dict, **overrides) -> dict:
    payload = {
        "grassSpeciesId": plan["grassSpeciesId"],
        "planType": plan["planType"],
        "establishmentType": plan["establishmentType"],
        "isCompleted": plan["isCompleted"],
        "isArchived": plan["isArchived"],
        "steps": [],
    }
    payload.update(overrides)
    return payload


def test_update_plan_upserts_steps(client, alice, plan):
    plan_id = plan["userPlanId"]
    existing = add_step(client, alice, plan_id, "Mow", "2024-05-01")

    payload = _update_payload(
        plan,
        isArchived=True,
        grassSpeciesId=2,
        steps=[
            {"planStepId": existing["planStepId"], "stepDescription": "Mow high", "dueDate": "2024-05-03"},
            {"stepDescription": "Overseed", "dueDate": "2024-09-01"},
        ],
    )
    resp = client.put(f"/api/plans/{plan_id}", json=payload, headers=alice.headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["isArchived"] is True
    assert body["grassSpeciesName"] == "Tall Fescue"
    assert [s["stepDescription"] for s in body["steps"]] == ["Mow high", "Overseed"]
    new_step = body["steps"][1]
    assert new_step["templateId"] is None
    assert new_step["stepOrder"] == 2


def test_update_is_all_or_nothing(client, alice, plan):
    plan_id = plan["userPlanId"]
    payload = _update_payload(
        plan,
        isArchived=True,
        steps=[
            {"stepDescription": "Overseed", "dueDate": "2024-09-01"},
            {"planStepId": 424242, "stepDescription": "Ghost", "dueDate": "2024-09-02"},
        ],
    )
    resp = client.put(f"/api/plans/{plan_id}", json=payload, headers=alice.headers)
    assert resp.status_code == 404
    assert resp.json() == {"error": "Step not found"}

    body = client.get(f"/api/plans/{plan_id}", headers=alice.headers).json()
    assert body["isArchived"] is False
    assert body["steps"] == []


def test_update_foreign_plan(client, alice, bob, plan):
    plan_id = plan["userPlanId"]
    resp = client.put(f"/api/plans/{plan_id}", json=_update_payload(plan, isArchived=True), headers=bob.headers)
    assert resp.status_code == 404
    assert client.get(f"/api/plans/{plan_id}", headers=alice.headers).json()["isArchived"] is False


def test_update_cannot_reopen_completed_plan(client, alice, plan):
    plan_id = plan["userPlanId"]
    completed = client.put(f"/api/plans/{plan_id}/complete", headers=alice.headers).json()

    resp = client.put(f"/api/plans/{plan_id}", json=_update_payload(plan, isCompleted=False), headers=alice.headers)
    assert resp.status_code == 200
    assert resp.json()["isCompleted"] is True
    assert resp.json()["completedAt"] == completed["completedAt"]


def test_update_completed_step_gets_timestamp(client, alice, plan):
    plan_id = plan["userPlanId"]
    payload = _update_payload(plan, steps=[{"stepDescription": "Mow", "dueDate": "2024-05-01", "completed": True}])
    body = client.put(f"/api/plans/{plan_id}", json=payload, headers=alice.headers).json()
    assert body["steps"][0]["completed"] is True
    assert body["steps"][0]["completedAt"] is not None


# --- User plans / save to profile -------------------------------------------


def test_list_user_plans_newest_first_with_steps(client, alice):
    older = create_plan(client, alice)
    newer = create_plan(client, alice, planType="lawn_improvement")
    add_step(client, alice, older["userPlanId"], "Mow", "2024-05-01")
    add_step(client, alice, older["userPlanId"], "Seed", "2024-04-15")

    resp = client.get(f"/api/users/{alice.user_id}/plans", headers=alice.headers)
    assert resp.status_code == 200
    plans = resp.json()
    assert [p["userPlanId"] for p in plans] == [newer["userPlanId"], older["userPlanId"]]
    assert plans[0]["steps"] == []
    assert [s["stepDescription"] for s in plans[1]["steps"]] == ["Seed", "Mow"]


def test_list_user_plans_only_own(client, alice, bob, plan):
    resp = client.get(f"/api/users/{alice.user_id}/plans", headers=bob.headers)
    assert resp.status_code == 403

    resp = client.get(f"/api/users/{bob.user_id}/plans", headers=bob.headers)
    assert resp.json() == []


def test_save_plan_to_profile(client, alice, plan):
    resp = client.post(
        f"/api/users/{alice.user_id}/plans",
        json={"planId": plan["userPlanId"]},
        headers=alice.headers,
    )
    assert resp.status_code == 200
    assert resp.json() == {"message": "Plan saved to profile successfully"}


def test_save_plan_to_other_profile(client, alice, bob, plan):
    resp = client.post(
        f"/api/users/{alice.user_id}/plans",
        json={"planId": plan["userPlanId"]},
        headers=bob.headers,
    )
    assert resp.status_code == 403

    resp = client.post(
        f"/api/users/{bob.user_id}/plans",
        json={"planId": plan["userPlanId"]},
        headers=bob.headers,
    )
    assert resp.status_code == 404


# --- Input bounds and plan type options --------------------------------------

TOO_LARGE_ID = 2**63


def test_ids_beyond_store_range_are_rejected(client, alice, plan):
    assert client.get(f"/api/plans/{TOO_LARGE_ID}", headers=alice.headers).status_code == 422
    assert client.delete(
        f"/api/plans/{plan['userPlanId']}/steps/{TOO_LARGE_ID}", headers=alice.headers
    ).status_code == 422
    assert client.get(f"/api/users/{TOO_LARGE_ID}/plans", headers=alice.headers).status_code == 422


def test_update_with_oversized_step_id_is_rejected(client, alice, plan):
    payload = _update_payload(
        plan,
        steps=[{"planStepId": TOO_LARGE_ID, "stepDescription": "Ghost", "dueDate": "2024-09-02"}],
    )
    resp = client.put(f"/api/plans/{plan['userPlanId']}", json=payload, headers=alice.headers)
    assert resp.status_code == 422
    assert client.get(f"/api/plans/{plan['userPlanId']}", headers=alice.headers).json()["steps"] == []


def test_create_plan_rejects_establishment_type_not_offered(client, alice):
    for establishment_type in ("seed", "banana", None):
        resp = client.post(
            "/api/plans/new",
            json={"grassSpeciesId": 6, "planType": "new_lawn", "establishmentType": establishment_type},
            headers=alice.headers,
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Plan type not offered for this grass species"}
    assert client.get(f"/api/users/{alice.user_id}/plans", headers=alice.headers).json() == []


def test_create_plan_accepts_offered_establishment_type(client, alice):
    plan = create_plan(client, alice, grassSpeciesId=6, establishmentType="sod_plugs")
    assert plan["grassSpeciesName"] == "St. Augustine"
    assert plan["establishmentType"] == "sod_plugs"


def test_update_drops_establishment_type_for_lawn_improvement(client, alice, plan):
    payload = _update_payload(plan, planType="lawn_improvement", establishmentType="seed")
    resp = client.put(f"/api/plans/{plan['userPlanId']}", json=payload, headers=alice.headers)
    assert resp.status_code == 200
    assert resp.json()["planType"] == "lawn_improvement"
    assert resp.json()["establishmentType"] is None


def test_update_rejects_establishment_type_not_offered(client, alice, plan):
    payload = _update_payload(plan, grassSpeciesId=3, isArchived=True)
    resp = client.put(f"/api/plans/{plan['userPlanId']}", json=payload, headers=alice.headers)
    assert resp.status_code == 400

    body = client.get(f"/api/plans/{plan['userPlanId']}", headers=alice.headers).json()
    assert body["grassSpeciesId"] == 1
    assert body["isArchived"] is False


def test_update_keeps_completion_time_of_completed_step(client, alice, plan):
    plan_id = plan["userPlanId"]
    step = add_step(client, alice, plan_id, "Seed", "2024-04-15")
    client.put(
        f"/api/plans/{plan_id}/steps/{step['planStepId']}",
        json={"completed": True, "completedAt": "2024-04-15T08:00:00Z"},
        headers=alice.headers,
    )

    payload = _update_payload(
        plan,
        steps=[{"planStepId": step["planStepId"], "stepDescription": "Seed deeply", "dueDate": "2024-04-15", "completed": True}],
    )
    body = client.put(f"/api/plans/{plan_id}", json=payload, headers=alice.headers).json()
    assert body["steps"][0]["stepDescription"] == "Seed deeply"
    assert body["steps"][0]["completedAt"].startswith("2024-04-15T08:00:00")
