"""Request helpers shared by the API tests."""

from __future__ import annotations

from dataclasses import dataclass

from starlette.testclient import TestClient


@dataclass
class SignedInUser:
    user_id: int
    username: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def sign_up_and_in(client: TestClient, username: str, password: str = "secret-pass") -> SignedInUser:
    resp = client.post("/api/auth/sign-up", json={"username": username, "password": password})
    assert resp.status_code == 201, resp.text
    resp = client.post("/api/auth/sign-in", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    return SignedInUser(user_id=body["user"]["userId"], username=username, token=body["token"])


def create_plan(client: TestClient, user: SignedInUser, **overrides) -> dict:
    payload = {"grassSpeciesId": 1, "planType": "new_lawn", "establishmentType": "sod_plugs"}
    payload.update(overrides)
    resp = client.post("/api/plans/new", json=payload, headers=user.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def add_step(client: TestClient, user: SignedInUser, plan_id: int, description: str, due_date: str) -> dict:
    resp = client.post(
        f"/api/plans/{plan_id}/steps",
        json={"stepDescription": description, "dueDate": due_date},
        headers=user.headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
