"""Request helpers shared by the API tests."""
from typing import Dict

from httpx import AsyncClient

from taskflow.auth.security import create_access_token
from taskflow.tasks.models import User

PASSWORD = "secret123"


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


async def create_task(
    client: AsyncClient,
    creator: User,
    assignee: User,
    **fields,
) -> dict:
    payload = {
        "title": "Fix login page layout",
        "description": "The login page layout is broken on mobile devices",
        "priority": "HIGH",
        "assigneeId": assignee.id,
    }
    payload.update(fields)
    response = await client.post("/api/tasks", json=payload, headers=auth_headers(creator))
    assert response.status_code == 201, response.text
    return response.json()


async def set_status(client: AsyncClient, actor: User, task_id: int, status: str):
    return await client.put(
        f"/api/tasks/{task_id}",
        json={"status": status},
        headers=auth_headers(actor),
    )
