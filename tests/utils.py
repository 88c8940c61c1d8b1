from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from tutorial_portal.api.deps import issue_smoke_token
from tutorial_portal.core.auth import Role
from tutorial_portal.libs.webhook_client import DispatchError

API_KEY = "test-release-key"
EMPLOYEE_ID = "employee-1"
OTHER_EMPLOYEE_ID = "employee-2"
ADMIN_ID = "admin-1"


def auth_headers(user_id: str = EMPLOYEE_ID, role: Role = Role.EMPLOYEE) -> dict[str, str]:
    token = issue_smoke_token(user_id, role=role, email=f"{user_id}@portal.com.br")
    return {"Authorization": f"Bearer {token}"}


def admin_headers() -> dict[str, str]:
    return auth_headers(ADMIN_ID, Role.ADMIN)


def api_key_headers(key: str = API_KEY) -> dict[str, str]:
    return {"x-api-key": key}


def release_payload(**overrides: Any) -> dict[str, Any]:
    """Camel-case body for POST /tutorial-releases."""
    payload: dict[str, Any] = {
        "clientName": "João Silva",
        "clientCpf": "12345678901",
        "clientEmail": "joao@empresa.com.br",
        "clientPhone": "(11) 99999-9999",
        "companyName": "Empresa ABC",
        "companyDocument": "12345678000190",
        "companyRole": "Gerente",
        "tutorialIds": ["t1", "t2"],
    }
    payload.update(overrides)
    return payload


class FrozenClock:
    """Reference clock stand-in that only moves when a test says so."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


class RecordingWebhookClient:
    """Collects payloads instead of calling the fulfillment system."""

    def __init__(self) -> None:
        self.payloads: list[dict[str, Any]] = []
        self.fail_with: int | None = None

    async def post_json(self, payload: dict[str, Any]) -> str:
        self.payloads.append(payload)
        if self.fail_with is not None:
            raise DispatchError(
                f"Webhook failed with status: {self.fail_with}", status_code=self.fail_with
            )
        return '{"received": true}'
