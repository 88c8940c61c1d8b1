"""Integration tests for tutorial catalog and job-role endpoints."""

from __future__ import annotations

import pytest
from fastapi import status
from httpx import AsyncClient

from tests.utils import admin_headers, auth_headers


class TestTutorials:
    @pytest.mark.asyncio
    async def test_list_tutorials(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/tutorials", headers=auth_headers())

        assert response.status_code == status.HTTP_200_OK
        tags = [tutorial["tag"] for tutorial in response.json()]
        assert tags == sorted(tags)
        fiscal = next(tutorial for tutorial in response.json() if tutorial["id"] == "t2")
        assert fiscal == {
            "id": "t2",
            "name": "Notas fiscais",
            "description": "Emissão de NF-e",
            "tag": "fiscal",
            "idCademi": 102,
        }

    @pytest.mark.asyncio
    async def test_admin_creates_tutorial(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/tutorials",
            json={
                "name": "Estoque",
                "description": "Controle de estoque",
                "tag": "estoque",
                "idCademi": 204,
            },
            headers=admin_headers(),
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["idCademi"] == 204
        listing = await async_client.get("/tutorials", headers=auth_headers())
        assert "Estoque" in [tutorial["name"] for tutorial in listing.json()]

    @pytest.mark.asyncio
    async def test_employee_cannot_create_tutorial(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/tutorials",
            json={"name": "X", "description": "Y", "tag": "z", "idCademi": 1},
            headers=auth_headers(),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestJobRoles:
    @pytest.mark.asyncio
    async def test_crud_and_type_filter(self, async_client: AsyncClient) -> None:
        created = []
        for body in (
            {"name": "Vendas", "type": "department", "sortOrder": 2},
            {"name": "Engenharia", "type": "department", "sortOrder": 1},
            {"name": "Gerente", "type": "client_role"},
        ):
            response = await async_client.post("/job-roles", json=body, headers=admin_headers())
            assert response.status_code == status.HTTP_201_CREATED
            created.append(response.json())

        departments = await async_client.get("/job-roles", params={"type": "department"})
        assert [role["name"] for role in departments.json()] == ["Engenharia", "Vendas"]

        everything = await async_client.get("/job-roles")
        assert len(everything.json()) == 3

        renamed = await async_client.put(
            f"/job-roles/{created[0]['id']}",
            json={"name": "Comercial"},
            headers=admin_headers(),
        )
        assert renamed.status_code == status.HTTP_200_OK
        assert renamed.json()["name"] == "Comercial"
        assert renamed.json()["type"] == "department"

        deleted = await async_client.delete(
            f"/job-roles/{created[2]['id']}", headers=admin_headers()
        )
        assert deleted.status_code == status.HTTP_204_NO_CONTENT

        client_roles = await async_client.get("/job-roles", params={"type": "client_role"})
        assert client_roles.json() == []

    @pytest.mark.asyncio
    async def test_unknown_type_is_400(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/job-roles", params={"type": "team"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_unknown_role_is_404(self, async_client: AsyncClient) -> None:
        response = await async_client.put(
            "/job-roles/missing", json={"name": "X"}, headers=admin_headers()
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_writes_require_admin(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/job-roles", json={"name": "X", "type": "department"}, headers=auth_headers()
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
