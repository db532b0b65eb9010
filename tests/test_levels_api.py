"""Tests for level endpoints."""

import asyncio

import pytest
from httpx import AsyncClient

from gridmaze.core.maze_engine import TUTORIAL_LEVEL


async def submit(client: AsyncClient, grid) -> dict:
    response = await client.post("/v1/levels/submit", json={"grid": grid})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_submit_level(client):
    """POST /v1/levels/submit stores the grid and derives the marker."""
    data = await submit(client, TUTORIAL_LEVEL)

    assert isinstance(data["id"], int)
    assert data["grid"] == TUTORIAL_LEVEL
    assert data["rows"] == 5
    assert data["cols"] == 5
    assert data["marker_row"] == 2
    assert data["marker_col"] == 1
    assert "created_at" in data


@pytest.mark.asyncio
@pytest.mark.parametrize("grid,message", [
    (None, "Missing grid"),
    ([], "Missing grid"),
    ([[2, 0, 3], [0, 0]], "rectangular"),
    ([[2, 0], [4, 3]], "0,1,2,3"),
    ([[2] * 101], "more than 100 columns"),
    ([[0, 0], [1, 3]], "must have a marker"),
])
async def test_submit_invalid_level(client, grid, message):
    response = await client.post("/v1/levels/submit", json={"grid": grid})

    assert response.status_code == 400
    assert message in response.json()["detail"]

    # Nothing was stored
    listing = await client.get("/v1/levels")
    assert listing.json()["total"] == 0


@pytest.mark.asyncio
async def test_submit_missing_body_field(client):
    response = await client.post("/v1/levels/submit", json={})
    assert response.status_code == 400
    assert "Missing grid" in response.json()["detail"]


@pytest.mark.asyncio
async def test_submit_malformed_body(client):
    """Shape errors are caught before the validator runs."""
    response = await client.post("/v1/levels/submit", json={"grid": "not a grid"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_level(client):
    created = await submit(client, TUTORIAL_LEVEL)

    response = await client.get(f"/v1/levels/{created['id']}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == created["id"]
    assert data["grid"] == TUTORIAL_LEVEL
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_get_level_not_found(client):
    response = await client.get("/v1/levels/4242")
    assert response.status_code == 404
    assert response.json()["detail"] == "Level not found: 4242"


@pytest.mark.asyncio
async def test_list_levels(client):
    for _ in range(3):
        await submit(client, [[2, 3]])

    response = await client.get("/v1/levels?limit=2")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert len(data["levels"]) == 2
    # Grid data is not part of the listing
    assert "grid" not in data["levels"][0]

    response = await client.get("/v1/levels?offset=2")
    assert len(response.json()["levels"]) == 1


@pytest.mark.asyncio
async def test_move(client):
    created = await submit(client, TUTORIAL_LEVEL)

    response = await client.post(f"/v1/levels/{created['id']}/move", json={"direction": 1})

    assert response.status_code == 200
    data = response.json()
    assert data["level_id"] == created["id"]
    assert data["marker"] == {"row": 1, "col": 1}
    assert data["grid"][1][1] == 2
    assert data["grid"][2][1] == 0

    stored = (await client.get(f"/v1/levels/{created['id']}")).json()
    assert stored["grid"] == data["grid"]
    assert (stored["marker_row"], stored["marker_col"]) == (1, 1)


@pytest.mark.asyncio
@pytest.mark.parametrize("grid,direction,error", [
    (TUTORIAL_LEVEL, 0, "wall_collision"),
    (TUTORIAL_LEVEL, 4, "invalid_direction"),
    (TUTORIAL_LEVEL, -1, "invalid_direction"),
    ([[2, 0, 3]], 3, "out_of_bounds"),
])
async def test_rejected_moves(client, grid, direction, error):
    """Rejected moves return 400 with an error code and change nothing."""
    created = await submit(client, grid)

    response = await client.post(
        f"/v1/levels/{created['id']}/move", json={"direction": direction}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == error
    assert body["detail"].startswith("Invalid move")

    stored = (await client.get(f"/v1/levels/{created['id']}")).json()
    assert stored["grid"] == grid
    assert (stored["marker_row"], stored["marker_col"]) == (
        created["marker_row"],
        created["marker_col"],
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("grid", [
    [[2, True, 3]],
    [[2, 0, "3"]],
    [[2, 1.0, 3]],
])
async def test_submit_rejects_non_integer_cells(client, grid):
    """Booleans, strings and floats are not cell codes, even if they look like one."""
    response = await client.post("/v1/levels/submit", json={"grid": grid})

    assert response.status_code == 400
    assert "0,1,2,3" in response.json()["detail"]

    listing = await client.get("/v1/levels")
    assert listing.json()["total"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("direction", [True, False, "1", 1.0, None])
async def test_move_rejects_non_integer_direction(client, direction):
    created = await submit(client, TUTORIAL_LEVEL)

    response = await client.post(
        f"/v1/levels/{created['id']}/move", json={"direction": direction}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_direction"

    stored = (await client.get(f"/v1/levels/{created['id']}")).json()
    assert stored["grid"] == TUTORIAL_LEVEL
    assert (stored["marker_row"], stored["marker_col"]) == (2, 1)


@pytest.mark.asyncio
async def test_move_unknown_level(client):
    response = await client.post("/v1/levels/999/move", json={"direction": 1})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_move_requires_direction(client):
    created = await submit(client, TUTORIAL_LEVEL)
    response = await client.post(f"/v1/levels/{created['id']}/move", json={})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_solution(client):
    """The worked example solves as up, right, right, up."""
    created = await submit(client, TUTORIAL_LEVEL)

    response = await client.get(f"/v1/levels/{created['id']}/solution")

    assert response.status_code == 200
    data = response.json()
    assert data == {"level_id": created["id"], "moves": [1, 2, 2, 1], "length": 4}

    # Following the solution lands on the exit
    for direction in data["moves"]:
        moved = await client.post(
            f"/v1/levels/{created['id']}/move", json={"direction": direction}
        )
        assert moved.status_code == 200

    assert moved.json()["marker"] == {"row": 0, "col": 3}


@pytest.mark.asyncio
async def test_solution_unreachable(client):
    created = await submit(client, [[2, 1, 3]])

    response = await client.get(f"/v1/levels/{created['id']}/solution")

    assert response.status_code == 200
    assert response.json()["moves"] == []
    assert response.json()["length"] == 0


@pytest.mark.asyncio
async def test_solution_not_found(client):
    response = await client.get("/v1/levels/31337/solution")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_concurrent_move_requests(client):
    """Concurrent move requests on one level are all applied, in some order."""
    created = await submit(client, [[2, 0, 0, 0, 0, 3]])
    level_url = f"/v1/levels/{created['id']}"

    responses = await asyncio.gather(
        *(client.post(f"{level_url}/move", json={"direction": 2}) for _ in range(4))
    )

    assert [r.status_code for r in responses] == [200] * 4
    cols = sorted(r.json()["marker"]["col"] for r in responses)
    assert cols == [1, 2, 3, 4]

    stored = (await client.get(level_url)).json()
    assert stored["grid"] == [[0, 0, 0, 0, 2, 3]]
    assert stored["marker_col"] == 4
