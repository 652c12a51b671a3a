"""Task Routes — end-to-end CRUD over HTTP with a real SQLite database.

Invariants:
    - POST → 201 detail shape, status pendiente, fechaCreacion == fechaActualizacion
    - GET /tasks → list-item shape, most recent first, no descripcion key
    - PUT → new status, fechaActualizacion strictly later
    - Missing ids → 404 "Tarea con ID n no fue encontrado"
    - Invalid input → 400 with errors keyed by field; nothing persisted
    - Storage failure → 500 DatabaseError body without driver text
"""

from datetime import datetime

from app.api.dependencies import get_task_service
from app.services.task_service import TaskService


class _BrokenRepository:
    async def _fail(self, *args, **kwargs):
        raise RuntimeError("SQLITE_CORRUPT: database disk image is malformed")

    find_all_ordered = find_by_id = insert = update = delete = _fail


async def _create(client, **body) -> dict:
    response = await client.post("/tasks", json=body or {"titulo": "Comprar pan"})
    assert response.status_code == 201, response.text
    return response.json()


# -- create -----------------------------------------------------------------------

async def test_create_task(client):
    response = await client.post("/tasks", json={"title": "Buy milk"})
    assert response.status_code == 201
    body = response.json()
    assert body["id"] == 1
    assert body["titulo"] == "Buy milk"
    assert body["descripcion"] is None
    assert body["status"] == "pendiente"
    assert body["fechaCreacion"] == body["fechaActualizacion"]
    datetime.fromisoformat(body["fechaCreacion"])


async def test_create_with_description(client):
    body = await _create(client, titulo="  Leer  ", descripcion="  Un libro ")
    assert body["titulo"] == "Leer"
    assert body["descripcion"] == "Un libro"


async def test_create_blank_description_stored_as_null(client):
    body = await _create(client, titulo="Leer", descripcion="   ")
    assert body["descripcion"] is None


async def test_create_empty_title_rejected(client):
    response = await client.post("/tasks", json={"titulo": ""})
    assert response.status_code == 400
    body = response.json()
    assert body["type"] == "https://httpstatuses.com/400"
    assert body["title"] == "Datos de entrada inválidos"
    assert body["errors"]["titulo"] == ["El título es obligatorio"]
    assert (await client.get("/tasks")).json() == []


async def test_create_title_too_long(client):
    response = await client.post("/tasks", json={"titulo": "x" * 101})
    assert response.status_code == 400
    assert response.json()["errors"] == {
        "titulo": ["El título debe tener entre 1 y 100 caracteres"],
    }


async def test_create_unknown_field_rejected(client):
    response = await client.post(
        "/tasks", json={"titulo": "a", "status": "completada"},
    )
    assert response.status_code == 400
    assert "status" in response.json()["errors"]


async def test_create_invalid_json(client):
    response = await client.post(
        "/tasks", content=b"{titulo", headers={"content-type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["errors"] == {
        "body": ["El cuerpo de la petición no es JSON válido"],
    }


async def test_create_non_object_body(client):
    response = await client.post("/tasks", json=["Comprar pan"])
    assert response.status_code == 400
    assert "body" in response.json()["errors"]


# -- list / get -------------------------------------------------------------------

async def test_list_empty(client):
    response = await client.get("/tasks")
    assert response.status_code == 200
    assert response.json() == []


async def test_list_most_recent_first_without_description(client):
    first = await _create(client, titulo="primera", descripcion="d")
    second = await _create(client, titulo="segunda")
    items = (await client.get("/tasks")).json()
    assert [t["id"] for t in items] == [second["id"], first["id"]]
    assert all("descripcion" not in t for t in items)
    assert set(items[0]) == {
        "id", "titulo", "status", "fechaCreacion", "fechaActualizacion",
    }


async def test_get_task(client):
    created = await _create(client, titulo="a", descripcion="b")
    response = await client.get(f"/tasks/{created['id']}")
    assert response.status_code == 200
    assert response.json() == created


async def test_get_missing_task(client):
    response = await client.get("/tasks/999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Tarea con ID 999 no fue encontrado"


# -- update -----------------------------------------------------------------------

async def test_update_status(client):
    created = await _create(client)
    response = await client.put(
        f"/tasks/{created['id']}", json={"status": "completada"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completada"
    assert body["titulo"] == created["titulo"]
    assert body["fechaCreacion"] == created["fechaCreacion"]
    assert datetime.fromisoformat(body["fechaActualizacion"]) > datetime.fromisoformat(
        created["fechaActualizacion"],
    )


async def test_update_status_persists(client):
    created = await _create(client)
    await client.put(f"/tasks/{created['id']}", json={"status": "cancelada"})
    items = (await client.get("/tasks")).json()
    assert items[0]["status"] == "cancelada"


async def test_update_missing_task(client):
    response = await client.put("/tasks/999", json={"status": "completada"})
    assert response.status_code == 404
    body = response.json()
    assert body["type"] == "https://httpstatuses.com/404"
    assert body["detail"] == "Tarea con ID 999 no fue encontrado"
    assert body["context"] == {"resource": "Tarea", "id": 999}


async def test_update_invalid_status(client):
    created = await _create(client)
    response = await client.put(f"/tasks/{created['id']}", json={"status": "done"})
    assert response.status_code == 400
    assert response.json()["errors"] == {
        "status": ["El status debe ser: pendiente, completada o cancelada"],
    }


async def test_update_non_numeric_id_checked_before_body(client):
    response = await client.put("/tasks/abc", json={"status": "nope"})
    assert response.status_code == 400
    assert response.json()["errors"] == {"id": ["ID debe ser un número válido"]}


# -- delete -----------------------------------------------------------------------

async def test_delete_task(client):
    created = await _create(client)
    response = await client.delete(f"/tasks/{created['id']}")
    assert response.status_code == 204
    assert response.content == b""
    ids = [t["id"] for t in (await client.get("/tasks")).json()]
    assert created["id"] not in ids


async def test_delete_twice(client):
    created = await _create(client)
    await client.delete(f"/tasks/{created['id']}")
    response = await client.delete(f"/tasks/{created['id']}")
    assert response.status_code == 404


async def test_delete_non_numeric_id(client):
    response = await client.delete("/tasks/12abc")
    assert response.status_code == 400
    assert "id" in response.json()["errors"]


async def test_id_beyond_storable_range_rejected(client):
    huge = "99999999999999999999"
    responses = [
        await client.get(f"/tasks/{huge}"),
        await client.put(f"/tasks/{huge}", json={"status": "completada"}),
        await client.delete(f"/tasks/{huge}"),
    ]
    for response in responses:
        assert response.status_code == 400
        assert response.json()["errors"] == {"id": ["ID debe ser un número válido"]}


async def test_id_zero_rejected(client):
    response = await client.get("/tasks/0")
    assert response.status_code == 400


# -- storage failure --------------------------------------------------------------

async def test_storage_failure_is_500_without_driver_text(app, client):
    app.dependency_overrides[get_task_service] = lambda: TaskService(
        _BrokenRepository(),
    )
    try:
        response = await client.get("/tasks")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 500
    body = response.json()
    assert body["title"] == "Error de base de datos"
    assert body["context"] == {"operation": "list"}
    assert "SQLITE_CORRUPT" not in response.text


async def test_storage_failure_on_update_tagged(app, client):
    app.dependency_overrides[get_task_service] = lambda: TaskService(
        _BrokenRepository(),
    )
    try:
        response = await client.put(
            "/tasks/1", json={"status": "completada"},
        )
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 500
    assert response.json()["context"] == {"operation": "updateStatus"}
