"""Error Handlers — unknown routes, wrong methods and unexpected exceptions.

Invariants:
    - Unknown route → 404 "Ruta no encontrada" naming method and path
    - Wrong method → 405 "Método no permitido", Allow header kept
    - Unexpected exception → 500; raw message outside production, generic inside
"""

from httpx import ASGITransport, AsyncClient

from app.main import create_app


def _app_with_failing_route(settings):
    app = create_app(settings)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom in handler")

    return app


async def _get(app, path: str):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        return await c.get(path)


async def test_unknown_route(client):
    response = await client.get("/no-existe")
    assert response.status_code == 404
    body = response.json()
    assert body["title"] == "Ruta no encontrada"
    assert body["detail"] == "La ruta GET /no-existe no existe"
    assert body["type"] == "https://httpstatuses.com/404"
    assert "timestamp" in body


async def test_wrong_method(client):
    response = await client.patch("/tasks")
    assert response.status_code == 405
    assert response.json()["title"] == "Método no permitido"
    assert "allow" in response.headers


async def test_unexpected_error_shows_message_outside_production(settings):
    response = await _get(_app_with_failing_route(settings), "/boom")
    assert response.status_code == 500
    body = response.json()
    assert body["type"] == "about:blank"
    assert body["detail"] == "kaboom in handler"


async def test_unexpected_error_hidden_in_production(settings):
    production = settings.model_copy(update={"environment": "production"})
    response = await _get(_app_with_failing_route(production), "/boom")
    assert response.status_code == 500
    body = response.json()
    assert body["detail"] == "Ha ocurrido un error interno del servidor"
    assert "kaboom" not in response.text
