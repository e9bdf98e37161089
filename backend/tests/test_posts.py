from pathlib import Path

from conftest import png_upload

from purdetall.routers.blog import parse_tags


def _create_post(client, headers, **fields):
    data = {"title": "Cómo lavar tu coche", "content": "Paso a paso.", "is_published": "true"}
    data.update(fields)
    return client.post("/api/blog", data=data, headers=headers)


def test_duplicate_slug_is_a_conflict(client, admin_headers):
    first = _create_post(client, admin_headers)
    assert first.status_code == 201
    assert first.json()["slug"] == "como-lavar-tu-coche"

    second = _create_post(client, admin_headers, title="¡Como lavar tu coche!")
    assert second.status_code == 409
    assert second.json() == {"error": "Ya existe un post con ese título"}


def test_title_without_slug_characters_is_rejected(client, admin_headers):
    response = _create_post(client, admin_headers, title="¡¿?!")
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "title"


def test_public_blog_only_shows_published_posts(client, admin_headers):
    _create_post(client, admin_headers, title="Publicado", tags="cera, brillo")
    _create_post(client, admin_headers, title="Borrador", is_published="false")

    listed = client.get("/api/blog").json()
    assert [post["slug"] for post in listed] == ["publicado"]
    assert "content" not in listed[0]

    post = client.get("/api/blog/publicado").json()
    assert post["tags"] == ["cera", "brillo"]
    assert post["author"] == "PurDetall"

    draft = client.get("/api/blog/borrador")
    assert draft.status_code == 404
    assert draft.json() == {"error": "Post no encontrado"}

    admin_listing = client.get("/api/blog/admin", headers=admin_headers).json()
    assert {post["slug"] for post in admin_listing} == {"publicado", "borrador"}


def test_blog_pagination(client, admin_headers):
    for index in range(3):
        _create_post(client, admin_headers, title=f"Entrada {index}")
    page = client.get("/api/blog", params={"limit": 2, "offset": 0}).json()
    rest = client.get("/api/blog", params={"limit": 2, "offset": 2}).json()
    assert len(page) == 2
    assert len(rest) == 1
    assert {post["slug"] for post in page + rest} == {"entrada-0", "entrada-1", "entrada-2"}


def test_update_keeps_own_slug_but_rejects_taken_one(client, admin_headers):
    first_id = _create_post(client, admin_headers, title="Primero").json()["postId"]
    second_id = _create_post(client, admin_headers, title="Segundo").json()["postId"]

    same = client.put(
        f"/api/blog/{first_id}",
        data={"title": "Primero", "content": "Contenido revisado", "is_published": "true"},
        headers=admin_headers,
    )
    assert same.status_code == 200
    assert same.json()["slug"] == "primero"

    clash = client.put(
        f"/api/blog/{second_id}",
        data={"title": "PRIMERO", "content": "Otro", "is_published": "true"},
        headers=admin_headers,
    )
    assert clash.status_code == 409

    missing = client.put(
        "/api/blog/9999",
        data={"title": "Nuevo", "content": "Nada"},
        headers=admin_headers,
    )
    assert missing.status_code == 404


def test_blog_featured_image_removed_with_post(app, client, admin_headers):
    created = client.post(
        "/api/blog",
        data={"title": "Con imagen", "content": "Texto", "is_published": "true"},
        files={"featured_image": png_upload("cover.png")},
        headers=admin_headers,
    )
    post_id = created.json()["postId"]
    image_url = client.get(f"/api/blog/admin/{post_id}", headers=admin_headers).json()["featured_image"]
    assert image_url.startswith("/uploads/blog/blog-")
    image_path = Path(app.state.settings.upload_dir) / image_url[len("/uploads/"):]
    assert image_path.exists()

    assert client.delete(f"/api/blog/{post_id}", headers=admin_headers).status_code == 200
    assert not image_path.exists()
    assert client.delete(f"/api/blog/{post_id}", headers=admin_headers).status_code == 404


def test_news_categories_and_filter(client, admin_headers):
    for title, category, published in (
        ("Nuevo local", "empresa", "true"),
        ("Oferta verano", "ofertas", "true"),
        ("Oferta secreta", "secreto", "false"),
    ):
        response = client.post(
            "/api/news",
            data={"title": title, "content": "Detalles", "category": category, "is_published": published},
            headers=admin_headers,
        )
        assert response.status_code == 201

    assert client.get("/api/news/categories").json() == ["empresa", "ofertas"]

    offers = client.get("/api/news", params={"category": "ofertas"}).json()
    assert [item["slug"] for item in offers] == ["oferta-verano"]
    assert offers[0]["category"] == "ofertas"

    duplicate = client.post(
        "/api/news",
        data={"title": "Nuevo   local", "content": "Otra vez"},
        headers=admin_headers,
    )
    assert duplicate.status_code == 409
    assert duplicate.json() == {"error": "Ya existe una noticia con ese título"}

    missing = client.get("/api/news/oferta-secreta")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Noticia no encontrada"}


def test_parse_tags_accepts_json_or_commas():
    assert parse_tags('["cera", " pulido "]') == ["cera", "pulido"]
    assert parse_tags("cera, ,pulido") == ["cera", "pulido"]
    assert parse_tags("[broken") == []
    assert parse_tags(None) == []
