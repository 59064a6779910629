ARTICLE = {"title": "Magnets", "content": "<p>Opposites attract.</p>", "category": "Physics"}


def test_wiki_is_public(client):
    r = client.get("/api/wiki")
    assert r.status_code == 200
    assert len(r.json()) == 3

    assert client.get("/api/wiki/categories").json() == ["Physics", "Chemistry", "Biology"]

    physics = client.get("/api/wiki/category/physics").json()
    assert [a["category"] for a in physics] == ["Physics"]

    article = client.get(f"/api/wiki/{physics[0]['id']}")
    assert article.status_code == 200
    assert article.json()["title"] == physics[0]["title"]


def test_missing_article(client):
    r = client.get("/api/wiki/99999")
    assert r.status_code == 404
    assert r.json()["detail"] == "Content not found"


def test_only_admins_write_wiki(client, user_client):
    assert client.post("/api/wiki", json=ARTICLE).status_code == 401
    assert user_client.post("/api/wiki", json=ARTICLE).status_code == 403


def test_admin_wiki_lifecycle(admin_client):
    admin = admin_client.get("/api/user").json()

    created = admin_client.post("/api/wiki", json=ARTICLE)
    assert created.status_code == 201
    article = created.json()
    assert article["created_by"] == admin["id"]

    updated = admin_client.put(f"/api/wiki/{article['id']}", json={"title": "Magnetism"})
    assert updated.status_code == 200
    assert updated.json()["title"] == "Magnetism"
    assert updated.json()["content"] == ARTICLE["content"]

    assert admin_client.delete(f"/api/wiki/{article['id']}").status_code == 204
    assert admin_client.get(f"/api/wiki/{article['id']}").status_code == 404
    assert admin_client.put(f"/api/wiki/{article['id']}", json={"title": "x"}).status_code == 404


def test_new_category_appears(admin_client):
    admin_client.post("/api/wiki", json={**ARTICLE, "category": "Astronomy"})
    assert "Astronomy" in admin_client.get("/api/wiki/categories").json()


def test_settings_are_public_and_grouped(client):
    r = client.get("/api/settings")
    assert r.status_code == 200
    body = r.json()
    assert set(body) == {"general", "email", "appearance"}
    assert body["general"]["eventDate"] == "May 15th, 2025"
    assert body["appearance"]["primaryColor"] == "#3B82F6"


def test_only_admins_update_settings(client, user_client):
    payload = {"settings": {"siteTitle": "Hacked"}}
    assert client.post("/api/settings", json=payload).status_code == 401
    assert user_client.post("/api/settings", json=payload).status_code == 403
    assert client.get("/api/settings").json()["general"]["siteTitle"] == "TGHBHS Science Carnival"


def test_admin_updates_existing_settings_only(admin_client):
    r = admin_client.post(
        "/api/settings",
        json={"group": "general", "settings": {"siteTitle": "Spring Fair", "bogus": "x"}},
    )
    assert r.status_code == 200
    assert [s["name"] for s in r.json()] == ["siteTitle"]

    settings = admin_client.get("/api/settings").json()
    assert settings["general"]["siteTitle"] == "Spring Fair"
    assert all("bogus" not in group for group in settings.values())
