from models.category import Category


def test_drafts_hidden_from_staff_until_published(client, make_staff, auth_headers, admin_headers, make_category):
    draft = make_category(title="Secret Award", status="draft")
    staff_headers = auth_headers(make_staff())

    assert client.get("/categories", headers=staff_headers).json() == []
    assert client.get(f"/categories/{draft.id}", headers=staff_headers).status_code == 404
    assert client.get(f"/categories/{draft.id}").status_code == 404

    admin_view = client.get("/categories", headers=admin_headers).json()
    assert [c["title"] for c in admin_view] == ["Secret Award"]

    r = client.post(f"/categories/{draft.id}/publish", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["status"] == "published"

    listed = client.get("/categories", headers=staff_headers).json()
    assert [c["id"] for c in listed] == [draft.id]
    assert listed[0]["phase"] == "nominations"


def test_create_category_with_form_fields(client, admin_headers):
    r = client.post("/categories", headers=admin_headers, data={
        "title": "  Rising Star ",
        "type": "Team Award",
        "nomination_deadline": "2030-01-10T12:00:00+02:00",
    })
    assert r.status_code == 201
    body = r.json()
    assert body["title"] == "Rising Star"
    assert body["status"] == "draft"
    # Stored as naive UTC
    assert body["nomination_deadline"].startswith("2030-01-10T10:00:00")


def test_create_category_rejects_inverted_windows(client, admin_headers):
    r = client.post("/categories", headers=admin_headers, data={
        "title": "Broken",
        "voting_start": "2030-02-10T00:00:00",
        "voting_end": "2030-02-01T00:00:00",
    })
    assert r.status_code == 400


def test_create_category_requires_admin(client, make_staff, auth_headers):
    r = client.post("/categories", headers=auth_headers(make_staff()), data={"title": "Nope"})
    assert r.status_code == 403
    assert client.post("/categories", data={"title": "Nope"}).status_code in (401, 403)


def test_upload_rejects_non_images(client, admin_headers):
    r = client.post(
        "/categories",
        headers=admin_headers,
        data={"title": "With image"},
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert r.status_code == 400


def test_upload_stores_image(client, admin_headers):
    r = client.post(
        "/categories",
        headers=admin_headers,
        data={"title": "With image"},
        files={"file": ("badge.png", b"\x89PNG\r\n\x1a\n", "image/png")},
    )
    assert r.status_code == 201
    assert r.json()["image"].startswith("/uploads/category-images/")
    assert r.json()["image"].endswith(".png")


def test_patch_and_close_category(client, admin_headers, make_category):
    category = make_category()
    r = client.patch(f"/categories/{category.id}", headers=admin_headers, data={"description": "Updated"})
    assert r.status_code == 200
    assert r.json()["description"] == "Updated"

    r = client.post(f"/categories/{category.id}/close", headers=admin_headers)
    assert r.json()["status"] == "closed"
    assert r.json()["phase"] == "closed"


def test_delete_category_removes_nominations(client, db, admin, admin_headers, make_staff, make_category,
                                             make_nomination):
    category = make_category()
    make_nomination(category, make_staff(), admin)

    assert client.delete(f"/categories/{category.id}", headers=admin_headers).status_code == 200
    db.expire_all()
    assert db.query(Category).count() == 0


def test_publish_winner_defaults_to_leader(client, db, admin_headers, make_staff, make_category, make_nomination,
                                          auth_headers):
    category = make_category(phase="voting")
    ann, bob = make_staff(name="Ann"), make_staff(name="Bob")
    for nominee in (ann, bob):
        make_nomination(category, nominee, None, status="approved", is_finalist=True)

    r = client.post(f"/categories/{category.id}/winner", headers=admin_headers)
    assert r.status_code == 400

    for voter, nominee in ((make_staff(), ann), (make_staff(), ann), (make_staff(), bob)):
        cast = client.post("/votes", headers=auth_headers(voter),
                           json={"category_id": category.id, "nominee_id": nominee.id})
        assert cast.status_code == 200

    # Named winner must have votes
    outsider = make_staff(name="Zed")
    r = client.post(f"/categories/{category.id}/winner", headers=admin_headers, json={"nominee_id": outsider.id})
    assert r.status_code == 400

    r = client.post(f"/categories/{category.id}/winner", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["winner_id"] == ann.id
    assert r.json()["status"] == "closed"
    assert r.json()["winner_published_at"] is not None


def test_finalists_ballot(client, make_staff, make_category, make_nomination):
    category = make_category(phase="voting")
    nominator = make_staff()
    finalist, other = make_staff(name="Finalist"), make_staff(name="Other")
    make_nomination(category, finalist, nominator, status="approved", is_finalist=True)
    make_nomination(category, other, nominator, status="approved")

    r = client.get(f"/categories/{category.id}/finalists")
    assert r.status_code == 200
    assert [i["nominee"]["name"] for i in r.json()["items"]] == ["Finalist"]


def test_upload_extension_follows_content_type(client, admin_headers):
    r = client.post(
        "/categories",
        headers=admin_headers,
        data={"title": "Sneaky"},
        files={"file": ("page.html", b"\x89PNG\r\n\x1a\n", "image/png")},
    )
    assert r.status_code == 201
    assert r.json()["image"].endswith(".png")
