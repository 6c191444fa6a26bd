import pytest

from models.nomination import Nomination


@pytest.fixture
def nominator(make_staff):
    return make_staff(name="Nora Nominator")


@pytest.fixture
def nominator_headers(nominator, auth_headers):
    return auth_headers(nominator)


def _nominate(client, headers, category, nominee, reason="Always helps the team"):
    return client.post("/nominations", headers=headers,
                       json={"category_id": category.id, "nominee_id": nominee.id, "reason": reason})


def test_create_and_list_mine(client, nominator_headers, make_staff, make_category):
    category = make_category()
    nominee = make_staff(name="Ned Nominee")

    r = _nominate(client, nominator_headers, category, nominee)
    assert r.status_code == 201
    assert r.json()["status"] == "pending"
    assert r.json()["nominee"]["name"] == "Ned Nominee"
    assert r.json()["category"]["id"] == category.id

    mine = client.get("/nominations/mine", headers=nominator_headers).json()
    assert len(mine) == 1
    assert mine[0]["can_cancel"] is True


def test_duplicate_nomination_conflicts(client, nominator_headers, make_staff, make_category):
    category = make_category()
    nominee = make_staff()
    assert _nominate(client, nominator_headers, category, nominee).status_code == 201
    assert _nominate(client, nominator_headers, category, nominee).status_code == 409


def test_nominations_only_while_window_open(client, nominator_headers, make_staff, make_category):
    nominee = make_staff()
    assert _nominate(client, nominator_headers, make_category(phase="upcoming"), nominee).status_code == 400
    assert _nominate(client, nominator_headers, make_category(status="draft"), nominee).status_code == 404


def test_cancel_only_while_pending(client, db, nominator, nominator_headers, make_staff, make_category,
                                   make_nomination):
    category = make_category()
    pending = make_nomination(category, make_staff(), nominator)
    approved = make_nomination(category, make_staff(), nominator, status="approved")

    assert client.delete(f"/nominations/{approved.id}", headers=nominator_headers).status_code == 409
    assert client.delete(f"/nominations/{pending.id}", headers=nominator_headers).status_code == 200

    db.expire_all()
    assert [n.id for n in db.query(Nomination).all()] == [approved.id]

    mine = client.get("/nominations/mine", headers=nominator_headers).json()
    assert [(m["id"], m["can_cancel"]) for m in mine] == [(approved.id, False)]


def test_cannot_cancel_someone_elses_nomination(client, nominator, make_staff, auth_headers, make_category,
                                               make_nomination):
    nomination = make_nomination(make_category(), make_staff(), nominator)
    stranger = auth_headers(make_staff())
    assert client.delete(f"/nominations/{nomination.id}", headers=stranger).status_code == 403
    assert client.get(f"/nominations/{nomination.id}", headers=stranger).status_code == 403


def test_admin_review_and_counts(client, admin_headers, nominator, make_staff, make_category, make_nomination):
    category = make_category()
    first = make_nomination(category, make_staff(), nominator)
    make_nomination(category, make_staff(), nominator)

    r = client.put(f"/nominations/{first.id}/status", headers=admin_headers, json={"status": "approved"})
    assert r.status_code == 200
    assert r.json()["status"] == "approved"

    counts = client.get("/nominations/counts", headers=admin_headers).json()
    assert counts == {"total": 2, "pending": 1, "approved": 1, "rejected": 0, "shortlisted": 0}

    pending = client.get("/nominations/pending", headers=admin_headers).json()
    assert len(pending) == 1

    page = client.get("/nominations", headers=admin_headers, params={"status": "approved"}).json()
    assert page["total"] == 1
    assert page["items"][0]["id"] == first.id


def test_admin_routes_forbidden_for_staff(client, nominator_headers):
    assert client.get("/nominations", headers=nominator_headers).status_code == 403
    assert client.get("/nominations/counts", headers=nominator_headers).status_code == 403


def test_leaderboard_skips_rejected(client, admin_headers, make_staff, make_category, make_nomination):
    category = make_category()
    star, other = make_staff(name="Star"), make_staff(name="Other")
    for _ in range(3):
        make_nomination(category, star, make_staff())
    make_nomination(category, other, make_staff())
    make_nomination(category, other, make_staff(), status="rejected")

    board = client.get("/nominations/leaderboard", headers=admin_headers).json()
    assert [(b["nominee"]["name"], b["count"]) for b in board] == [("Star", 3), ("Other", 1)]


def test_finalist_cap_is_enforced(client, admin_headers, make_staff, make_category, make_nomination):
    category = make_category()
    nominees = [make_staff(name=f"Nominee {i}") for i in range(7)]
    for nominee in nominees:
        make_nomination(category, nominee, make_staff(), status="approved")

    listing = client.get(f"/nominations/category/{category.id}/nominees", headers=admin_headers).json()
    assert len(listing["items"]) == 7

    first_four = [n.id for n in nominees[:4]]
    r = client.post(f"/nominations/category/{category.id}/finalists", headers=admin_headers,
                    json={"nominee_ids": first_four})
    assert r.status_code == 200
    assert sorted(i["nominee_id"] for i in r.json()["items"]) == sorted(first_four)

    too_many = [n.id for n in nominees[4:6]]
    r = client.post(f"/nominations/category/{category.id}/finalists", headers=admin_headers,
                    json={"nominee_ids": too_many})
    assert r.status_code == 409

    r = client.post(f"/nominations/category/{category.id}/finalists", headers=admin_headers,
                    json={"nominee_ids": [nominees[4].id]})
    assert r.status_code == 200
    assert len(r.json()["items"]) == 5

    r = client.delete(f"/nominations/category/{category.id}/finalists/{nominees[0].id}", headers=admin_headers)
    assert r.status_code == 200
    assert len(r.json()["items"]) == 4


def test_finalists_need_an_approved_nomination(client, admin_headers, make_staff, make_category, make_nomination):
    category = make_category()
    pending_nominee = make_staff()
    make_nomination(category, pending_nominee, make_staff())

    r = client.post(f"/nominations/category/{category.id}/finalists", headers=admin_headers,
                    json={"nominee_ids": [pending_nominee.id]})
    assert r.status_code == 400
