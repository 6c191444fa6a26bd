import pytest

from models.vote import Vote


@pytest.fixture
def ballot(make_staff, make_category, make_nomination):
    category = make_category(phase="voting")
    ann, bob = make_staff(name="Ann"), make_staff(name="Bob")
    for nominee in (ann, bob):
        make_nomination(category, nominee, None, status="approved", is_finalist=True)
    return category, ann, bob


def _vote(client, headers, category, nominee):
    return client.post("/votes", headers=headers, json={"category_id": category.id, "nominee_id": nominee.id})


def test_changing_vote_updates_single_row(client, db, ballot, make_staff, auth_headers):
    category, ann, bob = ballot
    voter = make_staff()
    headers = auth_headers(voter)

    first = _vote(client, headers, category, ann)
    assert first.status_code == 200
    assert first.json()["nominee_id"] == ann.id

    second = _vote(client, headers, category, bob)
    assert second.status_code == 200
    assert second.json()["nominee_id"] == bob.id
    assert second.json()["id"] == first.json()["id"]

    db.expire_all()
    votes = db.query(Vote).filter(Vote.voter_id == voter.id).all()
    assert len(votes) == 1
    assert votes[0].nominee_id == bob.id


def test_vote_requires_finalist(client, ballot, make_staff, auth_headers, make_nomination):
    category, _, _ = ballot
    outsider = make_staff(name="Not a finalist")
    make_nomination(category, outsider, None, status="approved")
    assert _vote(client, auth_headers(make_staff()), category, outsider).status_code == 400


def test_vote_requires_voting_phase(client, make_staff, auth_headers, make_category, make_nomination):
    category = make_category(phase="nominations")
    nominee = make_staff()
    make_nomination(category, nominee, None, status="approved", is_finalist=True)
    assert _vote(client, auth_headers(make_staff()), category, nominee).status_code == 400


def test_vote_on_closed_category_is_rejected(client, db, ballot, make_staff, auth_headers):
    category, ann, _ = ballot
    category.status = "closed"
    db.commit()
    assert _vote(client, auth_headers(make_staff()), category, ann).status_code == 404


def test_my_vote_and_has_voted(client, ballot, make_staff, auth_headers):
    category, ann, _ = ballot
    headers = auth_headers(make_staff())

    assert client.get(f"/votes/has-voted/{category.id}", headers=headers).json()["has_voted"] is False
    assert client.get("/votes/mine", headers=headers, params={"category_id": category.id}).json() is None

    _vote(client, headers, category, ann)

    assert client.get(f"/votes/has-voted/{category.id}", headers=headers).json()["has_voted"] is True
    mine = client.get("/votes/mine", headers=headers, params={"category_id": category.id}).json()
    assert mine["nominee_id"] == ann.id


def test_counts_and_total_for_admin(client, ballot, make_staff, auth_headers, admin_headers):
    category, ann, bob = ballot
    for nominee in (ann, ann, bob):
        _vote(client, auth_headers(make_staff()), category, nominee)

    counts = client.get(f"/votes/counts/{category.id}", headers=admin_headers).json()
    assert counts == [{"nominee_id": ann.id, "count": 2}, {"nominee_id": bob.id, "count": 1}]
    assert client.get("/votes/total", headers=admin_headers).json() == {"total": 3}

    staff_headers = auth_headers(make_staff())
    assert client.get("/votes/total", headers=staff_headers).status_code == 403
