import io

import pandas as pd
import pytest


@pytest.fixture
def voted_category(client, make_staff, make_category, make_nomination, auth_headers):
    category = make_category(title="Team Player", phase="voting")
    ann = make_staff(name="Ann", department="Sales")
    bob = make_staff(name="Bob", department="Ops")
    for nominee in (ann, bob):
        make_nomination(category, nominee, None, status="approved", is_finalist=True)
    for nominee in (ann, ann, ann, bob):
        r = client.post("/votes", headers=auth_headers(make_staff()),
                        json={"category_id": category.id, "nominee_id": nominee.id})
        assert r.status_code == 200
    return category, ann, bob


def test_public_results(client, voted_category, make_category):
    category, ann, bob = voted_category
    make_category(title="No votes yet", phase="voting")
    make_category(title="Hidden draft", status="draft")

    results = client.get("/results").json()
    assert [r["category_id"] for r in results] == [category.id]

    result = results[0]
    assert result["total_votes"] == 4
    assert result["status"] == "ongoing"
    assert [(n["nominee"]["name"], n["vote_count"], n["percentage"]) for n in result["nominees"]] == [
        ("Ann", 3, 75.0), ("Bob", 1, 25.0),
    ]


def test_admin_category_results(client, admin_headers, voted_category):
    category, ann, _ = voted_category
    r = client.get(f"/admin/results/{category.id}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["leading_nominee_id"] == ann.id
    assert r.json()["winner_id"] is None

    assert client.get("/admin/results/9999", headers=admin_headers).status_code == 404


def test_csv_export(client, admin_headers, voted_category):
    category, _, _ = voted_category
    r = client.get("/admin/results/export", headers=admin_headers, params={"category_id": category.id})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert 'filename="team_player_results.csv"' in r.headers["content-disposition"]

    frame = pd.read_csv(io.StringIO(r.text))
    assert list(frame.columns) == ["Category", "Nominee", "Department", "Votes", "Is Winner"]
    assert frame.to_dict(orient="records") == [
        {"Category": "Team Player", "Nominee": "Ann", "Department": "Sales", "Votes": 3, "Is Winner": "Yes"},
        {"Category": "Team Player", "Nominee": "Bob", "Department": "Ops", "Votes": 1, "Is Winner": "No"},
    ]


def test_export_requires_admin(client, make_staff, auth_headers):
    r = client.get("/admin/results/export", headers=auth_headers(make_staff()))
    assert r.status_code == 403


def test_csv_export_with_accented_title(client, admin_headers, make_category):
    category = make_category(title="Collègue de l’année", phase="voting")
    r = client.get("/admin/results/export", headers=admin_headers, params={"category_id": category.id})
    assert r.status_code == 200
    disposition = r.headers["content-disposition"]
    assert 'filename="collegue_de_lannee_results.csv"' in disposition
    assert "filename*=UTF-8''coll%C3%A8gue_de_l%E2%80%99ann%C3%A9e_results.csv" in disposition
