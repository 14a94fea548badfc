"""Tests for creators endpoints."""
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from app.models.creator import derive_public_id
from tests.conftest import auth_headers

NEW_CREATOR = {
    "name": "Priya Sharma",
    "genre": "Fashion",
    "avatar": "https://res.cloudinary.com/demo/image/upload/v1/creator-avatars/priya.png",
    "platform": "Instagram",
    "socialLink": "https://instagram.com/priya",
    "location": "Delhi",
    "phoneNumber": "+91-9123456780",
    "mediaKit": "https://example.com/priya-kit.pdf",
    "details": {
        "bio": "Fashion and styling",
        "analytics": {"followers": 250000, "totalViews": 9000000, "averageViews": 30000},
        "reels": ["Summer lookbook"],
    },
}


@pytest.mark.asyncio
async def test_list_creators(client, creator):
    resp = await client.get("/api/creators")
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["data"]) == 1
    assert data["data"][0]["name"] == "Test Creator"
    assert data["data"][0]["socialLink"] == "https://instagram.com/testcreator"
    assert data["meta"]["total"] == 1


@pytest.mark.asyncio
async def test_list_creators_filter_genre(client, creator, other_creator):
    resp = await client.get("/api/creators?genre=Comedy")
    assert [c["name"] for c in resp.json()["data"]] == ["Test Creator"]

    resp = await client.get("/api/creators?genre=All Creators")
    assert resp.json()["meta"]["total"] == 2


@pytest.mark.asyncio
async def test_list_creators_filters(client, creator, other_creator):
    resp = await client.get("/api/creators?platform=YouTube")
    assert [c["name"] for c in resp.json()["data"]] == ["Another Person"]

    resp = await client.get("/api/creators?location=mumbai")
    assert [c["name"] for c in resp.json()["data"]] == ["Test Creator"]

    resp = await client.get("/api/creators?min_followers=10000")
    assert [c["name"] for c in resp.json()["data"]] == ["Another Person"]

    resp = await client.get("/api/creators?max_followers=10000")
    assert [c["name"] for c in resp.json()["data"]] == ["Test Creator"]


@pytest.mark.asyncio
async def test_list_creators_search_q(client, creator):
    resp = await client.get("/api/creators?q=test")
    assert len(resp.json()["data"]) == 1

    resp = await client.get("/api/creators?q=Nonexistent")
    assert len(resp.json()["data"]) == 0


@pytest.mark.asyncio
async def test_list_creators_sort_and_paginate(client, creator, other_creator):
    resp = await client.get("/api/creators?sort=followers")
    assert [c["name"] for c in resp.json()["data"]] == ["Another Person", "Test Creator"]

    resp = await client.get("/api/creators?sort=name&per_page=1&page=2")
    data = resp.json()
    assert [c["name"] for c in data["data"]] == ["Test Creator"]
    assert data["meta"]["total_pages"] == 2


@pytest.mark.asyncio
async def test_list_genres(client, creator, other_creator):
    resp = await client.get("/api/creators/genres")
    assert resp.json() == ["Comedy", "Tech"]


@pytest.mark.asyncio
async def test_get_creator_detail(client, creator_with_media):
    resp = await client.get(f"/api/creators/{creator_with_media.id}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "Test Creator"
    assert data["cloudinaryPublicId"] == "creator-avatars/abc123"
    assert data["details"]["analytics"] == {"followers": 5000, "totalViews": 120000, "averageViews": 4000}
    assert data["details"]["media"][0]["id"] == "creator-media/clip1"
    assert data["details"]["media"][0]["type"] == "video"


@pytest.mark.asyncio
async def test_get_creator_not_found(client):
    resp = await client.get("/api/creators/00000000-0000-0000-0000-000000000000")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_create_creator(client):
    resp = await client.post("/api/creators", json=NEW_CREATOR, headers=auth_headers())
    assert resp.status_code == 201
    data = resp.json()
    assert data["name"] == "Priya Sharma"
    assert data["cloudinaryPublicId"] == "creator-avatars/priya"
    assert data["mediaKit"] == "https://example.com/priya-kit.pdf"
    assert data["details"]["reels"] == ["Summer lookbook"]
    assert data["details"]["media"] == []


@pytest.mark.asyncio
async def test_create_creator_requires_admin(client):
    resp = await client.post("/api/creators", json=NEW_CREATOR)
    assert resp.status_code in (401, 403)


@pytest.mark.asyncio
async def test_create_creator_rejects_bad_platform(client):
    resp = await client.post("/api/creators", json={**NEW_CREATOR, "platform": "Snapchat"}, headers=auth_headers())
    assert resp.status_code == 400
    assert "not a valid platform" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_create_creator_rejects_bad_urls(client):
    resp = await client.post("/api/creators", json={**NEW_CREATOR, "socialLink": "instagram.com/x"}, headers=auth_headers())
    assert resp.status_code == 400

    resp = await client.post("/api/creators", json={**NEW_CREATOR, "mediaKit": "kit.pdf"}, headers=auth_headers())
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_create_creator_rejects_negative_followers(client):
    body = {**NEW_CREATOR, "details": {"analytics": {"followers": -1, "totalViews": 0}}}
    resp = await client.post("/api/creators", json=body, headers=auth_headers())
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_update_creator(client, creator_with_media):
    resp = await client.put(
        f"/api/creators/{creator_with_media.id}",
        json={
            "genre": "Stand-up",
            "avatar": "https://res.cloudinary.com/demo/image/upload/v2/creator-avatars/new.webp",
            "details": {"analytics": {"followers": 6000}},
        },
        headers=auth_headers(),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["genre"] == "Stand-up"
    assert data["name"] == "Test Creator"
    assert data["cloudinaryPublicId"] == "creator-avatars/new"
    assert data["details"]["analytics"]["followers"] == 6000
    assert data["details"]["analytics"]["totalViews"] == 120000
    assert data["details"]["bio"] == "Test bio"
    assert len(data["details"]["media"]) == 1


@pytest.mark.asyncio
async def test_update_creator_invalid(client, creator):
    creator_id = creator.id
    resp = await client.put(f"/api/creators/{creator_id}", json={"platform": "Vine"}, headers=auth_headers())
    assert resp.status_code == 400

    resp = await client.get(f"/api/creators/{creator_id}")
    assert resp.json()["platform"] == "Instagram"


@pytest.mark.asyncio
async def test_update_creator_not_found(client):
    resp = await client.put(
        "/api/creators/00000000-0000-0000-0000-000000000000", json={"genre": "X"}, headers=auth_headers()
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_creator(client, creator_with_media):
    resp = await client.delete(f"/api/creators/{creator_with_media.id}", headers=auth_headers())
    assert resp.status_code == 200
    assert resp.json()["message"] == "Creator deleted successfully"

    resp = await client.get(f"/api/creators/{creator_with_media.id}")
    assert resp.status_code == 404


@pytest.mark.parametrize(
    "avatar,expected",
    [
        ("https://res.cloudinary.com/demo/image/upload/v1/creator-avatars/abc.jpg", "creator-avatars/abc"),
        ("https://cdn.example.com/a/b/c/photo.final.png", "c/photo.final"),
        ("https://cdn.example.com/noext/file", "noext/file"),
        ("https://placehold.co/400x400?text=Creator", None),
        ("", None),
        (None, None),
    ],
)
def test_derive_public_id(avatar, expected):
    assert derive_public_id(avatar) == expected


@pytest.mark.asyncio
async def test_create_creator_rejects_counter_beyond_column_range(client):
    body = {**NEW_CREATOR, "details": {"analytics": {"followers": 2**63, "totalViews": 0}}}
    resp = await client.post("/api/creators", json=body, headers=auth_headers())
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_update_creator_database_error_is_bad_request(client, db, creator):
    creator_id = creator.id

    async def failing_commit():
        raise OperationalError("UPDATE creators", {}, Exception("database is locked"))

    with patch.object(db, "commit", failing_commit):
        resp = await client.put(f"/api/creators/{creator_id}", json={"genre": "Satire"}, headers=auth_headers())
    assert resp.status_code == 400
    assert resp.json()["detail"] == "database is locked"

    resp = await client.get(f"/api/creators/{creator_id}")
    assert resp.json()["genre"] == "Comedy"
