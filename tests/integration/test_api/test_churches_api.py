"""Integration tests for church dashboard endpoints."""

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from saintshub_api.models.church import Church

_BASE = "/api/v1/dashboard"


@pytest.fixture
async def owner(make_user):
    return await make_user(role="pastor", church_selection="Grace Chapel")


@pytest.fixture
def headers(owner, auth_headers) -> dict[str, str]:
    return auth_headers(owner)


@pytest.fixture
async def church(client: AsyncClient, headers, church_payload) -> dict:
    response = await client.post(f"{_BASE}/churches", json=church_payload(), headers=headers)
    assert response.status_code == 201
    return response.json()


async def _count(session: AsyncSession) -> int:
    return (await session.execute(select(func.count()).select_from(Church))).scalar_one()


class TestCreateChurch:
    """Tests for POST /dashboard/churches."""

    async def test_requires_authentication_before_validation(self, client: AsyncClient) -> None:
        response = await client.post(f"{_BASE}/churches", json={"name": ""})

        assert response.status_code == 401

    async def test_created_record_round_trips(
        self, client: AsyncClient, headers, church: dict, owner, church_payload
    ) -> None:
        payload = church_payload()

        response = await client.get(f"{_BASE}/churches/{church['id']}", headers=headers)

        assert response.status_code == 200
        stored = response.json()
        assert stored["name"] == "Grace Chapel"
        assert stored["user"] == str(owner.id)
        assert stored["gallery"] == payload["gallery"]
        assert stored["banner"] == payload["banner"]
        assert [song["title"] for song in stored["songs"]] == ["Song A", "Song B", "Song C"]
        assert [song["songUrl"] for song in stored["songs"]] == [song["songUrl"] for song in payload["songs"]]
        assert [service["title"] for service in stored["oldServices"]] == ["Easter", "Pentecost"]
        assert [service["title"] for service in stored["liveServices"]] == ["Sunday Live"]
        assert [d["names"] for d in stored["securities"]["deacons"]] == ["Deacon A", "Deacon B"]
        assert [t["names"] for t in stored["securities"]["trustees"]] == ["Trustee A"]
        assert stored["securities"]["deacons"][0]["description"] == "Treasurer"
        assert all(service["date"] for service in stored["oldServices"] + stored["liveServices"])
        for key in ("gallery", "banner", "songs", "oldServices", "liveServices", "securities"):
            assert stored[key] == church[key]

    async def test_missing_banner(
        self, client: AsyncClient, headers, church_payload, async_session: AsyncSession
    ) -> None:
        payload = church_payload()
        del payload["banner"]

        response = await client.post(f"{_BASE}/churches", json=payload, headers=headers)

        assert response.status_code == 400
        assert [error["path"] for error in response.json()["errors"]] == ["banner"]
        assert await _count(async_session) == 0

    async def test_invalid_url(self, client: AsyncClient, headers, church_payload) -> None:
        response = await client.post(f"{_BASE}/churches", json=church_payload(logo="logo.png"), headers=headers)

        assert response.status_code == 400
        assert response.json()["errors"] == [{"path": "logo", "message": "Valid logo URL is required"}]

    async def test_empty_songs(self, client: AsyncClient, headers, church_payload) -> None:
        response = await client.post(f"{_BASE}/churches", json=church_payload(songs=[]), headers=headers)

        assert response.status_code == 400
        assert response.json()["errors"] == [{"path": "songs", "message": "At least one song is required"}]

    async def test_descriptions_spelling(self, client: AsyncClient, headers, church_payload) -> None:
        payload = church_payload()
        payload["securities"]["trustees"] = [{"names": "Trustee A", "descriptions": "Keeps the keys"}]

        response = await client.post(f"{_BASE}/churches", json=payload, headers=headers)

        assert response.json()["securities"]["trustees"][0]["description"] == "Keeps the keys"


class TestReadChurches:
    async def test_list_requires_auth(self, client: AsyncClient) -> None:
        assert (await client.get(f"{_BASE}/churches")).status_code == 401

    async def test_list(self, client: AsyncClient, headers, church: dict) -> None:
        response = await client.get(f"{_BASE}/churches", headers=headers)

        assert [item["id"] for item in response.json()] == [church["id"]]

    async def test_public_listing_holds_only_id_and_name(
        self, client: AsyncClient, headers, church_payload, church: dict
    ) -> None:
        await client.post(f"{_BASE}/churches", json=church_payload(name="Bethel"), headers=headers)

        response = await client.get(f"{_BASE}/public/churches")

        assert response.status_code == 200
        listing = response.json()
        assert [item["name"] for item in listing] == ["Bethel", "Grace Chapel"]
        assert all(set(item) == {"id", "name"} for item in listing)

    async def test_detail_includes_owner(self, client: AsyncClient, headers, church: dict, owner) -> None:
        response = await client.get(f"{_BASE}/churches/{church['id']}", headers=headers)

        assert response.status_code == 200
        detail = response.json()
        assert detail["owner"]["id"] == str(owner.id)
        assert detail["owner"]["email"] == owner.email
        assert "hashedPassword" not in detail["owner"]

    async def test_detail_not_found(self, client: AsyncClient, headers) -> None:
        response = await client.get(f"{_BASE}/churches/{uuid.uuid4()}", headers=headers)

        assert response.status_code == 404
        assert response.json() == {"status": "fail", "message": "Church not found"}

    async def test_malformed_id(self, client: AsyncClient, headers) -> None:
        response = await client.get(f"{_BASE}/churches/not-a-uuid", headers=headers)

        assert response.status_code == 400
        assert response.json()["errors"][0]["path"] == "church_id"


class TestUpdateChurch:
    """Tests for PATCH /dashboard/churches/{id}."""

    async def test_overlay_replaces_only_supplied_fields(
        self, client: AsyncClient, headers, church: dict, church_payload
    ) -> None:
        response = await client.patch(
            f"{_BASE}/churches/{church['id']}",
            json={"location": "Lubumbashi", "gallery": ["https://img.example.com/new.jpg"]},
            headers=headers,
        )

        assert response.status_code == 200
        updated = response.json()
        assert updated["location"] == "Lubumbashi"
        assert updated["gallery"] == ["https://img.example.com/new.jpg"]
        assert updated["name"] == church["name"]
        assert updated["songs"] == church["songs"]

    async def test_invalid_overlay_leaves_record(self, client: AsyncClient, headers, church: dict) -> None:
        response = await client.patch(f"{_BASE}/churches/{church['id']}", json={"banner": []}, headers=headers)

        assert response.status_code == 400
        stored = (await client.get(f"{_BASE}/churches/{church['id']}", headers=headers)).json()
        assert stored["banner"] == church["banner"]

    async def test_null_field_rejected(self, client: AsyncClient, headers, church: dict) -> None:
        response = await client.patch(f"{_BASE}/churches/{church['id']}", json={"name": None}, headers=headers)

        assert response.status_code == 400
        assert response.json()["errors"] == [{"path": "name", "message": "name cannot be null"}]
        stored = (await client.get(f"{_BASE}/churches/{church['id']}", headers=headers)).json()
        assert stored["name"] == church["name"]

    async def test_replaced_services_are_dated(self, client: AsyncClient, headers, church: dict) -> None:
        response = await client.patch(
            f"{_BASE}/churches/{church['id']}",
            json={"liveServices": [{"title": "Midweek Live"}, {"title": "Sunday Live", "date": None}]},
            headers=headers,
        )

        assert response.status_code == 200
        live = response.json()["liveServices"]
        assert [service["title"] for service in live] == ["Midweek Live", "Sunday Live"]
        assert all(service["date"] for service in live)
        assert response.json()["oldServices"] == church["oldServices"]

    async def test_unknown_church(self, client: AsyncClient, headers) -> None:
        response = await client.patch(f"{_BASE}/churches/{uuid.uuid4()}", json={"name": "X"}, headers=headers)

        assert response.status_code == 404

    async def test_any_authenticated_identity_may_update(
        self, client: AsyncClient, church: dict, make_user, auth_headers
    ) -> None:
        stranger = await make_user()

        response = await client.patch(
            f"{_BASE}/churches/{church['id']}", json={"name": "Renamed"}, headers=auth_headers(stranger)
        )

        assert response.status_code == 200
        assert response.json()["user"] == church["user"]


class TestDeleteChurch:
    async def test_delete_then_gone(self, client: AsyncClient, headers, church: dict) -> None:
        response = await client.delete(f"{_BASE}/churches/{church['id']}", headers=headers)

        assert response.status_code == 204
        assert response.content == b""
        gone = await client.get(f"{_BASE}/churches/{church['id']}", headers=headers)
        assert gone.status_code == 404

    async def test_delete_unknown(self, client: AsyncClient, headers) -> None:
        response = await client.delete(f"{_BASE}/churches/{uuid.uuid4()}", headers=headers)

        assert response.status_code == 404


class TestDeleteNestedItem:
    """Tests for DELETE /dashboard/churches/{id}/{collection}/{index}."""

    async def test_removes_gallery_image(self, client: AsyncClient, headers, church: dict) -> None:
        response = await client.delete(f"{_BASE}/churches/{church['id']}/gallery/1", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"status": "success", "message": "Gallery image deleted successfully."}
        stored = (await client.get(f"{_BASE}/churches/{church['id']}", headers=headers)).json()
        assert stored["gallery"] == [church["gallery"][0], church["gallery"][2]]

    async def test_removes_deacon(self, client: AsyncClient, headers, church: dict) -> None:
        response = await client.delete(f"{_BASE}/churches/{church['id']}/deacon/0", headers=headers)

        assert response.json()["message"] == "Deacon deleted successfully."
        stored = (await client.get(f"{_BASE}/churches/{church['id']}", headers=headers)).json()
        assert [d["names"] for d in stored["securities"]["deacons"]] == ["Deacon B"]
        assert stored["securities"]["trustees"] == church["securities"]["trustees"]

    @pytest.mark.parametrize(
        ("segment", "field", "label"),
        [
            ("banner", "banner", "Banner image"),
            ("song", "songs", "Song"),
            ("past-service", "oldServices", "Past service"),
            ("live", "liveServices", "Live service"),
            ("trustee", None, "Trustee"),
        ],
    )
    async def test_every_segment(
        self, client: AsyncClient, headers, church: dict, segment: str, field: str | None, label: str
    ) -> None:
        response = await client.delete(f"{_BASE}/churches/{church['id']}/{segment}/0", headers=headers)

        assert response.status_code == 200
        assert response.json()["message"] == f"{label} deleted successfully."
        stored = (await client.get(f"{_BASE}/churches/{church['id']}", headers=headers)).json()
        if field is None:
            assert stored["securities"]["trustees"] == []
        else:
            assert len(stored[field]) == len(church[field]) - 1

    async def test_out_of_range(self, client: AsyncClient, headers, church: dict) -> None:
        response = await client.delete(f"{_BASE}/churches/{church['id']}/song/3", headers=headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid song index."

    async def test_negative_index(self, client: AsyncClient, headers, church: dict) -> None:
        response = await client.delete(f"{_BASE}/churches/{church['id']}/gallery/-1", headers=headers)

        assert response.status_code == 400

    async def test_unknown_segment(self, client: AsyncClient, headers, church: dict) -> None:
        response = await client.delete(f"{_BASE}/churches/{church['id']}/organ/0", headers=headers)

        assert response.status_code == 400
        assert response.json()["errors"][0]["path"] == "collection"

    async def test_unknown_church(self, client: AsyncClient, headers) -> None:
        response = await client.delete(f"{_BASE}/churches/{uuid.uuid4()}/gallery/0", headers=headers)

        assert response.status_code == 404

    async def test_requires_auth(self, client: AsyncClient, church: dict) -> None:
        response = await client.delete(f"{_BASE}/churches/{church['id']}/gallery/0")

        assert response.status_code == 401

    async def test_repeat_removes_next_element(self, client: AsyncClient, headers, church: dict) -> None:
        url = f"{_BASE}/churches/{church['id']}/gallery/0"

        await client.delete(url, headers=headers)
        await client.delete(url, headers=headers)

        stored = (await client.get(f"{_BASE}/churches/{church['id']}", headers=headers)).json()
        assert stored["gallery"] == [church["gallery"][2]]

    async def test_emptied_collection_allows_later_updates(self, client: AsyncClient, headers, church: dict) -> None:
        removed = await client.delete(f"{_BASE}/churches/{church['id']}/live/0", headers=headers)
        assert removed.status_code == 200

        response = await client.patch(f"{_BASE}/churches/{church['id']}", json={"name": "Renamed"}, headers=headers)

        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"
        assert response.json()["liveServices"] == []
        stored = (await client.get(f"{_BASE}/churches/{church['id']}", headers=headers)).json()
        assert stored["liveServices"] == []

    async def test_drained_deacons_allow_later_updates(self, client: AsyncClient, headers, church: dict) -> None:
        url = f"{_BASE}/churches/{church['id']}/deacon/0"
        await client.delete(url, headers=headers)
        await client.delete(url, headers=headers)

        response = await client.patch(
            f"{_BASE}/churches/{church['id']}", json={"location": "Goma"}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["securities"]["deacons"] == []
        assert response.json()["securities"]["trustees"] == church["securities"]["trustees"]
