"""Integration tests for Events and membership API."""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest
from httpx import AsyncClient


class TestEventsAPI:
    """Integration tests for hosting and discovering events."""

    @pytest.mark.asyncio
    async def test_create_event(self, client: AsyncClient, sign_up, event_payload) -> None:
        """Test POST /api/v1/events."""
        host, headers = await sign_up("Host")

        response = await client.post(
            "/api/v1/events", json=event_payload(max_attendees=4), headers=headers
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["host_id"] == str(host.id)
        assert data["current_attendees"] == 0
        assert data["max_attendees"] == 4
        assert data["status"] == "active"

    @pytest.mark.asyncio
    async def test_create_requires_profile(
        self, client: AsyncClient, make_user, event_payload
    ) -> None:
        _, headers = make_user()

        response = await client.post("/api/v1/events", json=event_payload(), headers=headers)

        assert response.status_code == 404
        assert response.json()["error_code"] == "PROFILE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_end_before_start_rejected(
        self, client: AsyncClient, sign_up, event_payload
    ) -> None:
        _, headers = await sign_up()
        start = datetime.utcnow() + timedelta(days=1)

        response = await client.post(
            "/api/v1/events",
            json=event_payload(
                start_time=start.isoformat(),
                end_time=(start - timedelta(hours=1)).isoformat(),
            ),
            headers=headers,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_discover_filters_by_category(
        self, client: AsyncClient, sign_up, host_event
    ) -> None:
        _, headers = await sign_up()
        await host_event(headers, title="Run club", category="fitness")
        await host_event(headers, title="Study hall", category="study")

        response = await client.get(
            "/api/v1/events", params={"category": "study"}, headers=headers
        )

        assert response.status_code == 200
        titles = [e["title"] for e in response.json()["data"]]
        assert titles == ["Study hall"]

    @pytest.mark.asyncio
    async def test_discover_hides_cancelled_and_private(
        self, client: AsyncClient, sign_up, host_event
    ) -> None:
        _, headers = await sign_up()
        cancelled = await host_event(headers, title="Called off")
        await host_event(headers, title="Invite only", is_public=False)
        await host_event(headers, title="Open")
        await client.post(f"/api/v1/events/{cancelled['id']}/cancel", headers=headers)

        response = await client.get("/api/v1/events", headers=headers)

        assert [e["title"] for e in response.json()["data"]] == ["Open"]

    @pytest.mark.asyncio
    async def test_only_host_edits(self, client: AsyncClient, sign_up, host_event) -> None:
        _, host_headers = await sign_up("Host")
        _, other_headers = await sign_up("Other")
        event = await host_event(host_headers)

        response = await client.patch(
            f"/api/v1/events/{event['id']}", json={"title": "Mine"}, headers=other_headers
        )
        assert response.status_code == 403

        response = await client.patch(
            f"/api/v1/events/{event['id']}", json={"title": "Renamed"}, headers=host_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Renamed"

    @pytest.mark.asyncio
    async def test_completed_event_cannot_be_cancelled(
        self, client: AsyncClient, sign_up, host_event
    ) -> None:
        _, headers = await sign_up()
        event = await host_event(headers)

        response = await client.post(f"/api/v1/events/{event['id']}/complete", headers=headers)
        assert response.json()["data"]["status"] == "completed"

        response = await client.post(f"/api/v1/events/{event['id']}/cancel", headers=headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_STATE_TRANSITION"

    @pytest.mark.asyncio
    async def test_hosting_list(self, client: AsyncClient, sign_up, host_event) -> None:
        _, headers = await sign_up()
        event = await host_event(headers, is_public=False)

        response = await client.get("/api/v1/events/hosting", headers=headers)

        assert [e["id"] for e in response.json()["data"]] == [event["id"]]

    @pytest.mark.asyncio
    async def test_get_missing_event(self, client: AsyncClient, make_user) -> None:
        _, headers = make_user()

        response = await client.get(f"/api/v1/events/{uuid4()}", headers=headers)

        assert response.status_code == 404
        assert response.json()["error_code"] == "EVENT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_requires_session(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/events")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_rejects_bad_token(self, client: AsyncClient) -> None:
        response = await client.get(
            "/api/v1/events", headers={"Authorization": "Bearer not.a.token"}
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_TOKEN"


class TestMembershipAPI:
    """Join, leave and host review through the API."""

    @pytest.mark.asyncio
    async def test_capacity_scenario(
        self, client: AsyncClient, sign_up, make_user, host_event
    ) -> None:
        """Two seats: A and B join, C is turned away and the count stays at 2."""
        _, host_headers = await sign_up("Host")
        event = await host_event(host_headers, max_attendees=2)
        event_url = f"/api/v1/events/{event['id']}"
        _, a = make_user("A")
        _, b = make_user("B")
        _, c = make_user("C")

        response = await client.post(f"{event_url}/join", headers=a)
        assert response.status_code == 201
        assert response.json()["data"]["status"] == "joined"
        assert (await client.get(event_url, headers=a)).json()["data"]["current_attendees"] == 1

        response = await client.post(f"{event_url}/join", headers=b)
        assert response.status_code == 201
        assert response.json()["data"]["status"] == "joined"
        assert (await client.get(event_url, headers=b)).json()["data"]["current_attendees"] == 2

        response = await client.post(f"{event_url}/join", headers=c)
        assert response.status_code == 409
        assert response.json()["error_code"] == "EVENT_FULL"

        event_after = (await client.get(event_url, headers=c)).json()["data"]
        assert event_after["current_attendees"] == 2
        attendees = (await client.get(f"{event_url}/attendees", headers=c)).json()
        assert attendees["meta"]["joined"] == 2
        assert len(attendees["data"]) == 2

    @pytest.mark.asyncio
    async def test_join_twice(self, client: AsyncClient, sign_up, make_user, host_event) -> None:
        _, host_headers = await sign_up("Host")
        event = await host_event(host_headers)
        event_url = f"/api/v1/events/{event['id']}"
        _, headers = make_user()

        await client.post(f"{event_url}/join", headers=headers)
        response = await client.post(f"{event_url}/join", headers=headers)

        assert response.status_code == 409
        assert response.json()["error_code"] == "ALREADY_ATTENDING"
        attendees = (await client.get(f"{event_url}/attendees", headers=headers)).json()
        assert len(attendees["data"]) == 1
        assert (await client.get(event_url, headers=headers)).json()["data"][
            "current_attendees"
        ] == 1

    @pytest.mark.asyncio
    async def test_leave_frees_seat_and_leaves_others(
        self, client: AsyncClient, sign_up, make_user, host_event
    ) -> None:
        _, host_headers = await sign_up("Host")
        event = await host_event(host_headers)
        event_url = f"/api/v1/events/{event['id']}"
        stayer, a = make_user("Stays")
        _, b = make_user("Leaves")
        await client.post(f"{event_url}/join", headers=a)
        await client.post(f"{event_url}/join", headers=b)

        response = await client.delete(f"{event_url}/join", headers=b)

        assert response.status_code == 204
        attendees = (await client.get(f"{event_url}/attendees", headers=a)).json()["data"]
        assert [row["user_id"] for row in attendees] == [str(stayer.id)]
        assert (await client.get(event_url, headers=a)).json()["data"]["current_attendees"] == 1

    @pytest.mark.asyncio
    async def test_leave_without_row_is_noop(
        self, client: AsyncClient, sign_up, make_user, host_event
    ) -> None:
        _, host_headers = await sign_up("Host")
        event = await host_event(host_headers)
        event_url = f"/api/v1/events/{event['id']}"
        member, a = make_user("Member")
        _, stranger = make_user("Stranger")
        await client.post(f"{event_url}/join", headers=a)

        response = await client.delete(f"{event_url}/join", headers=stranger)

        assert response.status_code == 204
        attendees = (await client.get(f"{event_url}/attendees", headers=a)).json()["data"]
        assert [row["user_id"] for row in attendees] == [str(member.id)]
        assert (await client.get(event_url, headers=a)).json()["data"]["current_attendees"] == 1

    @pytest.mark.asyncio
    async def test_approval_flow(
        self, client: AsyncClient, sign_up, make_user, host_event
    ) -> None:
        _, host_headers = await sign_up("Host")
        event = await host_event(host_headers, auto_approve=False)
        event_url = f"/api/v1/events/{event['id']}"
        guest, headers = make_user("Guest")

        response = await client.post(
            f"{event_url}/join", json={"notes": "Can I bring a friend?"}, headers=headers
        )
        assert response.json()["data"]["status"] == "requested"
        assert (await client.get(event_url, headers=headers)).json()["data"][
            "current_attendees"
        ] == 0

        response = await client.post(
            f"{event_url}/attendees/{guest.id}/approve", headers=headers
        )
        assert response.status_code == 403

        response = await client.post(
            f"{event_url}/attendees/{guest.id}/approve", headers=host_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "joined"
        assert (await client.get(event_url, headers=headers)).json()["data"][
            "current_attendees"
        ] == 1

    @pytest.mark.asyncio
    async def test_cannot_join_cancelled_event(
        self, client: AsyncClient, sign_up, make_user, host_event
    ) -> None:
        _, host_headers = await sign_up("Host")
        event = await host_event(host_headers)
        await client.post(f"/api/v1/events/{event['id']}/cancel", headers=host_headers)
        _, headers = make_user()

        response = await client.post(f"/api/v1/events/{event['id']}/join", headers=headers)

        assert response.status_code == 400
        assert response.json()["error_code"] == "EVENT_NOT_JOINABLE"

    @pytest.mark.asyncio
    async def test_join_requires_session(
        self, client: AsyncClient, sign_up, host_event
    ) -> None:
        _, host_headers = await sign_up("Host")
        event = await host_event(host_headers)

        response = await client.post(f"/api/v1/events/{event['id']}/join")

        assert response.status_code == 401
