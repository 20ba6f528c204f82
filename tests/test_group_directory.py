"""
Tests - group directory: register / rename groups and grant them privileges.

The shared fixtures seed sample groups; the startup test below builds its
own app so only what create_app seeds is present.
"""

import pytest

from routeflow import create_app


def _groups(client):
    res = client.get("/api/system/groups")
    assert res.status_code == 200
    return res.get_json()


class TestGroupDirectory:
    def test_register_group(self, client):
        res = client.post("/api/system/groups", data={"groupID": 310, "name": "Fiscal"})
        assert res.get_json() == "1"
        assert {"groupID": 310, "name": "Fiscal"} in _groups(client)

    def test_rename_group(self, client):
        res = client.post("/api/system/groups", data={"groupID": 206, "name": "<b>Logistics</b>"})
        assert res.get_json() == "1"
        names = {g["groupID"]: g["name"] for g in _groups(client)}
        assert names[206] == "Logistics"

    def test_listed_in_id_order(self, client):
        client.post("/api/system/groups", data={"groupID": 5, "name": "Early"})
        ids = [g["groupID"] for g in _groups(client)]
        assert ids == sorted(ids)

    @pytest.mark.parametrize("payload", [
        {"groupID": 0, "name": "Zero"},
        {"groupID": -3, "name": "Negative"},
        {"groupID": "abc", "name": "Junk"},
        {"groupID": 311, "name": "<i></i>"},
        {"groupID": 312, "name": "n" * 251},
    ])
    def test_invalid_group_rejected(self, client, payload):
        before = _groups(client)
        res = client.post("/api/system/groups", data=payload)
        assert res.status_code == 400
        assert _groups(client) == before


class TestStartupProvisioning:
    def test_grant_after_registering_group_on_fresh_app(self):
        fresh = create_app("testing")
        client = fresh.test_client()

        with fresh.app_context():
            assert _groups(client) == []

            res = client.post("/api/workflow/dependencies", data={"description": "Budget Review"})
            dependency_id = int(res.get_json())
            url = f"/api/workflow/dependency/{dependency_id}/privileges"

            assert client.post(url, data={"groupID": 206}).status_code == 404

            client.post("/api/system/groups", data={"groupID": 206, "name": "Budget Office"})
            assert client.post(url, data={"groupID": 206}).get_json() == "1"
            assert client.get(url).get_json() == [
                {"dependencyID": dependency_id, "groupID": 206, "name": "Budget Office"},
            ]
