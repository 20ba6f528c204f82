"""
Tests - full editor session: build a two-step workflow, attach requirements,
wire actions, then tear it down again.
"""


class TestEditorSession:
    def test_build_and_tear_down(self, client):
        wid = int(client.post("/api/workflow/new", data={"description": "Purchase"}).get_json())
        s1 = int(client.post(f"/api/workflow/{wid}/step", data={"stepTitle": "Supervisor"}).get_json())
        s2 = int(client.post(f"/api/workflow/{wid}/step", data={"stepTitle": "Finance"}).get_json())

        # Requirements: a custom one for finance, person designated for the supervisor
        dep = int(client.post("/api/workflow/dependencies", data={"description": "Budget"}).get_json())
        assert dep > 8
        assert client.post(f"/api/workflow/dependency/{dep}/privileges",
                           data={"groupID": 206}).status_code == 200
        assert client.post(f"/api/workflow/step/{s2}/dependencies",
                           data={"dependencyID": dep, "workflowID": wid}).status_code == 200
        assert client.post(f"/api/workflow/step/{s1}/dependencies",
                           data={"dependencyID": -1, "workflowID": wid}).status_code == 200
        client.post(f"/api/workflow/step/{s1}/indicatorID_for_assigned_empUID",
                    data={"indicatorID": 8})

        # System Agent can never be attached
        res = client.post(f"/api/workflow/step/{s1}/dependencies",
                          data={"dependencyID": -4, "workflowID": wid})
        assert res.status_code == 400

        # Actions and routes
        custom = client.post("/api/system/action", data={
            "actionText": "Request Info", "actionTextPasttense": "Requested Info",
            "actionIcon": "help.svg", "sort": "2",
        }).get_json()
        assert custom == "requestinfo"
        for step_id, next_id, action in [
            (s1, s2, "approve"),
            (s1, 0, "disapprove"),
            (s2, s1, "sendback"),
            (s2, 0, "approve"),
            (s2, s2, "requestinfo"),
        ]:
            res = client.post(f"/api/workflow/{wid}/action",
                              data={"stepID": step_id, "nextStepID": next_id, "action": action})
            assert res.status_code == 200

        s1_deps = client.get(f"/api/workflow/step/{s1}/dependencies").get_json()
        assert s1_deps[0]["description"] == "Person Designated by the Requestor"
        assert s1_deps[0]["indicatorID_for_assigned_empUID"] == 8

        s2_deps = client.get(f"/api/workflow/step/{s2}/dependencies").get_json()
        assert [(d["dependencyID"], d["groupID"], d["name"]) for d in s2_deps] == [(dep, 206, "Group A")]

        s2_actions = client.get(f"/api/workflow/step/{s2}/actions").get_json()
        assert [a["actionType"] for a in s2_actions] == ["approve", "sendback", "requestinfo"]

        # Teardown
        assert client.delete(f"/api/workflow/{wid}").get_json() == "1"
        assert client.get(f"/api/workflow/{wid}").status_code == 404
        assert client.get(f"/api/workflow/step/{s1}").status_code == 404
        # Requirement definitions outlive the workflow
        ids = [d["dependencyID"] for d in client.get("/api/workflow/dependencies").get_json()]
        assert dep in ids

    def test_link_resolve_unlink_cycle(self, client, workflow, step, custom_dependency):
        linkable = [custom_dependency, -1, -2, -3]
        assert client.post(f"/api/workflow/dependency/{custom_dependency}/privileges",
                           data={"groupID": 206}).get_json() == "1"
        for dep_id in linkable:
            res = client.post(f"/api/workflow/step/{step}/dependencies",
                              data={"dependencyID": dep_id, "workflowID": workflow})
            assert res.get_json() == "1"
        assert client.post(f"/api/workflow/step/{step}/indicatorID_for_assigned_empUID",
                           data={"indicatorID": 8}).get_json() == "1"
        assert client.post(f"/api/workflow/step/{step}/indicatorID_for_assigned_groupID",
                           data={"indicatorID": 9}).get_json() == "1"

        resolved = client.get(f"/api/workflow/step/{step}/dependencies").get_json()
        assert [d["dependencyID"] for d in resolved] == [-3, -2, -1, custom_dependency]
        assert all(d["indicatorID_for_assigned_empUID"] == 8 for d in resolved)
        assert all(d["indicatorID_for_assigned_groupID"] == 9 for d in resolved)
        assert resolved[-1]["name"] == "Group A"

        for dep_id in linkable:
            res = client.delete(f"/api/workflow/step/{step}/dependencies"
                                f"?dependencyID={dep_id}&workflowID={workflow}")
            assert res.get_json() == "1"
        assert client.get(f"/api/workflow/step/{step}/dependencies").get_json() == []
        data = client.get(f"/api/workflow/step/{step}").get_json()
        assert data["indicatorID_for_assigned_empUID"] == 0
        assert data["indicatorID_for_assigned_groupID"] == 0

        assert client.delete(f"/api/workflow/step/{step}").get_json() == "1"
        assert client.delete(f"/api/workflow/{workflow}").get_json() == "1"
