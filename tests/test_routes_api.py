"""
Tests - workflow routes (step + action -> next step).
"""


def _routes(client, workflow_id):
    res = client.get(f"/api/workflow/{workflow_id}/route")
    assert res.status_code == 200
    return res.get_json()


def _add_route(client, workflow_id, step_id, next_step_id, action, **extra):
    data = {"stepID": step_id, "nextStepID": next_step_id, "action": action, **extra}
    return client.post(f"/api/workflow/{workflow_id}/action", data=data)


class TestRoutes:
    def test_create_and_list(self, client, workflow, step, second_step):
        res = _add_route(client, workflow, step, second_step, "approve",
                         displayConditional='{"required": true}')
        assert res.get_json() == "1"
        assert _routes(client, workflow) == [{
            "workflowID": workflow,
            "stepID": step,
            "nextStepID": second_step,
            "actionType": "approve",
            "displayConditional": '{"required": true}',
        }]

    def test_route_to_end(self, client, workflow, step):
        assert _add_route(client, workflow, step, 0, "submit").status_code == 200
        assert _routes(client, workflow)[0]["nextStepID"] == 0

    def test_duplicate_step_action_conflicts(self, client, workflow, step, second_step):
        _add_route(client, workflow, step, second_step, "approve")
        res = _add_route(client, workflow, step, 0, "approve")
        assert res.status_code == 409
        assert len(_routes(client, workflow)) == 1

    def test_unknown_action(self, client, workflow, step, second_step):
        res = _add_route(client, workflow, step, second_step, "teleport")
        assert res.status_code == 404

    def test_deleted_action_cannot_be_routed(self, client, workflow, step, second_step):
        client.post("/api/system/action", data={"actionText": "Escalate"})
        client.delete("/api/workflow/action/_escalate")
        res = _add_route(client, workflow, step, second_step, "escalate")
        assert res.status_code == 404

    def test_next_step_must_share_workflow(self, client, workflow, step):
        other = int(client.post("/api/workflow/new", data={"description": "Other"}).get_json())
        foreign = int(client.post(f"/api/workflow/{other}/step", data={"stepTitle": "X"}).get_json())
        res = _add_route(client, workflow, step, foreign, "approve")
        assert res.status_code == 400
        assert _routes(client, workflow) == []

    def test_missing_action_field(self, client, workflow, step):
        res = _add_route(client, workflow, step, 0, "")
        assert res.status_code == 400

    def test_remove_route(self, client, workflow, step, second_step):
        _add_route(client, workflow, step, second_step, "approve")
        res = client.delete(f"/api/workflow/{workflow}/action"
                            f"?stepID={step}&nextStepID={second_step}&action=approve")
        assert res.get_json() == "1"
        assert _routes(client, workflow) == []

    def test_remove_missing_route_is_noop(self, client, workflow, step):
        res = client.delete(f"/api/workflow/{workflow}/action?stepID={step}&nextStepID=0&action=approve")
        assert res.status_code == 200

    def test_deleting_step_removes_routes(self, client, workflow, step, second_step):
        _add_route(client, workflow, step, second_step, "approve")
        _add_route(client, workflow, second_step, step, "sendback")
        _add_route(client, workflow, step, 0, "Note")
        client.delete(f"/api/workflow/step/{second_step}")
        remaining = _routes(client, workflow)
        assert [(r["stepID"], r["actionType"]) for r in remaining] == [(step, "Note")]

    def test_routes_of_missing_workflow(self, client):
        assert client.get("/api/workflow/9999/route").status_code == 404
