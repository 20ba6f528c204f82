"""
Tests - Workflow Store API.

Covers:
    - Workflow create / list / delete
    - Step create / detail / rename / delete
    - Initial step bookkeeping
    - Editor coordinates clamped at 0, out-of-range input stored as 0
    - Text length limits (400, no state change)
"""


def _new_step(client, workflow_id, title="Step"):
    res = client.post(f"/api/workflow/{workflow_id}/step", data={"stepTitle": title})
    assert res.status_code == 200
    return int(res.get_json())


def _workflow_row(client, workflow_id):
    rows = client.get("/api/workflow").get_json()
    return next(w for w in rows if w["workflowID"] == workflow_id)


class TestWorkflowCRUD:
    def test_create_returns_id_string(self, client):
        res = client.post("/api/workflow/new", data={"description": "Leave request"})
        assert res.status_code == 200
        body = res.get_json()
        assert isinstance(body, str)
        assert int(body) > 0

    def test_list_workflows(self, client, workflow):
        row = _workflow_row(client, workflow)
        assert row["description"] == "Test Workflow"
        assert row["initialStepID"] == 0

    def test_description_stripped(self, client):
        res = client.post("/api/workflow/new", data={"description": "<b>Travel</b>"})
        wid = int(res.get_json())
        assert _workflow_row(client, wid)["description"] == "Travel"

    def test_description_keeps_comparison_text(self, client):
        res = client.post("/api/workflow/new", data={"description": "R&amp;D 5 < 6 and 7 > 3"})
        wid = int(res.get_json())
        assert _workflow_row(client, wid)["description"] == "R&D 5 < 6 and 7 > 3"

    def test_get_steps_empty(self, client, workflow):
        res = client.get(f"/api/workflow/{workflow}")
        assert res.status_code == 200
        assert res.get_json() == []

    def test_get_missing_workflow(self, client):
        res = client.get("/api/workflow/9999")
        assert res.status_code == 404
        assert res.get_json()["code"] == "ERR_NOT_FOUND"

    def test_delete_workflow_cascades_steps(self, client, workflow, step):
        res = client.delete(f"/api/workflow/{workflow}")
        assert res.status_code == 200
        assert res.get_json() == "1"
        assert client.get(f"/api/workflow/step/{step}").status_code == 404
        assert all(w["workflowID"] != workflow for w in client.get("/api/workflow").get_json())


class TestSteps:
    def test_first_step_becomes_initial(self, client, workflow, step):
        assert _workflow_row(client, workflow)["initialStepID"] == step

    def test_second_step_keeps_initial(self, client, workflow, step, second_step):
        assert _workflow_row(client, workflow)["initialStepID"] == step

    def test_create_step_in_workflow_zero(self, client):
        res = client.post("/api/workflow/0/step", data={"stepTitle": "Orphan"})
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_INVALID"

    def test_create_step_in_missing_workflow(self, client):
        res = client.post("/api/workflow/9999/step", data={"stepTitle": "Orphan"})
        assert res.status_code == 404

    def test_step_detail(self, client, workflow, step):
        data = client.get(f"/api/workflow/step/{step}").get_json()
        assert data["stepID"] == step
        assert data["workflowID"] == workflow
        assert data["stepTitle"] == "Step 1"
        assert data["posX"] == 0
        assert data["posY"] == 0
        assert data["indicatorID_for_assigned_empUID"] == 0
        assert data["indicatorID_for_assigned_groupID"] == 0

    def test_steps_listed_for_workflow(self, client, workflow, step, second_step):
        data = client.get(f"/api/workflow/{workflow}").get_json()
        assert [s["stepID"] for s in data] == [step, second_step]

    def test_rename_step_strips_markup(self, client, step):
        res = client.post(f"/api/workflow/step/{step}/title", data={"title": "<i>Review</i>"})
        assert res.get_json() == "1"
        assert client.get(f"/api/workflow/step/{step}").get_json()["stepTitle"] == "Review"

    def test_rename_step_empty_title(self, client, step):
        res = client.post(f"/api/workflow/step/{step}/title", data={"title": "<b></b>"})
        assert res.status_code == 400
        assert client.get(f"/api/workflow/step/{step}").get_json()["stepTitle"] == "Step 1"

    def test_create_step_title_too_long(self, client, workflow):
        res = client.post(f"/api/workflow/{workflow}/step", data={"stepTitle": "t" * 65})
        assert res.status_code == 400
        assert res.get_json()["details"]["stepTitle"] == "too_long"
        assert client.get(f"/api/workflow/{workflow}").get_json() == []

    def test_rename_step_title_too_long(self, client, step):
        res = client.post(f"/api/workflow/step/{step}/title", data={"title": "t" * 65})
        assert res.status_code == 400
        assert client.get(f"/api/workflow/step/{step}").get_json()["stepTitle"] == "Step 1"

    def test_delete_initial_step_resets_entry(self, client, workflow, step, second_step):
        res = client.delete(f"/api/workflow/step/{step}")
        assert res.get_json() == "1"
        assert _workflow_row(client, workflow)["initialStepID"] == 0
        remaining = client.get(f"/api/workflow/{workflow}").get_json()
        assert [s["stepID"] for s in remaining] == [second_step]

    def test_delete_missing_step(self, client):
        assert client.delete("/api/workflow/step/9999").status_code == 404


class TestInitialStep:
    def test_set_initial_step(self, client, workflow, step, second_step):
        res = client.post(f"/api/workflow/{workflow}/initialStep", data={"stepID": second_step})
        assert res.get_json() == "1"
        assert _workflow_row(client, workflow)["initialStepID"] == second_step

    def test_clear_initial_step(self, client, workflow, step):
        client.post(f"/api/workflow/{workflow}/initialStep", data={"stepID": 0})
        assert _workflow_row(client, workflow)["initialStepID"] == 0

    def test_step_from_other_workflow_rejected(self, client, workflow, step):
        other = int(client.post("/api/workflow/new", data={"description": "Other"}).get_json())
        foreign = _new_step(client, other, "Foreign")
        res = client.post(f"/api/workflow/{workflow}/initialStep", data={"stepID": foreign})
        assert res.status_code == 400
        assert _workflow_row(client, workflow)["initialStepID"] == step


class TestEditorPosition:
    def _position(self, client, step_id):
        data = client.get(f"/api/workflow/step/{step_id}").get_json()
        return data["posX"], data["posY"]

    def test_store_coordinates(self, client, workflow, step):
        res = client.post(f"/api/workflow/{workflow}/editorPosition",
                          data={"stepID": step, "x": "120", "y": "45"})
        assert res.get_json() == "1"
        assert self._position(client, step) == (120, 45)

    def test_negative_and_invalid_coordinates_store_zero(self, client, workflow, step):
        client.post(f"/api/workflow/{workflow}/editorPosition",
                    data={"stepID": step, "x": "120", "y": "45"})
        res = client.post(f"/api/workflow/{workflow}/editorPosition",
                          data={"stepID": step, "x": "-100", "y": "invalid value"})
        assert res.status_code == 200
        assert self._position(client, step) == (0, 0)

    def test_step_must_belong_to_workflow(self, client, workflow, step):
        other = int(client.post("/api/workflow/new", data={"description": "Other"}).get_json())
        res = client.post(f"/api/workflow/{other}/editorPosition",
                          data={"stepID": step, "x": "5", "y": "5"})
        assert res.status_code == 400
        assert self._position(client, step) == (0, 0)

    def test_oversized_coordinate_stores_zero(self, client, workflow, step):
        res = client.post(f"/api/workflow/{workflow}/editorPosition",
                          data={"stepID": step, "x": "99999999999999999999", "y": "45"})
        assert res.get_json() == "1"
        assert self._position(client, step) == (0, 45)
