from app.models import ActivityLog, Task, TaskAssignee


def _create(client, headers, **body):
    body.setdefault("title", "Write report")
    return client.post("/api/tasks", json=body, headers=headers)


def test_create_with_assignees_mirrors_first(client, auth_headers, admin, employee, other_employee):
    response = _create(client, auth_headers(admin), assigned_user_ids=[employee.id, other_employee.id])

    assert response.status_code == 201
    task = response.json()["task"]
    assert [a["id"] for a in task["assignees"]] == [employee.id, other_employee.id]
    assert task["assigned_to"] == employee.id
    assert task["assigned_to_name"] == employee.name
    assert task["created_by_name"] == admin.name
    assert task["status"] == "pending"

    fetched = client.get(f"/api/tasks/{task['id']}", headers=auth_headers(admin)).json()["task"]
    assert [a["id"] for a in fetched["assignees"]] == [employee.id, other_employee.id]


def test_list_wins_over_legacy_field_and_dedupes(client, auth_headers, admin, employee, other_employee):
    response = _create(
        client, auth_headers(admin),
        assigned_to=employee.id,
        assigned_user_ids=[other_employee.id, other_employee.id, employee.id],
    )

    task = response.json()["task"]
    assert task["assigned_to"] == other_employee.id
    assert [a["id"] for a in task["assignees"]] == [other_employee.id, employee.id]


def test_legacy_field_alone_creates_assignment(client, auth_headers, admin, employee):
    task = _create(client, auth_headers(admin), assigned_to=employee.id).json()["task"]

    assert [a["id"] for a in task["assignees"]] == [employee.id]


def test_empty_list_clears_legacy_field(client, auth_headers, admin, employee):
    task = _create(client, auth_headers(admin), assigned_to=employee.id, assigned_user_ids=[]).json()["task"]

    assert task["assigned_to"] is None
    assert task["assignees"] == []


def test_unknown_assignee(client, auth_headers, admin):
    response = _create(client, auth_headers(admin), assigned_user_ids=[9999])

    assert response.status_code == 404
    assert response.json()["error_code"] == "USER_NOT_FOUND"


def test_assignee_must_be_team_member(client, auth_headers, admin, employee, other_employee, make_team, db):
    team = make_team("Core", members=[employee])

    response = _create(client, auth_headers(admin), team_id=team.id, assigned_user_ids=[employee.id, other_employee.id])

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "ASSIGNEE_NOT_IN_TEAM"
    assert body["details"]["user_ids"] == [other_employee.id]
    db.expire_all()
    assert db.query(Task).count() == 0


def test_employee_cannot_create(client, auth_headers, employee):
    response = _create(client, auth_headers(employee))
    assert response.status_code == 403


def test_manager_limited_to_managed_teams(client, auth_headers, manager, other_manager, make_team):
    own = make_team("Own", manager=manager)
    foreign = make_team("Foreign", manager=other_manager)

    assert _create(client, auth_headers(manager), team_id=own.id).status_code == 201
    assert _create(client, auth_headers(manager), team_id=foreign.id).status_code == 403
    assert _create(client, auth_headers(manager)).status_code == 201


def test_employee_visibility(client, auth_headers, admin, employee, other_employee):
    headers = auth_headers(admin)
    primary = _create(client, headers, title="Primary", assigned_user_ids=[employee.id]).json()["task"]
    secondary = _create(client, headers, title="Secondary", assigned_user_ids=[other_employee.id, employee.id]).json()["task"]
    hidden = _create(client, headers, title="Hidden", assigned_user_ids=[other_employee.id]).json()["task"]

    listed = client.get("/api/tasks", headers=auth_headers(employee)).json()["tasks"]
    assert {t["id"] for t in listed} == {primary["id"], secondary["id"]}

    assert client.get(f"/api/tasks/{secondary['id']}", headers=auth_headers(employee)).status_code == 200
    assert client.get(f"/api/tasks/{hidden['id']}", headers=auth_headers(employee)).status_code == 403

    everything = client.get("/api/tasks", headers=headers).json()["tasks"]
    assert [t["id"] for t in everything] == [hidden["id"], secondary["id"], primary["id"]]


def test_get_missing_task(client, auth_headers, admin):
    response = client.get("/api/tasks/404", headers=auth_headers(admin))

    assert response.status_code == 404
    assert response.json()["error_code"] == "TASK_NOT_FOUND"


def test_update_replaces_assignees(client, auth_headers, admin, employee, other_employee):
    headers = auth_headers(admin)
    task = _create(client, headers, assigned_user_ids=[employee.id, other_employee.id]).json()["task"]

    response = client.put(
        f"/api/tasks/{task['id']}",
        json={"assigned_user_ids": [other_employee.id, employee.id], "title": "Renamed"},
        headers=headers,
    )

    assert response.status_code == 200
    updated = response.json()["task"]
    assert updated["title"] == "Renamed"
    assert updated["assigned_to"] == other_employee.id
    assert [a["id"] for a in updated["assignees"]] == [other_employee.id, employee.id]


def test_update_explicit_null_clears_field(client, auth_headers, admin):
    headers = auth_headers(admin)
    task = _create(client, headers, description="old").json()["task"]

    updated = client.put(f"/api/tasks/{task['id']}", json={"description": None}, headers=headers).json()["task"]

    assert updated["description"] is None
    assert updated["title"] == task["title"]


def test_update_with_no_fields(client, auth_headers, admin):
    task = _create(client, auth_headers(admin)).json()["task"]

    response = client.put(f"/api/tasks/{task['id']}", json={}, headers=auth_headers(admin))

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_employee_full_update_forbidden(client, auth_headers, admin, employee):
    task = _create(client, auth_headers(admin), assigned_user_ids=[employee.id]).json()["task"]

    response = client.put(f"/api/tasks/{task['id']}", json={"title": "Mine now"}, headers=auth_headers(employee))

    assert response.status_code == 403


def test_manager_cannot_move_task_into_foreign_team(client, auth_headers, manager, other_manager, make_team):
    foreign = make_team("Foreign", manager=other_manager)
    task = _create(client, auth_headers(manager)).json()["task"]

    response = client.put(f"/api/tasks/{task['id']}", json={"team_id": foreign.id}, headers=auth_headers(manager))

    assert response.status_code == 403


def test_manager_cannot_detach_task_from_foreign_team(client, auth_headers, admin, manager, other_manager, make_team, db):
    foreign = make_team("Foreign", manager=other_manager)
    task = _create(client, auth_headers(admin), team_id=foreign.id).json()["task"]

    response = client.put(f"/api/tasks/{task['id']}", json={"team_id": None}, headers=auth_headers(manager))
    assert response.status_code == 403

    response = client.delete(f"/api/tasks/{task['id']}", headers=auth_headers(manager))
    assert response.status_code == 403

    db.expire_all()
    assert db.query(Task).filter(Task.id == task["id"]).one().team_id == foreign.id


def test_status_update_only_by_primary_assignee(client, auth_headers, admin, employee, other_employee):
    task = _create(client, auth_headers(admin), assigned_user_ids=[employee.id, other_employee.id]).json()["task"]
    url = f"/api/tasks/{task['id']}/status"

    response = client.patch(url, json={"status": "in_progress"}, headers=auth_headers(employee))
    assert response.status_code == 200
    assert response.json()["task"]["status"] == "in_progress"

    response = client.patch(url, json={"status": "completed"}, headers=auth_headers(other_employee))
    assert response.status_code == 403

    response = client.patch(url, json={"status": "done"}, headers=auth_headers(admin))
    assert response.status_code == 400


def test_status_change_is_logged(client, auth_headers, admin, db):
    task = _create(client, auth_headers(admin)).json()["task"]

    client.patch(f"/api/tasks/{task['id']}/status", json={"status": "completed"}, headers=auth_headers(admin))

    db.expire_all()
    log = db.query(ActivityLog).filter(ActivityLog.action_type == "task_status_updated").one()
    assert log.entity_id == task["id"]
    assert log.event_metadata == {"task_title": task["title"], "old_status": "pending", "new_status": "completed"}


def test_delete_task(client, auth_headers, admin, employee, db):
    task = _create(client, auth_headers(admin), assigned_user_ids=[employee.id]).json()["task"]

    response = client.delete(f"/api/tasks/{task['id']}", headers=auth_headers(admin))

    assert response.status_code == 200
    db.expire_all()
    assert db.query(Task).count() == 0
    assert db.query(TaskAssignee).count() == 0
    actions = [log.action_type for log in db.query(ActivityLog).order_by(ActivityLog.id)]
    assert actions == ["task_created", "task_deleted"]


def test_manager_cannot_delete_task_of_foreign_team(client, auth_headers, admin, manager, other_manager, make_team):
    foreign = make_team("Foreign", manager=other_manager)
    task = _create(client, auth_headers(admin), team_id=foreign.id).json()["task"]

    response = client.delete(f"/api/tasks/{task['id']}", headers=auth_headers(manager))

    assert response.status_code == 403


def test_blank_title_is_rejected(client, auth_headers, admin, db):
    response = _create(client, auth_headers(admin), title="   ")
    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"

    task = _create(client, auth_headers(admin), title="  Padded  ").json()["task"]
    assert task["title"] == "Padded"

    response = client.put(f"/api/tasks/{task['id']}", json={"title": " "}, headers=auth_headers(admin))
    assert response.status_code == 400

    db.expire_all()
    assert [t.title for t in db.query(Task)] == ["Padded"]
