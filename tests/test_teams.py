from app.models import ActivityLog, Task, Team, TeamMember


def test_admin_created_team_has_no_manager(client, auth_headers, admin):
    response = client.post("/api/teams", json={"name": "Ops"}, headers=auth_headers(admin))

    assert response.status_code == 201
    assert response.json()["team"]["manager_id"] is None


def test_manager_created_team_gets_creator_as_manager(client, auth_headers, manager):
    response = client.post("/api/teams", json={"name": "Ops", "manager_id": ""}, headers=auth_headers(manager))

    assert response.status_code == 201
    team = response.json()["team"]
    assert team["manager_id"] == manager.id
    assert team["manager_name"] == manager.name


def test_create_with_members(client, auth_headers, admin, manager, employee, other_employee):
    response = client.post(
        "/api/teams",
        json={"name": "Ops", "manager_id": manager.id, "member_ids": [employee.id, other_employee.id, employee.id]},
        headers=auth_headers(admin),
    )

    assert response.json()["team"]["member_count"] == 2
    detail = client.get(f"/api/teams/{response.json()['team']['id']}", headers=auth_headers(admin)).json()
    assert {m["id"] for m in detail["members"]} == {employee.id, other_employee.id}


def test_create_with_unknown_member_writes_nothing(client, auth_headers, admin, db):
    response = client.post("/api/teams", json={"name": "Ops", "member_ids": [4242]}, headers=auth_headers(admin))

    assert response.status_code == 404
    db.expire_all()
    assert db.query(Team).count() == 0


def test_manager_must_have_manager_role(client, auth_headers, admin, employee):
    response = client.post("/api/teams", json={"name": "Ops", "manager_id": employee.id}, headers=auth_headers(admin))
    assert response.status_code == 400

    response = client.post("/api/teams", json={"name": "Ops", "manager_id": 4242}, headers=auth_headers(admin))
    assert response.status_code == 404


def test_employee_cannot_create_team(client, auth_headers, employee):
    assert client.post("/api/teams", json={"name": "Ops"}, headers=auth_headers(employee)).status_code == 403


def test_list_teams_with_counts(client, auth_headers, employee, manager, other_employee, make_team):
    make_team("Alpha", manager=manager, members=[employee, other_employee])
    make_team("Beta")

    teams = client.get("/api/teams", headers=auth_headers(employee)).json()["teams"]

    assert [t["name"] for t in teams] == ["Beta", "Alpha"]
    alpha = teams[1]
    assert alpha["member_count"] == 2
    assert alpha["manager_email"] == manager.email
    assert teams[0]["member_count"] == 0


def test_employee_sees_members_only_of_own_team(client, auth_headers, employee, make_team):
    own = make_team("Own", members=[employee])
    other = make_team("Other")

    assert client.get(f"/api/teams/{own.id}", headers=auth_headers(employee)).status_code == 200
    assert client.get(f"/api/teams/{other.id}", headers=auth_headers(employee)).status_code == 403


def test_update_team(client, auth_headers, admin, manager, make_team, db):
    team = make_team("Old")

    response = client.put(
        f"/api/teams/{team.id}",
        json={"name": "New", "manager_id": manager.id},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    assert response.json()["team"]["name"] == "New"
    db.expire_all()
    log = db.query(ActivityLog).filter(ActivityLog.action_type == "team_updated").one()
    assert log.event_metadata["changes"]["name"] == {"old": "Old", "new": "New"}


def test_update_team_without_fields(client, auth_headers, admin, make_team):
    team = make_team("Old")

    response = client.put(f"/api/teams/{team.id}", json={}, headers=auth_headers(admin))

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_delete_team_detaches_tasks(client, auth_headers, admin, manager, employee, make_team, db):
    team = make_team("Doomed", members=[employee])
    created = client.post("/api/tasks", json={"title": "Keep me", "team_id": team.id}, headers=auth_headers(admin))
    task_id = created.json()["task"]["id"]

    assert client.delete(f"/api/teams/{team.id}", headers=auth_headers(manager)).status_code == 403
    response = client.delete(f"/api/teams/{team.id}", headers=auth_headers(admin))

    assert response.status_code == 200
    db.expire_all()
    assert db.query(Team).count() == 0
    assert db.query(TeamMember).count() == 0
    assert db.query(Task).filter(Task.id == task_id).one().team_id is None
    assert db.query(ActivityLog).filter(ActivityLog.action_type == "team_deleted").count() == 1


def test_add_member_twice_is_idempotent(client, auth_headers, manager, employee, make_team, db):
    team = make_team("Crew", manager=manager)
    url = f"/api/teams/{team.id}/members"

    first = client.post(url, json={"user_id": employee.id}, headers=auth_headers(manager))
    second = client.post(url, json={"user_id": employee.id}, headers=auth_headers(manager))

    assert first.status_code == 200
    assert second.status_code == 200
    db.expire_all()
    assert db.query(TeamMember).filter(TeamMember.team_id == team.id).count() == 1
    assert db.query(ActivityLog).filter(ActivityLog.action_type == "team_member_added").count() == 1


def test_only_team_manager_or_admin_manages_members(client, auth_headers, admin, manager, other_manager, employee, make_team):
    team = make_team("Crew", manager=manager)
    url = f"/api/teams/{team.id}/members"

    assert client.post(url, json={"user_id": employee.id}, headers=auth_headers(other_manager)).status_code == 403
    assert client.post(url, json={"user_id": employee.id}, headers=auth_headers(employee)).status_code == 403
    assert client.post(url, json={"user_id": employee.id}, headers=auth_headers(admin)).status_code == 200


def test_remove_member(client, auth_headers, manager, employee, make_team):
    team = make_team("Crew", manager=manager, members=[employee])
    url = f"/api/teams/{team.id}/members/{employee.id}"

    assert client.delete(url, headers=auth_headers(manager)).status_code == 200

    response = client.delete(url, headers=auth_headers(manager))
    assert response.status_code == 404
    assert response.json()["error_code"] == "MEMBER_NOT_FOUND"


def test_missing_team(client, auth_headers, admin):
    response = client.get("/api/teams/999", headers=auth_headers(admin))

    assert response.status_code == 404
    assert response.json()["error_code"] == "TEAM_NOT_FOUND"


def test_blank_team_name_is_rejected(client, auth_headers, admin, make_team, db):
    response = client.post("/api/teams", json={"name": "  "}, headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"

    team = make_team("Ops")
    response = client.put(f"/api/teams/{team.id}", json={"name": "\t"}, headers=auth_headers(admin))
    assert response.status_code == 400

    db.expire_all()
    assert [t.name for t in db.query(Team)] == ["Ops"]
