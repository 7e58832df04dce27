from datetime import datetime

from conftest import REPORTER_EMAIL

ISSUES = "/api/v1/issues/"


def create_issue_payload(
    title="Login button broken",
    description="Clicking login does nothing",
    priority="Medium",
    status="Open",
    assigned_to="",
):
    return {
        "title": title,
        "description": description,
        "priority": priority,
        "status": status,
        "assigned_to": assigned_to,
    }


def create(client, **kwargs):
    res = client.post(f"{ISSUES}?confirm=true", json=create_issue_payload(**kwargs))
    assert res.status_code == 201
    return res.json()


def assert_issue_shape(issue: dict):
    for key in ["id", "title", "description", "priority", "status", "assigned_to", "created_time", "created_by"]:
        assert key in issue
    assert isinstance(issue["id"], str) and issue["id"]
    datetime.fromisoformat(issue["created_time"])


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        data = res.json()
        assert data["message"] == "Healthy"
        assert data["backend"] in ("memory", "sqlite")


class TestAuthRequired:
    def test_issue_routes_require_credentials(self, client):
        assert client.get(ISSUES).status_code == 401
        assert client.post(ISSUES, json=create_issue_payload()).status_code == 401
        assert client.post(f"{ISSUES}similar", json={"title": "Login button"}).status_code == 401


class TestCreateIssue:
    def test_create_issue(self, auth_client):
        res = auth_client.post(ISSUES, json=create_issue_payload(priority="High", assigned_to=" dev@example.com "))
        assert res.status_code == 201
        issue = res.json()
        assert_issue_shape(issue)
        assert issue["title"] == "Login button broken"
        assert issue["priority"] == "High"
        assert issue["status"] == "Open"
        assert issue["assigned_to"] == "dev@example.com"
        assert issue["created_by"] == REPORTER_EMAIL

    def test_defaults(self, auth_client):
        res = auth_client.post(ISSUES, json={"title": "Crash on save", "description": "Editor crashes"})
        assert res.status_code == 201
        issue = res.json()
        assert issue["priority"] == "Medium"
        assert issue["status"] == "Open"
        assert issue["assigned_to"] == ""

    def test_similar_issue_requires_confirmation(self, auth_client):
        existing = create(auth_client)
        res = auth_client.post(ISSUES, json=create_issue_payload(description="Different words entirely"))
        assert res.status_code == 409
        body = res.json()
        assert body["error"] == "SimilarIssuesFound"
        assert body["message"] == "Found 1 similar issue(s). Do you still want to create this issue?"
        assert [i["id"] for i in body["items"]] == [existing["id"]]
        assert auth_client.get(ISSUES).json()["total"] == 1

    def test_confirm_creates_despite_similar(self, auth_client):
        create(auth_client)
        res = auth_client.post(f"{ISSUES}?confirm=true", json=create_issue_payload())
        assert res.status_code == 201
        assert auth_client.get(ISSUES).json()["total"] == 2

    def test_short_drafts_skip_the_duplicate_check(self, auth_client):
        create(auth_client, title="Bug", description="Broken")
        res = auth_client.post(ISSUES, json=create_issue_payload(title="Bug", description="Broken"))
        assert res.status_code == 201

    def test_blank_title_is_a_validation_error(self, auth_client):
        res = auth_client.post(ISSUES, json=create_issue_payload(title="   "))
        assert res.status_code == 422
        body = res.json()
        assert body.get("error") == "ValidationError"
        assert body.get("message") == "Request validation failed"
        assert isinstance(body.get("detail"), list)

    def test_blank_description_is_a_validation_error(self, auth_client):
        res = auth_client.post(ISSUES, json=create_issue_payload(description=" \n\t "))
        assert res.status_code == 422
        body = res.json()
        assert body.get("error") == "ValidationError"
        assert body.get("message") == "Request validation failed"
        assert body["detail"][0]["loc"] == ["body", "description"]

    def test_unknown_priority_is_a_validation_error(self, auth_client):
        res = auth_client.post(ISSUES, json=create_issue_payload(priority="Urgent"))
        assert res.status_code == 422

    def test_store_failure(self, auth_client, store):
        store.issues_down = True
        res = auth_client.post(f"{ISSUES}?confirm=true", json=create_issue_payload())
        assert res.status_code == 503
        assert res.json()["detail"] == "Failed to create issue. Please try again."


class TestSimilarCheck:
    def test_reports_matches_with_preview(self, auth_client):
        ids = [create(auth_client, title=f"Login button broken {n}")["id"] for n in range(5)]
        create(auth_client, title="Export to CSV fails", description="Large exports time out")
        res = auth_client.post(f"{ISSUES}similar", json={"title": "Login button broken"})
        assert res.status_code == 200
        body = res.json()
        assert body["checked"] is True
        assert body["count"] == 5
        assert sorted(i["id"] for i in body["items"]) == sorted(ids)
        assert len(body["preview"]) == 3
        assert body["remaining"] == 2

    def test_short_draft_is_not_checked(self, auth_client):
        create(auth_client, title="Login")
        res = auth_client.post(f"{ISSUES}similar", json={"title": "Login", "description": "short"})
        assert res.status_code == 200
        body = res.json()
        assert body["checked"] is False
        assert body["count"] == 0
        assert body["items"] == [] and body["preview"] == []

    def test_empty_title_with_long_description_finds_nothing(self, auth_client):
        create(auth_client, description="Clicking login does nothing")
        res = auth_client.post(f"{ISSUES}similar", json={"title": "", "description": "Clicking login does nothing"})
        body = res.json()
        assert body["checked"] is True
        assert body["count"] == 0

    def test_no_match(self, auth_client):
        create(auth_client, title="Export to CSV fails", description="Large exports time out")
        res = auth_client.post(f"{ISSUES}similar", json={"title": "Add dark mode", "description": "Night theme"})
        assert res.json()["count"] == 0

    def test_store_failure(self, auth_client, store):
        store.issues_down = True
        res = auth_client.post(f"{ISSUES}similar", json={"title": "Login button broken"})
        assert res.status_code == 503


class TestListIssues:
    def seed(self, client):
        create(client, title="Alpha crash", description="a", priority="High", status="Open")
        create(client, title="Beta glitch", description="b", priority="Low", status="In Progress")
        create(client, title="Gamma typo", description="c", priority="High", status="Done")
        create(client, title="Delta slowness", description="d", priority="Medium", status="Open")

    def test_list_newest_first(self, auth_client):
        self.seed(auth_client)
        res = auth_client.get(ISSUES)
        assert res.status_code == 200
        body = res.json()
        assert body["total"] == 4
        assert body["shown"] == 4
        created = [datetime.fromisoformat(i["created_time"]) for i in body["items"]]
        assert created == sorted(created, reverse=True)

    def test_filter_by_status(self, auth_client):
        self.seed(auth_client)
        body = auth_client.get(ISSUES, params={"status": "Open"}).json()
        assert body["shown"] == 2
        assert body["total"] == 4
        assert all(i["status"] == "Open" for i in body["items"])

    def test_filter_by_status_and_priority(self, auth_client):
        self.seed(auth_client)
        body = auth_client.get(ISSUES, params={"status": "Open", "priority": "High"}).json()
        assert [i["title"] for i in body["items"]] == ["Alpha crash"]

    def test_filter_with_no_matches(self, auth_client):
        self.seed(auth_client)
        body = auth_client.get(ISSUES, params={"status": "Done", "priority": "Low"}).json()
        assert body["items"] == []
        assert body["shown"] == 0

    def test_invalid_filter_value(self, auth_client):
        res = auth_client.get(ISSUES, params={"status": "Closed"})
        assert res.status_code == 422

    def test_store_failure(self, auth_client, store):
        store.issues_down = True
        res = auth_client.get(ISSUES)
        assert res.status_code == 503
        assert res.json()["detail"] == "Failed to load issues"

    def test_get_issue_and_not_found(self, auth_client):
        issue = create(auth_client)
        res = auth_client.get(f"{ISSUES}{issue['id']}")
        assert res.status_code == 200
        assert res.json()["id"] == issue["id"]

        res_404 = auth_client.get(f"{ISSUES}does-not-exist")
        assert res_404.status_code == 404
        assert res_404.json()["detail"] == "Issue not found"


class TestStatusChange:
    def patch_status(self, client, issue_id, status):
        return client.patch(f"{ISSUES}{issue_id}/status", json={"status": status})

    def test_open_to_done_is_refused_and_not_written(self, auth_client):
        issue = create(auth_client)
        res = self.patch_status(auth_client, issue["id"], "Done")
        assert res.status_code == 409
        assert res.json()["detail"] == (
            'An issue cannot move directly from Open to Done. Please change it to "In Progress" first.'
        )
        assert auth_client.get(f"{ISSUES}{issue['id']}").json()["status"] == "Open"

    def test_open_to_in_progress_to_done(self, auth_client):
        issue = create(auth_client)
        res = self.patch_status(auth_client, issue["id"], "In Progress")
        assert res.status_code == 200
        assert res.json()["status"] == "In Progress"
        res = self.patch_status(auth_client, issue["id"], "Done")
        assert res.status_code == 200
        assert res.json()["status"] == "Done"
        assert auth_client.get(f"{ISSUES}{issue['id']}").json()["status"] == "Done"

    def test_done_can_be_reopened(self, auth_client):
        issue = create(auth_client, status="Done")
        res = self.patch_status(auth_client, issue["id"], "Open")
        assert res.status_code == 200
        assert res.json()["status"] == "Open"

    def test_same_status_is_allowed(self, auth_client):
        issue = create(auth_client)
        assert self.patch_status(auth_client, issue["id"], "Open").status_code == 200

    def test_unknown_issue(self, auth_client):
        res = self.patch_status(auth_client, "missing", "In Progress")
        assert res.status_code == 404
        assert res.json()["detail"] == "Issue not found"

    def test_invalid_status_value(self, auth_client):
        issue = create(auth_client)
        assert self.patch_status(auth_client, issue["id"], "Closed").status_code == 422

    def test_store_failure(self, auth_client, store):
        issue = create(auth_client)
        store.issues_down = True
        res = self.patch_status(auth_client, issue["id"], "In Progress")
        assert res.status_code == 503
        assert res.json()["detail"] == "Failed to update status"
