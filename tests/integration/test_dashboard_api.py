import httpx
from fastapi.testclient import TestClient

from launchpad.core.config import DashboardConfig
from launchpad.server import create_app
from tests.fakes import FakeGitHub, FakeVercel, b64, combined_transport

ALLOWED_STATES = {"queued", "building", "ready", "error", "canceled"}


# ---------- root ----------

def test_root_and_status(client: TestClient) -> None:
    assert client.get("/api/").json() == {"message": "Launchpad Dashboard API"}

    status = client.get("/api/status").json()
    assert status == {"hostingConfigured": True, "githubConfigured": True, "teamScoped": False}


def test_frameworks(client: TestClient) -> None:
    res = client.get("/api/frameworks")

    assert res.status_code == 200
    nextjs = next(p for p in res.json() if p["id"] == "nextjs")
    assert nextjs["outputDirectory"] == ".next"
    assert nextjs["buildCommand"] == "npm run build"


# ---------- projects and deployments ----------

def test_create_deploy_and_poll_flow(client: TestClient, vercel: FakeVercel) -> None:
    res = client.post("/api/projects", json={"name": "demo-app", "framework": "static"})
    assert res.status_code == 200
    project = res.json()
    assert project["name"] == "demo-app"
    assert project["buildCommand"] == ""
    assert project["installCommand"] == ""
    assert project["latestDeployment"] is None

    listed = client.get("/api/projects").json()["projects"]
    assert [p["name"] for p in listed] == ["demo-app"]
    assert listed[0]["latestDeployment"] is None

    res = client.post("/api/deployments", json={"projectId": project["id"]})
    assert res.status_code == 200
    deployment = res.json()
    assert deployment["state"] in {"queued", "building"}
    assert deployment["projectId"] == project["id"]
    assert deployment["target"] == "production"

    # The UI polls the project list until the state is terminal.
    vercel.deployments[deployment["id"]]["state"] = "BUILDING"
    latest = client.get("/api/projects").json()["projects"][0]["latestDeployment"]
    assert latest["id"] == deployment["id"]
    assert latest["state"] in ALLOWED_STATES
    assert latest["state"] == "building"

    vercel.deployments[deployment["id"]]["state"] = "READY"
    detail = client.get(f"/api/projects/{project['id']}").json()
    assert detail["deployments"][0]["state"] == "ready"
    assert detail["deployments"][0]["url"].startswith("https://")


def test_cancel_finished_deployment_is_conflict(client: TestClient, vercel: FakeVercel) -> None:
    project = vercel.add_project("web")
    done = vercel.add_deployment(project["id"], state="READY")

    res = client.post(f"/api/deployments/{done['uid']}/cancel")

    assert res.status_code == 409
    assert "error" in res.json()
    assert vercel.deployments[done["uid"]]["state"] == "READY"


def test_cancel_building_deployment(client: TestClient, vercel: FakeVercel) -> None:
    project = vercel.add_project("web")
    running = vercel.add_deployment(project["id"], state="BUILDING")

    res = client.post(f"/api/deployments/{running['uid']}/cancel")

    assert res.status_code == 200
    assert res.json()["state"] == "canceled"


def test_project_error_shapes(client: TestClient, vercel: FakeVercel) -> None:
    vercel.add_project("taken")

    missing = client.get("/api/projects/prj_missing")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Project not found"}

    dup = client.post("/api/projects", json={"name": "taken"})
    assert dup.status_code == 409
    assert "already exists" in dup.json()["error"]

    bad = client.post("/api/projects", json={"name": "Not Valid!"})
    assert bad.status_code == 400
    assert "lowercase" in bad.json()["error"]


def test_malformed_bodies_are_400(client: TestClient) -> None:
    res = client.post(
        "/api/projects", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert res.status_code == 400
    assert "error" in res.json()

    res = client.post("/api/deployments", json={})
    assert res.status_code == 400
    assert res.json() == {"error": "Project ID is required"}

    res = client.get("/api/projects/prj_1/deployments", params={"limit": 0})
    assert res.status_code == 400


def test_update_and_delete_project(client: TestClient, vercel: FakeVercel) -> None:
    project = vercel.add_project("web", buildCommand="npm run build")

    res = client.patch(f"/api/projects/{project['id']}", json={"buildCommand": "", "outputDirectory": "out"})
    assert res.status_code == 200
    assert res.json()["buildCommand"] == ""
    assert res.json()["outputDirectory"] == "out"

    refused = client.put(f"/api/projects/{project['id']}", json={"environmentVariables": {"A": "1"}})
    assert refused.status_code == 400

    res = client.delete(f"/api/projects/{project['id']}")
    assert res.status_code == 204
    assert client.get(f"/api/projects/{project['id']}").status_code == 404


def test_project_deployment_history(client: TestClient, vercel: FakeVercel) -> None:
    project = vercel.add_project("web")
    first = vercel.add_deployment(project["id"], state="ERROR")
    second = vercel.add_deployment(project["id"], state="READY", target="preview")

    res = client.get(f"/api/projects/{project['id']}/deployments", params={"limit": 5})

    assert res.status_code == 200
    deployments = res.json()["deployments"]
    assert [d["id"] for d in deployments] == [second["uid"], first["uid"]]
    assert [d["state"] for d in deployments] == ["ready", "error"]
    assert deployments[0]["target"] == "preview"


def test_upstream_outage_is_502(client: TestClient, vercel: FakeVercel) -> None:
    project = vercel.add_project("web")
    vercel.failing_projects.add(project["id"])

    res = client.get(f"/api/projects/{project['id']}/deployments")

    assert res.status_code == 502
    assert res.json() == {"error": "Internal error"}


# ---------- github ----------

def test_github_file_explorer_flow(client: TestClient, gh: FakeGitHub) -> None:
    repos = client.get("/api/github/repos").json()
    assert repos[0]["full_name"] == "acme/site"

    res = client.post("/api/github/repos/acme/site/files", json={"path": "index.html", "content": b64("<h1>hi</h1>")})
    assert res.status_code == 200
    created = res.json()
    assert created["commit_message"] == "Create index.html"

    again = client.post("/api/github/repos/acme/site/files", json={"path": "index.html", "content": b64("x")})
    assert again.status_code == 409
    assert gh.text_of("acme/site", "index.html") == "<h1>hi</h1>"

    f = client.get("/api/github/repos/acme/site/file", params={"path": "index.html"}).json()
    assert f["sha"] == created["sha"]

    res = client.put(
        "/api/github/repos/acme/site/files",
        json={"path": "index.html", "content": b64("<h1>v2</h1>"), "sha": f["sha"], "message": "Edit heading"},
    )
    assert res.status_code == 200
    assert gh.commits[-1]["message"] == "Edit heading"

    stale = client.put(
        "/api/github/repos/acme/site/files",
        json={"path": "index.html", "content": b64("<h1>v3</h1>"), "sha": f["sha"]},
    )
    assert stale.status_code == 409
    assert "error" in stale.json()
    assert gh.text_of("acme/site", "index.html") == "<h1>v2</h1>"


def test_github_directory_and_delete(client: TestClient, gh: FakeGitHub) -> None:
    res = client.post("/api/github/repos/acme/site/directories", json={"path": "docs"})
    assert res.status_code == 200
    assert res.json()["path"] == "docs/.gitkeep"

    sha = gh.put_file("acme/site", "docs/a.md", "a")
    res = client.request("DELETE", "/api/github/repos/acme/site/files", json={"path": "docs/a.md", "sha": sha})
    assert res.status_code == 200
    assert res.json()["sha"] is None

    listing = client.get("/api/github/repos/acme/site/contents", params={"path": "docs"}).json()
    assert [e["name"] for e in listing] == [".gitkeep"]

    root = client.get("/api/github/repos/acme/site/contents").json()
    assert {(e["name"], e["type"]) for e in root} == {("docs", "dir")}


def test_github_bad_input(client: TestClient, gh: FakeGitHub) -> None:
    res = client.get("/api/github/repos/%2E%2E/user/contents")
    assert res.status_code in (400, 404)
    assert gh.requests == []

    res = client.post("/api/github/repos/acme/site/files", json={"path": "../x", "content": ""})
    assert res.status_code == 400

    res = client.put("/api/github/repos/acme/site/files", json={"path": "a.txt", "content": b64("a")})
    assert res.status_code == 400

    res = client.get("/api/github/repos/acme/site/file", params={"path": "missing.txt"})
    assert res.status_code == 404
    assert gh.requests[-1].method == "GET"


# ---------- configuration ----------

def test_missing_tokens_answer_500(vercel: FakeVercel, gh: FakeGitHub) -> None:
    app = create_app(DashboardConfig(), transport=combined_transport(vercel, gh))
    client = TestClient(app)

    assert client.get("/api/status").json()["hostingConfigured"] is False

    res = client.get("/api/projects")
    assert res.status_code == 500
    assert res.json() == {"error": "Vercel token not configured (VERCEL_TOKEN)."}

    res = client.get("/api/github/repos")
    assert res.status_code == 500
    assert "GITHUB_TOKEN" in res.json()["error"]

    assert vercel.requests == []
    assert gh.requests == []


def test_team_scope_on_every_call(vercel: FakeVercel, gh: FakeGitHub) -> None:
    config = DashboardConfig(vercel_token="t", github_token="g", vercel_team_id="team_42")
    client = TestClient(create_app(config, transport=combined_transport(vercel, gh)))
    project = vercel.add_project("web")
    vercel.add_deployment(project["id"])

    assert client.get("/api/projects").status_code == 200
    assert client.get("/api/status").json()["teamScoped"] is True

    assert len(vercel.requests) == 2
    assert all(r.url.params["teamId"] == "team_42" for r in vercel.requests)


def test_timeout_maps_to_502() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    config = DashboardConfig(vercel_token="t", github_token="g")
    client = TestClient(create_app(config, transport=httpx.MockTransport(handler)))

    res = client.get("/api/projects")

    assert res.status_code == 502
    assert "timed out" in res.json()["error"]


def test_bad_upstream_timestamp_is_502(client: TestClient, vercel: FakeVercel) -> None:
    project = vercel.add_project("web")
    project["updatedAt"] = 10 ** 20

    res = client.get(f"/api/projects/{project['id']}")

    assert res.status_code == 502
    assert "timestamp" in res.json()["error"]
