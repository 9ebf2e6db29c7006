"""Tests for the /filesystem endpoints."""


class TestReadEndpoints:
    """Test GET /filesystem routes."""

    def test_tree(self, api_client):
        response = api_client.get("/filesystem/tree", params={"path": "/etc"})
        assert response.status_code == 200
        data = response.json()
        assert data["path"] == "/etc"
        assert [child["name"] for child in data["tree"]["children"]] == ["passwd", "hostname", "os-release"]
        assert "content" not in data["tree"]["children"][1]

    def test_tree_with_content(self, api_client):
        response = api_client.get("/filesystem/tree", params={"path": "/etc", "include_content": True})
        assert response.json()["tree"]["children"][1]["content"] == "desktop"

    def test_tree_missing(self, api_client):
        response = api_client.get("/filesystem/tree", params={"path": "/nope"})
        assert response.status_code == 404
        assert response.json()["error"] == "PathNotFound"

    def test_list(self, api_client):
        response = api_client.get("/filesystem/list", params={"path": "/home/user"})
        assert response.status_code == 200
        data = response.json()
        assert [entry["name"] for entry in data["entries"]] == [
            "Documents", "Tools", "Downloads", "Desktop", ".bash_history",
        ]
        assert data["count"] == 5
        assert data["entries"][0]["size"] == 4096

    def test_list_without_hidden(self, api_client):
        response = api_client.get("/filesystem/list", params={"path": "/home/user", "show_hidden": False})
        assert response.json()["count"] == 4

    def test_list_file(self, api_client):
        response = api_client.get("/filesystem/list", params={"path": "/etc/passwd"})
        assert response.status_code == 400
        assert response.json()["error"] == "NotADirectory"

    def test_read_file(self, api_client):
        response = api_client.get("/filesystem/file", params={"path": "/etc/hostname"})
        assert response.status_code == 200
        assert response.json() == {"path": "/etc/hostname", "content": "desktop", "size": 7}

    def test_read_directory(self, api_client):
        response = api_client.get("/filesystem/file", params={"path": "/etc"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Is a directory"

    def test_read_missing(self, api_client):
        response = api_client.get("/filesystem/file", params={"path": "/etc/shadow"})
        assert response.status_code == 404
        assert response.json()["path"] == "/etc/shadow"

    def test_resolve(self, api_client):
        response = api_client.get(
            "/filesystem/resolve", params={"target": "../etc/./passwd", "base": "/home"}
        )
        assert response.json() == {
            "base": "/home",
            "target": "../etc/./passwd",
            "path": "/etc/passwd",
            "exists": True,
        }

    def test_state(self, api_client):
        data = api_client.get("/filesystem/state").json()
        assert data["update_count"] == 0
        assert data["issues"] == []
        assert data["node_count"] > 10


class TestMutationEndpoints:
    """Test filesystem mutations and their error mapping."""

    def test_write_file(self, api_client, engine):
        response = api_client.put("/filesystem/file", json={"path": "/tmp/a.txt", "content": "x"})
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "File written", "path": "/tmp/a.txt"}
        assert engine.read_file("/tmp/a.txt") == "x"
        assert engine.update_count == 1

    def test_write_missing_parent(self, api_client, engine):
        response = api_client.put("/filesystem/file", json={"path": "/nope/a.txt", "content": "x"})
        assert response.status_code == 404
        assert engine.update_count == 0

    def test_write_over_directory(self, api_client):
        response = api_client.put("/filesystem/file", json={"path": "/tmp", "content": "x"})
        assert response.status_code == 400
        assert response.json()["error"] == "IsADirectory"

    def test_make_directory(self, api_client, engine):
        response = api_client.post("/filesystem/directory", json={"path": "/tmp/work"})
        assert response.status_code == 201
        assert engine.is_directory("/tmp/work")

    def test_make_existing_directory(self, api_client):
        response = api_client.post("/filesystem/directory", json={"path": "/tmp"})
        assert response.status_code == 409
        assert response.json()["error"] == "AlreadyExists"

    def test_delete(self, api_client, engine):
        response = api_client.delete("/filesystem/item", params={"path": "/home/user/Documents"})
        assert response.status_code == 200
        assert not engine.exists("/home/user/Documents/Notes")

    def test_delete_root(self, api_client, engine):
        response = api_client.delete("/filesystem/item", params={"path": "/"})
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidOperation"
        assert engine.exists("/etc")

    def test_copy_into_directory(self, api_client, engine):
        response = api_client.post(
            "/filesystem/copy", json={"source": "/etc/hostname", "destination": "/tmp"}
        )
        assert response.status_code == 200
        assert engine.read_file("/tmp/hostname") == "desktop"
        assert engine.read_file("/etc/hostname") == "desktop"

    def test_copy_into_itself(self, api_client):
        response = api_client.post(
            "/filesystem/copy",
            json={"source": "/home/user", "destination": "/home/user/Documents"},
        )
        assert response.status_code == 400

    def test_move(self, api_client, engine):
        response = api_client.post(
            "/filesystem/move", json={"source": "/home/user/Desktop/todo.md", "destination": "/tmp/todo.md"}
        )
        assert response.status_code == 200
        assert engine.exists("/tmp/todo.md")
        assert not engine.exists("/home/user/Desktop/todo.md")

    def test_move_missing(self, api_client):
        response = api_client.post("/filesystem/move", json={"source": "/nope", "destination": "/tmp"})
        assert response.status_code == 404

    def test_chmod(self, api_client):
        response = api_client.post(
            "/filesystem/chmod", json={"path": "/home/user/Desktop/todo.md", "mode": "u+x"}
        )
        assert response.status_code == 200
        assert response.json()["permissions"] == "-rwxr--r--"

    def test_chmod_invalid_mode(self, api_client):
        response = api_client.post("/filesystem/chmod", json={"path": "/tmp", "mode": "z+q"})
        assert response.status_code == 400

    def test_missing_field(self, api_client):
        response = api_client.post("/filesystem/copy", json={"source": "/etc/hostname"})
        assert response.status_code == 422

    def test_reset(self, api_client, engine):
        engine.delete_item("/etc")
        response = api_client.post("/filesystem/reset")
        assert response.status_code == 200
        assert engine.read_file("/etc/hostname") == "desktop"
