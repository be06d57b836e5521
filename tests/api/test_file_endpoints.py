"""
Tests for the SGF document endpoints
"""
import httplib2
import pytest
from googleapiclient.errors import HttpError

METADATA = {
    'id': 'file-1',
    'name': 'game.sgf',
    'mimeType': 'application/x-go-sgf',
    'modifiedTime': '2024-03-01T10:00:00.000Z',
    'capabilities': {'canEdit': True},
}
CONTENT = b"(;FF[4]GM[1]SZ[19]PB[Black]PW[White];B[pd];W[dp])\n"


@pytest.fixture
def drive(drive):
    drive.get_file.return_value = dict(METADATA)
    drive.get_file_content.return_value = CONTENT
    drive.create_file.return_value = dict(METADATA)
    drive.update_file.return_value = dict(METADATA)
    return drive


def http_error(status, message):
    return HttpError(httplib2.Response({'status': status}), f'{{"error": {{"message": "{message}"}}}}'.encode())


class TestLoad:
    """Test GET /svc and GET /svc/new"""

    def test_requires_login(self, client, drive):
        response = client.get("/svc", params={"file_id": "file-1"})

        assert response.status_code == 401
        assert response.json()["error"] == "authentication_required"
        drive.get_file.assert_not_called()

    def test_load(self, logged_in, drive):
        response = logged_in.get("/svc", params={"file_id": "file-1"})

        assert response.status_code == 200
        document = response.json()
        assert document["resource_id"] == "file-1"
        assert document["title"] == "game.sgf"
        assert document["info"]["properties"] == {"SZ": "19", "PB": "Black", "PW": "White"}
        assert document["moves"] == [{"color": "B", "point": "pd"}, {"color": "W", "point": "dp"}]

    def test_view(self, logged_in, drive):
        response = logged_in.get("/view/file-1")

        assert response.status_code == 200
        assert response.json()["resource_id"] == "file-1"

    def test_missing_file_id(self, logged_in, drive):
        response = logged_in.get("/svc")

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_drive_not_found(self, logged_in, drive):
        drive.get_file.side_effect = http_error(404, "File not found: nope")

        response = logged_in.get("/svc", params={"file_id": "nope"})

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "not_found", "message": "File not found: nope"}

    def test_drive_forbidden(self, logged_in, drive):
        drive.get_file.side_effect = http_error(403, "The user does not have sufficient permissions")

        response = logged_in.get("/svc", params={"file_id": "file-1"})

        assert response.status_code == 403
        assert response.json()["error"] == "permission_denied"

    def test_malformed_file(self, logged_in, drive):
        drive.get_file_content.return_value = b"this is not sgf"

        response = logged_in.get("/svc", params={"file_id": "file-1"})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_new(self, logged_in, drive):
        response = logged_in.get("/svc/new", params={"parent_id": "folder-1"})

        assert response.status_code == 200
        assert response.json()["resource_id"] is None
        assert response.json()["parent_id"] == "folder-1"
        assert response.json()["content"] == "(;FF[4]GM[1]SZ[19]CA[UTF-8]AP[SGF Editor])\n"


class TestSave:
    """Test POST and PUT /svc"""

    def test_create(self, logged_in, drive):
        response = logged_in.post("/svc", json={"title": "new.sgf", "content": "(;GM[1]SZ[9])", "parent_id": "folder-1"})

        assert response.status_code == 200
        args, kwargs = drive.create_file.call_args
        assert args == ("new.sgf", b"(;GM[1]SZ[9])")
        assert kwargs["parents"] == ["folder-1"]

    def test_create_invalid_sgf(self, logged_in, drive):
        response = logged_in.post("/svc", json={"title": "new.sgf", "content": "(;GM[1]"})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        drive.create_file.assert_not_called()

    def test_update(self, logged_in, drive):
        response = logged_in.put("/svc", json={"resource_id": "file-1", "title": "renamed.sgf"})

        assert response.status_code == 200
        assert drive.update_file.call_args.kwargs["title"] == "renamed.sgf"

    def test_update_nothing(self, logged_in, drive):
        response = logged_in.put("/svc", json={"resource_id": "file-1"})

        assert response.status_code == 400
        drive.update_file.assert_not_called()

    def test_update_invalid_sgf(self, logged_in, drive):
        response = logged_in.put("/svc", json={"resource_id": "file-1", "content": ")("})

        assert response.status_code == 400
        drive.update_file.assert_not_called()

    def test_body_validation(self, logged_in, drive):
        response = logged_in.put("/svc", json={"title": "no-id.sgf"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert any(detail["field"].endswith("resource_id") for detail in body["details"])


class TestGameEdits:
    """Test POST /svc/info and POST /svc/node"""

    def test_save_info(self, logged_in, drive):
        response = logged_in.post("/svc/info", json={"resource_id": "file-1", "properties": {"KM": "6.5", "PW": ""}})

        assert response.status_code == 200
        assert response.json()["info"]["properties"] == {"SZ": "19", "PB": "Black", "KM": "6.5"}
        assert b"KM[6.5]" in drive.update_file.call_args.kwargs["content"]

    def test_save_info_invalid_value(self, logged_in, drive):
        response = logged_in.post("/svc/info", json={"resource_id": "file-1", "properties": {"HA": "many"}})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        drive.update_file.assert_not_called()

    def test_save_info_unknown_property(self, logged_in, drive):
        response = logged_in.post("/svc/info", json={"resource_id": "file-1", "properties": {"B": "pd"}})

        assert response.status_code == 400

    def test_save_node(self, logged_in, drive):
        response = logged_in.post("/svc/node", json={"resource_id": "file-1", "node_id": 2, "properties": {"C": "Joseki"}})

        assert response.status_code == 200
        assert b";W[dp]C[Joseki]" in drive.update_file.call_args.kwargs["content"]

    def test_save_unknown_node(self, logged_in, drive):
        response = logged_in.post("/svc/node", json={"resource_id": "file-1", "node_id": 42, "properties": {"C": "x"}})

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "not_found", "message": "Node 42 does not exist"}

    def test_negative_node_id(self, logged_in, drive):
        response = logged_in.post("/svc/node", json={"resource_id": "file-1", "node_id": -1, "properties": {}})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestAbout:
    """Test GET /about"""

    def test_about(self, logged_in, drive):
        drive.about.return_value = {"user": {"displayName": "Go Player"}, "storageQuota": {"limit": "100"}}

        response = logged_in.get("/about")

        assert response.status_code == 200
        assert response.json()["app_name"] == "SGF Editor"
        assert response.json()["user"]["displayName"] == "Go Player"

    def test_about_drive_error(self, logged_in, drive):
        drive.about.side_effect = http_error(500, "Backend Error")

        response = logged_in.get("/about")

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "internal_server_error", "message": "Backend Error"}

    def test_about_requires_login(self, client, drive):
        assert client.get("/about").status_code == 401
