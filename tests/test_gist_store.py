"""Tests for the GitHub Gist remote store."""

import json
from unittest.mock import Mock

import pytest
import requests

from memo_sync.auth import StaticAuthProvider
from memo_sync.core.errors import AuthError, DecodeError, NetworkError
from memo_sync.stores import GistRemoteStore, MemoryHandleStore

API = "https://api.example.test"


def make_response(status_code=200, payload=None, text=""):
    """Build a fake requests response."""
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.json.return_value = payload
    response.text = text
    return response


def gist_document(gist_id, record, filename="memo.json"):
    """Gist API document holding ``record``."""
    return {
        "id": gist_id,
        "files": {filename: {"content": record.to_json(), "truncated": False}},
    }


@pytest.fixture
def session():
    """Mock requests session."""
    return Mock(spec=requests.Session)


@pytest.fixture
def handles():
    """In-memory gist id store."""
    return MemoryHandleStore()


@pytest.fixture
def store(session, handles):
    """Gist store with a token and a mocked session."""
    return GistRemoteStore(
        StaticAuthProvider("secret-token"),
        handles=handles,
        api_base=API,
        session=session,
    )


def _calls(session):
    return [(c.args[0], c.args[1]) for c in session.request.call_args_list]


class TestAuthentication:
    """Test token gating."""

    def test_is_authenticated(self, store):
        """Test a token makes the store authenticated."""
        assert store.is_authenticated()

    def test_no_token_fails_without_network(self, session):
        """Test read and write raise AuthError before any request."""
        store = GistRemoteStore(StaticAuthProvider(None), session=session)

        assert not store.is_authenticated()
        with pytest.raises(AuthError):
            store.read()
        session.request.assert_not_called()

    def test_sends_token_header(self, store, session, handles, make_record):
        """Test requests carry the token."""
        handles.set("abc")
        session.request.return_value = make_response(
            200, gist_document("abc", make_record())
        )

        store.read()

        headers = session.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "token secret-token"

    @pytest.mark.parametrize("status", [401, 403])
    def test_rejected_token(self, store, session, handles, status):
        """Test 401/403 surface as AuthError."""
        handles.set("abc")
        session.request.return_value = make_response(status)

        with pytest.raises(AuthError):
            store.read()


class TestRead:
    """Test reading the record from a gist."""

    def test_read_known_gist(self, store, session, handles, make_record):
        """Test the record is decoded from the gist file."""
        record = make_record(body="remote", revision=5)
        handles.set("abc")
        session.request.return_value = make_response(
            200, gist_document("abc", record)
        )

        assert store.read() == record
        assert _calls(session) == [("GET", f"{API}/gists/abc")]

    def test_discovers_existing_gist(self, store, session, handles, make_record):
        """Test a gist holding memo.json is found when no id is known."""
        record = make_record(body="found")
        session.request.side_effect = [
            make_response(
                200,
                [
                    {"id": "other", "files": {"notes.txt": {}}},
                    {"id": "mine", "files": {"memo.json": {}}},
                ],
            ),
            make_response(200, gist_document("mine", record)),
        ]

        assert store.read() == record
        assert handles.get() == "mine"
        assert _calls(session) == [
            ("GET", f"{API}/gists"),
            ("GET", f"{API}/gists/mine"),
        ]

    def test_no_gist_anywhere(self, store, session, handles):
        """Test absence when discovery finds nothing."""
        session.request.return_value = make_response(200, [])

        assert store.read() is None
        assert handles.get() is None

    def test_deleted_gist_reads_as_absent(self, store, session, handles):
        """Test a 404 forgets the gist id."""
        handles.set("gone")
        session.request.return_value = make_response(404)

        assert store.read() is None
        assert handles.get() is None

    def test_gist_without_memo_file(self, store, session, handles):
        """Test a gist missing the file reads as absent."""
        handles.set("abc")
        session.request.return_value = make_response(
            200, {"id": "abc", "files": {"other.json": {"content": "{}"}}}
        )

        assert store.read() is None
        assert handles.get() == "abc"

    def test_truncated_file_fetches_raw(self, store, session, handles, make_record):
        """Test large files are fetched from raw_url."""
        record = make_record(body="x" * 50)
        handles.set("abc")
        session.request.return_value = make_response(
            200,
            {
                "id": "abc",
                "files": {
                    "memo.json": {
                        "content": "{",
                        "truncated": True,
                        "raw_url": "https://raw.example.test/memo.json",
                    }
                },
            },
        )
        session.get.return_value = make_response(200, text=record.to_json())

        assert store.read() == record
        session.get.assert_called_once()
        assert session.get.call_args.args[0] == "https://raw.example.test/memo.json"

    def test_corrupt_content(self, store, session, handles):
        """Test invalid file content raises DecodeError."""
        handles.set("abc")
        session.request.return_value = make_response(
            200, {"id": "abc", "files": {"memo.json": {"content": "not json"}}}
        )

        with pytest.raises(DecodeError):
            store.read()

    def test_server_error(self, store, session, handles):
        """Test unexpected statuses surface as NetworkError with the status."""
        handles.set("abc")
        session.request.return_value = make_response(502)

        with pytest.raises(NetworkError) as exc_info:
            store.read()
        assert exc_info.value.status_code == 502

    @pytest.mark.parametrize(
        "error", [requests.ConnectionError("down"), requests.Timeout("slow")]
    )
    def test_transport_error(self, store, session, handles, error):
        """Test transport failures surface as NetworkError."""
        handles.set("abc")
        session.request.side_effect = error

        with pytest.raises(NetworkError):
            store.read()

    def test_exists_swallows_errors(self, store, session, handles):
        """Test the existence probe never raises."""
        handles.set("abc")
        session.request.side_effect = requests.ConnectionError("down")

        assert store.exists() is False


class TestWrite:
    """Test writing the record to a gist."""

    def test_first_write_creates_private_gist(
        self, store, session, handles, make_record
    ):
        """Test a POST creates the gist and its id is remembered."""
        record = make_record(body="hello", revision=1)
        session.request.return_value = make_response(201, {"id": "new1"})

        store.write(record)

        method, url = _calls(session)[0]
        assert (method, url) == ("POST", f"{API}/gists")
        payload = session.request.call_args.kwargs["json"]
        assert payload["public"] is False
        assert payload["description"] == "Memo App Data"
        content = payload["files"]["memo.json"]["content"]
        assert json.loads(content)["memo"]["content"] == "hello"
        assert handles.get() == "new1"

    def test_update_existing_gist(self, store, session, handles, make_record):
        """Test a known gist is PATCHed in place."""
        handles.set("abc")
        session.request.return_value = make_response(200, {"id": "abc"})

        store.write(make_record(body="v2", revision=2))

        assert _calls(session) == [("PATCH", f"{API}/gists/abc")]
        payload = session.request.call_args.kwargs["json"]
        assert json.loads(payload["files"]["memo.json"]["content"])["sync"][
            "revision"
        ] == 2
        assert handles.get() == "abc"

    def test_recreates_deleted_gist(self, store, session, handles, make_record):
        """Test a 404 on PATCH creates a new gist."""
        handles.set("gone")
        session.request.side_effect = [
            make_response(404),
            make_response(201, {"id": "fresh"}),
        ]

        store.write(make_record(body="again"))

        assert _calls(session) == [
            ("PATCH", f"{API}/gists/gone"),
            ("POST", f"{API}/gists"),
        ]
        assert handles.get() == "fresh"

    def test_write_transport_error(self, store, session, handles, make_record):
        """Test a timeout surfaces as NetworkError and keeps the id."""
        handles.set("abc")
        session.request.side_effect = requests.Timeout("slow")

        with pytest.raises(NetworkError):
            store.write(make_record())
        assert handles.get() == "abc"

    def test_write_rejected(self, store, session, handles, make_record):
        """Test a rejected token surfaces as AuthError."""
        handles.set("abc")
        session.request.return_value = make_response(401)

        with pytest.raises(AuthError):
            store.write(make_record())
