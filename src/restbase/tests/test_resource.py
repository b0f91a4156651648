import json

import pytest

from ..exceptions import (
    ConfigurationError,
    HTTPError,
    InvalidResponseError,
    MissingRelationError,
    ResponseParseError,
    UnknownRelationshipError,
)
from .testing import Comment, FakeTransport, Issue, Project, Version

ISSUE_PATH = "/jira/rest/api/2/issue"


@pytest.fixture
def client():
    return FakeTransport()


class TestConstruction:
    def test_defaults(self, client):
        issue = Issue(client)
        assert issue.client is client
        assert issue.attrs == {}
        assert issue.expanded is False
        assert issue.deleted is False
        assert issue.is_new_record

    def test_missing_relation(self, client):
        with pytest.raises(MissingRelationError) as e:
            Version(client)
        assert isinstance(e.value, ConfigurationError)
        assert e.value.relation == "project"
        assert "project_id" in str(e.value)

    def test_relation_by_instance(self, client):
        project = Project(client, attrs={"key": "PROJ"})
        version = Version(client, project=project)
        assert version.get_parent("project") is project
        assert version.get_parent_id("project") == "PROJ"

    def test_relation_by_id(self, client):
        version = Version(client, project_id="PROJ")
        assert version.get_parent("project") is None
        assert version.get_parent_id("project") == "PROJ"

    def test_undeclared_parent(self, client):
        version = Version(client, project_id="PROJ")
        with pytest.raises(UnknownRelationshipError):
            version.get_parent("issue")
        with pytest.raises(UnknownRelationshipError):
            version.get_parent_id("issue")

    def test_undeclared_options_are_ignored(self, client):
        issue = Issue(client, project_id="PROJ")
        assert issue.url == ISSUE_PATH

    def test_attribute_access(self, client):
        issue = Issue(client, attrs={"key": "PROJ-1", "fields": None})
        assert issue["key"] == "PROJ-1"
        assert "fields" in issue
        assert "summary" not in issue
        with pytest.raises(KeyError):
            issue["summary"]

    def test_build_round_trip(self, client):
        original = Issue(client, attrs={"id": "1", "fields": {"summary": "x", "labels": ["a", "b"], "due": None}})
        rebuilt = Issue.build(client, json.loads(original.to_json()))
        assert rebuilt.attrs == original.attrs
        assert rebuilt.expanded is False

    def test_has_errors(self, client):
        assert not Issue(client).has_errors
        assert Issue(client, attrs={"errors": {"summary": "required"}}).has_errors


class TestFetch:
    def test_fetch(self, client):
        client.respond("GET", ISSUE_PATH + "/1", {"id": "1", "key": "PROJ-1"})
        issue = Issue(client, attrs={"id": "1", "local": True})
        issue.fetch()
        assert client.requests == [("GET", ISSUE_PATH + "/1", None)]
        assert issue.attrs == {"id": "1", "key": "PROJ-1", "local": True}
        assert issue.expanded

    def test_fetch_expanded_is_noop(self, client):
        issue = Issue(client, attrs={"id": "1"}, expanded=True)
        issue.fetch()
        assert client.requests == []
        assert issue.attrs == {"id": "1"}

    def test_fetch_reload(self, client):
        client.respond("GET", ISSUE_PATH + "/1", {"id": "1", "fields": {"summary": "new"}})
        issue = Issue(client, attrs={"id": "1", "fields": {"summary": "old", "labels": []}}, expanded=True)
        issue.fetch(reload=True)
        assert len(client.requests) == 1
        assert issue.attrs["fields"] == {"summary": "new"}

    def test_fetch_empty_body(self, client):
        client.respond("GET", ISSUE_PATH + "/1", "")
        issue = Issue(client, attrs={"id": "1"})
        issue.fetch()
        assert issue.attrs == {"id": "1"}
        assert issue.expanded

    def test_fetch_error_propagates(self, client):
        client.respond("GET", ISSUE_PATH + "/1", {"errorMessages": ["not found"]}, status=404)
        issue = Issue(client, attrs={"id": "1"})
        with pytest.raises(HTTPError) as e:
            issue.fetch()
        assert e.value.status == 404
        assert not issue.expanded
        assert issue.attrs == {"id": "1"}

    def test_fetch_malformed_json(self, client):
        client.respond("GET", ISSUE_PATH + "/1", "{not json")
        issue = Issue(client, attrs={"id": "1"})
        with pytest.raises(ResponseParseError) as e:
            issue.fetch()
        assert e.value.body == "{not json"
        assert isinstance(e.value.__cause__, ValueError)
        assert not issue.expanded

    def test_fetch_non_object(self, client):
        client.respond("GET", ISSUE_PATH + "/1", [1, 2])
        with pytest.raises(InvalidResponseError):
            Issue(client, attrs={"id": "1"}).fetch()

    def test_find(self, client):
        client.respond("GET", ISSUE_PATH + "/10002", {"id": "10002", "key": "PROJ-1"})
        issue = Issue.find(client, "10002")
        assert client.requests == [("GET", ISSUE_PATH + "/10002", None)]
        assert issue.key_value == "10002"
        assert issue["key"] == "PROJ-1"
        assert issue.expanded

    def test_find_with_parent(self, client):
        client.respond("GET", ISSUE_PATH + "/10002/comment/5", {"id": "5", "body": "hi"})
        comment = Comment.find(client, "5", issue_id="10002")
        assert comment["body"] == "hi"


class TestSave:
    def test_create_posts(self, client):
        client.respond("POST", ISSUE_PATH, {"id": "10002", "key": "PROJ-1", "self": "http://x/issue/10002"})
        issue = Issue(client)
        assert issue.save({"fields": {"summary": "new"}}) is True
        method, path, body = client.requests[0]
        assert (method, path) == ("POST", ISSUE_PATH)
        assert json.loads(body) == {"fields": {"summary": "new"}}
        assert issue.attrs == {
            "fields": {"summary": "new"},
            "id": "10002",
            "key": "PROJ-1",
            "self": "http://x/issue/10002",
        }
        assert issue.expanded is False
        assert not issue.is_new_record

    def test_update_puts(self, client):
        client.respond("PUT", ISSUE_PATH + "/1", "")
        issue = Issue(client, attrs={"id": "1", "fields": {"summary": "old", "labels": ["a"]}}, expanded=True)
        assert issue.save({"fields": {"summary": "new"}}) is True
        assert [(m, p) for m, p, _ in client.requests] == [("PUT", ISSUE_PATH + "/1")]
        assert issue.attrs["fields"] == {"summary": "new", "labels": ["a"]}
        assert issue.expanded is False

    def test_response_overrides_changes(self, client):
        client.respond("PUT", ISSUE_PATH + "/1", {"fields": {"summary": "server"}})
        issue = Issue(client, attrs={"id": "1", "fields": {"labels": ["a"]}})
        issue.save({"fields": {"summary": "client"}})
        assert issue.attrs["fields"] == {"summary": "server"}

    def test_failure_salvages_error_body(self, client):
        client.respond("POST", ISSUE_PATH, {"errors": {"summary": "required"}}, status=400)
        issue = Issue(client)
        assert issue.save({"fields": {}}) is False
        assert issue.has_errors
        assert issue.attrs == {"errors": {"summary": "required"}}
        assert issue.is_new_record

    def test_failure_with_unparsable_error_body(self, client):
        client.respond("PUT", ISSUE_PATH + "/1", "<html>oops</html>", status=500)
        issue = Issue(client, attrs={"id": "1"})
        assert issue.save({"fields": {"summary": "x"}}) is False
        assert issue.attrs == {"id": "1"}

    def test_instance_usable_after_failure(self, client):
        client.respond("PUT", ISSUE_PATH + "/1", None, status=503)
        issue = Issue(client, attrs={"id": "1"})
        assert issue.save({"a": 1}) is False
        client.respond("PUT", ISSUE_PATH + "/1", {"a": 1})
        assert issue.save({"a": 1}) is True
        assert issue.attrs["a"] == 1

    def test_save_strict_raises(self, client):
        client.respond("POST", ISSUE_PATH, {"errors": {"summary": "required"}}, status=400)
        issue = Issue(client)
        with pytest.raises(HTTPError) as e:
            issue.save_strict({"fields": {}})
        assert e.value.status == 400
        assert issue.attrs == {}


class TestDelete:
    def test_delete(self, client):
        issue = Issue(client, attrs={"id": "1", "key": "PROJ-1"})
        issue.delete()
        assert client.requests == [("DELETE", ISSUE_PATH + "/1", None)]
        assert issue.deleted
        assert issue.attrs == {"id": "1", "key": "PROJ-1"}

    def test_delete_error_propagates(self, client):
        client.respond("DELETE", ISSUE_PATH + "/1", None, status=403)
        issue = Issue(client, attrs={"id": "1"})
        with pytest.raises(HTTPError):
            issue.delete()
        assert not issue.deleted


class TestAll:
    def test_bare_array(self, client):
        client.respond("GET", ISSUE_PATH, [{"id": "1"}, {"id": "2"}])
        issues = Issue.all(client)
        assert [i.key_value for i in issues] == ["1", "2"]
        assert all(isinstance(i, Issue) and not i.expanded for i in issues)
        assert all(i.client is client for i in issues)

    def test_nested_collection_with_parent(self, client):
        client.respond(
            "GET",
            "/jira/rest/api/2/project/PROJ/version",
            {"versions": [{"id": "1", "name": "1.0"}]},
        )
        versions = Version.all(client, project_id="PROJ")
        assert len(versions) == 1
        assert versions[0]["name"] == "1.0"
        assert versions[0].get_parent_id("project") == "PROJ"
        assert versions[0].url == "/jira/rest/api/2/project/PROJ/version/1"

    def test_missing_parent_fails_before_request(self, client):
        with pytest.raises(MissingRelationError):
            Version.all(client)
        assert client.requests == []

    def test_nested_key_missing(self, client):
        client.respond("GET", "/jira/rest/api/2/project/PROJ/version", [{"id": "1"}])
        with pytest.raises(InvalidResponseError):
            Version.all(client, project_id="PROJ")

    def test_not_an_array(self, client):
        client.respond("GET", ISSUE_PATH, {"id": "1"})
        with pytest.raises(InvalidResponseError):
            Issue.all(client)

    def test_error_propagates(self, client):
        client.respond("GET", ISSUE_PATH, None, status=401)
        with pytest.raises(HTTPError):
            Issue.all(client)
