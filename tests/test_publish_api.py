"""
API tests for the /publish blueprint.

Checks the response envelope and HTTP status mapping:
  - accepted          → 200 {success: true, data: {publishId}}
  - soft rejection    → 200 {success: false, data: {text}}
  - hard rejection    → 200 {success: false, message}
  - not found / range → 200 {success: false, code}
  - missing params    → 400
"""

import pytest

from release_console.utils.errors import E, OUT_OF_RANGE, PARAM_MISSING


def _publish_body(user, **overrides):
    body = {
        "branch": "daily/1.0.3",
        "userId": user.id,
        "repository": "group/web-portal",
        "commit": "a1b2c3d4",
        "publishEnv": "daily",
    }
    body.update(overrides)
    return body


class TestCreatePublishEndpoint:
    def test_daily_publish_accepted(self, client, user, iteration):
        res = client.post("/publish/createPublish", json=_publish_body(user))

        assert res.status_code == 200
        body = res.get_json()
        assert body["success"] is True
        assert isinstance(body["data"]["publishId"], int)

    def test_online_publish_returns_review_text(self, client, user, iteration):
        res = client.post("/publish/createPublish", json=_publish_body(user, publishEnv="online"))

        assert res.status_code == 200
        body = res.get_json()
        assert body["success"] is False
        assert body["code"] == E.REVIEW_REQUIRED
        assert "code review" in body["data"]["text"]
        assert "message" not in body

    def test_duplicate_publish_returns_message(self, client, user, iteration):
        client.post("/publish/createPublish", json=_publish_body(user))
        res = client.post("/publish/createPublish", json=_publish_body(user))

        body = res.get_json()
        assert res.status_code == 200
        assert body["success"] is False
        assert body["code"] == E.PUBLISH_REJECTED
        assert body["message"] == "This commit has already been published."

    def test_approved_review_returns_existing_id(self, client, user, make_publish):
        existing = make_publish("a1b2c3d4", env="online", status="4003", review_status="7001")

        res = client.post("/publish/createPublish", json=_publish_body(user, publishEnv="online"))

        assert res.get_json() == {"success": True, "data": {"publishId": existing.id}}

    @pytest.mark.parametrize("missing", ["branch", "userId", "repository", "commit", "publishEnv"])
    def test_missing_field_is_400(self, client, user, iteration, missing):
        body = _publish_body(user)
        del body[missing]

        res = client.post("/publish/createPublish", json=body)

        assert res.status_code == 400
        payload = res.get_json()
        assert payload["success"] is False
        assert payload["message"] == PARAM_MISSING
        assert payload["details"] == {missing: "required"}
        assert payload["code"] == E.VALIDATION_REQUIRED

    def test_empty_body_is_400(self, client):
        res = client.post("/publish/createPublish", data="not json", content_type="text/plain")
        assert res.status_code == 400

    def test_unknown_environment_is_400(self, client, user, iteration):
        res = client.post("/publish/createPublish", json=_publish_body(user, publishEnv="staging"))
        assert res.status_code == 400
        assert res.get_json()["code"] == E.VALIDATION_INVALID

    def test_unknown_repository_is_soft_not_found(self, client, user, iteration):
        res = client.post(
            "/publish/createPublish", json=_publish_body(user, repository="group/unknown"),
        )
        body = res.get_json()
        assert res.status_code == 200
        assert body["success"] is False
        assert body["code"] == E.NOT_FOUND
        assert "Application" in body["message"]


class TestPublishListEndpoint:
    def _body(self, app_id, **overrides):
        body = {"appId": app_id, "publishEnv": [], "publishStatus": [], "page": 1, "pageSize": 10}
        body.update(overrides)
        return body

    def test_list_envelope(self, client, application, make_publish):
        make_publish("abc", env="daily", status="4004")

        res = client.post("/publish/getAppPublishList", json=self._body(application.id))

        assert res.status_code == 200
        data = res.get_json()["data"]
        assert data["total"] == 1
        assert data["hasMore"] is False
        assert data["list"][0]["commit"] == "abc"

    def test_out_of_range_page(self, client, application):
        res = client.post("/publish/getAppPublishList", json=self._body(application.id, page=3))

        body = res.get_json()
        assert res.status_code == 200
        assert body == {"success": False, "code": E.OUT_OF_RANGE, "message": OUT_OF_RANGE}

    def test_non_integer_page_is_invalid(self, client, application):
        res = client.post("/publish/getAppPublishList", json=self._body(application.id, page="two"))

        assert res.status_code == 400
        body = res.get_json()
        assert body["code"] == E.VALIDATION_INVALID
        assert body["details"] == {"page": "invalid"}

    def test_missing_page_size_is_400(self, client, application):
        body = self._body(application.id)
        del body["pageSize"]
        res = client.post("/publish/getAppPublishList", json=body)
        assert res.status_code == 400

    def test_unknown_application(self, client):
        res = client.post("/publish/getAppPublishList", json=self._body(999))
        assert res.status_code == 200
        assert res.get_json()["code"] == E.NOT_FOUND


class TestPublishDetailEndpoints:
    def test_detail(self, client, make_publish):
        publish = make_publish("abc", env="online", status="4003", review_status="7003")

        res = client.post("/publish/getAppPublishDetail", json={"publishId": publish.id})

        data = res.get_json()["data"]
        assert data["publishId"] == publish.id
        assert data["reviewStatus"] == "7003"

    def test_log_roundtrip_through_executor_callbacks(self, client, make_publish):
        publish = make_publish("abc", env="daily", status="4004")

        client.post("/publish/appendPublishLog", json={"publishId": publish.id, "content": "step 1"})
        client.post("/publish/appendPublishLog", json={"publishId": publish.id, "content": "step 2"})
        res = client.post("/publish/getAppPublishLog", json={"publishId": publish.id})

        assert res.get_json() == {"success": True, "data": {"log": "step 1\nstep 2"}}

    def test_update_status(self, client, make_publish):
        publish = make_publish("abc", env="daily", status="4004")

        res = client.post(
            "/publish/updatePublishStatus",
            json={"publishId": publish.id, "publishStatus": "4006"},
        )

        assert res.get_json()["data"] == {"publishId": publish.id, "publishStatus": "4006"}

    def test_update_status_rejects_unknown_code(self, client, make_publish):
        publish = make_publish("abc", env="daily", status="4004")
        res = client.post(
            "/publish/updatePublishStatus",
            json={"publishId": publish.id, "publishStatus": "9999"},
        )
        assert res.status_code == 400

    def test_detail_invalid_id_is_400(self, client):
        res = client.post("/publish/getAppPublishDetail", json={"publishId": "abc"})
        assert res.status_code == 400

    def test_detail_unknown_id(self, client):
        res = client.post("/publish/getAppPublishDetail", json={"publishId": 999})
        assert res.status_code == 200
        assert res.get_json()["success"] is False


class TestAppLevelHandlers:
    def test_unknown_route_uses_envelope(self, client):
        res = client.post("/publish/doesNotExist")
        assert res.status_code == 404
        assert res.get_json()["success"] is False

    def test_wrong_method(self, client):
        res = client.get("/publish/createPublish")
        assert res.status_code == 405

    def test_response_carries_request_headers(self, client):
        res = client.post("/publish/getAppPublishDetail", json={}, headers={"X-Request-ID": "req-42"})
        assert res.headers["X-Request-ID"] == "req-42"
        assert "X-Request-Duration-Ms" in res.headers
