"""API tests for the /app blueprint."""

from release_console.utils.errors import E


class TestAppEndpoints:
    def test_create_app(self, client, user):
        res = client.post("/app/createApp", json={
            "userId": user.id,
            "appName": "billing",
            "repository": "group/billing",
            "description": "Billing service",
        })

        assert res.status_code == 200
        data = res.get_json()["data"]
        assert data["appName"] == "billing"
        assert data["port"] == data["appId"] + 9000

    def test_create_app_duplicate_is_soft_conflict(self, client, user, application):
        res = client.post("/app/createApp", json={
            "userId": user.id,
            "appName": "web-portal",
            "repository": "group/another",
            "description": "dup",
        })

        body = res.get_json()
        assert res.status_code == 200
        assert body["success"] is False
        assert body["code"] == E.CONFLICT_DUPLICATE

    def test_create_app_missing_description_is_400(self, client, user):
        res = client.post("/app/createApp", json={
            "userId": user.id, "appName": "billing", "repository": "group/billing",
        })
        assert res.status_code == 400

    def test_create_app_non_string_name_is_invalid(self, client, user):
        res = client.post("/app/createApp", json={
            "userId": user.id,
            "appName": 123,
            "repository": "group/billing",
            "description": "Billing service",
        })

        assert res.status_code == 400
        body = res.get_json()
        assert body["success"] is False
        assert body["code"] == E.VALIDATION_INVALID
        assert body["details"] == {"appName": "invalid"}

    def test_create_app_non_string_repository_is_invalid(self, client, user):
        res = client.post("/app/createApp", json={
            "userId": user.id,
            "appName": "billing",
            "repository": ["group/billing"],
            "description": "Billing service",
        })
        assert res.status_code == 400
        assert res.get_json()["details"] == {"repository": "invalid"}

    def test_app_list_with_publish_type_list_filter(self, client, user, application):
        res = client.post("/app/getAppList", json={
            "page": 1, "pageSize": 10, "userId": user.id, "publishType": [],
        })

        data = res.get_json()["data"]
        assert data["total"] == 1
        assert data["list"][0]["repository"] == "group/web-portal"

    def test_app_list_by_count(self, client, user, application):
        client.post("/app/createApp", json={
            "userId": user.id, "appName": "billing",
            "repository": "group/billing", "description": "B",
        })

        res = client.post("/app/getAppListByCount", json={
            "userId": user.id, "count": 1, "loadedCount": 0, "publishType": [],
        })

        assert res.status_code == 200
        data = res.get_json()["data"]
        assert data["total"] == 2
        assert data["hasMore"] is True
        assert [a["appName"] for a in data["list"]] == ["billing"]

    def test_app_list_by_count_beyond_total(self, client, user, application):
        res = client.post("/app/getAppListByCount", json={
            "userId": user.id, "count": 10, "loadedCount": 5, "publishType": [],
        })
        body = res.get_json()
        assert res.status_code == 200
        assert body["success"] is False
        assert body["code"] == E.OUT_OF_RANGE

    def test_app_list_by_count_missing_publish_type(self, client, user):
        res = client.post("/app/getAppListByCount", json={
            "userId": user.id, "count": 10, "loadedCount": 0,
        })
        assert res.status_code == 400
        assert res.get_json()["code"] == E.VALIDATION_REQUIRED

    def test_my_app_list(self, client, user, application):
        res = client.post("/app/getMyAppList", json={"userId": user.id})
        assert res.get_json()["data"]["list"] == [{"appId": application.id, "appName": "web-portal"}]

    def test_member_flow(self, client, application, other_user):
        res = client.post("/app/addAppMember", json={
            "appId": application.id, "userName": "bob", "role": "5002",
        })
        assert res.get_json()["success"] is True

        res = client.post("/app/getAppMemberRole", json={
            "appId": application.id, "userId": other_user.id,
        })
        assert res.get_json()["data"] == {"memberRole": "5002"}

        res = client.post("/app/getAppBasicInfo", json={
            "appId": application.id, "userId": other_user.id,
        })
        assert res.get_json()["data"]["isJoin"] is True

    def test_basic_info_for_non_member_reports_zero_join_time(self, client, application, other_user):
        res = client.post("/app/getAppBasicInfo", json={
            "appId": application.id, "userId": other_user.id,
        })
        data = res.get_json()["data"]
        assert data["isJoin"] is False
        assert data["joinTime"] == "0"

    def test_edit_basic_info_and_dynamics(self, client, user, application):
        res = client.post("/app/editBasicInfo", json={
            "appId": application.id, "userId": user.id, "description": "Updated", "product": "web",
        })
        assert res.get_json()["data"]["description"] == "Updated"

        res = client.post("/app/getAppDynamicList", json={"appId": application.id})
        contents = [d["content"] for d in res.get_json()["data"]["list"]]
        assert contents == ["Changed the description to Updated", "Changed the product type to web"]

    def test_edit_basic_info_requires_user(self, client, application):
        res = client.post("/app/editBasicInfo", json={
            "appId": application.id, "description": "Updated", "product": "web",
        })
        assert res.status_code == 400
        assert res.get_json()["details"] == {"userId": "required"}

    def test_iteration_flow(self, client, application):
        res = client.post("/app/createIteration", json={
            "appId": application.id, "branch": "daily/3.0.0",
        })
        assert res.get_json()["data"]["version"] == "3.0.0"

        res = client.post("/app/getIterationList", json={"appId": application.id})
        assert [i["branch"] for i in res.get_json()["data"]["list"]] == ["daily/3.0.0"]

    def test_create_iteration_non_string_branch_is_invalid(self, client, application):
        res = client.post("/app/createIteration", json={"appId": application.id, "branch": 42})

        assert res.status_code == 400
        body = res.get_json()
        assert body["code"] == E.VALIDATION_INVALID
        assert body["details"] == {"branch": "invalid"}

    def test_unknown_app(self, client):
        res = client.post("/app/getIterationList", json={"appId": 999})
        assert res.status_code == 200
        assert res.get_json()["code"] == E.NOT_FOUND
