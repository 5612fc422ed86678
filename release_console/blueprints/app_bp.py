"""
Application Blueprint.

Routes for applications, their members and iterations. Business logic lives
in app_service.

Endpoints:
  POST /app/createApp          POST /app/getAppList
  POST /app/getAppListByCount  POST /app/getMyAppList
  POST /app/getAppBasicInfo    POST /app/addAppMember
  POST /app/getAppMemberRole   POST /app/editBasicInfo
  POST /app/getAppDynamicList  POST /app/createIteration
  POST /app/getIterationList
"""

import logging

from flask import Blueprint

from release_console.blueprints import json_body, register_envelope_handlers
from release_console.services import app_service
from release_console.utils.errors import api_ok
from release_console.utils.helpers import first_value, require_fields, to_positive_int

logger = logging.getLogger(__name__)

app_bp = Blueprint("app", __name__, url_prefix="/app")
register_envelope_handlers(app_bp)


@app_bp.route("/createApp", methods=["POST"])
def create_app_route():
    """Body: { userId, appName, repository, description, productType?, publishType? }"""
    data = json_body()
    require_fields(data, "userId", "appName", "repository", "description")
    result = app_service.create_application(
        user_id=to_positive_int(data["userId"], "userId"),
        app_name=data["appName"],
        repository=data["repository"],
        description=data["description"],
        product_type=data.get("productType"),
        publish_type=data.get("publishType"),
    )
    return api_ok(result)


@app_bp.route("/getAppList", methods=["POST"])
def get_app_list():
    """Body: { page, pageSize, userId?, appName?, publishType?: [str] | str }"""
    data = json_body()
    require_fields(data, "page", "pageSize")
    result = app_service.list_applications(
        page=data["page"],
        page_size=data["pageSize"],
        user_id=data.get("userId"),
        app_name=data.get("appName"),
        publish_type=first_value(data.get("publishType")),
    )
    return api_ok(result)


@app_bp.route("/getAppListByCount", methods=["POST"])
def get_app_list_by_count():
    """Body: { userId, count, loadedCount, publishType: [str] | str }

    Returns: {success, data: {hasMore, total, list}}
    """
    data = json_body()
    require_fields(data, "userId", "count", "loadedCount", "publishType")
    result = app_service.list_applications_by_count(
        user_id=to_positive_int(data["userId"], "userId"),
        count=data["count"],
        loaded_count=data["loadedCount"],
        publish_type=data["publishType"],
    )
    return api_ok(result)


@app_bp.route("/getMyAppList", methods=["POST"])
def get_my_app_list():
    data = json_body()
    require_fields(data, "userId")
    apps = app_service.list_my_applications(to_positive_int(data["userId"], "userId"))
    return api_ok({"list": apps})


@app_bp.route("/getAppBasicInfo", methods=["POST"])
def get_app_basic_info():
    data = json_body()
    require_fields(data, "userId", "appId")
    info = app_service.get_app_basic_info(
        app_id=to_positive_int(data["appId"], "appId"),
        user_id=to_positive_int(data["userId"], "userId"),
    )
    return api_ok(info)


@app_bp.route("/addAppMember", methods=["POST"])
def add_app_member():
    """Body: { appId, userName, role, useTime? (ms) }"""
    data = json_body()
    require_fields(data, "appId", "userName", "role")
    member = app_service.add_app_member(
        app_id=to_positive_int(data["appId"], "appId"),
        user_name=data["userName"],
        role_code=data["role"],
        use_time=data.get("useTime"),
    )
    return api_ok(member)


@app_bp.route("/getAppMemberRole", methods=["POST"])
def get_app_member_role():
    data = json_body()
    require_fields(data, "userId", "appId")
    role = app_service.get_app_member_role(
        app_id=to_positive_int(data["appId"], "appId"),
        user_id=to_positive_int(data["userId"], "userId"),
    )
    return api_ok({"memberRole": role})


@app_bp.route("/editBasicInfo", methods=["POST"])
def edit_basic_info():
    """Body: { appId, userId, description, product }"""
    data = json_body()
    require_fields(data, "appId", "userId", "description", "product")
    app = app_service.edit_basic_info(
        app_id=to_positive_int(data["appId"], "appId"),
        user_id=to_positive_int(data["userId"], "userId"),
        description=data["description"],
        product_type=data["product"],
    )
    return api_ok(app)


@app_bp.route("/getAppDynamicList", methods=["POST"])
def get_app_dynamic_list():
    data = json_body()
    require_fields(data, "appId")
    dynamics = app_service.list_app_dynamics(to_positive_int(data["appId"], "appId"))
    return api_ok({"list": dynamics})


@app_bp.route("/createIteration", methods=["POST"])
def create_iteration():
    """Bind a branch to a new iteration.

    Body: { appId, branch, iterationName?, version? }
    """
    data = json_body()
    require_fields(data, "appId", "branch")
    iteration = app_service.create_iteration(
        app_id=to_positive_int(data["appId"], "appId"),
        branch=data["branch"],
        iteration_name=data.get("iterationName"),
        version=data.get("version"),
    )
    return api_ok(iteration)


@app_bp.route("/getIterationList", methods=["POST"])
def get_iteration_list():
    data = json_body()
    require_fields(data, "appId")
    iterations = app_service.list_iterations(to_positive_int(data["appId"], "appId"))
    return api_ok({"list": iterations})
