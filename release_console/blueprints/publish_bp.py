"""
Publish Blueprint.

Routes for publish admission and publish history. All business logic is
delegated to publish_service; this module validates required fields and
shapes the response envelope.

Endpoints:
  Admission:        POST /publish/createPublish
  Listing:          POST /publish/getAppPublishList
  Detail:           POST /publish/getAppPublishDetail
  Log:              POST /publish/getAppPublishLog
  Executor hooks:   POST /publish/appendPublishLog
                    POST /publish/updatePublishStatus

Business rejections (duplicate commit, review pending/failed, online publish
without review) answer HTTP 200 with success=false.
"""

import logging

from flask import Blueprint

from release_console.blueprints import json_body, register_envelope_handlers
from release_console.services import publish_service
from release_console.utils.errors import api_fail, api_ok
from release_console.utils.helpers import require_fields, to_positive_int

logger = logging.getLogger(__name__)

publish_bp = Blueprint("publish", __name__, url_prefix="/publish")
register_envelope_handlers(publish_bp)


@publish_bp.route("/createPublish", methods=["POST"])
def create_publish():
    """Admit a publish request.

    Body: { "branch": str, "userId": int, "repository": str,
            "commit": str, "publishEnv": "daily"|"online" }
    Returns: {success: true, data: {publishId}}
             {success: false, message}            — rejected
             {success: false, data: {text}}       — online publish needs review
    """
    data = json_body()
    require_fields(data, "branch", "userId", "repository", "commit", "publishEnv")
    decision = publish_service.admit_publish(
        branch=data["branch"],
        user_id=data["userId"],
        repository=data["repository"],
        commit=data["commit"],
        publish_env=data["publishEnv"],
    )
    if decision.accepted:
        return api_ok({"publishId": decision.publish_id})
    if decision.text is not None:
        return api_fail(decision.code, data={"text": decision.text})
    return api_fail(decision.code, decision.message)


@publish_bp.route("/getAppPublishList", methods=["POST"])
def get_app_publish_list():
    """Paginated publish list of one application.

    Body: { "appId": int, "iterationId"?: int, "publishEnv": [str] | str,
            "publishStatus": [str] | str, "publisherId"?: [int] | int,
            "page": int, "pageSize": int }
    Empty filter lists mean "no constraint".
    Returns: {success, data: {page, pageSize, hasMore, total, list}}
    """
    data = json_body()
    require_fields(data, "appId", "publishEnv", "publishStatus", "page", "pageSize")
    result = publish_service.list_publishes(
        app_id=data["appId"],
        page=data["page"],
        page_size=data["pageSize"],
        iteration_id=data.get("iterationId"),
        publish_env=data["publishEnv"],
        publish_status=data["publishStatus"],
        publisher_id=data.get("publisherId"),
    )
    return api_ok(result)


@publish_bp.route("/getAppPublishDetail", methods=["POST"])
def get_app_publish_detail():
    """Body: { "publishId": int } → publish detail, review fields when reviewed."""
    data = json_body()
    require_fields(data, "publishId")
    publish_id = to_positive_int(data["publishId"], "publishId")
    return api_ok(publish_service.get_publish_detail(publish_id))


@publish_bp.route("/getAppPublishLog", methods=["POST"])
def get_app_publish_log():
    """Body: { "publishId": int } → {log: str}"""
    data = json_body()
    require_fields(data, "publishId")
    publish_id = to_positive_int(data["publishId"], "publishId")
    return api_ok(publish_service.get_publish_log(publish_id))


@publish_bp.route("/appendPublishLog", methods=["POST"])
def append_publish_log():
    """Executor callback: append output to a publish log.

    Body: { "publishId": int, "content": str }
    """
    data = json_body()
    require_fields(data, "publishId", "content")
    publish_id = to_positive_int(data["publishId"], "publishId")
    return api_ok(publish_service.append_publish_log(publish_id, data["content"]))


@publish_bp.route("/updatePublishStatus", methods=["POST"])
def update_publish_status():
    """Executor callback: record a new publish status.

    Body: { "publishId": int, "publishStatus": str }
    """
    data = json_body()
    require_fields(data, "publishId", "publishStatus")
    publish_id = to_positive_int(data["publishId"], "publishId")
    return api_ok(
        publish_service.advance_publish_status(publish_id, data["publishStatus"])
    )
