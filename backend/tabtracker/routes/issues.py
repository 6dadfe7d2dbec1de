# Overview: Game issue log routes.

from flask import Blueprint, current_app, request

from ..decorators import api_route, json_body, ok
from ..services import issue_service, tracker


issues_bp = Blueprint("issues", __name__, url_prefix="/api/issues")


@issues_bp.post("/add")
@api_route("Failed to add issue")
def add_issue_route():
    data = json_body()
    issue = issue_service.add_issue(
        data.get("key"),
        data.get("issue"),
        max_length=tracker().settings.issue_max_length,
    )
    current_app.logger.info("Issue %s logged against %s", issue.id, issue.game_key)
    return ok(id=issue.id)


@issues_bp.get("/list")
@api_route("Failed to list issues")
def list_issues_route():
    page_size = current_app.config["ISSUES_PAGE_SIZE"]
    limit = request.args.get("limit", page_size, type=int)
    limit = max(1, min(limit, page_size))
    return ok(results=[issue.to_dict() for issue in issue_service.list_issues(limit=limit)])


@issues_bp.post("/fix")
@api_route("Failed to fix issue")
def fix_issue_route():
    deleted = issue_service.fix_issue(json_body().get("id"))
    return ok(deleted=deleted)
