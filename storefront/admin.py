"""Flask admin pages for creating categories and subcategories.

The pages are plain server-rendered forms. Repeatable rows are added and
removed with submit buttons (``action=add:<group>`` / ``remove:<group>:<i>``)
that re-render the form without posting to the backend.
"""

import base64
import os
from typing import Any, Dict, List, Optional, Tuple

from flask import Blueprint, Flask, Response, current_app, render_template, request

from storefront.api_client import ApiClient, FetchFailure
from storefront.config import CATEGORY_PLACEHOLDER_THUMB, detect_api_base_url
from storefront.forms import (
    AdminFormController,
    CategoryFormController,
    FormMessage,
    SubcategoryFormController,
    UploadedFile,
)
from storefront.logging_config import get_logger

__all__ = ["admin", "create_app", "load_sidebar_categories", "load_category_options"]

logger = get_logger("admin")

admin = Blueprint("admin", __name__, url_prefix="/admin", template_folder="templates")


# ---------- BASIC AUTH ----------


def _basic_auth_creds() -> Tuple[Optional[str], Optional[str]]:
    """Get admin credentials from environment."""
    return os.getenv("ADMIN_USER"), os.getenv("ADMIN_PASS")


def _unauthorized() -> Response:
    return Response(
        "Authentication required",
        401,
        {"WWW-Authenticate": 'Basic realm="Login Required"'},
    )


@admin.before_request
def require_basic_auth() -> Optional[Response]:
    """Enforce HTTP Basic Auth when ADMIN_USER/ADMIN_PASS are set."""
    user, password = _basic_auth_creds()
    if not user or not password:
        return None  # auth disabled

    header = request.headers.get("Authorization", "")
    if not header.startswith("Basic "):
        return _unauthorized()

    try:
        decoded = base64.b64decode(header.split(" ", 1)[1]).decode("utf-8")
        username, passwd = decoded.split(":", 1)
    except Exception:
        return _unauthorized()

    if username == user and passwd == password:
        return None
    return _unauthorized()


# ---------- LOOKUPS ----------


def _client() -> ApiClient:
    return current_app.config["STOREFRONT_CLIENT"]


def load_sidebar_categories(client: ApiClient) -> Tuple[List[Dict[str, str]], Optional[str]]:
    """Sidebar entries plus a status line shown instead of (or with) them."""
    try:
        categories = client.fetch_categories(is_active=None)
    except FetchFailure as e:
        logger.error(f"Sidebar categories failed: {e}")
        if e.status is not None:
            return [], "Failed to load categories"
        return [], "Error loading categories"

    if not categories:
        return [], "No categories yet"

    entries = []
    for cat in categories:
        images = cat.get("images") or []
        first = images[0] if images and isinstance(images[0], dict) else {}
        entries.append({
            "href": f"/index_decor/category/{cat.get('slug', '')}",
            "thumb": first.get("thumb") or first.get("src") or CATEGORY_PLACEHOLDER_THUMB,
            "name": cat.get("name") or "category",
        })
    return entries, None


def load_category_options(client: ApiClient) -> List[Tuple[str, str]]:
    """(id, name) pairs for the parent category select."""
    try:
        categories = client.fetch_categories(is_active=None)
    except FetchFailure as e:
        logger.error(f"Error loading categories: {e}")
        return []
    return [(str(c.get("_id", "")), c.get("name", "")) for c in categories if c.get("_id")]


# ---------- FORM HANDLING ----------


def _uploaded_files() -> List[UploadedFile]:
    files = []
    for storage in request.files.getlist("images"):
        if not storage or not storage.filename:
            continue
        files.append(UploadedFile(
            filename=storage.filename,
            content=storage.read(),
            content_type=storage.mimetype,
        ))
    return files


def _load_form(controller: AdminFormController) -> None:
    controller.set_values(request.form)
    for name, group in controller.groups.items():
        group.load_columns({f: request.form.getlist(f"{name}-{f}") for f in group.fields})


def _apply_row_action(controller: AdminFormController, action: str) -> bool:
    """Handle add/remove row buttons. Returns True if the action was one."""
    parts = action.split(":")
    if len(parts) < 2 or parts[1] not in controller.groups:
        return False
    group = controller.groups[parts[1]]
    if parts[0] == "add":
        group.add_row()
        return True
    if parts[0] == "remove" and len(parts) == 3 and parts[2].isdigit():
        group.remove_row(int(parts[2]))
        return True
    return False


def _handle_form(controller: AdminFormController) -> Tuple[Optional[FormMessage], int]:
    if request.method != "POST":
        return None, 200

    _load_form(controller)
    if _apply_row_action(controller, request.form.get("action", "submit")):
        return None, 200

    rejected = controller.select_images(_uploaded_files())
    if rejected is not None:
        return rejected, 400

    message = controller.submit()
    return message, 200 if message.ok else 502


def _render(template: str, controller: AdminFormController, message: Optional[FormMessage],
            status: int, **extra: Any) -> Tuple[str, int]:
    sidebar, sidebar_status = load_sidebar_categories(_client())
    return render_template(
        template,
        form=controller,
        message=message,
        sidebar=sidebar,
        sidebar_status=sidebar_status,
        **extra,
    ), status


@admin.route("/categories/new", methods=["GET", "POST"])
def new_category() -> Tuple[str, int]:
    controller = CategoryFormController(_client())
    message, status = _handle_form(controller)
    return _render("admin/category_form.html", controller, message, status)


@admin.route("/subcategories/new", methods=["GET", "POST"])
def new_subcategory() -> Tuple[str, int]:
    controller = SubcategoryFormController(_client())
    message, status = _handle_form(controller)
    return _render(
        "admin/subcategory_form.html",
        controller,
        message,
        status,
        category_options=load_category_options(_client()),
    )


def create_app(client: Optional[ApiClient] = None) -> Flask:
    """Build the admin Flask app around one backend client."""
    app = Flask(__name__)
    app.config["STOREFRONT_CLIENT"] = client or ApiClient(detect_api_base_url("localhost"))
    app.register_blueprint(admin)
    return app
