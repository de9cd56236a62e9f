"""
IdeaVault - Web Application

A Flask app for journaling ideas: sign in, jot down ideas with a mood, tags
and an optional image, then browse them as a list, a calendar or a dashboard.

Every mutation redirects back to a page that reloads the full idea list.

Run with: python -m web.app
Or: python main.py
"""

import logging
from datetime import date
from functools import wraps
from typing import Any, Dict, Optional

from flask import (
    Flask,
    Response,
    abort,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from ideavault.analytics import (
    PERIODS,
    STATUS_FILTERS,
    build_dashboard,
    build_month_view,
    count_by_status,
    filter_by_status_and_favorite,
)
from ideavault.auth import AuthSession, MockAuth, SupabaseAuth
from ideavault.config import (
    SECRET_KEY,
    WEEK_NUMBERING,
    is_backend_configured,
    is_development,
    setup_logging,
)
from ideavault.errors import (
    AuthError,
    IdeaVaultError,
    NotFound,
    StorageError,
    StoreUnavailable,
    Unauthenticated,
    ValidationError,
)
from ideavault.models import KNOWN_MOODS, KNOWN_STATUSES, Mood, Status, normalize_tags
from ideavault.services import IdeaService, ImageUpload
from ideavault.state import AppState, Section
from ideavault.storage import (
    IdeaQuery,
    InMemoryIdeaStore,
    InMemoryImageStore,
    SupabaseIdeaStore,
    SupabaseImageStore,
)

setup_logging()
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = SECRET_KEY or "ideavault-dev-secret"


# =============================================================================
# Backends
# =============================================================================

# Shared in-memory backends used in development without Supabase
_dev_ideas = InMemoryIdeaStore()
_dev_images = InMemoryImageStore(base_url="/dev-images")


def get_auth():
    """Get the configured auth provider (None if unavailable)."""
    if is_backend_configured():
        return SupabaseAuth()
    if is_development():
        return MockAuth()
    return None


def get_idea_service(auth_session: Optional[AuthSession]) -> Optional[IdeaService]:
    """Get an IdeaService scoped to the signed-in user (None if unavailable)."""
    owner_id = auth_session.user_id if auth_session else None

    if is_backend_configured():
        token = auth_session.access_token if auth_session else None
        return IdeaService(
            SupabaseIdeaStore(access_token=token),
            SupabaseImageStore(access_token=token),
            owner_id,
        )
    if is_development():
        return IdeaService(_dev_ideas, _dev_images, owner_id)
    return None


def current_session() -> Optional[AuthSession]:
    """The signed-in user's session from the cookie, if any."""
    return AuthSession.from_dict(session.get("auth"))


def app_state(section: Section) -> AppState:
    """Build the state passed to every template."""
    auth_session = current_session()
    if auth_session is None:
        return AppState(section=section)
    return AppState(section=section, user_id=auth_session.user_id, email=auth_session.email)


# =============================================================================
# Request Helpers
# =============================================================================

def login_required(view):
    """Redirect pages to sign-in when nobody is signed in."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_session() is None:
            return redirect(url_for("signin"))
        return view(*args, **kwargs)
    return wrapper


def api_login_required(view):
    """Answer API calls with 401 when nobody is signed in."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_session() is None:
            return jsonify({"error": "Not signed in"}), 401
        return view(*args, **kwargs)
    return wrapper


def _service_or_error():
    """Return (service, None) or (None, error response)."""
    service = get_idea_service(current_session())
    if service is None:
        return None, render_template("error.html", message="Supabase not configured")
    return service, None


def _back(default_endpoint: str = "index") -> Response:
    """Redirect to the form's 'next' path, or to a default page."""
    target = request.form.get("next", "")
    if target.startswith("/") and not target.startswith("//"):
        return redirect(target)
    return redirect(url_for(default_endpoint))


def _form_flag(name: str) -> bool:
    return request.form.get(name, "").lower() in ("on", "true", "1", "yes")


def _image_from_request() -> Optional[ImageUpload]:
    """Read the optional 'image' file field."""
    upload = request.files.get("image")
    if upload is None or not upload.filename:
        return None
    return ImageUpload(
        data=upload.read(),
        filename=upload.filename,
        content_type=upload.mimetype or "application/octet-stream",
    )


def _int_arg(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


def _flash_failure(action: str, error: IdeaVaultError) -> None:
    """Show a retryable failure notice."""
    logger.warning("%s failed: %s", action, error)
    flash(f"Failed to {action}. Please try again. ({error})", "error")


# =============================================================================
# Auth Routes
# =============================================================================

@app.route("/signin", methods=["GET", "POST"])
def signin():
    """Sign-in page; POST signs in with email and password."""
    if request.method == "GET":
        if current_session() is not None:
            return redirect(url_for("index"))
        return render_template("signin.html", state=app_state(Section.IDEAS), error=None)

    auth = get_auth()
    if auth is None:
        return render_template("error.html", message="Supabase not configured")

    email = request.form.get("email", "")
    try:
        auth_session = auth.sign_in(email, request.form.get("password", ""))
    except (AuthError, StoreUnavailable) as e:
        return render_template(
            "signin.html", state=app_state(Section.IDEAS), error=str(e), email=email
        )

    session.clear()
    session["auth"] = auth_session.to_dict()
    return redirect(url_for("index"))


@app.route("/signup", methods=["POST"])
def signup():
    """Register a new account."""
    auth = get_auth()
    if auth is None:
        return render_template("error.html", message="Supabase not configured")

    email = request.form.get("email", "")
    try:
        needs_confirmation = auth.sign_up(
            email,
            request.form.get("password", ""),
            redirect_to=url_for("signin", _external=True),
        )
    except (AuthError, StoreUnavailable) as e:
        return render_template(
            "signin.html", state=app_state(Section.IDEAS), error=str(e), email=email
        )

    if needs_confirmation:
        flash("Check your email for the confirmation link!", "info")
    else:
        flash("Account created. You can sign in now.", "info")
    return redirect(url_for("signin"))


@app.route("/signout", methods=["POST"])
def signout():
    """Sign out and drop the session cookie."""
    auth_session = current_session()
    auth = get_auth()
    if auth is not None and auth_session is not None:
        auth.sign_out(auth_session.access_token)
    session.clear()
    return redirect(url_for("signin"))


# =============================================================================
# Page Routes
# =============================================================================

@app.route("/")
@login_required
def index():
    """Ideas list with status and favorite filters."""
    service, error_page = _service_or_error()
    if error_page:
        return error_page

    status_filter = request.args.get("status", "all")
    if status_filter not in STATUS_FILTERS:
        status_filter = "all"
    favorite_only = request.args.get("favorite", "").lower() in ("1", "true", "on")

    result = service.load()
    ideas = filter_by_status_and_favorite(result.ideas, status_filter, favorite_only)

    return render_template(
        "index.html",
        state=app_state(Section.IDEAS),
        ideas=ideas,
        total=len(result.ideas),
        status_counts=count_by_status(result.ideas),
        load_error=result.error,
        current_status=status_filter,
        favorite_only=favorite_only,
        status_filters=STATUS_FILTERS,
        moods=KNOWN_MOODS,
        statuses=KNOWN_STATUSES,
    )


@app.route("/calendar")
@login_required
def calendar_view():
    """Month calendar of ideas by creation day."""
    service, error_page = _service_or_error()
    if error_page:
        return error_page

    today = date.today()
    year = _int_arg("year", today.year)
    month = _int_arg("month", today.month - 1)
    if not (1 <= year <= 9999 and 0 <= month <= 11):
        year, month = today.year, today.month - 1

    result = service.load()
    month_view = build_month_view(result.ideas, year, month, today=today)

    return render_template(
        "calendar.html",
        state=app_state(Section.CALENDAR),
        month=month_view,
        load_error=result.error,
        weekdays=["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"],
    )


@app.route("/dashboard")
@login_required
def dashboard():
    """Charts: ideas per mood, over time, per tag, per status."""
    service, error_page = _service_or_error()
    if error_page:
        return error_page

    period = request.args.get("period", "day")
    if period not in PERIODS:
        period = "day"

    result = service.load()
    summary = build_dashboard(result.ideas, period, WEEK_NUMBERING)

    return render_template(
        "dashboard.html",
        state=app_state(Section.DASHBOARD),
        summary=summary,
        percentages=summary.status.percentages(),
        load_error=result.error,
        periods=PERIODS,
    )


@app.route("/dev-images/<path:key>")
def dev_image(key):
    """Serve images uploaded to the in-memory store (development only)."""
    if is_backend_configured():
        abort(404)
    stored = _dev_images.get(key)
    if stored is None:
        abort(404)
    data, content_type = stored
    return Response(data, mimetype=content_type)


# =============================================================================
# Mutation Routes (form posts)
# =============================================================================

@app.route("/ideas", methods=["POST"])
@login_required
def create_idea():
    """Create an idea from the add form."""
    service, error_page = _service_or_error()
    if error_page:
        return error_page

    try:
        service.create(
            text=request.form.get("text", ""),
            tags=request.form.get("tags", ""),
            mood=request.form.get("mood", Mood.HAPPY.value),
            favorite=_form_flag("favorite"),
            status=request.form.get("status") or Status.OPEN.value,
            image=_image_from_request(),
        )
        flash("Idea added.", "success")
    except Unauthenticated:
        return redirect(url_for("signin"))
    except IdeaVaultError as e:
        _flash_failure("add idea", e)

    return _back()


@app.route("/ideas/<idea_id>", methods=["POST"])
@login_required
def edit_idea(idea_id):
    """Full edit: text, tags, mood, favorite, status and image."""
    service, error_page = _service_or_error()
    if error_page:
        return error_page

    changes: Dict[str, Any] = {
        "text": request.form.get("text", ""),
        "tags": normalize_tags(request.form.get("tags", "")),
        "mood": request.form.get("mood", ""),
        "favorite": _form_flag("favorite"),
    }
    if request.form.get("status"):
        changes["status"] = request.form["status"]
    if _form_flag("remove_image"):
        changes["image_url"] = None

    try:
        service.update(idea_id, changes, image=_image_from_request())
        flash("Idea updated.", "success")
    except Unauthenticated:
        return redirect(url_for("signin"))
    except IdeaVaultError as e:
        _flash_failure("update idea", e)

    return _back()


@app.route("/ideas/<idea_id>/favorite", methods=["POST"])
@login_required
def favorite_idea(idea_id):
    """Set favorite from a toggle or swipe ('direction' right/left)."""
    service, error_page = _service_or_error()
    if error_page:
        return error_page

    direction = request.form.get("direction")
    favorite = direction == "right" if direction else _form_flag("favorite")

    try:
        service.toggle_favorite(idea_id, favorite)
    except Unauthenticated:
        return redirect(url_for("signin"))
    except IdeaVaultError as e:
        _flash_failure("update idea", e)

    return _back()


@app.route("/ideas/<idea_id>/status", methods=["POST"])
@login_required
def status_idea(idea_id):
    """Move an idea to another status."""
    service, error_page = _service_or_error()
    if error_page:
        return error_page

    try:
        service.set_status(idea_id, request.form.get("status", ""))
    except Unauthenticated:
        return redirect(url_for("signin"))
    except IdeaVaultError as e:
        _flash_failure("change status", e)

    return _back()


@app.route("/ideas/<idea_id>/delete", methods=["POST"])
@login_required
def delete_idea(idea_id):
    """Delete an idea."""
    service, error_page = _service_or_error()
    if error_page:
        return error_page

    try:
        service.delete(idea_id)
        flash("Idea deleted.", "success")
    except Unauthenticated:
        return redirect(url_for("signin"))
    except IdeaVaultError as e:
        _flash_failure("delete idea", e)

    return _back()


# =============================================================================
# JSON API
# =============================================================================

def _api_error(error: IdeaVaultError):
    """Map an IdeaVault error to a JSON response."""
    if isinstance(error, ValidationError):
        status = 400
    elif isinstance(error, Unauthenticated):
        status = 401
    elif isinstance(error, NotFound):
        status = 404
    elif isinstance(error, StorageError):
        status = 502
    else:
        status = 503
    return jsonify({"error": str(error)}), status


def _api_service():
    service = get_idea_service(current_session())
    if service is None:
        return None, (jsonify({"error": "Supabase not configured"}), 500)
    return service, None


def _query_from_args() -> IdeaQuery:
    """Build store filters from ?tags=a,b&mood=&favorite=true&status=."""
    mood = request.args.get("mood")
    status = request.args.get("status")
    return IdeaQuery(
        mood=Mood.parse(mood) if mood else None,
        favorite_only=request.args.get("favorite", "").lower() == "true",
        status=Status.parse(status) if status and status != "all" else None,
        tags=normalize_tags(request.args.get("tags", "")),
    )


@app.route("/api/ideas", methods=["GET"])
@api_login_required
def api_list_ideas():
    """List the user's ideas, newest first."""
    service, error = _api_service()
    if error:
        return error

    try:
        ideas = service.list_ideas(_query_from_args())
    except IdeaVaultError as e:
        return _api_error(e)

    return jsonify([idea.to_dict() for idea in ideas])


@app.route("/api/ideas", methods=["POST"])
@api_login_required
def api_create_idea():
    """Create an idea from a JSON body."""
    service, error = _api_service()
    if error:
        return error

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "JSON object required"}), 400

    try:
        idea = service.create(
            text=data.get("text", ""),
            tags=data.get("tags"),
            mood=data.get("mood", Mood.HAPPY.value),
            favorite=data.get("favorite", False),
            status=data.get("status") or Status.OPEN.value,
        )
    except IdeaVaultError as e:
        return _api_error(e)

    return jsonify({"message": "Idea created successfully", "idea": idea.to_dict()}), 201


@app.route("/api/ideas/<idea_id>", methods=["PUT"])
@api_login_required
def api_update_idea(idea_id):
    """Merge fields of a JSON body into an idea."""
    service, error = _api_service()
    if error:
        return error

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "JSON object required"}), 400

    try:
        idea = service.update(idea_id, data)
    except IdeaVaultError as e:
        return _api_error(e)

    return jsonify({"message": "Idea updated successfully", "idea": idea.to_dict()})


@app.route("/api/ideas/<idea_id>", methods=["DELETE"])
@api_login_required
def api_delete_idea(idea_id):
    """Delete an idea (idempotent)."""
    service, error = _api_service()
    if error:
        return error

    try:
        service.delete(idea_id)
    except IdeaVaultError as e:
        return _api_error(e)

    return jsonify({"message": "Idea deleted successfully"})


@app.route("/api/stats")
@api_login_required
def api_stats():
    """Dashboard aggregates as JSON."""
    service, error = _api_service()
    if error:
        return error

    period = request.args.get("period", "day")
    if period not in PERIODS:
        return jsonify({"error": f"period must be one of {list(PERIODS)}"}), 400

    try:
        ideas = service.list_ideas()
    except IdeaVaultError as e:
        return _api_error(e)

    return jsonify(build_dashboard(ideas, period, WEEK_NUMBERING).to_dict())


# =============================================================================
# Error Handlers
# =============================================================================

@app.errorhandler(Unauthenticated)
def handle_unauthenticated(error):
    """An expired or rejected session: back to sign-in (401 for the API)."""
    logger.info("Session rejected: %s", error)
    session.pop("auth", None)
    if request.path.startswith("/api/"):
        return jsonify({"error": str(error)}), 401
    return redirect(url_for("signin"))


# =============================================================================
# Template Filters
# =============================================================================

@app.template_filter("mood_icon")
def mood_icon(mood):
    """Return the emoji for a mood (or its raw value)."""
    return Mood.parse(mood).icon


@app.template_filter("format_date")
def format_date(dt):
    """Format datetime for display."""
    if not dt:
        return "Unknown"
    if isinstance(dt, str):
        return dt
    return dt.strftime("%b %d, %Y")


@app.template_filter("format_percent")
def format_percent(value):
    """Format a percentage with no decimals."""
    try:
        return f"{float(value):.0f}%"
    except (TypeError, ValueError):
        return "0%"


if __name__ == "__main__":
    print("=" * 50)
    print("💡 IdeaVault")
    print("=" * 50)
    print("Open http://localhost:5001 in your browser")
    print("Press Ctrl+C to stop")
    print("=" * 50)
    app.run(debug=True, port=5001)
