"""Actor authentication middleware for the application lifecycle API."""

from functools import wraps
from typing import Dict

import jwt
from flask import current_app, g, jsonify, request

from app.models.application_status import ActorRole


# Account roles issued by the identity service, mapped onto lifecycle roles
ROLE_CLAIMS = {
    "jobseeker": ActorRole.APPLICANT,
    "applicant": ActorRole.APPLICANT,
    "employer": ActorRole.EMPLOYER,
}


def error_response(message: str, status: int = 401):
    """Helper to create error responses."""
    return jsonify({
        "error": "Unauthorized" if status == 401 else "Forbidden",
        "message": message,
        "status": status,
    }), status


def decode_actor_token(token: str) -> Dict:
    """
    Decode a bearer token and resolve the actor it identifies.

    Args:
        token: JWT signed with the application's SECRET_KEY (HS256)

    Returns:
        Dictionary with `actor_id` (int) and `actor_role` (ActorRole)

    Raises:
        ValueError: If the token is expired, malformed or carries no user id
        PermissionError: If the role claim is not an applicant or employer role
    """
    try:
        payload = jwt.decode(
            token, current_app.config["SECRET_KEY"], algorithms=["HS256"]
        )
    except jwt.ExpiredSignatureError:
        raise ValueError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise ValueError(f"Invalid token: {str(e)}")

    role = ROLE_CLAIMS.get(str(payload.get("role", "")).lower())
    if role is None:
        raise PermissionError("Token does not carry an applicant or employer role")

    try:
        actor_id = int(payload.get("user_id"))
    except (TypeError, ValueError):
        raise ValueError("Token does not carry a user id")

    return {"actor_id": actor_id, "actor_role": role}


def require_actor(f):
    """
    Decorator to require an authenticated applicant or employer.

    Attaches `g.actor_id` and `g.actor_role` for the route and the services.

    Usage:
        @bp.route("/mine")
        @require_actor
        def my_applications():
            return {"actor": g.actor_id}
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header:
            return error_response("Authorization header is required")

        parts = auth_header.split()

        if len(parts) != 2 or parts[0].lower() != "bearer":
            return error_response("Invalid Authorization header format. Use: Bearer <token>")

        try:
            actor = decode_actor_token(parts[1])
        except ValueError as e:
            return error_response(str(e))
        except PermissionError as e:
            return error_response(str(e), 403)

        g.actor_id = actor["actor_id"]
        g.actor_role = actor["actor_role"]

        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: ActorRole):
    """
    Decorator to restrict a route to specific actor roles.

    Must be applied AFTER require_actor.

    Usage:
        @bp.route("/employer-only")
        @require_actor
        @require_role(ActorRole.EMPLOYER)
        def employer_endpoint():
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            role = getattr(g, "actor_role", None)
            if role not in roles:
                allowed = ", ".join(r.value for r in roles)
                return error_response(f"This action requires one of the roles: {allowed}", 403)
            return f(*args, **kwargs)

        return decorated_function

    return decorator
