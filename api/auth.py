"""
Authentication blueprint:
- POST /auth/signup
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout
- GET  /auth/me

Handlers only bind/validate the payload and delegate to AuthenticationFlow,
which owns hashing, token issuance and refresh-token rotation.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from models.schemas.account import AccountCreateSchema, LoginSchema, RefreshSchema, LogoutSchema
from utils.auth_flow import AuthenticationFlow
from utils.decorators import user_required, require_self_or_admin

bp = Blueprint("auth", __name__)

account_create_schema = AccountCreateSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()


def auth_flow() -> AuthenticationFlow:
    return current_app.extensions["auth_flow"]


@bp.post("/signup")
def signup():
    """
    Register a new account.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            email: { type: string }
            password: { type: string }
            firstName: { type: string }
            lastName: { type: string }
    responses:
      201:
        description: Created
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = account_create_schema.load(payload)
    account = auth_flow().signup(
        email=data["email"],
        password=data["password"],
        first_name=data["first_name"],
        last_name=data["last_name"],
    )
    return jsonify({"data": account}), 201


@bp.post("/login")
def login():
    """
    Login: return token and refreshToken
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid credentials
      404:
        description: Unknown email
    """
    payload = request.get_json(silent=True) or {}
    data = login_schema.load(payload)
    pair = auth_flow().login(data["email"], data["password"])
    return jsonify(
        dict(
            pair.to_dict(),
            token_type="bearer",
            expires_in=int(current_app.config["ACCESS_TOKEN_EXPIRES"].total_seconds()),
        )
    ), 200


@bp.post("/refresh")
def refresh():
    """
    Exchange a refresh token for a new token pair (rotation).
    The presented refresh token stops working once this succeeds.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid or expired token
      404:
        description: Token no longer current
    """
    payload = request.get_json(silent=True) or {}
    data = refresh_schema.load(payload)
    pair = auth_flow().refresh(data["refresh_token"])
    return jsonify(
        dict(
            pair.to_dict(),
            token_type="bearer",
            expires_in=int(current_app.config["ACCESS_TOKEN_EXPIRES"].total_seconds()),
        )
    ), 200


@bp.post("/logout")
@user_required
def logout():
    """
    logout: invalidates the stored refresh token
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             accountId: { type: string }
    responses:
      204:
        description: ""
      401:
        description: Unauthorized
      403:
        description: Not your account
    """
    payload = request.get_json(silent=True) or {}
    data = logout_schema.load(payload)
    account_id = data.get("account_id") or g.claims.subject
    require_self_or_admin(account_id)
    auth_flow().logout(account_id)
    return ("", 204)


@bp.get("/me")
@user_required
def me():
    """
    Get current account info.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    account = auth_flow().get_account(g.claims.subject)
    return jsonify({"data": account}), 200
