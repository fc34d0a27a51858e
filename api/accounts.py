from __future__ import annotations

import logging
from typing import Tuple

from flask import Blueprint, request, jsonify, abort, current_app

from models.account import Account
from models.schemas.account import AccountUpdateSchema, AccountOutSchema, RoleSchema
from utils.auth_flow import AuthenticationFlow
from utils.decorators import admin_required, user_required, require_self_or_admin

MAX_LIMIT = 100

logger = logging.getLogger(__name__)

bp = Blueprint("accounts", __name__)

account_update_schema = AccountUpdateSchema()
role_schema = RoleSchema()
account_out_schema = AccountOutSchema()
account_list_out_schema = AccountOutSchema(many=True)


def auth_flow() -> AuthenticationFlow:
    return current_app.extensions["auth_flow"]


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


@bp.get("/accounts")
@admin_required
def list_accounts():
    """
    List all accounts - admin
    ---
    tags:
      - Accounts
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    page, limit = parse_pagination()
    store = auth_flow().store
    total = store.count()
    rows = store.list_all(offset=(page - 1) * limit, limit=limit)
    return jsonify(
        {
            "data": account_list_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total}
        }
    )


@bp.get("/accounts/<account_id>")
@user_required
def get_account(account_id: str):
    """
    Get one account - owner or admin
    ---
    tags:
      - Accounts
    security:
      - Bearer: []
    parameters:
      - in: path
        name: account_id
        type: string
        required: true
    responses:
      200: { description: OK }
      403: { description: Forbidden }
      404: { description: Not found }
    """
    require_self_or_admin(account_id)
    return jsonify({"data": auth_flow().get_account(account_id)}), 200


@bp.patch("/accounts/<account_id>")
@user_required
def update_account(account_id: str):
    """
    Update first/last name or password. Email is immutable.
    ---
    tags:
      - Accounts
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: account_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            firstName: { type: string }
            lastName: { type: string }
            password: { type: string }
    responses:
      200: { description: OK }
      422: { description: Validation error }
    """
    require_self_or_admin(account_id)
    payload = request.get_json(silent=True) or {}
    data = account_update_schema.load(payload)
    account = auth_flow().update_profile(
        account_id,
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        password=data.get("password"),
    )
    return jsonify({"data": account}), 200


@bp.delete("/accounts/<account_id>")
@user_required
def delete_account(account_id: str):
    """
    Delete an account and its runs - owner or admin
    ---
    tags:
      - Accounts
    security:
      - Bearer: []
    parameters:
      - in: path
        name: account_id
        type: string
        required: true
    responses:
      204: { description: Deleted }
      404: { description: Not found }
    """
    require_self_or_admin(account_id)
    if not auth_flow().store.delete(account_id):
        abort(404, description="Account not found")
    logger.info("Account %s deleted", account_id)
    return ("", 204)


@bp.put("/accounts/<account_id>/role")
@admin_required
def set_role(account_id: str):
    """
    Admin-only: set the role of an account.
    Body: { "role": "USER" | "ADMIN" }
    ---
    tags:
      - Accounts
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: path
         name: account_id
         type: string
         required: true
      -  in: body
         name: body
         schema:
           type: object
           properties:
             role: { type: string }
    responses:
      200: { description: OK }
    """
    payload = request.get_json(silent=True) or {}
    data = role_schema.load(payload)
    account: Account | None = auth_flow().store.update_fields(account_id, role=data["role"])
    if account is None:
        abort(404, description="Account not found")
    logger.info("Account %s role set to %s", account_id, data["role"])
    return jsonify({"data": account_out_schema.dump(account)}), 200
