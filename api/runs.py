from __future__ import annotations

import logging
from typing import Tuple

from flask import Blueprint, request, jsonify, abort, g
from marshmallow import ValidationError

from models import storage
from models.account import Account, ADMIN
from models.run import Run
from models.schemas.run import RunCreateSchema, RunUpdateSchema, RunOutSchema
from models.schemas.common import day_window
from utils.decorators import user_required, require_self_or_admin

logger = logging.getLogger(__name__)

bp = Blueprint("runs", __name__)

run_create_schema = RunCreateSchema()
run_update_schema = RunUpdateSchema()
run_out_schema = RunOutSchema()
runs_out_schema = RunOutSchema(many=True)

MAX_LIMIT = 100


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def get_owned_run(run_id: str) -> Run:
    run = storage.get(Run, run_id)
    if not run:
        abort(404, description="Run not found")
    require_self_or_admin(run.account_id)
    return run


@bp.post("/runs")
@user_required
def create_run():
    """
    Record a running session
    ---
    tags:
      - Runs
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            accountId: { type: string, description: "admin only; defaults to the caller" }
            pace: { type: number, minimum: 0 }
            time: { type: string, example: "00:31:12" }
            distance: { type: number, minimum: 0 }
            lap: { type: integer, minimum: 0 }
            incline: { type: number }
    responses:
      201:
        description: Created
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = run_create_schema.load(payload)

    account_id = data.pop("account_id", None) or g.claims.subject
    if account_id != g.claims.subject and g.claims.role != ADMIN:
        abort(403, description="Not allowed to record runs for another account")
    if not storage.get(Account, account_id):
        abort(404, description="Account not found")

    run = Run(account_id=account_id, **data)
    storage.new(run)
    storage.save()
    logger.info("Run %s recorded for account %s", run.id, account_id)
    return jsonify({"data": run_out_schema.dump(run)}), 201


@bp.get("/runs")
@user_required
def list_runs():
    """
    List runs of an account, newest first
    ---
    tags:
      - Runs
    security:
      - Bearer: []
    parameters:
      - in: query
        name: accountId
        type: string
        description: defaults to the caller
      - in: query
        name: date
        type: string
        description: epoch milliseconds; only runs in the 24h starting there
      - in: query
        name: page
        type: integer
      - in: query
        name: limit
        type: integer
    responses:
      200: { description: OK }
    """
    account_id = request.args.get("accountId") or g.claims.subject
    require_self_or_admin(account_id)
    page, limit = parse_pagination()

    session = storage.get_session()
    query = session.query(Run).filter(Run.account_id == account_id)

    raw_date = request.args.get("date")
    if raw_date:
        try:
            start, end = day_window(raw_date)
        except ValidationError as err:
            abort(400, description=err.messages[0])
        query = query.filter(Run.created_at >= start, Run.created_at < end)

    total = query.count()
    rows = (
        query.order_by(Run.created_at.desc())
             .offset((page - 1) * limit)
             .limit(limit)
             .all()
    )
    return jsonify(
        {
            "data": runs_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total}
        }
    )


@bp.get("/runs/<run_id>")
@user_required
def get_run(run_id: str):
    """
    Get a run
    ---
    tags:
      - Runs
    security:
      - Bearer: []
    parameters:
      - in: path
        name: run_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    run = get_owned_run(run_id)
    return jsonify({"data": run_out_schema.dump(run)})


@bp.patch("/runs/<run_id>")
@user_required
def update_run(run_id: str):
    """
    Partially update a run
    ---
    tags:
      - Runs
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: run_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
    responses:
      200: { description: OK }
      422: { description: Validation error }
    """
    run = get_owned_run(run_id)
    payload = request.get_json(silent=True) or {}
    data = run_update_schema.load(payload, partial=True)
    for key, value in data.items():
        setattr(run, key, value)
    storage.new(run)
    storage.save()
    return jsonify({"data": run_out_schema.dump(run)})


@bp.delete("/runs/<run_id>")
@user_required
def delete_run(run_id: str):
    """
    Delete a run
    ---
    tags:
      - Runs
    security:
      - Bearer: []
    parameters:
      - in: path
        name: run_id
        type: string
        required: true
    responses:
      204: { description: Deleted }
      404: { description: Not found }
    """
    run = get_owned_run(run_id)
    storage.delete(run)
    storage.save()
    return ("", 204)
