"""HTTP routes for the Flask API."""

from http import HTTPStatus
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from sipswp.core.breakdown import sip_breakdown, swp_breakdown
from sipswp.core.history import HistoryStorageError, HistoryStore
from sipswp.core.projection import project_sip, project_swp
from sipswp.core.summary import summarize_sip, summarize_swp
from sipswp.schemas.history import history_adapter
from sipswp.schemas.ping import PingResponse
from sipswp.schemas.sip import SIPRequest, SIPResponse
from sipswp.schemas.swp import SWPRequest, SWPResponse

api_bp = Blueprint("api", __name__)

SAVE_FAILED_NOTICE = "Failed to save calculation"


def _history() -> HistoryStore:
    return current_app.extensions["history_store"]


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    return (
        jsonify({"detail": exc.errors(include_url=False, include_context=False)}),
        HTTPStatus.UNPROCESSABLE_ENTITY,
    )


@api_bp.get("/ping")
def ping() -> Any:
    """Health-check endpoint."""
    response = PingResponse(service=current_app.config["PROJECT_NAME"])
    return jsonify(response.model_dump())


@api_bp.post("/calc/sip")
def calc_sip() -> Any:
    """Project a monthly SIP and optionally record it in the history."""
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = SIPRequest.model_validate(raw_payload)
    params = payload.to_input()

    projection = project_sip(params)
    response = SIPResponse(
        years=projection.years,
        yearlyBalances=projection.yearlyBalances,
        nominalYearlyBalances=projection.nominalYearlyBalances,
        breakdown=sip_breakdown(params, projection),
        summary=summarize_sip(params, projection),
    )

    if payload.save:
        try:
            response.record = _history().append("SIP", payload.to_params(), response.to_results())
        except HistoryStorageError:
            response.notice = SAVE_FAILED_NOTICE

    return jsonify(response.model_dump(mode="json"))


@api_bp.post("/calc/swp")
def calc_swp() -> Any:
    """Project a monthly SWP and optionally record it in the history."""
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = SWPRequest.model_validate(raw_payload)
    params = payload.to_input()

    projection = project_swp(params)
    response = SWPResponse(
        years=projection.years,
        yearlyBalances=projection.yearlyBalances,
        breakdown=swp_breakdown(projection),
        summary=summarize_swp(params, projection),
    )

    if payload.save:
        try:
            response.record = _history().append("SWP", payload.to_params(), response.to_results())
        except HistoryStorageError:
            response.notice = SAVE_FAILED_NOTICE

    return jsonify(response.model_dump(mode="json"))


@api_bp.get("/history")
def list_history() -> Any:
    """Past calculations, newest first."""
    try:
        records = _history().read_all()
    except HistoryStorageError:
        return jsonify({"detail": "Failed to load calculation history"}), HTTPStatus.SERVICE_UNAVAILABLE
    return jsonify(history_adapter.dump_python(records, mode="json"))


@api_bp.delete("/history")
def clear_history() -> Any:
    try:
        _history().clear()
    except HistoryStorageError:
        return jsonify({"detail": "Failed to clear history"}), HTTPStatus.SERVICE_UNAVAILABLE
    return "", HTTPStatus.NO_CONTENT
