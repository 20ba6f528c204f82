"""
Blueprint registry helpers.

Every workflow blueprint shares the same translation of service exceptions
to HTTP responses and the same confirmation body (the JSON string ``"1"``
the workflow editor checks for).
"""

import logging

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from routeflow.core.exceptions import (
    ConflictError,
    NotFoundError,
    ReservedDependencyError,
    ValidationError,
)
from routeflow.models import db
from routeflow.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def confirmed():
    """Standard success body for mutations that return no data."""
    return jsonify("1"), 200


def created_id(new_id):
    """New identifiers are returned as JSON strings."""
    return jsonify(str(new_id)), 200


def register_error_handlers(bp):
    """Attach the service-exception handlers to a blueprint."""

    @bp.errorhandler(ReservedDependencyError)
    def _handle_reserved(error: ReservedDependencyError):
        db.session.rollback()
        return api_error(E.RESERVED, str(error), details=error.details)

    @bp.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        db.session.rollback()
        return api_error(E.VALIDATION_INVALID, str(error), details=error.details)

    @bp.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        db.session.rollback()
        return api_error(E.NOT_FOUND, str(error))

    @bp.errorhandler(ConflictError)
    def _handle_conflict(error: ConflictError):
        db.session.rollback()
        return api_error(E.CONFLICT_DUPLICATE, str(error), details={"field": error.field})

    @bp.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return error
        db.session.rollback()
        logger.exception("Unexpected error in %s endpoint=%s", bp.name, request.endpoint)
        return api_error(E.INTERNAL, "Internal server error")
