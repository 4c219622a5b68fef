"""
Flask application exposing the auto-grader over HTTP.

Run with: python main.py serve
"""

import logging

from flask import Flask, jsonify, request
from flask_cors import CORS
from pydantic import ValidationError

from .config import CORS_ALLOW_HEADERS, STUDENT_AUDIENCE, TEACHER_AUDIENCE
from .errors import AutoGradeError, LookupFailure, TestConfigError
from .models import TestCase
from .service import grade_submission
from .store import GradingStore

LOG = logging.getLogger(__name__)


def _error(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def create_app(store: GradingStore, cors_origins: str | list[str] = "*") -> Flask:
    """
    Create the grading API.

    Args:
        store: Store used to load and persist grading data.
        cors_origins: Origins allowed to call the API.

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__)
    app.config["STORE"] = store
    CORS(
        app,
        origins=cors_origins,
        allow_headers=CORS_ALLOW_HEADERS,
        send_wildcard=cors_origins == "*",
    )

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/auto-grade", methods=["POST"])
    def auto_grade():
        """Grade a submission and return the feedback the caller may see."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _error("Expected a JSON object", 500)

        submission_id = data.get("submission_id")
        audience = data.get("audience", STUDENT_AUDIENCE)

        if not submission_id or not isinstance(submission_id, str):
            return _error("submission_id is required", 500)
        if audience not in (STUDENT_AUDIENCE, TEACHER_AUDIENCE):
            return _error(f"Unknown audience: {audience}", 500)

        try:
            result = grade_submission(store, submission_id)
        except AutoGradeError as e:
            LOG.error("Error in auto-grade for submission %s: %s", submission_id, e)
            return _error(str(e), 500)
        except Exception as e:
            LOG.exception("Unexpected error in auto-grade for submission %s", submission_id)
            return _error(str(e), 500)

        view = result if audience == TEACHER_AUDIENCE else result.student_view()
        return jsonify({"success": True, **view.model_dump(mode="json")})

    @app.route("/submissions/<submission_id>/manual-grade", methods=["POST"])
    def manual_grade(submission_id: str):
        """Record the teacher's score and feedback for a submission."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _error("Expected a JSON object", 400)

        score = data.get("score")
        feedback = data.get("feedback", "")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            return _error("score must be a number", 400)
        if not isinstance(feedback, str):
            return _error("feedback must be a string", 400)

        try:
            submission = store.save_manual_grade(submission_id, float(score), feedback)
        except LookupFailure as e:
            return _error(str(e), 404)
        except ValueError as e:
            return _error(str(e), 400)

        return jsonify({"success": True, "submission": submission.model_dump(mode="json")})

    @app.route("/notebooks/<notebook_id>/test-cases", methods=["GET"])
    def list_test_cases(notebook_id: str):
        try:
            test_cases = store.list_test_cases(notebook_id)
        except AutoGradeError as e:
            return _error(str(e), 500)
        return jsonify({"success": True, "test_cases": [tc.model_dump(mode="json") for tc in test_cases]})

    @app.route("/notebooks/<notebook_id>/test-cases", methods=["POST"])
    def add_test_case(notebook_id: str):
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _error("Expected a JSON object", 400)

        try:
            test_case = TestCase.model_validate(data)
            stored = store.add_test_case(notebook_id, test_case)
        except ValidationError as e:
            return _error(f"Invalid test case: {e.error_count()} validation error(s)", 400)
        except TestConfigError as e:
            return _error(str(e), 400)
        except AutoGradeError as e:
            return _error(str(e), 500)

        return jsonify({"success": True, "test_case": stored.model_dump(mode="json")}), 201

    @app.route("/notebooks/<notebook_id>/test-cases/<test_case_id>", methods=["DELETE"])
    def delete_test_case(notebook_id: str, test_case_id: str):
        try:
            removed = store.delete_test_case(notebook_id, test_case_id)
        except AutoGradeError as e:
            return _error(str(e), 500)
        if not removed:
            return _error("Test case not found", 404)
        return "", 204

    return app
