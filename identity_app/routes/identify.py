# identity_app/routes/identify.py

"""
Identity reconciliation JSON endpoint
"""

import time

from flask import current_app, jsonify, request

from config.monitoring import IdentifyMonitoring
from identity_app.services import IdentityResolver, StorageError, ValidationError

INTERNAL_ERROR_MESSAGE = "Internal server error"


def _coerce_identity_field(data, key):
    """
    Read an optional identity field from the request body.

    Blank strings count as absent. Phone numbers are frequently sent as JSON
    numbers, so integers are accepted and converted to their decimal string.
    """
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a string")
    if isinstance(value, int):
        return str(value)
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value.strip() or None


def parse_identify_payload(data):
    """Return ``(email, phone_number)`` from a decoded request body."""
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON data")
    return _coerce_identity_field(data, "email"), _coerce_identity_field(data, "phoneNumber")


def register_identify_routes(app):
    """Register identity routes"""

    @app.route("/", methods=["GET"])
    def index():
        return current_app.config.get("SERVER_BANNER", "Identity reconciliation server is running")

    @app.route("/identify", methods=["POST"])
    def identify():
        """
        Resolve an email and/or phone number to its consolidated contact.

        Body: {"email": str?, "phoneNumber": str | int?}
        """
        started = time.perf_counter()
        outcome = "error"
        try:
            email, phone_number = parse_identify_payload(request.get_json(silent=True))
            current_app.logger.debug(f"Identify request email={email!r} phoneNumber={phone_number!r}")

            resolution = IdentityResolver().reconcile(email, phone_number)
            outcome = resolution.outcome
            IdentifyMonitoring.record_merge(demoted_count=len(resolution.demoted_contact_ids))
            return jsonify({"contact": resolution.view.to_dict()})

        except ValidationError as e:
            outcome = "invalid"
            current_app.logger.info(f"Rejected identify request: {str(e)}")
            return jsonify({"error": str(e)}), 400

        except StorageError as e:
            current_app.logger.error(f"Storage failure in identify API: {str(e)}", exc_info=True)
            return jsonify({"error": INTERNAL_ERROR_MESSAGE}), 500

        finally:
            IdentifyMonitoring.record_identify(
                duration_seconds=time.perf_counter() - started,
                outcome=outcome,
            )
