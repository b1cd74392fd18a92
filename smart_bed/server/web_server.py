#!/usr/bin/env python3
"""
Smart Bed Web Server
====================
Flask host for the bed presence API and the bundled single-page UI.
"""

import logging
import os
import traceback

from flask import Blueprint, Flask, jsonify, request, send_from_directory
from werkzeug.exceptions import HTTPException

from . import server_config as config
from .logging_setup import setup_logging
from .services.presence import UNSET, PresenceStore, ValidationError

logger = logging.getLogger("WebServer")


class InvalidJSON(Exception):
    pass


def read_json_body():
    """Parsed request body, {} when empty. Anything but an object counts as {}."""
    if not request.get_data(cache=True):
        return {}
    data = request.get_json(force=True, silent=True)
    if data is None:
        raise InvalidJSON()
    return data if isinstance(data, dict) else {}


def presence_blueprint(store):
    bp = Blueprint("presence", __name__)

    # --- API: Presence ---
    @bp.route('/presence', methods=['POST'])
    def update_presence():
        data = read_json_body()
        try:
            result = store.update_presence(
                left=data.get('left', UNSET),
                right=data.get('right', UNSET),
            )
        except ValidationError as e:
            logger.info(f"Rejected presence update: {e}")
            return jsonify(e.to_dict()), 400
        except Exception as e:
            logger.exception("Error updating presence")
            return jsonify({"error": "Internal server error", "message": str(e)}), 500

        return jsonify({
            "success": True,
            "message": "Presence data updated",
            "data": result,
        })

    @bp.route('/presence', methods=['GET'])
    def get_presence():
        try:
            return jsonify(store.get_presence(request.args.get('side')))
        except Exception as e:
            logger.exception("Error retrieving presence")
            return jsonify({"error": "Internal server error", "message": str(e)}), 500

    return bp


def register_error_handlers(app, production):
    @app.errorhandler(InvalidJSON)
    def invalid_json(_e):
        return jsonify({"error": {"message": "Invalid JSON"}}), 400

    @app.errorhandler(Exception)
    def central_error(e):
        status = e.code if isinstance(e, HTTPException) else 500
        message = (e.description if isinstance(e, HTTPException) else str(e)) or "Internal Server Error"
        body = {"error": {"message": message}}
        if not production:
            body["error"]["stack"] = "".join(traceback.format_exception(type(e), e, e.__traceback__))
        if status >= 500:
            logger.error(f"Unhandled error: {message}", exc_info=e)
        else:
            logger.warning(f"{request.method} {request.path} -> {status}: {message}")
        return jsonify(body), status


def register_spa(app, public_dir):
    api_methods = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE']

    @app.route('/api', defaults={'path': ''}, methods=api_methods)
    @app.route('/api/<path:path>', methods=api_methods)
    def api_not_found(path):
        return jsonify({"error": {"message": "Not Found"}}), 404

    @app.route('/', defaults={'path': ''})
    @app.route('/<path:path>')
    def spa(path):
        if path and os.path.isfile(os.path.join(public_dir, path)):
            return send_from_directory(public_dir, path)
        if not os.path.isfile(os.path.join(public_dir, 'index.html')):
            return jsonify({"error": {"message": "Not Found"}}), 404
        return send_from_directory(public_dir, 'index.html')


def create_app(store=None, public_dir=None, production=None):
    """Build the Flask app around an explicitly owned PresenceStore."""
    store = store if store is not None else PresenceStore()
    public_dir = os.path.abspath(public_dir or config.PUBLIC_DIR)
    production = config.PRODUCTION if production is None else production

    # Static files are served by the SPA route, not Flask's static view
    app = Flask(__name__, static_folder=None)
    app.extensions['presence_store'] = store

    app.register_blueprint(presence_blueprint(store), url_prefix='/api/metrics')
    register_spa(app, public_dir)
    register_error_handlers(app, production)

    logger.debug("Registered routes")
    return app


def main():
    setup_logging()
    store = PresenceStore()
    logger.info(
        f"Presence stale timeout {store.stale_timeout_ms} ms, timezone {config.TIMEZONE}"
    )
    app = create_app(store)
    # Host 0.0.0.0 to be accessible from LAN
    app.run(host=config.HOST, port=config.PORT, debug=False, use_reloader=False)


if __name__ == '__main__':
    main()
