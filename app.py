import argparse
import logging
import os
from uuid import UUID, uuid4

from flask import Blueprint, Flask, current_app, jsonify, request

from receipt import InvalidReceiptError, MalformedReceiptError, check_receipt, parse_receipt
from scoring import calculate_points
from store import PointsStore

HOST = "0.0.0.0"
PORT = int(os.environ.get("RECEIPT_SERVICE_PORT", 3005))
STORE_EXTENSION = "points_store"

logger = logging.getLogger(__name__)
receipts_blueprint = Blueprint("receipts", __name__)


def points_store() -> PointsStore:
    return current_app.extensions[STORE_EXTENSION]


@receipts_blueprint.route('/receipts/process', methods=['POST'])
def process_receipt():
    """
    Router for receipt processing requests. The input JSON is checked for the
    receipt structure, then every field rule is applied and all violations are
    reported together. A valid receipt is scored, the points are stored under a
    freshly generated id and the id is returned to the user.

    Returns:
        400 Error if the body is not a receipt or any field is invalid
        200 OK and generated receipt id if the receipt is valid
    """
    body = request.get_json(silent=True)
    try:
        receipt = parse_receipt(body)
        check_receipt(receipt)
    except MalformedReceiptError as e:
        logger.warning("Rejected malformed receipt: %s", e)
        return jsonify({"error": str(e)}), 400
    except InvalidReceiptError as e:
        logger.warning("Rejected invalid receipt: %s", e)
        return jsonify({"error": "Error: the receipt is invalid", "violations": e.errors}), 400

    receipt_id = uuid4()
    points = calculate_points(receipt)
    points_store().put(receipt_id, points)
    logger.info("Processed receipt %s from %s for %d points", receipt_id, receipt.retailer, points)
    return jsonify({"id": str(receipt_id)})


@receipts_blueprint.route('/receipts/<receipt_id>/points', methods=['GET'])
def get_points(receipt_id):
    """
    Router for point lookups. Ids that are not UUIDs are treated the same as
    ids that were never issued.

    Returns:
        404 Error if the receipt id is malformed or not found
        200 OK and the calculated points for the receipt if receipt id is present in memory
    """
    not_found = jsonify({"error": f"ERROR: receipt id not found ({receipt_id})"}), 404
    try:
        parsed_id = UUID(receipt_id)
    except ValueError:
        logger.debug("Lookup with malformed receipt id %r", receipt_id)
        return not_found

    points = points_store().get(parsed_id)
    if points is None:
        logger.debug("Lookup for unknown receipt id %s", parsed_id)
        return not_found
    return jsonify({"points": points})


def create_app(store: PointsStore = None) -> Flask:
    """ Builds the receipt service with its own points store unless one is given """
    app = Flask(__name__)
    app.extensions[STORE_EXTENSION] = store if store is not None else PointsStore()
    app.register_blueprint(receipts_blueprint)
    return app


flask_app = create_app()


def port_number(value: str) -> int:
    port = int(value)
    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError("Port must be between 1 and 65535")
    return port


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Receipt points service")
    parser.add_argument("--host", default=HOST, help="Interface to listen on")
    parser.add_argument("--port", type=port_number, default=PORT, help="Port used by Receipt Service")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.info("Starting Receipt Service on port %d", args.port)
    # threaded=True lets Flask handle requests concurrently; the store lock covers shared state
    flask_app.run(host=args.host, port=args.port, threaded=True)


if __name__ == '__main__':
    main()
