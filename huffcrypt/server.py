"""
server.py

HTTP front end for the huffcrypt pipeline. The request body is the raw input,
the password travels in the X-Password header, and the response body is the
raw output.
"""

from datetime import datetime, timezone

from flask import Flask, Response, jsonify, request
from loguru import logger

from .compression import compress_bytes, decompress_bytes
from .config_loader import configure_logging, load_config
from .exceptions import HuffcryptError

PASSWORD_HEADER = "X-Password"

config = load_config()
configure_logging(config["logging"]["level"])

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = config["server"]["max_content_length"]
CHUNK_SIZE = config["io"]["chunk_size"]


def _run(operation, name):
    password = request.headers.get(PASSWORD_HEADER)
    if password is None:
        return jsonify({"error": f"Missing {PASSWORD_HEADER} header"}), 400

    data = request.get_data()
    try:
        result = operation(data, password, CHUNK_SIZE)
    except HuffcryptError as e:
        logger.warning("{} failed: {}", name, e)
        return jsonify({"error": str(e)}), 422

    logger.info("{}: {} bytes in, {} bytes out", name, len(data), len(result))
    return Response(result, mimetype="application/octet-stream")


@app.route("/compress", methods=["POST"])
def compress():
    """Compresses the request body with the password from the X-Password header"""
    return _run(compress_bytes, "compress")


@app.route("/decompress", methods=["POST"])
def decompress():
    """Decompresses the request body with the password from the X-Password header"""
    return _run(decompress_bytes, "decompress")


@app.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint"""
    return jsonify({
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "endpoints": [
            "/compress",
            "/decompress",
            "/health"
        ]
    })


@app.after_request
def after_request(response):
    response.headers.add('Access-Control-Allow-Origin', '*')
    response.headers.add('Access-Control-Allow-Headers', f'Content-Type,{PASSWORD_HEADER}')
    response.headers.add('Access-Control-Allow-Methods', 'GET,POST,OPTIONS')
    return response


if __name__ == '__main__':
    logger.info("Starting huffcrypt server on {}:{}", config["server"]["host"], config["server"]["port"])
    app.run(host=config["server"]["host"], port=config["server"]["port"])
