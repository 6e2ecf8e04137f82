"""
Flask front end for the exporter.

Metrics are served on every path except /health, so a scraper pointed at
either / or /metrics gets the same payload.
"""

from flask import Flask, Response, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

SERVICE_NAME = "nvidia-gpu-exporter"


def create_app(registry: CollectorRegistry) -> Flask:
    app = Flask(__name__)

    @app.route('/health')
    def health():
        """Health check endpoint"""
        return jsonify({'status': 'healthy', 'service': SERVICE_NAME})

    @app.route('/', defaults={'path': ''})
    @app.route('/<path:path>')
    def metrics(path):
        """Return Prometheus metrics"""
        return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)

    return app


def run(app: Flask, host: str, port: int) -> None:
    # Threaded so overlapping scrapes don't queue on the socket; the
    # collector's lock serializes the NVML work itself.
    app.run(host=host, port=port, debug=False, threaded=True)
