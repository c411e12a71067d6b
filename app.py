# app.py
from flask import Flask, jsonify, request, g
from flask_cors import CORS
from routes.scripture import scripture_bp
from database import ScriptureStore
from utils.scripture_service import ScriptureService
from config import Config
import os
import logging
import time
import sys
from werkzeug.middleware.proxy_fix import ProxyFix

# Configure logging to output to stdout
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


def create_app(store=None, notifier=None):
    app = Flask(__name__)

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    app.json.sort_keys = False  # Preserve order of keys in JSON responses
    app.config['MAX_CONTENT_LENGTH'] = Config.MAX_CONTENT_LENGTH
    app.config['CORS_HEADERS'] = 'Content-Type'

    CORS(app, resources={
        r"/api/*": {
            "origins": "*",
            "methods": ["GET", "POST", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type"],
        }
    })

    app.url_map.strict_slashes = False

    if store is None:
        logger.info("Initializing scripture store...")
        store = ScriptureStore()
        store.init_db()
    app.extensions['scripture_store'] = store
    app.extensions['scripture_service'] = ScriptureService(store, notifier)

    app.register_blueprint(scripture_bp, url_prefix='/api/scripture')

    @app.before_request
    def before_request():
        g.start_time = time.time()

    @app.after_request
    def after_request(response):
        duration = time.time() - g.get('start_time', time.time())
        logger.info(f"Request to {request.path} took {duration:.2f} seconds")
        return response

    @app.route('/health', methods=['GET'])
    def health():
        """Health check endpoint that also verifies the store is readable"""
        try:
            versions = app.extensions['scripture_store'].list_versions()
            return jsonify({
                'status': 'healthy',
                'versions': len(versions),
                'timestamp': time.time()
            })
        except Exception as e:
            logger.error(f"Health check failed: {str(e)}")
            return jsonify({
                'status': 'unhealthy',
                'error': str(e),
                'timestamp': time.time()
            }), 500

    return app


if __name__ == '__main__':
    print("Starting Flask server...")
    port = int(os.getenv('PORT', 5001))
    create_app().run(debug=True, port=port)
