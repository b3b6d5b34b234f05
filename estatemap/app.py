"""Estate Map Flask Application"""

import logging
import os
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify
from flask_restx import Api
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_caching import Cache
from flask_compress import Compress
import structlog

from estatemap.config.settings import settings
from estatemap.api.routes import register_routes
from estatemap.services.directions_client import DirectionsClient
from estatemap.services.geo_query_engine import GeoQueryEngine
from estatemap.services.property_repository import PropertyRepository
from estatemap.utils.exceptions import EstateMapException
from estatemap.utils.monitoring import add_performance_monitoring

# Configure structured logging
logging.basicConfig(format="%(message)s", level=settings.LOG_LEVEL.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if settings.LOG_FORMAT == "json" else structlog.dev.ConsoleRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

def create_app(config_name: str = "development",
               repository: Optional[PropertyRepository] = None,
               directions_client: Optional[DirectionsClient] = None) -> Flask:
    """Create and configure Flask application"""

    testing = config_name == "testing"

    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.SECRET_KEY
    app.config["DEBUG"] = settings.DEBUG and not testing
    app.config["TESTING"] = testing
    app.config["RESTX_ERROR_404_HELP"] = False

    CORS(app,
         origins=settings.ALLOWED_ORIGINS,
         allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
         methods=["GET", "OPTIONS"]
    )

    Compress(app)
    app.config['COMPRESS_ALGORITHM'] = 'gzip'
    app.config['COMPRESS_LEVEL'] = 6
    app.config['COMPRESS_MIN_SIZE'] = 500

    # Rate limiting
    app.config["RATELIMIT_ENABLED"] = not testing
    limiter = Limiter(
        app=app,
        key_func=get_remote_address,
        default_limits=[
            f"{settings.RATE_LIMIT_PER_MINUTE} per minute",
            f"{settings.RATE_LIMIT_PER_HOUR} per hour"
        ],
        storage_uri=settings.REDIS_URL if settings.USE_CACHE and not testing else "memory://"
    )

    # Response caching; map data changes whenever listings are approved,
    # so caching is opt-in
    use_cache = settings.USE_CACHE and not testing
    cache_config = {
        "CACHE_TYPE": "RedisCache" if use_cache else "NullCache",
        "CACHE_DEFAULT_TIMEOUT": settings.CACHE_TTL
    }

    if use_cache:
        cache_config["CACHE_REDIS_URL"] = settings.REDIS_URL

    cache = Cache(app, config=cache_config)

    api = Api(
        app,
        version="1.0",
        title="Estate Map API",
        description="Geo queries over approved real-estate listings",
        doc="/docs" if settings.DEBUG else False,
        prefix=f"/api/{settings.API_VERSION}"
    )

    # Store extensions and services on app
    repository = repository or PropertyRepository()
    app.limiter = limiter
    app.cache = cache
    app.api = api
    app.repository = repository
    app.geo_engine = GeoQueryEngine(repository)
    app.directions_client = directions_client or DirectionsClient()

    register_routes(api)

    add_performance_monitoring(app, settings.SLOW_REQUEST_SECONDS)

    @app.route("/metrics/performance")
    def performance_metrics():
        """Request timings and failures by error kind"""
        return jsonify(app.monitor.report())

    # Health check endpoint (outside API prefix)
    @app.route("/health", methods=["GET"])
    def health_check():
        """Health check including property store reachability"""
        health_status = {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.API_VERSION,
            "services": {}
        }

        if app.repository.ping():
            health_status["services"]["database"] = {"status": "healthy"}
        else:
            health_status["services"]["database"] = {"status": "unhealthy"}
            health_status["status"] = "degraded"

        health_status["services"]["directions"] = {
            "status": "configured" if app.directions_client.api_key else "not configured"
        }

        status_code = 200 if health_status["status"] == "healthy" else 503
        return jsonify(health_status), status_code

    # Error handlers
    @api.errorhandler(EstateMapException)
    def handle_estate_map_exception(error):
        """Render custom exceptions as {error, message}"""
        log = logger.warning if error.status_code < 500 else logger.error
        log("Request failed", error=str(error), type=error.kind)
        app.monitor.record_error(error.kind)
        return {
            "error": error.kind,
            "message": str(error)
        }, error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        """Handle 404 errors"""
        return jsonify({
            "error": "NotFound",
            "message": "The requested resource was not found"
        }), 404

    @app.errorhandler(500)
    def handle_internal_error(error):
        """Handle 500 errors"""
        logger.error("Internal server error", error=str(error))
        return jsonify({
            "error": "InternalServerError",
            "message": "An internal server error occurred"
        }), 500

    @app.route('/')
    def welcome():
        """Welcome page with endpoint index"""
        prefix = f"/api/{settings.API_VERSION}/map"
        return jsonify({
            "message": "Welcome to the Estate Map API",
            "version": "1.0",
            "status": "operational",
            "documentation": "/docs" if settings.DEBUG else "Contact admin for API docs",
            "health_check": "/health",
            "endpoints": {
                "markers": {"method": "GET", "url": f"{prefix}/properties"},
                "nearby": {
                    "method": "GET",
                    "url": f"{prefix}/nearby?latitude=40.0&longitude=-73.0&radius=2000",
                    "description": "Properties within radius meters, nearest first"
                },
                "clusters": {"method": "GET", "url": f"{prefix}/clusters"},
                "heatmap": {"method": "GET", "url": f"{prefix}/heatmap"},
                "bounds": {"method": "GET", "url": f"{prefix}/bounds"},
                "route": {
                    "method": "GET",
                    "url": f"{prefix}/route?origin=...&destination=...&mode=driving"
                }
            }
        })

    logger.info(
        "Estate map app created",
        config=config_name,
        debug=app.config["DEBUG"],
        cache_enabled=use_cache,
        rate_limiting_enabled=not testing
    )

    return app

# Shared app instance for run.py and wsgi.py
app = create_app(os.environ.get("APP_CONFIG", "development"))

if __name__ == "__main__":
    settings.validate()

    app.run(
        host=settings.API_HOST,
        port=settings.API_PORT,
        debug=settings.DEBUG
    )
