#!/usr/bin/env python3
"""Run Estate Map Flask application"""

from estatemap.app import app
from estatemap.config.settings import settings

if __name__ == "__main__":
    # Validate settings
    try:
        settings.validate()
        print("✓ Settings validated")
        print(f"  - Database pool: {settings.DB_MIN_CONNECTIONS}-{settings.DB_MAX_CONNECTIONS} connections")
        print(f"  - Cache: {'Enabled' if settings.USE_CACHE else 'Disabled'}")
        print(f"  - Directions: {'Configured' if settings.GOOGLE_MAPS_API_KEY else 'Not configured'}")
    except Exception as e:
        print(f"✗ Settings validation failed: {e}")
        exit(1)

    # Run app
    print(f"\n🚀 Starting Estate Map API on http://{settings.API_HOST}:{settings.API_PORT}")
    print(f"📚 API Docs: http://{settings.API_HOST}:{settings.API_PORT}/docs\n")

    app.run(
        host=settings.API_HOST,
        port=settings.API_PORT,
        debug=settings.DEBUG
    )
