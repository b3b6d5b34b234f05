#!/usr/bin/env python3
"""WSGI entry point; APP_CONFIG selects the configuration"""

import os

from estatemap.app import app

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    app.run(host="0.0.0.0", port=port)
