"""
ASGI entry point for Uvicorn and Gunicorn.
This module provides the application factory for production deployment.
"""

import sys
from fastapi import FastAPI
from dotenv import load_dotenv
from calproxy.config import Settings
from calproxy.domain.exceptions import ConfigurationError
from calproxy.interfaces.http.app import create_app

# Load environment variables
load_dotenv()


def create_application() -> FastAPI:
    """Application factory for Uvicorn."""
    try:
        settings = Settings()
    except ConfigurationError as e:
        print(f"\nConfiguration Error:\n{e}", file=sys.stderr)
        raise SystemExit(1)
    except Exception as e:
        print(f"\nUnexpected error during configuration: {e}", file=sys.stderr)
        raise SystemExit(1)
    return create_app(settings)


# Create the app instance for Uvicorn
app = create_application()
