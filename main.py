import sys
from fastapi import FastAPI
import uvicorn
from dotenv import load_dotenv
from calproxy.config import Settings
from calproxy.domain.exceptions import ConfigurationError
from calproxy.interfaces.http.app import create_app

load_dotenv()

try:
    settings = Settings()
except ConfigurationError as e:
    print(f"\nConfiguration Error:\n{e}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"\nUnexpected error during configuration: {e}", file=sys.stderr)
    sys.exit(1)

app: FastAPI = create_app(settings)

if __name__ == "__main__":
    uvicorn.run(
        "main:app" if settings.reload else app,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        timeout_keep_alive=settings.timeout_keep_alive,
        log_config=None,
        access_log=False,
    )
