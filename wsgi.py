"""WSGI entry point for production server."""

import os
import sys

# Make the project root importable when gunicorn starts from elsewhere
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app import create_app

# Capture the full traceback in the logs if app init fails, so
# 'Worker failed to boot' errors are debuggable
try:
    app = create_app()
except Exception:
    import traceback

    print("\nFATAL: Failed to create Flask application during startup:\n", file=sys.stderr)
    traceback.print_exc()
    # Re-raise so gunicorn reports the boot failure
    raise

if __name__ == "__main__":
    app.run()
