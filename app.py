#!/usr/bin/env python3
#USE VENV: source venv/bin/activate
"""
Run script for GarageGuru
"""

import argparse
import os
import sys
from dotenv import load_dotenv

# Load environment variables from .env file before the app reads its config
load_dotenv()

from garageguru import create_app  # noqa: E402
from garageguru.build import build_database  # noqa: E402
from garageguru.logger import get_logger  # noqa: E402

# Note: secrets and activation codes are configured via environment variables.
# Run 'python generate_env.py' to create a .env file with secure values.

app = create_app()
logger = get_logger("garageguru.run")


def parse_arguments():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description='GarageGuru API server')
    parser.add_argument('--build-only', action='store_true',
                        help='Create database tables only, then exit without starting the server')
    parser.add_argument('--skip-build', action='store_true',
                        help='Start the server without touching the database schema')
    return parser.parse_args()


if __name__ == '__main__':
    args = parse_arguments()

    logger.debug("Starting GarageGuru...")

    if not args.skip_build:
        build_database(app, build_only=args.build_only)

    if args.build_only:
        logger.debug("Build completed. Exiting without starting web server.")
        sys.exit(0)

    # FLASK_DEBUG: Enable/disable debug mode (default: False for security)
    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')

    # USE_RELOADER: Enable/disable auto-reloader (default: False in production)
    use_reloader = os.environ.get('USE_RELOADER', 'False').lower() in ('true', '1', 'yes', 'on')

    # FLASK_HOST: Server host (default: 127.0.0.1 for security)
    host = os.environ.get('FLASK_HOST', '127.0.0.1')

    # FLASK_PORT: Server port (default: 5000)
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode}, reloader={use_reloader})")
    app.run(debug=debug_mode, host=host, port=port, use_reloader=use_reloader)
