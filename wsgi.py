"""
WSGI Entry Point

Point the server (gunicorn, PythonAnywhere, ...) at `wsgi:application`.
SECRET_KEY and DATABASE_URL must be set in the environment or in .env.
"""

import sys
import os

# Project path
project_home = os.path.dirname(os.path.abspath(__file__))

# Add to path
if project_home not in sys.path:
    sys.path.insert(0, project_home)

os.environ.setdefault('FLASK_ENV', 'production')

# Import and create Flask app
from shopdesk import create_app

application = create_app(os.environ['FLASK_ENV'])
