"""
Server-wide constants.
"""

from pathlib import Path

PROJECT_NAME = "BestRegi"
VERSION = "0.1.0"

# Name of the required connection string in the ConnectionStrings section
CONNECTION_STRING_NAME = "BestRegiContextConnection"

DEVELOPMENT_ENVIRONMENT = "Development"

SERVER_ROOT = Path(__file__).resolve().parent.parent
WEB_ROOT = SERVER_ROOT / "wwwroot"
TEMPLATES_DIR = SERVER_ROOT / "templates"

# Conventional route registered by the bootstrapper
DEFAULT_ROUTE_NAME = "default"
DEFAULT_ROUTE_PATTERN = "{controller=Home}/{action=Index}/{id?}"

# Path re-executed by the exception handler outside Development
ERROR_HANDLER_PATH = "/Home/Error"
