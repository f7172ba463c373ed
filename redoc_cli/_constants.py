"""Common literal values used across redoc_cli.

These constants keep asset names, endpoint paths and default timings
centralized so the renderer, server, bundler and tests import the same values
without drifting. Intended for internal use within the redoc_cli package.

Examples
--------
>>> from redoc_cli import _constants
>>> _constants.SPEC_ENDPOINT
'spec.json'
>>> _constants.DEFAULT_ENCODINGS
('deflate', 'gzip')
"""

from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"
BUNDLES_DIR = PACKAGE_DIR / "bundles"

DEFAULT_TEMPLATE_NAME = "page.html.jinja"
STANDALONE_BUNDLE = "redoc.standalone.js"
CDN_BUNDLE_URL = "https://unpkg.com/redoc@next/bundles/redoc.standalone.js"
SPEC_ENDPOINT = "spec.json"

DEFAULT_TITLE = "ReDoc documentation"
DEFAULT_OUTPUT = "redoc-static.html"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_CONFIG_FILE = "redoc.yaml"

DEBOUNCE_SECONDS = 2.2
POLL_INTERVAL_SECONDS = 0.5
DEFAULT_ENCODINGS = ("deflate", "gzip")
