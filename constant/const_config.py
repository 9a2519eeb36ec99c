"""
constant default paths and values for the application
"""
import os
from pathlib import Path

# other constants can be added here as needed
# get the parent folder of the project

file_sep_char = os.sep

PARENT_DIR = Path(__file__).parents[1]
LOG_FOLDER = os.path.join(PARENT_DIR, 'Logs')
LOG_FILE = os.path.join(LOG_FOLDER, 'app.log')
ENV_FILE = os.path.join(PARENT_DIR, '.env')

# output roots, relative to the project the artifacts are generated into
SPEC_ROOT = os.path.join('test', 'specs')
PAGE_ROOT = os.path.join('src', 'pages')
LOCATOR_ROOT = os.path.join('src', 'object-repository')

SUPPORTED_PLATFORMS = ("android", "ios")
DEFAULT_PLATFORM = "android"

DEFAULT_APPIUM_URL = "http://127.0.0.1:4723"
DEFAULT_MODEL = "gpt-4o"
DEFAULT_WAIT_TIMEOUT_MS = 20000
DEFAULT_REQUEST_TIMEOUT_S = 30
DEFAULT_ACTION_PAUSE_MS = 500

METADATA_SCAN_LINES = 40
RAW_RESPONSE_EXCERPT_CHARS = 500
