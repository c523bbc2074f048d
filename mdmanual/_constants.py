"""Common literal values used across mdmanual.

These constants keep filenames and placeholder values centralized so the
converter, the analyzer, the pipeline, and tests can import the same values
without drifting. Intended for internal use within the mdmanual package.

Examples
--------
>>> from mdmanual import _constants
>>> _constants.SIDEBAR_FILENAME
'_sidebar.md'
>>> _constants.TEMPLATE_FILENAME.format(name="report")
'layout_report.html.jinja'
"""

SIDEBAR_FILENAME = "_sidebar.md"
LANDING_PAGE_FILENAME = "readme.md"
UNTITLED_SECTION = "Untitled"
DEFAULT_TEMPLATE = "report"
DEFAULT_VERSION = "1.0.0"
DEFAULT_TITLE = "Document"
DEFAULT_TEMPLATE_FILENAME = "layout.html.jinja"
TEMPLATE_FILENAME = "layout_{name}.html.jinja"
FAQ_PREFIXES = ("Q.", "Q ")

PASS1_HTML = "pass1.html"
PASS1_PDF = "pass1.pdf"
PASS2_HTML = "pass2.html"
SECTIONS_JSON = "sections.json"
PAGES_JSON = "pages.json"
TEMP_DIR_PREFIX = "mdmanual-"
