"""Worker script format detection and Service Worker to ES module conversion.

Service Worker scripts (``addEventListener('fetch', ...)``) cannot receive
bindings, so a script that has bindings must be published as an ES module.
"""

from __future__ import annotations

import re

CONVERSION_HEADER = "// Automatically converted from Service Worker to ES Module format\n\n"
DEFAULT_HANDLER = "handleRequest"

_FETCH_LISTENER = re.compile(
    r"""addEventListener\s*\(\s*['"]fetch['"]\s*,\s*(?:event|e)\s*=>\s*\{[^}]*"""
    r"""\.respondWith\s*\(\s*(\w+)\s*\([^)]*\)\s*\)\s*;?\s*\}\s*\)\s*;?""",
    re.DOTALL,
)

_EXPORT_TEMPLATE = """export default {{
  async fetch(request, env, ctx) {{
    return {handler}(request);
  }}
}};"""


def is_service_worker(content: str) -> bool:
    return "addEventListener" in content


def is_es_module(content: str) -> bool:
    return "export default" in content


def needs_module_conversion(content: str, has_bindings: bool) -> bool:
    """Only Service Worker scripts that carry bindings are converted."""
    return has_bindings and is_service_worker(content) and not is_es_module(content)


def convert_service_worker_to_es_module(content: str) -> str:
    """Rewrite a Service Worker script as an ES module.

    The fetch listener is removed and replaced by an ``export default``
    object whose ``fetch`` delegates to the listener's handler function
    (``handleRequest`` when the listener cannot be parsed).
    """
    match = _FETCH_LISTENER.search(content)
    handler = match.group(1) if match else DEFAULT_HANDLER
    body = _FETCH_LISTENER.sub("", content).strip()
    return CONVERSION_HEADER + body + "\n\n" + _EXPORT_TEMPLATE.format(handler=handler)
