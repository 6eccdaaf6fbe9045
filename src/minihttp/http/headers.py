"""
=============================================================================
HEADER PARSER
=============================================================================

Splits the head of a raw request into its request line and a header map.

    GET /user-agent HTTP/1.1\r\n        ← line 0: request line (verbatim)
    Host: localhost:4221\r\n            ← "host"       → "localhost:4221"
    User-Agent: curl/8.4.0\r\n          ← "user-agent" → "curl/8.4.0"
    Accept-Encoding: gzip, br\r\n       ← "accept-encoding" → "gzip, br"
    \r\n                                ← first empty line ends the headers

RULES
-----
- Lines are separated by CRLF.
- A header line is split on the FIRST literal ": " into name and value.
  The name is lowercased so lookups are case-insensitive; the value is
  kept exactly as sent.
- A repeated name overwrites the earlier value (last write wins).
- A line with no ": " separator is skipped. The request is still parsed.
- No obsolete line folding: a line starting with whitespace is just
  another header line (and normally gets skipped for having no ": ").

=============================================================================
"""

import logging
from typing import Dict

logger = logging.getLogger(__name__)

CRLF = "\r\n"
HEADER_SEPARATOR = ": "


def parse_headers(text: str) -> tuple[str, Dict[str, str]]:
    """
    Parse the request line and headers out of raw request text.

    Args:
        text: Decoded request text. May include the body after the blank
              line; parsing stops at the first empty line.

    Returns:
        Tuple of (request line, headers). Header names are lowercase.

    Example:
        >>> parse_headers("GET / HTTP/1.1\\r\\nUser-Agent: x\\r\\n\\r\\n")
        ('GET / HTTP/1.1', {'user-agent': 'x'})
    """
    lines = text.split(CRLF)
    request_line = lines[0]
    headers: Dict[str, str] = {}

    for line in lines[1:]:
        if line == "":
            break

        name, sep, value = line.partition(HEADER_SEPARATOR)
        if not sep:
            logger.debug(f"Skipping malformed header line: {line!r}")
            continue

        headers[name.lower()] = value

    return request_line, headers
