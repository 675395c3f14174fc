"""URL normalization and resolution restricted to http(s)."""

import ipaddress
import re
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

ALLOWED_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}

HOST_LABEL = r"[a-z0-9_](?:[a-z0-9_-]{0,61}[a-z0-9_])?"
HOSTNAME = re.compile(rf"^{HOST_LABEL}(?:\.{HOST_LABEL})*\.?$")

PATH_SAFE = "/%:@!$&'()*+,;=-._~"
QUERY_SAFE = PATH_SAFE + "?"
USERINFO_SAFE = "%!$&'()*+,;=-._~"


def normalize_url(value: str | None) -> str | None:
    """Return the canonical http(s) form of *value*, or None.

    The value is tried as-is, then with ``https://`` and ``http://``
    prefixed; the first attempt that yields an http(s) URL with a valid
    host wins.
    """
    if not value:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None

    for candidate in (trimmed, f"https://{trimmed}", f"http://{trimmed}"):
        canonical = _canonicalize(candidate)
        if canonical:
            return canonical
    return None


def to_absolute_url(base_url: str, target: str | None) -> str | None:
    """Resolve *target* against *base_url*, keeping only http(s) results."""
    if not target:
        return None
    trimmed = target.strip()
    if not trimmed:
        return None
    try:
        joined = urljoin(base_url, trimmed)
    except ValueError:
        return None
    return _canonicalize(joined)


def hostname(url: str) -> str:
    """Hostname of *url*, or the URL itself if it has none."""
    try:
        return urlsplit(url).hostname or url
    except ValueError:
        return url


def _canonicalize(value: str) -> str | None:
    try:
        parts = urlsplit(value)
        port = parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        return None

    host = _normalize_host(parts.hostname)
    if host is None:
        return None

    netloc = host
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"
    if parts.username is not None:
        userinfo = quote(parts.username, safe=USERINFO_SAFE)
        if parts.password is not None:
            userinfo = f"{userinfo}:{quote(parts.password, safe=USERINFO_SAFE)}"
        netloc = f"{userinfo}@{netloc}"

    path = quote(parts.path, safe=PATH_SAFE) or "/"
    query = quote(parts.query, safe=QUERY_SAFE)
    fragment = quote(parts.fragment, safe=QUERY_SAFE)
    return urlunsplit((scheme, netloc, path, query, fragment))


def _normalize_host(host: str | None) -> str | None:
    if not host:
        return None

    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        pass
    else:
        return f"[{address.compressed}]" if address.version == 6 else address.compressed

    if not host.isascii():
        try:
            host = host.encode("idna").decode("ascii")
        except UnicodeError:
            return None

    host = host.lower()
    if len(host) > 253 or not HOSTNAME.match(host):
        return None
    return host
