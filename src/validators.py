import re

# Dotted quad, each octet 0-255.
_IPV4_RE = re.compile(r"^(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)$")
# Full 8-group form only; zero-compressed "::" addresses are rejected.
_IPV6_RE = re.compile(r"^(?:[0-9a-fA-F]{1,4}:){7}[0-9a-fA-F]{1,4}$")


def is_valid_ip(candidate: str) -> bool:
    """Return True if `candidate` is a strict dotted-quad IPv4 or full 8-group IPv6 address."""
    if not isinstance(candidate, str):
        return False
    return bool(_IPV4_RE.fullmatch(candidate) or _IPV6_RE.fullmatch(candidate))
