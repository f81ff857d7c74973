"""Domain and path helpers shared by the parser, the jar and the stores."""

import ipaddress
import urllib.parse

import idna

__all__ = ['canonical_domain', 'is_ip_literal', 'domain_match',
           'path_match', 'default_path', 'permute_path',
           'is_potentially_trustworthy']


SECURE_SCHEMES = ('https', 'wss')


def _strip_brackets(host):
    if len(host) >= 2 and host.startswith('[') and host.endswith(']'):
        return host[1:-1]
    return host


def is_ip_literal(host):
    """Return True if *host* is an IPv4 or IPv6 address literal."""
    if not host:
        return False
    try:
        ipaddress.ip_address(_strip_brackets(host))
    except ValueError:
        return False
    return True


def canonical_domain(host):
    """Canonicalize a host name, RFC 6265bis section 5.1.2.

    Leading dot and IPv6 brackets are removed, IDN labels are converted to
    their A-label form and the result is lowercased.

    """
    if host is None:
        return None
    host = host.strip()
    if host.startswith('.'):
        host = host[1:]
    host = _strip_brackets(host)

    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        pass
    else:
        if address.version == 6:
            return address.compressed
        return str(address)

    if not host.isascii():
        try:
            host = idna.encode(host, uts46=True).decode('ascii')
        except idna.IDNAError:
            # leave it alone; domain-match will simply fail on it
            pass
    return host.lower()


def domain_match(host, domain, canonicalize=True):
    """RFC 6265bis section 5.1.3: does *host* domain-match *domain*?

    True if the two strings are identical, or if *domain* is a suffix of
    *host* preceded by a '.' and *host* is not an IP address.

    """
    if host is None or domain is None:
        return False
    if canonicalize:
        host = canonical_domain(host)
        domain = canonical_domain(domain)
        if host is None or domain is None:
            return False

    if host == domain:
        return True

    idx = host.rfind(domain)
    if idx <= 0:
        return False
    if len(host) != len(domain) + idx:
        return False
    if host[idx - 1] != '.':
        return False
    return not is_ip_literal(host)


def path_match(req_path, cookie_path):
    """RFC 6265bis section 5.1.4: does *req_path* path-match *cookie_path*?"""
    if cookie_path == req_path:
        return True
    if req_path.startswith(cookie_path):
        # "The cookie-path is a prefix of the request-path, and the last
        # character of the cookie-path is %x2F ("/")."
        if cookie_path.endswith('/'):
            return True
        # "... and the first character of the request-path that is not
        # included in the cookie-path is a %x2F ("/") character."
        if req_path[len(cookie_path)] == '/':
            return True
    return False


def default_path(path):
    """Compute the default-path of a cookie from a request-uri path."""
    if not path or not path.startswith('/'):
        return '/'
    if path == '/':
        return path
    right_slash = path.rfind('/')
    if right_slash == 0:
        return '/'
    return path[:right_slash]


def permute_path(path):
    """All paths that *path* path-matches, longest first, ending with '/'."""
    if path == '/':
        return ['/']
    permutations = [path]
    while len(path) > 1:
        idx = path.rfind('/')
        if idx == 0:
            break
        path = path[:idx]
        permutations.append(path)
    permutations.append('/')
    return permutations


def is_potentially_trustworthy(url, allow_secure_on_local=True):
    """Check whether *url* is a potentially trustworthy origin.

    https and wss URLs always are.  With *allow_secure_on_local*,
    loopback addresses and localhost names count as well.

    """
    try:
        parts = urllib.parse.urlsplit(url)
        hostname = parts.hostname or ''
    except ValueError:
        return False

    if parts.scheme.lower() in SECURE_SCHEMES:
        return True
    if not allow_secure_on_local:
        return False

    hostname = hostname.rstrip('.')
    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        pass
    else:
        return address.is_loopback

    hostname = hostname.lower()
    return hostname == 'localhost' or hostname.endswith('.localhost')
