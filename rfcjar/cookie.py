"""The Cookie model and the Set-Cookie attribute parser.

Parsing follows RFC 6265bis section 5.6.  A parsed Cookie is only a
candidate: domain, path and host-only flag are settled by the jar when
the cookie is accepted.

"""

import itertools
import json
import math
import re
from datetime import datetime, timedelta, timezone

from .dates import format_date, format_iso, parse_date, parse_iso
from .helpers import canonical_domain
from .log import parser_logger
from .suffix import DEFAULT_SUFFIX_LIST

__all__ = ['Cookie', 'parse_cookie', 'cookie_compare',
           'SAME_SITE_CONTEXT_LEVELS']


MAX_NAME_VALUE_LENGTH = 4096
MAX_ATTRIBUTE_VALUE_LENGTH = 1024
# 400 days, RFC 6265bis section 5.5
MAX_AGE_CEILING = 400 * 24 * 60 * 60

# CTLs except HTAB
CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0A-\x1F\x7F]")
MAX_AGE_RE = re.compile(r"-?[0-9]+")
COOKIE_OCTETS_RE = re.compile(r"[\x21\x23-\x2B\x2D-\x3A\x3C-\x5B\x5D-\x7E]+")
PATH_VALUE_RE = re.compile(r"[\x20-\x3A\x3C-\x7E]+")

SAME_SITE_VALUES = ('strict', 'lax', 'none')
# None stands for the "Default" enforcement and ranks with "none"
SAME_SITE_CONTEXT_LEVELS = {'strict': 3, 'lax': 2, 'none': 1, None: 1}

# process-wide tie-breaker for cookies created within the same instant
_creation_counter = itertools.count(1)


def _utcnow():
    return datetime.now(timezone.utc)


def _octets(text):
    return len(text.encode('utf-8'))


class Cookie:
    """HTTP cookie, as described by RFC 6265bis.

    Like most of the jar this is a plain attribute holder.  It is possible
    to build a Cookie by hand that the jar would never accept;
    CookieJar.set_cookie() does all the checking.

    ``expires`` is an aware UTC datetime or None for a session cookie.
    ``max_age`` is an integer number of seconds, math.inf, -math.inf or
    None.  ``same_site`` is one of 'strict', 'lax', 'none' or None for the
    default enforcement.

    """

    serializable_properties = (
        'key', 'value', 'expires', 'maxAge', 'domain', 'path', 'secure',
        'httpOnly', 'extensions', 'hostOnly', 'pathIsDefault', 'creation',
        'lastAccessed', 'sameSite')

    def __init__(self, name='', value='', *,
                 domain=None, path=None,
                 expires=None, max_age=None,
                 secure=False, http_only=False,
                 host_only=None, path_is_default=None,
                 same_site=None,
                 creation=None, last_accessed=None,
                 extensions=None):
        self.name = name
        self.value = value
        self.domain = domain
        self.path = path
        self.expires = expires
        self.max_age = max_age
        self.secure = secure
        self.http_only = http_only
        self.host_only = host_only
        self.path_is_default = path_is_default
        self.same_site = same_site
        self.creation = creation
        self.last_accessed = last_accessed
        self.extensions = list(extensions) if extensions else []
        self.creation_index = next(_creation_counter)

    @classmethod
    def parse(cls, text, loose=False, now=None):
        return parse_cookie(text, loose=loose, now=now)

    def set_expires(self, expires):
        if isinstance(expires, datetime):
            self.expires = expires
        else:
            self.expires = parse_date(expires)

    def set_max_age(self, max_age):
        self.max_age = max_age

    def ttl(self, now=None):
        """Seconds this cookie has left to live.

        Max-Age takes precedence over Expires; a non-positive Max-Age
        means zero.  Session cookies live forever (math.inf).

        """
        if self.max_age is not None:
            if self.max_age <= 0:
                return 0
            return self.max_age
        if self.expires is None:
            return math.inf
        if now is None:
            now = _utcnow()
        return (self.expires - now).total_seconds()

    def expiry_time(self, now=None):
        """POSIX timestamp at which the cookie expires, or +/- math.inf.

        A finite Max-Age with no absolute expiry is measured from *now*
        (or the last access).  Accepted cookies always carry an absolute
        ``expires`` for a positive finite Max-Age.

        """
        if self.max_age is not None:
            if self.max_age <= 0:
                return -math.inf
            if self.max_age == math.inf:
                return math.inf
            if self.expires is None:
                relative_to = now or self.last_accessed or _utcnow()
                return relative_to.timestamp() + self.max_age
        if self.expires is None:
            return math.inf
        return self.expires.timestamp()

    def expiry_date(self, now=None):
        expiry = self.expiry_time(now)
        if expiry == math.inf:
            return None
        if expiry == -math.inf:
            return datetime(1970, 1, 1, tzinfo=timezone.utc)
        return datetime.fromtimestamp(expiry, timezone.utc)

    def is_expired(self, now=None):
        if now is None:
            now = _utcnow()
        return self.expiry_time(now) <= now.timestamp()

    def is_persistent(self):
        return self.max_age is not None or self.expires is not None

    def canonicalized_domain(self):
        return canonical_domain(self.domain)

    cdomain = canonicalized_domain

    def validate(self, suffix_list=None):
        """Check the cookie against the server-side grammar.

        Returns False when the value is not made of cookie-octets, the
        Max-Age is not positive, the path has forbidden characters or the
        domain is a public suffix.

        """
        if not self.value or not COOKIE_OCTETS_RE.fullmatch(self.value):
            return False
        if self.max_age is not None and self.max_age <= 0:
            return False
        if self.path is not None and not PATH_VALUE_RE.fullmatch(self.path):
            return False
        cdomain = self.cdomain()
        if cdomain:
            if cdomain.endswith('.'):
                return False
            if suffix_list is None:
                suffix_list = DEFAULT_SUFFIX_LIST
            if suffix_list.get_registered_domain(cdomain) is None:
                return False
        return True

    def cookie_string(self):
        """The name=value pair as sent in a Cookie header."""
        value = self.value or ''
        if self.name:
            return '%s=%s' % (self.name, value)
        return value

    def clone(self):
        return self.from_json(self.to_json())

    def to_json(self):
        """Map the cookie to a JSON-compatible dict, omitting defaults."""
        obj = {}
        if self.name:
            obj['key'] = self.name
        if self.value:
            obj['value'] = self.value
        if self.expires is not None:
            obj['expires'] = format_iso(self.expires)
        if self.max_age is not None:
            if self.max_age == math.inf:
                obj['maxAge'] = 'Infinity'
            elif self.max_age == -math.inf:
                obj['maxAge'] = '-Infinity'
            else:
                obj['maxAge'] = self.max_age
        if self.domain is not None:
            obj['domain'] = self.domain
        if self.path is not None:
            obj['path'] = self.path
        if self.secure:
            obj['secure'] = True
        if self.http_only:
            obj['httpOnly'] = True
        if self.extensions:
            obj['extensions'] = list(self.extensions)
        if self.host_only is not None:
            obj['hostOnly'] = self.host_only
        if self.path_is_default is not None:
            obj['pathIsDefault'] = self.path_is_default
        if self.creation is not None:
            obj['creation'] = format_iso(self.creation)
        if self.last_accessed is not None:
            obj['lastAccessed'] = format_iso(self.last_accessed)
        if self.same_site is not None:
            obj['sameSite'] = self.same_site
        return obj

    @classmethod
    def from_json(cls, obj):
        """Build a Cookie from a dict (or its JSON text) made by to_json().

        Returns None for JSON text which does not decode to an object.
        Malformed field values raise ValueError.

        """
        if isinstance(obj, str):
            try:
                obj = json.loads(obj)
            except ValueError:
                return None
        if not isinstance(obj, dict):
            return None

        cookie = cls(obj.get('key') or '', obj.get('value') or '')

        expires = obj.get('expires')
        if expires is not None and expires != 'Infinity':
            cookie.expires = parse_iso(expires)

        max_age = obj.get('maxAge')
        if max_age == 'Infinity':
            cookie.max_age = math.inf
        elif max_age == '-Infinity':
            cookie.max_age = -math.inf
        elif max_age is not None:
            cookie.max_age = int(max_age)

        cookie.domain = obj.get('domain')
        cookie.path = obj.get('path')
        cookie.secure = bool(obj.get('secure', False))
        cookie.http_only = bool(obj.get('httpOnly', False))
        cookie.extensions = list(obj.get('extensions') or [])
        cookie.host_only = obj.get('hostOnly')
        cookie.path_is_default = obj.get('pathIsDefault')
        cookie.creation = parse_iso(obj.get('creation'))
        cookie.last_accessed = parse_iso(obj.get('lastAccessed'))
        same_site = obj.get('sameSite')
        if same_site in SAME_SITE_VALUES:
            cookie.same_site = same_site
        return cookie

    def __str__(self):
        """Serialize as a Set-Cookie header value."""
        parts = [self.cookie_string()]
        if self.expires is not None:
            parts.append('Expires=%s' % format_date(self.expires))
        if self.max_age is not None and self.max_age != math.inf:
            if self.max_age == -math.inf:
                parts.append('Max-Age=0')
            else:
                parts.append('Max-Age=%d' % self.max_age)
        if self.domain and not self.host_only:
            parts.append('Domain=%s' % self.domain)
        if self.path:
            parts.append('Path=%s' % self.path)
        if self.secure:
            parts.append('Secure')
        if self.http_only:
            parts.append('HttpOnly')
        if self.same_site in ('strict', 'lax'):
            parts.append('SameSite=%s' % self.same_site.capitalize())
        parts.extend(self.extensions)
        return '; '.join(parts)

    def __repr__(self):
        args = []
        for name in ("name", "value", "domain", "path", "expires",
                     "max_age", "secure", "http_only", "host_only",
                     "same_site", "creation_index"):
            args.append("%s=%r" % (name, getattr(self, name)))
        return "Cookie(%s)" % ", ".join(args)


def cookie_compare(a, b):
    """Order cookies for a Cookie header, RFC 6265bis section 5.8.3.

    Longer paths first, then earlier creation times.  Cookies without a
    creation time sort after those with one; the creation index breaks
    any remaining tie.

    """
    cmp = len(b.path or '') - len(a.path or '')
    if cmp:
        return cmp
    if a.creation != b.creation:
        if a.creation is None:
            return 1
        if b.creation is None:
            return -1
        return -1 if a.creation < b.creation else 1
    return (a.creation_index or 0) - (b.creation_index or 0)


def _split_name_value(pair, loose):
    eq = pair.find('=')
    if loose:
        if eq == 0:
            pair = pair[1:]
            eq = pair.find('=')
    elif eq <= 0:
        return None
    if eq <= 0:
        # loose mode: a bare token is a value with an empty name
        return '', pair.strip()
    return pair[:eq].strip(), pair[eq + 1:].strip()


def parse_cookie(text, loose=False, now=None):
    """Parse a Set-Cookie header value into a candidate Cookie.

    Returns None if the text must be ignored as a whole.  Unusable
    attributes are skipped individually.

    """
    if not isinstance(text, str):
        return None
    if CONTROL_CHARS_RE.search(text):
        parser_logger.debug("control character in cookie text, ignoring")
        return None
    text = text.strip()
    if not text:
        return None

    pair, _, unparsed = text.partition(';')
    name_value = _split_name_value(pair, loose)
    if name_value is None:
        parser_logger.debug("no name in cookie pair %r, ignoring", pair)
        return None
    name, value = name_value
    if _octets(name) + _octets(value) > MAX_NAME_VALUE_LENGTH:
        parser_logger.debug("cookie name and value too long, ignoring")
        return None

    cookie = Cookie(name, value)
    if now is None:
        now = _utcnow()

    for av in unparsed.split(';'):
        av = av.strip()
        if not av:
            continue
        av_key, sep, av_value = av.partition('=')
        av_key = av_key.strip()
        av_value = av_value.strip() if sep else None
        if _octets(av_key) + _octets(av_value or '') > \
                MAX_ATTRIBUTE_VALUE_LENGTH:
            parser_logger.debug("attribute %s too long, skipped",
                                av_key[:32])
            continue
        av_key = av_key.lower()

        if av_key == 'expires':
            expires = parse_date(av_value)
            if expires is None:
                parser_logger.debug("bad expires value %r", av_value)
                continue
            ceiling = now + timedelta(seconds=MAX_AGE_CEILING)
            cookie.expires = min(expires, ceiling)
        elif av_key == 'max-age':
            if not av_value or not MAX_AGE_RE.fullmatch(av_value):
                parser_logger.debug("bad max-age value %r", av_value)
                continue
            cookie.set_max_age(min(int(av_value), MAX_AGE_CEILING))
        elif av_key == 'domain':
            if not av_value:
                continue
            domain = av_value[1:] if av_value.startswith('.') else av_value
            if domain:
                cookie.domain = domain.lower()
        elif av_key == 'path':
            if av_value and av_value.startswith('/'):
                cookie.path = av_value
            else:
                cookie.path = None
        elif av_key == 'secure':
            cookie.secure = True
        elif av_key == 'httponly':
            cookie.http_only = True
        elif av_key == 'samesite':
            same_site = (av_value or '').lower()
            cookie.same_site = same_site if same_site in SAME_SITE_VALUES \
                else None
        else:
            cookie.extensions.append(av)

    return cookie
