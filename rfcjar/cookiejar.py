"""HTTP cookie handling for web clients.

Storage and retrieval follow RFC 6265bis sections 5.7 and 5.8.  Every
public operation is a coroutine, since stores may do I/O.  For stores
which never suspend (``store.synchronous``) each operation also has a
blocking ``*_sync`` twin running the very same coroutine.

"""

import functools
import json
import math
import re
import urllib.parse
from datetime import datetime, timedelta, timezone

from . import __version__
from .cookie import (CONTROL_CHARS_RE, MAX_AGE_CEILING,
                     MAX_ATTRIBUTE_VALUE_LENGTH, MAX_NAME_VALUE_LENGTH,
                     SAME_SITE_CONTEXT_LEVELS, SAME_SITE_VALUES, Cookie,
                     cookie_compare, parse_cookie)
from .errors import CookieRejected, StoreNotSynchronousError
from .helpers import (SECURE_SCHEMES, canonical_domain, default_path,
                      domain_match, is_potentially_trustworthy, path_match)
from .log import jar_logger
from .store import MemoryCookieStore
from .suffix import DEFAULT_SUFFIX_LIST, is_special_use_domain

__all__ = ['CookieJar', 'CookiePolicy', 'request_host', 'request_path']


PREFIX_SECURITY_STRICT = 'strict'
PREFIX_SECURITY_SILENT = 'silent'
PREFIX_SECURITY_DISABLED = 'unsafe-disabled'
PREFIX_SECURITY_MODES = (PREFIX_SECURITY_STRICT, PREFIX_SECURITY_SILENT,
                         PREFIX_SECURITY_DISABLED)

SAME_SITE_CONTEXT_ERROR = ("Invalid same_site_context; expected one of "
                           "'strict', 'lax', or 'none'")


def _utcnow():
    return datetime.now(timezone.utc)


def _octets(text):
    return len(text.encode('utf-8'))


def request_host(url):
    """Return the canonical request-host of *url*, port removed."""
    try:
        host = urllib.parse.urlsplit(url).hostname
    except ValueError as exc:
        raise ValueError("Invalid url %r" % (url,)) from exc
    if not host:
        raise ValueError("Invalid url %r" % (url,))
    return canonical_domain(host)


# Characters in addition to A-Z, a-z, 0-9, '_', '.', and '-' that don't
# need to be escaped to form a valid HTTP URL (RFCs 2396 and 1738).
HTTP_PATH_SAFE = "%/;:@&=+$,!~*'()"
ESCAPED_CHAR_RE = re.compile(r"%([0-9a-fA-F][0-9a-fA-F])")


def uppercase_escaped_char(match):
    return "%%%s" % match.group(1).upper()


def escape_path(path):
    """Escape any invalid characters in HTTP URL, and uppercase all escapes."""
    path = urllib.parse.quote(path, HTTP_PATH_SAFE)
    path = ESCAPED_CHAR_RE.sub(uppercase_escaped_char, path)
    return path


def request_path(url):
    """Path component of the request-uri; never empty."""
    path = escape_path(urllib.parse.urlsplit(url).path)
    if not path.startswith("/"):
        path = "/" + path
    return path


def is_secure_scheme(url):
    return urllib.parse.urlsplit(url).scheme.lower() in SECURE_SCHEMES


def check_same_site_context(value):
    if value is None:
        return None
    if isinstance(value, str) and value.lower() in SAME_SITE_CONTEXT_LEVELS:
        return value.lower()
    raise ValueError(SAME_SITE_CONTEXT_ERROR)


def _run_sync(store, coro, operation):
    # a synchronous store never suspends, so a single send() finishes
    # the coroutine
    if not store.synchronous:
        coro.close()
        raise StoreNotSynchronousError(store, operation)
    try:
        coro.send(None)
    except StopIteration as exc:
        return exc.value
    coro.close()
    raise StoreNotSynchronousError(store, operation)


class CookiePolicy:
    """Jar-wide settings deciding which cookies get accepted.

    Constructor arguments should be passed as keyword arguments only; the
    settings are read-only afterwards.  Unknown prefix security modes fall
    back to 'silent'.

    """

    def __init__(self, *,
                 reject_public_suffixes=True,
                 loose_mode=False,
                 allow_special_use_domain=True,
                 prefix_security=PREFIX_SECURITY_SILENT):
        self._reject_public_suffixes = bool(reject_public_suffixes)
        self._loose_mode = bool(loose_mode)
        self._allow_special_use_domain = bool(allow_special_use_domain)
        if isinstance(prefix_security, str):
            prefix_security = prefix_security.lower()
        if prefix_security not in PREFIX_SECURITY_MODES:
            prefix_security = PREFIX_SECURITY_SILENT
        self._prefix_security = prefix_security

    @property
    def reject_public_suffixes(self):
        return self._reject_public_suffixes

    @property
    def loose_mode(self):
        return self._loose_mode

    @property
    def allow_special_use_domain(self):
        return self._allow_special_use_domain

    @property
    def prefix_security(self):
        return self._prefix_security

    def __repr__(self):
        return ("CookiePolicy(reject_public_suffixes=%r, loose_mode=%r, "
                "allow_special_use_domain=%r, prefix_security=%r)" % (
                    self._reject_public_suffixes, self._loose_mode,
                    self._allow_special_use_domain, self._prefix_security))


class CookieJar:
    """Collection of HTTP cookies.

    The jar owns one store and one policy.  ``now`` is a callable returning
    an aware UTC datetime; it defaults to the wall clock.  Policy settings
    may be given as keyword arguments instead of a CookiePolicy.

    """

    def __init__(self, store=None, policy=None, *, suffix_list=None,
                 now=None, **policy_options):
        if policy is None:
            policy = CookiePolicy(**policy_options)
        elif policy_options:
            raise TypeError("pass either a policy or policy options, "
                            "not both")
        if suffix_list is None:
            suffix_list = DEFAULT_SUFFIX_LIST
        if store is None:
            store = MemoryCookieStore(suffix_list=suffix_list)
        self.store = store
        self._policy = policy
        self._suffix_list = suffix_list
        self._now = now or _utcnow

    @property
    def policy(self):
        return self._policy

    def _sync(self, coro, operation):
        return _run_sync(self.store, coro, operation)

    async def set_cookie(self, cookie, url, *, http=True, loose=None,
                         same_site_context=None, ignore_error=False,
                         now=None):
        """Store *cookie* (text or Cookie) received in response to *url*.

        Returns the stored Cookie.  A rejected cookie raises CookieRejected,
        unless *ignore_error* is set or the rejection is a silent one, in
        which case None is returned.  A Cookie instance is updated in place.

        """
        same_site_context = check_same_site_context(same_site_context)
        if now is None:
            now = self._now()
        if loose is None:
            loose = self._policy.loose_mode

        try:
            return await self._set_cookie(cookie, url, http, loose,
                                          same_site_context, now)
        except CookieRejected as exc:
            if exc.silent or ignore_error:
                jar_logger.debug("Ignoring cookie from %s: %s",
                                 url, exc.reason)
                return None
            jar_logger.debug("Rejecting cookie from %s: %s", url, exc.reason)
            raise

    async def _set_cookie(self, cookie, url, http, loose, same_site_context,
                          now):
        policy = self._policy
        host = request_host(url)

        if isinstance(cookie, str):
            cookie = parse_cookie(cookie, loose=loose, now=now)
            if cookie is None:
                raise CookieRejected("Cookie failed to parse")
        elif not isinstance(cookie, Cookie):
            raise TypeError("First argument to set_cookie must be a Cookie "
                            "object or a string")

        if not cookie.name and not cookie.value:
            raise CookieRejected("Cookie has neither name nor value")
        if (CONTROL_CHARS_RE.search(cookie.name) or
                CONTROL_CHARS_RE.search(cookie.value)):
            raise CookieRejected("Cookie contains control characters")
        if (_octets(cookie.name) + _octets(cookie.value) >
                MAX_NAME_VALUE_LENGTH):
            raise CookieRejected("Cookie name and value are too long")

        # Max-Age wins over Expires; non-positive values stay as they are
        # and make the cookie expired on evaluation
        if cookie.max_age is not None and 0 < cookie.max_age < math.inf:
            cookie.expires = now + timedelta(
                seconds=min(cookie.max_age, MAX_AGE_CEILING))

        domain = cookie.domain
        if domain is not None and _octets(domain) > MAX_ATTRIBUTE_VALUE_LENGTH:
            jar_logger.debug("Domain attribute too long, ignored")
            domain = None
        if domain and not domain.isascii():
            raise CookieRejected("Cookie domain is not ASCII")
        domain = canonical_domain(domain) if domain else None

        if policy.reject_public_suffixes and domain:
            allow_special = policy.allow_special_use_domain
            if self._suffix_list.is_public_suffix(
                    domain, allow_special_use_domain=allow_special):
                if domain == host:
                    # a public suffix may only set host-only cookies
                    domain = None
                elif is_special_use_domain(domain) and not allow_special:
                    raise CookieRejected(
                        'Cookie has domain set to the public suffix "%s" '
                        'which is a special use domain. To allow this, '
                        'configure your CookieJar with '
                        'allow_special_use_domain=True and '
                        'reject_public_suffixes=False.' % domain)
                else:
                    raise CookieRejected(
                        "Cookie has domain set to a public suffix")

        if domain:
            if not domain_match(host, domain, canonicalize=False):
                raise CookieRejected(
                    "Cookie not in this host's domain. Cookie:%s Request:%s"
                    % (domain, host))
            if cookie.host_only is None:
                cookie.host_only = False
            cookie.domain = domain
        else:
            cookie.host_only = True
            cookie.domain = host

        if (not cookie.path or not cookie.path.startswith('/') or
                _octets(cookie.path) > MAX_ATTRIBUTE_VALUE_LENGTH):
            cookie.path = default_path(request_path(url))
            cookie.path_is_default = True

        if isinstance(cookie.same_site, str):
            cookie.same_site = cookie.same_site.lower()
        if cookie.same_site not in SAME_SITE_VALUES:
            cookie.same_site = None

        if not http and cookie.http_only:
            raise CookieRejected(
                "Cookie is HttpOnly and this isn't an HTTP API")

        if not cookie.secure and not is_secure_scheme(url):
            await self._check_secure_shadowing(cookie)

        if cookie.same_site == 'none' and not cookie.secure:
            raise CookieRejected("Cookie is SameSite=None but not Secure")
        if cookie.same_site in ('strict', 'lax') and \
                same_site_context == 'none':
            raise CookieRejected(
                "Cookie is SameSite but this is a cross-origin request")

        self._check_prefixes(cookie)

        if not cookie.name and \
                cookie.value.lower().startswith(('__secure-', '__host-')):
            raise CookieRejected(
                "Cookie without a name has a value looking like a prefix")

        old_cookie = await self.store.find_cookie(
            cookie.domain, cookie.path, cookie.name)
        if old_cookie is not None:
            if not http and old_cookie.http_only:
                raise CookieRejected(
                    "old Cookie is HttpOnly and this isn't an HTTP API")
            if old_cookie.host_only == cookie.host_only:
                cookie.creation = old_cookie.creation or now
                cookie.creation_index = old_cookie.creation_index
            else:
                cookie.creation = now
            cookie.last_accessed = now
            await self.store.update_cookie(old_cookie, cookie)
        else:
            cookie.creation = cookie.last_accessed = now
            await self.store.put_cookie(cookie)
        return cookie

    async def _check_secure_shadowing(self, cookie):
        # RFC 6265bis section 5.7, step 15: an insecure origin may not
        # overlay a Secure cookie of the same name; the domains overlap
        # in either direction, so subdomain cookies count too
        try:
            candidates = await self.store.get_all_cookies()
        except NotImplementedError:
            jar_logger.debug("%s cannot list cookies; checking parent "
                             "domains only", type(self.store).__name__)
            candidates = await self.store.find_cookies(
                cookie.domain, None,
                allow_special_use_domain=(
                    self._policy.allow_special_use_domain))
        for existing in candidates:
            if existing.name != cookie.name or not existing.secure:
                continue
            if not (domain_match(existing.domain, cookie.domain, False) or
                    domain_match(cookie.domain, existing.domain, False)):
                continue
            if path_match(cookie.path, existing.path):
                raise CookieRejected(
                    "Cookie would shadow a Secure cookie from an "
                    "insecure origin")

    def _check_prefixes(self, cookie):
        mode = self._policy.prefix_security
        if mode == PREFIX_SECURITY_DISABLED:
            return
        silent = mode == PREFIX_SECURITY_SILENT
        if cookie.name.startswith('__Secure-') and not cookie.secure:
            raise CookieRejected(
                "Cookie has __Secure prefix but Secure attribute is not set",
                silent=silent)
        if cookie.name.startswith('__Host-') and not (
                cookie.secure and cookie.host_only and cookie.path == '/'):
            raise CookieRejected(
                "Cookie has __Host prefix but either Secure or HostOnly "
                "attribute is not set or Path is not '/'", silent=silent)

    async def get_cookies(self, url, *, http=True, expire=True,
                          all_paths=False, same_site_context=None,
                          sort=True, allow_secure_on_local=False, now=None):
        """Return the cookies to send with a request to *url*.

        Expired cookies are evicted from the store on the way.  Cookies
        come sorted for a Cookie header unless *sort* is false.

        """
        same_site_context = check_same_site_context(same_site_context)
        if now is None:
            now = self._now()

        host = request_host(url)
        path = request_path(url)
        secure = is_potentially_trustworthy(url, allow_secure_on_local)
        if same_site_context is not None:
            same_site_level = SAME_SITE_CONTEXT_LEVELS[same_site_context]
        else:
            same_site_level = None

        candidates = await self.store.find_cookies(
            host, None if all_paths else path,
            allow_special_use_domain=self._policy.allow_special_use_domain)

        cookies = []
        for cookie in candidates:
            if cookie.host_only:
                if cookie.domain != host:
                    continue
            elif not domain_match(host, cookie.domain, canonicalize=False):
                continue
            if not all_paths and not path_match(path, cookie.path):
                continue
            if cookie.secure and not secure:
                continue
            if cookie.http_only and not http:
                continue
            if same_site_level is not None and \
                    SAME_SITE_CONTEXT_LEVELS[cookie.same_site] > \
                    same_site_level:
                continue
            if expire and cookie.is_expired(now):
                await self._evict(cookie)
                continue
            cookies.append(cookie)

        if sort:
            cookies.sort(key=functools.cmp_to_key(cookie_compare))
        for cookie in cookies:
            cookie.last_accessed = now
        return cookies

    async def _evict(self, cookie):
        try:
            await self.store.remove_cookie(cookie.domain, cookie.path,
                                           cookie.name)
        except Exception:
            jar_logger.warning("Failed to evict expired cookie %s=... "
                               "for %s%s", cookie.name, cookie.domain,
                               cookie.path, exc_info=True)

    async def get_cookie_string(self, url, **options):
        """Value for the Cookie header of a request to *url*."""
        options['sort'] = True
        cookies = await self.get_cookies(url, **options)
        return '; '.join(cookie.cookie_string() for cookie in cookies)

    async def get_set_cookie_strings(self, url, **options):
        cookies = await self.get_cookies(url, **options)
        return [str(cookie) for cookie in cookies]

    async def serialize(self):
        """Snapshot of the policy and all cookies as a JSON-ready dict."""
        try:
            cookies = await self.store.get_all_cookies()
        except NotImplementedError as exc:
            raise NotImplementedError(
                "%s does not support get_all_cookies() and cannot be "
                "serialized" % type(self.store).__name__) from exc

        policy = self._policy
        return {
            'version': 'rfcjar@%s' % __version__,
            'storeType': type(self.store).__name__,
            'rejectPublicSuffixes': policy.reject_public_suffixes,
            'enableLooseMode': policy.loose_mode,
            'allowSpecialUseDomain': policy.allow_special_use_domain,
            'prefixSecurity': policy.prefix_security,
            'cookies': [cookie.to_json() for cookie in cookies],
        }

    @classmethod
    async def deserialize(cls, data, store=None, *, suffix_list=None,
                          now=None):
        """Build a jar from a snapshot made by serialize() or its JSON."""
        if isinstance(data, str):
            data = json.loads(data)
        policy = CookiePolicy(
            reject_public_suffixes=data.get('rejectPublicSuffixes', True),
            loose_mode=data.get('enableLooseMode', False),
            allow_special_use_domain=data.get('allowSpecialUseDomain', True),
            prefix_security=data.get('prefixSecurity',
                                     PREFIX_SECURITY_SILENT))
        jar = cls(store, policy, suffix_list=suffix_list, now=now)
        await jar._import_cookies(data)
        return jar

    async def _import_cookies(self, data):
        cookies = data.get('cookies')
        if not isinstance(cookies, list):
            raise ValueError("serialized jar has no cookies array")
        for obj in cookies:
            try:
                cookie = Cookie.from_json(obj)
            except (TypeError, ValueError):
                jar_logger.debug("Skipping malformed cookie record %r", obj,
                                 exc_info=True)
                continue
            if cookie is None:
                continue
            await self.store.put_cookie(cookie)

    async def clone(self, new_store=None):
        data = await self.serialize()
        return await self.deserialize(data, new_store,
                                      suffix_list=self._suffix_list,
                                      now=self._now)

    async def remove_all_cookies(self):
        await self.store.remove_all_cookies()

    def set_cookie_sync(self, cookie, url, **options):
        return self._sync(self.set_cookie(cookie, url, **options),
                          'set_cookie')

    def get_cookies_sync(self, url, **options):
        return self._sync(self.get_cookies(url, **options), 'get_cookies')

    def get_cookie_string_sync(self, url, **options):
        return self._sync(self.get_cookie_string(url, **options),
                          'get_cookie_string')

    def get_set_cookie_strings_sync(self, url, **options):
        return self._sync(self.get_set_cookie_strings(url, **options),
                          'get_set_cookie_strings')

    def serialize_sync(self):
        return self._sync(self.serialize(), 'serialize')

    def to_json(self):
        return self.serialize_sync()

    @classmethod
    def deserialize_sync(cls, data, store=None, *, suffix_list=None,
                         now=None):
        if store is None:
            store = MemoryCookieStore(suffix_list=suffix_list)
        return _run_sync(store,
                         cls.deserialize(data, store,
                                         suffix_list=suffix_list, now=now),
                         'deserialize')

    @classmethod
    def from_json(cls, data, store=None, **kwargs):
        return cls.deserialize_sync(data, store, **kwargs)

    def clone_sync(self, new_store=None):
        if new_store is not None and not new_store.synchronous:
            raise StoreNotSynchronousError(new_store, 'clone')
        return self._sync(self.clone(new_store), 'clone')

    def remove_all_cookies_sync(self):
        return self._sync(self.remove_all_cookies(), 'remove_all_cookies')

    def __repr__(self):
        return "<%s store=%r policy=%r>" % (
            self.__class__.__name__, self.store, self._policy)
