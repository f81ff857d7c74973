"""Cookie storage backends.

A store only indexes cookies; every policy decision is made by the jar.
All operations are coroutines so that backends may do I/O.  Stores whose
coroutines never suspend set ``synchronous = True``, which lets the jar
offer its blocking API on top of them.

"""

from .helpers import path_match
from .log import store_logger
from .suffix import permute_domain

__all__ = ['AbstractCookieStore', 'MemoryCookieStore']


class AbstractCookieStore:
    """Interface for cookie storage backends."""

    synchronous = False

    async def find_cookie(self, domain, path, name):
        """Return the cookie stored under (domain, path, name), or None."""
        raise NotImplementedError()

    async def find_cookies(self, domain, path,
                           allow_special_use_domain=False):
        """Return cookies which may apply to *domain* and *path*.

        Candidates are collected for every domain *domain* domain-matches.
        With a *path*, only stored paths it path-matches are considered;
        with path None, all paths are.  The jar still filters the result.

        """
        raise NotImplementedError()

    async def put_cookie(self, cookie):
        raise NotImplementedError()

    async def update_cookie(self, old_cookie, new_cookie):
        """Replace *old_cookie* by *new_cookie*; both share one key."""
        await self.put_cookie(new_cookie)

    async def remove_cookie(self, domain, path, name):
        raise NotImplementedError()

    async def remove_cookies(self, domain, path=None):
        raise NotImplementedError()

    async def remove_all_cookies(self):
        """Remove every cookie, one at a time.

        All removals are attempted; the first failure is raised after.

        """
        errors = []
        for cookie in await self.get_all_cookies():
            try:
                await self.remove_cookie(cookie.domain, cookie.path,
                                         cookie.name)
            except Exception as exc:
                store_logger.debug("failed to remove %r", cookie,
                                   exc_info=True)
                errors.append(exc)
        if errors:
            raise errors[0]

    async def get_all_cookies(self):
        """Return all stored cookies in creation order."""
        raise NotImplementedError()


def _deepvalues(mapping):
    """Iterates over nested mapping, depth-first, in sorted order by key."""
    for key in sorted(mapping):
        obj = mapping[key]
        if isinstance(obj, dict):
            yield from _deepvalues(obj)
        else:
            yield obj


class MemoryCookieStore(AbstractCookieStore):
    """In-memory store: a domain -> path -> name -> Cookie mapping."""

    synchronous = True

    def __init__(self, suffix_list=None):
        self.idx = {}
        self._suffix_list = suffix_list

    async def find_cookie(self, domain, path, name):
        return self.idx.get(domain, {}).get(path, {}).get(name)

    async def find_cookies(self, domain, path,
                           allow_special_use_domain=False):
        if not domain:
            return []

        domains = permute_domain(
            domain, allow_special_use_domain=allow_special_use_domain,
            suffix_list=self._suffix_list) or [domain]

        results = []
        for cur_domain in domains:
            cookies_by_path = self.idx.get(cur_domain)
            if not cookies_by_path:
                continue
            for cookie_path, cookies_by_name in cookies_by_path.items():
                if path and not path_match(path, cookie_path):
                    continue
                results.extend(cookies_by_name.values())
        return results

    async def put_cookie(self, cookie):
        c = self.idx
        if cookie.domain not in c:
            c[cookie.domain] = {}
        c2 = c[cookie.domain]
        if cookie.path not in c2:
            c2[cookie.path] = {}
        c3 = c2[cookie.path]
        c3[cookie.name] = cookie

    async def remove_cookie(self, domain, path, name):
        cookies_by_path = self.idx.get(domain)
        if cookies_by_path is None:
            return
        cookies_by_name = cookies_by_path.get(path)
        if cookies_by_name is None:
            return
        cookies_by_name.pop(name, None)
        if not cookies_by_name:
            del cookies_by_path[path]
        if not cookies_by_path:
            del self.idx[domain]

    async def remove_cookies(self, domain, path=None):
        if path is not None:
            cookies_by_path = self.idx.get(domain)
            if cookies_by_path is not None:
                cookies_by_path.pop(path, None)
                if not cookies_by_path:
                    del self.idx[domain]
        else:
            self.idx.pop(domain, None)

    async def remove_all_cookies(self):
        self.idx = {}

    async def get_all_cookies(self):
        return sorted(self, key=lambda cookie: cookie.creation_index)

    def __iter__(self):
        return _deepvalues(self.idx)

    def __len__(self):
        """Return number of contained cookies."""
        return sum(1 for cookie in self)

    def __repr__(self):
        r = []
        for cookie in self:
            r.append(repr(cookie))
        return "<%s[%s]>" % (self.__class__.__name__, ", ".join(r))
