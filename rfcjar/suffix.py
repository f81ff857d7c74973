"""Public suffix lookups.

The default list is the snapshot of the Public Suffix List bundled with
tldextract; it is never refreshed over the network.  RFC 6761 special-use
domains are handled here as well since most of them are not on the list.

"""

import tldextract

from .helpers import is_ip_literal

__all__ = ['PublicSuffixList', 'SPECIAL_USE_DOMAINS', 'permute_domain',
           'is_special_use_domain', 'get_registered_domain',
           'is_public_suffix']


# RFC 6761
SPECIAL_USE_DOMAINS = ('local', 'example', 'invalid', 'localhost', 'test')

# single label names which are their own registered domain
SPECIAL_TREATMENT_DOMAINS = ('localhost', 'invalid')


def is_special_use_domain(domain):
    """True if the rightmost label of *domain* is an RFC 6761 name."""
    if not domain:
        return False
    return domain.rstrip('.').rsplit('.', 1)[-1] in SPECIAL_USE_DOMAINS


class PublicSuffixList:
    """Registered domain lookups backed by a tldextract extractor.

    Any object providing ``get_registered_domain()`` and
    ``is_public_suffix()`` with the same signatures may be passed to the
    jar instead.

    """

    def __init__(self, extractor=None):
        if extractor is None:
            extractor = tldextract.TLDExtract(
                cache_dir=None, suffix_list_urls=(),
                include_psl_private_domains=True)
        self._extract = extractor

    def get_registered_domain(self, domain, allow_special_use_domain=False):
        """Return the public suffix plus one label, or None.

        None means *domain* is itself a public suffix, an IP address, or
        a special-use name while those are not allowed.

        """
        if not domain:
            return None
        domain = domain.rstrip('.')
        if is_ip_literal(domain):
            return None

        labels = domain.split('.')
        if labels[-1] in SPECIAL_USE_DOMAINS:
            if not allow_special_use_domain:
                return None
            if len(labels) > 1:
                return '.'.join(labels[-2:])
            if labels[-1] in SPECIAL_TREATMENT_DOMAINS:
                return labels[-1]

        ext = self._extract(domain)
        if ext.suffix:
            if not ext.domain:
                return None
            return '%s.%s' % (ext.domain, ext.suffix)

        # not on the list at all: the implicit "*" rule applies
        if len(labels) < 2:
            return None
        return '.'.join(labels[-2:])

    def is_public_suffix(self, domain, allow_special_use_domain=False):
        if not domain or is_ip_literal(domain):
            return False
        registered = self.get_registered_domain(
            domain, allow_special_use_domain=allow_special_use_domain)
        return registered is None


DEFAULT_SUFFIX_LIST = PublicSuffixList()


def get_registered_domain(domain, allow_special_use_domain=False):
    return DEFAULT_SUFFIX_LIST.get_registered_domain(
        domain, allow_special_use_domain=allow_special_use_domain)


def is_public_suffix(domain, allow_special_use_domain=False):
    return DEFAULT_SUFFIX_LIST.is_public_suffix(
        domain, allow_special_use_domain=allow_special_use_domain)


def permute_domain(domain, allow_special_use_domain=False, suffix_list=None):
    """Every domain that *domain* domain-matches, shortest first.

    Starts with the registered domain; returns None when *domain* has no
    registered domain.

    """
    if suffix_list is None:
        suffix_list = DEFAULT_SUFFIX_LIST
    registered = suffix_list.get_registered_domain(
        domain, allow_special_use_domain=allow_special_use_domain)
    if registered is None:
        return None

    domain = domain.rstrip('.')
    if registered == domain:
        return [domain]

    prefix = domain[:-(len(registered) + 1)]
    permutations = [registered]
    current = registered
    for label in reversed(prefix.split('.')):
        current = '%s.%s' % (label, current)
        permutations.append(current)
    return permutations
