import asyncio
import logging
from datetime import datetime, timedelta, timezone

import pytest
from freezegun import freeze_time

from rfcjar import (ConfigurationError, Cookie, CookieJar, CookiePolicy,
                    CookieRejected, MemoryCookieStore,
                    StoreNotSynchronousError, request_host, request_path)


class DeferredStore(MemoryCookieStore):
    """Memory store whose operations yield to the event loop."""

    synchronous = False

    async def find_cookie(self, domain, path, name):
        await asyncio.sleep(0)
        return await super().find_cookie(domain, path, name)

    async def find_cookies(self, domain, path,
                           allow_special_use_domain=False):
        await asyncio.sleep(0)
        return await super().find_cookies(domain, path,
                                           allow_special_use_domain)

    async def put_cookie(self, cookie):
        await asyncio.sleep(0)
        await super().put_cookie(cookie)

    async def get_all_cookies(self):
        await asyncio.sleep(0)
        return await super().get_all_cookies()


class MislabelledStore(DeferredStore):
    synchronous = True


class BrokenRemoveStore(MemoryCookieStore):

    async def remove_cookie(self, domain, path, name):
        raise OSError('backend unavailable')


def names(cookies):
    return [cookie.name for cookie in cookies]


# end to end

def test_accept_domain_cookie(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('a=1; Domain=example.com; Path=/',
                        'http://example.com/x')
    cookies = jar.get_cookies_sync('http://example.com/x')
    assert len(cookies) == 1
    assert cookies[0].cookie_string() == 'a=1'
    assert cookies[0].host_only is False


def test_reject_foreign_domain(cookie_jar):
    jar = cookie_jar()
    with pytest.raises(CookieRejected, match="not in this host's domain"):
        jar.set_cookie_sync('a=b; Domain=fooxample.com',
                            'http://example.com/')
    assert len(jar.store) == 0


def test_http_only_cookie_not_overwritten_from_script(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('k=1; HttpOnly', 'http://example.com/')
    with pytest.raises(CookieRejected, match='HttpOnly'):
        jar.set_cookie_sync('k=2', 'http://example.com/', http=False)
    assert jar.get_cookie_string_sync('http://example.com/') == 'k=1'


def test_host_prefix(cookie_jar):
    jar = cookie_jar(prefix_security='strict')
    cookie = jar.set_cookie_sync('__Host-x=1; Secure; Path=/',
                                 'https://a.b/')
    assert cookie.host_only

    jar = cookie_jar(prefix_security='strict')
    with pytest.raises(CookieRejected, match='__Host prefix'):
        jar.set_cookie_sync('__Host-x=1; Path=/', 'http://a.b/')
    assert len(jar.store) == 0


def test_path_order(cookie_jar, frozen_now):
    jar = cookie_jar()
    jar.set_cookie_sync('a=1; Path=/', 'http://example.com/')
    frozen_now.advance(1)
    jar.set_cookie_sync('c=3; Path=/foo/bar', 'http://example.com/')
    frozen_now.advance(1)
    jar.set_cookie_sync('b=2; Path=/foo', 'http://example.com/')
    cookies = jar.get_cookies_sync('http://example.com/foo/bar')
    assert names(cookies) == ['c', 'b', 'a']


# acceptance

def test_set_twice_keeps_creation(cookie_jar, frozen_now):
    jar = cookie_jar()
    first = jar.set_cookie_sync('a=1; Path=/', 'http://example.com/')
    created = first.creation
    index = first.creation_index
    frozen_now.advance(60)
    second = jar.set_cookie_sync('a=1; Path=/', 'http://example.com/')
    assert len(jar.store) == 1
    assert second.creation == created
    assert second.creation_index == index
    assert second.last_accessed == frozen_now()


def test_replacement_with_other_host_only_flag(cookie_jar, frozen_now):
    jar = cookie_jar()
    jar.set_cookie_sync('a=1', 'http://example.com/')
    frozen_now.advance(60)
    cookie = jar.set_cookie_sync('a=2; Domain=example.com',
                                 'http://example.com/')
    assert cookie.creation == frozen_now()
    assert jar.get_cookie_string_sync('http://example.com/') == 'a=2'


def test_host_only_cookie(cookie_jar):
    jar = cookie_jar()
    cookie = jar.set_cookie_sync('a=b', 'http://www.example.com/')
    assert cookie.host_only is True
    assert cookie.domain == 'www.example.com'
    assert jar.get_cookies_sync('http://www.example.com/')
    assert not jar.get_cookies_sync('http://sub.www.example.com/')
    assert not jar.get_cookies_sync('http://example.com/')


def test_domain_cookie_visible_to_subdomains(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('a=b; Domain=.Example.com', 'http://www.example.com/')
    assert names(jar.get_cookies_sync('http://example.com/')) == ['a']
    assert names(jar.get_cookies_sync('http://x.y.example.com/')) == ['a']
    assert jar.get_cookies_sync('http://example.org/') == []


def test_set_cookie_accepts_cookie_instance(cookie_jar):
    jar = cookie_jar()
    cookie = Cookie('a', 'b', path='/')
    assert jar.set_cookie_sync(cookie, 'http://example.com/') is cookie
    assert cookie.domain == 'example.com'
    assert cookie.host_only


def test_set_cookie_bad_type(cookie_jar):
    with pytest.raises(TypeError):
        cookie_jar().set_cookie_sync(42, 'http://example.com/')


def test_set_cookie_bad_url(cookie_jar):
    with pytest.raises(ValueError):
        cookie_jar().set_cookie_sync('a=b', 'not a url')


def test_unparsable_cookie(cookie_jar):
    jar = cookie_jar()
    with pytest.raises(CookieRejected, match='failed to parse'):
        jar.set_cookie_sync('novalue', 'http://example.com/')
    assert jar.set_cookie_sync('novalue', 'http://example.com/',
                               ignore_error=True) is None


def test_loose_mode(cookie_jar):
    jar = cookie_jar(loose_mode=True)
    cookie = jar.set_cookie_sync('abc', 'http://example.com/')
    assert cookie.name == ''
    assert jar.get_cookie_string_sync('http://example.com/') == 'abc'

    jar = cookie_jar()
    cookie = jar.set_cookie_sync('abc', 'http://example.com/', loose=True)
    assert cookie.value == 'abc'


def test_empty_name_and_value(cookie_jar):
    with pytest.raises(CookieRejected, match='neither name nor value'):
        cookie_jar().set_cookie_sync(Cookie('', ''), 'http://example.com/')


def test_control_characters_in_cookie_instance(cookie_jar):
    with pytest.raises(CookieRejected, match='control characters'):
        cookie_jar().set_cookie_sync(Cookie('a', 'b\x00'),
                                     'http://example.com/')


def test_oversized_cookie_instance(cookie_jar):
    with pytest.raises(CookieRejected, match='too long'):
        cookie_jar().set_cookie_sync(Cookie('a', 'x' * 4096),
                                     'http://example.com/')


def test_non_ascii_domain_attribute(cookie_jar):
    jar = cookie_jar()
    with pytest.raises(CookieRejected, match='not ASCII'):
        jar.set_cookie_sync('a=b; Domain=猫.cat', 'http://www.猫.cat/')
    cookie = jar.set_cookie_sync('a=b; Domain=xn--z7x.cat',
                                 'http://www.猫.cat/')
    assert cookie.domain == 'xn--z7x.cat'
    assert names(jar.get_cookies_sync('http://猫.cat/')) == ['a']


def test_oversized_domain_attribute_ignored(cookie_jar):
    jar = cookie_jar()
    cookie = jar.set_cookie_sync(
        Cookie('a', 'b', domain='x' * 1025 + '.example.com'),
        'http://www.example.com/')
    assert cookie.host_only
    assert cookie.domain == 'www.example.com'


def test_public_suffix_rejected(cookie_jar):
    jar = cookie_jar()
    with pytest.raises(CookieRejected, match='public suffix'):
        jar.set_cookie_sync('a=b; Domain=com', 'http://example.com/')
    with pytest.raises(CookieRejected, match='public suffix'):
        jar.set_cookie_sync('a=b; Domain=co.uk', 'http://example.co.uk/')
    assert len(jar.store) == 0


def test_public_suffix_equal_to_host_becomes_host_only(cookie_jar):
    jar = cookie_jar()
    cookie = jar.set_cookie_sync('a=b; Domain=co.uk', 'http://co.uk/')
    assert cookie.host_only
    assert cookie.domain == 'co.uk'
    assert names(jar.get_cookies_sync('http://co.uk/')) == ['a']
    assert jar.get_cookies_sync('http://example.co.uk/') == []


def test_public_suffix_allowed(cookie_jar):
    jar = cookie_jar(reject_public_suffixes=False)
    cookie = jar.set_cookie_sync('a=b; Domain=com', 'http://example.com/')
    assert cookie.domain == 'com'
    assert cookie.host_only is False


def test_special_use_domain(cookie_jar):
    jar = cookie_jar()
    cookie = jar.set_cookie_sync('a=b; Domain=localhost',
                                 'http://localhost:8080/')
    assert cookie.domain == 'localhost'
    assert not cookie.host_only
    jar.set_cookie_sync('b=c; Domain=foo.localhost',
                        'http://bar.foo.localhost/')
    assert names(jar.get_cookies_sync('http://bar.foo.localhost/')) == ['b']


def test_special_use_domain_not_allowed(cookie_jar):
    jar = cookie_jar(allow_special_use_domain=False)
    with pytest.raises(CookieRejected, match='special use domain'):
        jar.set_cookie_sync('a=b; Domain=foo.localhost',
                            'http://bar.foo.localhost/')


def test_ip_address_host(cookie_jar):
    jar = cookie_jar()
    with pytest.raises(CookieRejected):
        jar.set_cookie_sync('a=b; Domain=168.0.1', 'http://192.168.0.1/')
    cookie = jar.set_cookie_sync('a=b; Domain=192.168.0.1',
                                 'http://192.168.0.1/')
    assert cookie.host_only is False
    jar.set_cookie_sync('c=d', 'http://192.168.0.1/')
    cookies = jar.get_cookies_sync('http://192.168.0.1/')
    assert sorted(names(cookies)) == ['a', 'c']


def test_ipv6_host(cookie_jar):
    jar = cookie_jar()
    cookie = jar.set_cookie_sync('a=b', 'http://[::1]:8080/')
    assert cookie.domain == '::1'
    assert names(jar.get_cookies_sync('http://[::1]/')) == ['a']


def test_default_path(cookie_jar):
    jar = cookie_jar()
    cookie = jar.set_cookie_sync('a=b', 'http://example.com/dir/page')
    assert cookie.path == '/dir'
    assert cookie.path_is_default
    assert names(jar.get_cookies_sync('http://example.com/dir/other')) == \
        ['a']
    assert names(jar.get_cookies_sync('http://example.com/dir')) == ['a']
    assert jar.get_cookies_sync('http://example.com/') == []
    assert jar.get_cookies_sync('http://example.com/directory') == []


def test_relative_path_attribute_uses_default(cookie_jar):
    jar = cookie_jar()
    cookie = jar.set_cookie_sync(Cookie('a', 'b', path='relative'),
                                 'http://example.com/x/y')
    assert cookie.path == '/x'
    assert cookie.path_is_default


def test_http_only_from_non_http_api(cookie_jar):
    jar = cookie_jar()
    with pytest.raises(CookieRejected, match='HttpOnly'):
        jar.set_cookie_sync('a=b; HttpOnly', 'http://example.com/',
                            http=False)
    jar.set_cookie_sync('a=b; HttpOnly', 'http://example.com/')
    jar.set_cookie_sync('c=d', 'http://example.com/', http=False)
    assert names(jar.get_cookies_sync('http://example.com/',
                                      http=False)) == ['c']
    assert sorted(names(jar.get_cookies_sync('http://example.com/'))) == \
        ['a', 'c']


def test_ignore_error(cookie_jar):
    jar = cookie_jar()
    assert jar.set_cookie_sync('a=b; Domain=example.org',
                               'http://example.com/',
                               ignore_error=True) is None
    assert len(jar.store) == 0


def test_rejection_is_logged(cookie_jar, caplog):
    jar = cookie_jar()
    with caplog.at_level(logging.DEBUG, logger='rfcjar.jar'):
        jar.set_cookie_sync('a=b; Domain=example.org',
                            'http://example.com/', ignore_error=True)
    assert "not in this host's domain" in caplog.text


def test_empty_name_with_prefix_like_value(cookie_jar):
    jar = cookie_jar(loose_mode=True)
    with pytest.raises(CookieRejected, match='prefix'):
        jar.set_cookie_sync('=__Secure-x', 'https://example.com/')
    with pytest.raises(CookieRejected, match='prefix'):
        jar.set_cookie_sync('__host-x', 'https://example.com/')
    jar.set_cookie_sync('plain', 'https://example.com/')


# secure cookies

def test_secure_cookie_needs_secure_request(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('a=b; Secure', 'https://example.com/')
    assert jar.get_cookies_sync('http://example.com/') == []
    assert names(jar.get_cookies_sync('https://example.com/')) == ['a']
    assert names(jar.get_cookies_sync('wss://example.com/')) == ['a']


def test_secure_cookie_on_local_origin(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('a=b; Secure', 'https://localhost/')
    assert jar.get_cookies_sync('http://localhost/') == []
    assert names(jar.get_cookies_sync('http://localhost/',
                                      allow_secure_on_local=True)) == ['a']


def test_insecure_cookie_cannot_shadow_secure_one(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('sid=1; Secure', 'https://example.com/')
    with pytest.raises(CookieRejected, match='shadow'):
        jar.set_cookie_sync('sid=2', 'http://example.com/')
    with pytest.raises(CookieRejected, match='shadow'):
        jar.set_cookie_sync('sid=3; Domain=example.com; Path=/deeper',
                            'http://www.example.com/')
    jar.set_cookie_sync('other=1', 'http://example.com/')
    jar.set_cookie_sync('sid=4', 'https://example.com/')
    assert jar.get_cookie_string_sync('https://example.com/') == \
        'sid=4; other=1'


def test_insecure_parent_domain_cookie_cannot_shadow_secure_one(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('a=1; Secure', 'https://www.example.com/')
    assert jar.set_cookie_sync('a=2; Domain=example.com',
                               'http://example.com/',
                               ignore_error=True) is None
    with pytest.raises(CookieRejected, match='shadow'):
        jar.set_cookie_sync('a=3; Domain=example.com', 'http://example.com/')
    assert jar.get_cookie_string_sync('https://www.example.com/') == 'a=1'


class UnlistableStore(MemoryCookieStore):

    async def get_all_cookies(self):
        raise NotImplementedError()


def test_shadowing_check_without_cookie_listing(cookie_jar):
    jar = cookie_jar(store=UnlistableStore())
    jar.set_cookie_sync('a=1; Secure', 'https://example.com/')
    with pytest.raises(CookieRejected, match='shadow'):
        jar.set_cookie_sync('a=2', 'http://www.example.com/')
    # subdomain cookies are out of reach without a full listing
    jar.set_cookie_sync('b=1; Secure', 'https://www.example.com/')
    jar.set_cookie_sync('b=2; Domain=example.com', 'http://example.com/')


def test_host_only_cookie_instance_keeps_flag(cookie_jar):
    jar = cookie_jar()
    cookie = Cookie('a', 'b', domain='example.com', host_only=True)
    stored = jar.set_cookie_sync(cookie, 'http://www.example.com/')
    assert stored is cookie
    assert stored.host_only is True
    assert stored.domain == 'example.com'
    assert jar.get_cookies_sync('http://www.example.com/') == []
    assert jar.get_cookies_sync('http://example.com/') == [cookie]
    assert jar.get_cookies_sync('http://sub.example.com/') == []


def test_insecure_cookie_at_unrelated_path(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('sid=1; Secure; Path=/admin', 'https://example.com/')
    jar.set_cookie_sync('sid=2; Path=/', 'http://example.com/')
    assert names(jar.get_cookies_sync('http://example.com/')) == ['sid']


# expiry

def test_max_age_resolves_expiry(cookie_jar, frozen_now):
    jar = cookie_jar()
    cookie = jar.set_cookie_sync(
        'a=b; Expires=Fri, 01 Jan 2038 00:00:00 GMT; Max-Age=10',
        'http://example.com/')
    assert cookie.expires == frozen_now() + timedelta(seconds=10)
    assert cookie.max_age == 10


def test_expired_cookie_evicted(cookie_jar, frozen_now):
    jar = cookie_jar()
    jar.set_cookie_sync('a=b; Max-Age=10', 'http://example.com/')
    frozen_now.advance(5)
    assert names(jar.get_cookies_sync('http://example.com/')) == ['a']
    frozen_now.advance(5)
    assert jar.get_cookies_sync('http://example.com/', expire=False)
    assert jar.get_cookies_sync('http://example.com/') == []
    assert len(jar.store) == 0


def test_max_age_zero_deletes(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('a=b', 'http://example.com/')
    cookie = jar.set_cookie_sync('a=b; Max-Age=0', 'http://example.com/')
    assert cookie.max_age == 0
    assert jar.get_cookies_sync('http://example.com/') == []
    assert len(jar.store) == 0


def test_negative_max_age_preserved(cookie_jar):
    jar = cookie_jar()
    cookie = jar.set_cookie_sync('a=b; Max-Age=-10', 'http://example.com/')
    assert cookie.max_age == -10
    assert cookie.is_expired()


def test_past_expires(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('a=b; Expires=Thu, 01 Jan 1970 00:00:00 GMT',
                        'http://example.com/')
    assert jar.get_cookies_sync('http://example.com/') == []


def test_eviction_failure_is_logged(cookie_jar, frozen_now, caplog):
    jar = cookie_jar(BrokenRemoveStore())
    jar.set_cookie_sync('a=b; Max-Age=1', 'http://example.com/')
    frozen_now.advance(2)
    with caplog.at_level(logging.WARNING, logger='rfcjar.jar'):
        assert jar.get_cookies_sync('http://example.com/') == []
    assert 'Failed to evict expired cookie' in caplog.text
    assert len(jar.store) == 1


@freeze_time('2021-06-09 12:00:00')
def test_default_clock():
    jar = CookieJar()
    cookie = jar.set_cookie_sync('a=b; Max-Age=60', 'http://example.com/')
    assert cookie.creation == datetime(2021, 6, 9, 12, tzinfo=timezone.utc)
    assert cookie.expires == datetime(2021, 6, 9, 12, 1,
                                      tzinfo=timezone.utc)


# retrieval

def test_get_cookies_updates_last_accessed(cookie_jar, frozen_now):
    jar = cookie_jar()
    cookie = jar.set_cookie_sync('a=b', 'http://example.com/')
    frozen_now.advance(30)
    jar.get_cookies_sync('http://example.com/')
    assert cookie.last_accessed == frozen_now()
    assert cookie.creation == frozen_now() - timedelta(seconds=30)


def test_all_paths(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('a=b; Path=/foo', 'http://example.com/')
    jar.set_cookie_sync('c=d; Path=/bar', 'http://example.com/')
    assert jar.get_cookies_sync('http://example.com/') == []
    cookies = jar.get_cookies_sync('http://example.com/', all_paths=True)
    assert sorted(names(cookies)) == ['a', 'c']


def test_unsorted(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('a=b; Path=/', 'http://example.com/')
    jar.set_cookie_sync('c=d; Path=/foo', 'http://example.com/')
    cookies = jar.get_cookies_sync('http://example.com/foo', sort=False)
    assert sorted(names(cookies)) == ['a', 'c']


def test_get_cookie_string(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('a=1', 'http://example.com/')
    jar.set_cookie_sync('b=2', 'http://example.com/')
    assert jar.get_cookie_string_sync('http://example.com/') == 'a=1; b=2'
    assert jar.get_cookie_string_sync('http://example.com/',
                                      sort=False) == 'a=1; b=2'
    assert jar.get_cookie_string_sync('http://example.org/') == ''


def test_get_set_cookie_strings(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('a=1; Domain=example.com; Secure; HttpOnly',
                        'https://example.com/x/y')
    jar.set_cookie_sync('b=2; Path=/', 'https://example.com/')
    assert jar.get_set_cookie_strings_sync('https://example.com/x/') == [
        'a=1; Domain=example.com; Path=/x; Secure; HttpOnly',
        'b=2; Path=/',
    ]


def test_remove_all_cookies(cookie_jar):
    jar = cookie_jar()
    jar.set_cookie_sync('a=1', 'http://example.com/')
    jar.set_cookie_sync('b=2', 'http://example.org/')
    jar.remove_all_cookies_sync()
    assert jar.serialize_sync()['cookies'] == []


def test_request_helpers():
    assert request_host('http://Example.COM:8080/path') == 'example.com'
    assert request_host('http://[::1]:80/') == '::1'
    assert request_host('http://猫.cat/') == 'xn--z7x.cat'
    assert request_path('http://example.com') == '/'
    assert request_path('http://example.com/a b?q=1') == '/a%20b'
    assert request_path('http://example.com/%7e') == '/%7E'
    with pytest.raises(ValueError):
        request_host('/relative/only')


# policy

def test_policy_defaults():
    policy = CookiePolicy()
    assert policy.reject_public_suffixes
    assert not policy.loose_mode
    assert policy.allow_special_use_domain
    assert policy.prefix_security == 'silent'


@pytest.mark.parametrize('value,expected', [
    ('strict', 'strict'),
    ('STRICT', 'strict'),
    ('unsafe-disabled', 'unsafe-disabled'),
    ('bogus', 'silent'),
    (None, 'silent'),
])
def test_policy_prefix_security_normalized(value, expected):
    assert CookiePolicy(prefix_security=value).prefix_security == expected


def test_policy_is_read_only():
    policy = CookiePolicy()
    with pytest.raises(AttributeError):
        policy.loose_mode = True


def test_policy_keyword_only():
    with pytest.raises(TypeError):
        CookiePolicy(False)


def test_jar_policy_options():
    jar = CookieJar(loose_mode=True)
    assert jar.policy.loose_mode
    with pytest.raises(TypeError):
        CookieJar(policy=CookiePolicy(), loose_mode=True)


# sync and async surfaces

async def test_async_api_with_memory_store(cookie_jar):
    jar = cookie_jar()
    await jar.set_cookie('a=1', 'http://example.com/')
    assert await jar.get_cookie_string('http://example.com/') == 'a=1'


async def test_async_api_with_deferred_store(cookie_jar):
    jar = cookie_jar(DeferredStore())
    await jar.set_cookie('a=1; Path=/', 'http://example.com/')
    await jar.set_cookie('b=2; Path=/foo', 'http://example.com/')
    assert await jar.get_cookie_string('http://example.com/foo') == \
        'b=2; a=1'
    assert await jar.get_set_cookie_strings('http://example.com/') == \
        ['a=1; Path=/']
    data = await jar.serialize()
    assert len(data['cookies']) == 2
    await jar.remove_all_cookies()
    assert await jar.get_cookies('http://example.com/foo') == []


async def test_async_clone_from_deferred_store(cookie_jar):
    jar = cookie_jar(DeferredStore())
    await jar.set_cookie('a=1', 'http://example.com/')
    clone = await jar.clone()
    assert isinstance(clone.store, MemoryCookieStore)
    assert clone.get_cookie_string_sync('http://example.com/') == 'a=1'


def test_sync_api_refuses_async_store(cookie_jar):
    jar = cookie_jar(DeferredStore())
    with pytest.raises(StoreNotSynchronousError) as exc_info:
        jar.set_cookie_sync('a=1', 'http://example.com/')
    assert isinstance(exc_info.value, ConfigurationError)
    assert exc_info.value.operation == 'set_cookie'
    for call in (lambda: jar.get_cookies_sync('http://example.com/'),
                 lambda: jar.get_cookie_string_sync('http://example.com/'),
                 jar.serialize_sync,
                 jar.to_json,
                 jar.clone_sync,
                 jar.remove_all_cookies_sync):
        with pytest.raises(StoreNotSynchronousError):
            call()


def test_sync_api_detects_suspending_store(cookie_jar):
    jar = cookie_jar(MislabelledStore())
    with pytest.raises(StoreNotSynchronousError):
        jar.set_cookie_sync('a=1', 'http://example.com/')


def test_clone_sync_into_async_store(cookie_jar):
    jar = cookie_jar()
    with pytest.raises(StoreNotSynchronousError):
        jar.clone_sync(DeferredStore())


def test_repr(cookie_jar):
    jar = cookie_jar()
    assert repr(jar).startswith('<CookieJar store=<MemoryCookieStore[]> ')
