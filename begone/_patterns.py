"""
This module turns file and directory names into domain patterns. A name
like ``example.com`` matches only that host, a name like ``*.example.com``
matches hosts with exactly one extra label, e.g. ``www.example.com``
but not ``a.b.example.com``.
"""

import os
import re


SUPPORTED_EXTENSIONS = ".html", ".json"

WILDCARD_PREFIX = "*."


def parse_dirname(dirname):
    """ Get ``(domain, is_wildcard)`` for a domain directory name.
    """
    if dirname.startswith(WILDCARD_PREFIX):
        return dirname[len(WILDCARD_PREFIX) :], True
    return dirname, False


def parse_filename(filename):
    """ Get ``(domain, is_wildcard)`` for a page file name, or None if
    the file does not have a supported extension.
    """
    name, ext = os.path.splitext(filename)
    if ext.lower() not in SUPPORTED_EXTENSIONS:
        return None
    return parse_dirname(name)


class DomainMatcher:
    """ Callable that tests whether a (lowercase) host matches a domain
    pattern. Matching is case insensitive and always covers the whole host.
    """

    __slots__ = ("_domain", "_is_wildcard", "_regex")

    def __init__(self, domain, is_wildcard=False):
        if not isinstance(domain, str):
            raise TypeError("DomainMatcher domain must be a str.")
        self._domain = domain
        self._is_wildcard = bool(is_wildcard)
        escaped = re.escape(domain)
        if self._is_wildcard:
            # Exactly one label, multi-level subdomains do not match
            self._regex = re.compile(r"[^.]+\." + escaped, re.IGNORECASE)
        else:
            self._regex = re.compile(escaped, re.IGNORECASE)

    def __repr__(self):
        return f"<DomainMatcher {self.pattern!r}>"

    def __eq__(self, other):
        if not isinstance(other, DomainMatcher):
            return NotImplemented
        return self.pattern.lower() == other.pattern.lower()

    def __hash__(self):
        return hash(self.pattern.lower())

    @property
    def domain(self):
        """ The domain part of the pattern (without the wildcard prefix).
        """
        return self._domain

    @property
    def is_wildcard(self):
        """ Whether this is a wildcard pattern.
        """
        return self._is_wildcard

    @property
    def pattern(self):
        """ The textual pattern, e.g. "example.com" or "*.example.com".
        """
        if self._is_wildcard:
            return WILDCARD_PREFIX + self._domain
        return self._domain

    def __call__(self, host):
        return self._regex.fullmatch(host) is not None


def compile_domain(domain, is_wildcard=False):
    """ Compile a domain into a ``DomainMatcher``.
    """
    return DomainMatcher(domain, is_wildcard)
