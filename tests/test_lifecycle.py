"""
tests.test_lifecycle

Cookie deletion scopes.
"""

from __future__ import annotations

import pytest

from edge_gate.gate.lifecycle import cookie_domains


@pytest.mark.parametrize("host", [None, "", "localhost", "127.0.0.1", "10.0.0.8", "::1", "[::1]"])
def test_bare_hosts_only_get_host_only_deletion(host: str | None) -> None:
    assert cookie_domains(host) == [None]


def test_two_label_host() -> None:
    assert cookie_domains("example.com") == [None, "example.com"]


def test_subdomain_host_adds_registrable_domain() -> None:
    assert cookie_domains("tv.app.example.com") == [None, "tv.app.example.com", "example.com"]
