"""
Shared test fixtures for calico_upgrade.

Usage:
    from tests.fixtures import (
        clean_legacy_set,
        make_ip_pool,
        make_policy,
    )
"""

from tests.fixtures.resources import (
    clean_legacy_set,
    make_bgp_config,
    make_bgp_peer,
    make_host_endpoint,
    make_ip_pool,
    make_node,
    make_policy,
    make_profile,
    make_workload_endpoint,
)

__all__ = [
    "clean_legacy_set",
    "make_bgp_config",
    "make_bgp_peer",
    "make_host_endpoint",
    "make_ip_pool",
    "make_node",
    "make_policy",
    "make_profile",
    "make_workload_endpoint",
]
