"""Userspace TUN stack helpers: TCP NAT table, packet views, checksums, uid ranges, Android package lookups and routing rule planning."""

__version__ = "0.1.0"