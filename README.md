# singtun

Building blocks for a userspace TUN stack, written in plain Python.

## Modules

- `singtun.network`: protocol number and name conversion.
  `network_name(6)` gives `"tcp"`. Numbers without a name come back as their
  decimal string. `network_from_name("udp")` gives `17`. An unknown name that
  is not a number from 0 to 255 gives `0`. `broadcast_addr(prefixes)` returns
  the broadcast address of the first IPv4 prefix, or `None` when the list is
  empty.
- `singtun.nat`: `TCPNat(timeout)`, the port-mapping table that redirects
  TCP flows to a local listener.
  - `lookup(source, destination)` hands out NAT ports starting at 10000. The
    same source always gets the same port back.
  - `lookup_back(port)` returns the `TCPSession` behind a port and refreshes
    its activity time.
  - `check_timeout()` drops sessions that have been idle longer than the
    timeout.
  - `start()` and `close()` run that check in a background thread every
    timeout period. The table also works as a context manager.
- `singtun.uidrange`: `UIDRange(start, end)` is an inclusive range of user
  ids. It comes with three helpers:
  - `merge_ranges` sorts ranges and joins those that overlap or touch.
  - `revert_ranges(start, end, ranges)` returns the complement of the ranges
    within `[start, end]`.
  - `exclude_ranges` subtracts one set of ranges from another.
- `singtun.packages`: `PackageManager(callback, path=...)` reads an Android
  `packages.xml`. The default path is `/data/system/packages.xml`.
  - It maps package and shared-user names to uids and back, through
    `id_by_package`, `id_by_shared_package`, `package_by_id` and
    `shared_package_by_id`.
  - `start()` loads the file and raises if it cannot read it. It then watches
    the file with watchdog and reloads it on every change.
  - Errors that occur while watching go to the callback's `new_error`. Every
    successful load calls `on_packages_updated(packages, shared_users)`.
  - `decode_packages(data)` parses a document given as bytes or a string.
- `singtun.checksum`: Internet checksum helpers. They are `checksum_sum`,
  `checksum_no_fold`, `checksum_fold` and `pseudo_header_checksum_no_fold`.
- `singtun.packet`: views over writable buffers that read and rewrite header
  fields in place and recompute checksums. The views are `IPv4Packet`,
  `IPv6Packet`, `TCPHeader`, `UDPHeader`, `ICMPHeader` and `ICMPv6Header`.
- `singtun.linux_rules`: plans Linux policy routing for auto-route mode.
  - `build_rules(options, existing_priorities6=(), android=False,
    android_vpn_enabled=False, override_android_vpn=False)` returns a list of
    `Rule` objects.
  - `build_routes(options, link_index)` returns a list of `Route` objects.
  - Both take any object that has these attributes: `name`, `inet4_address`,
    `inet6_address`, `auto_route`, `strict_route`, `table_index`,
    `include_interface` and `exclude_interface`.
  - `build_rules` also calls the object's `excluded_ranges()` method, and
    `build_routes` calls its `build_auto_route_ranges(False)` method.

## Installing

```
pip install .
```

## Example

```python
from singtun.checksum import checksum_fold
from singtun.nat import TCPNat
from singtun.network import broadcast_addr, network_name
from singtun.uidrange import UIDRange, merge_ranges

print(network_name(6))                        # tcp
print(broadcast_addr(["172.19.0.1/30"]))      # 172.19.0.3

nat = TCPNat(timeout=60)
port = nat.lookup(("10.0.0.2", 40000), ("1.1.1.1", 443))
print(port)                                   # 10000
print(nat.lookup_back(port).destination)      # ('1.1.1.1', 443)

print(merge_ranges([UIDRange(5, 9), UIDRange(0, 4)]))  # [UIDRange(start=0, end=9)]
print(hex(checksum_fold(b"\x45\x00\x00\x1c", 0)))
```

## What this package does not do

- It does not open, create or configure TUN devices.
- It does not run a packet-forwarding stack, and it has no command-line
  program.
- It does not build TUN interface options or auto-route address ranges
  itself. `build_rules` and `build_routes` expect the caller to supply an
  options object that provides them.
- It does not apply rules or routes to the system. It only returns them as
  data.

## Running the tests

```
pip install .[test]
pytest
```