"""Example 01: Basic Key-Value Usage.

This example walks through the single-key operations:
- set() / get() with versions that start at 1 and grow with each write
- create() refusing to overwrite
- cas() returning 0 on a version conflict instead of raising
- children() listing full child keys
- erase() removing a whole subtree at once

Requires a ZooKeeper server (default 127.0.0.1:2181, override with ZKV_ZK_HOSTS).
"""

import os

from zkv import EntryExistsError, ZooKeeperClient


def main():
    """Run basic usage example."""
    hosts = os.getenv("ZKV_ZK_HOSTS", "127.0.0.1:2181")
    print("=" * 80)
    print("EXAMPLE 01: BASIC KEY-VALUE USAGE")
    print("=" * 80)

    with ZooKeeperClient(hosts, "/zkv-examples/basic") as kv:
        print(f"\n✓ Connected to {hosts}, namespace /zkv-examples/basic")
        if kv.exists("/app").version:
            kv.erase("/app")

        print("\n1. set() creates, then overwrites:")
        print(f"   set /app      -> version {kv.set('/app', b'')}")
        print(f"   set /app/name -> version {kv.set('/app/name', b'demo')}")
        print(f"   set /app/name -> version {kv.set('/app/name', b'demo-2')}")
        version, value, _ = kv.get("/app/name")
        print(f"   get /app/name -> version {version}, value {value!r}")

        print("\n2. create() refuses existing keys:")
        try:
            kv.create("/app/name", b"again")
        except EntryExistsError as e:
            print(f"   ✓ {e}")

        print("\n3. cas() reports conflicts as version 0:")
        print(f"   cas with stale version 1  -> {kv.cas('/app/name', b'x', 1)}")
        print(f"   cas with current version 2 -> {kv.cas('/app/name', b'x', 2)}")

        print("\n4. children() lists full keys:")
        kv.set("/app/flags", b"")
        for key in kv.children("/app").keys:
            print(f"   {key}")

        print("\n5. erase() removes the subtree atomically:")
        kv.erase("/app")
        print(f"   exists /app -> version {kv.exists('/app').version}")


if __name__ == "__main__":
    main()
