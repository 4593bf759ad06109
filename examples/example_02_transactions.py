"""Example 02: Atomic Transactions and Watches.

This example demonstrates:
- Txn with version checks guarding several writes
- TxnError naming the failing check or op
- A one-shot watch resolved by a later write

Requires a ZooKeeper server (default 127.0.0.1:2181, override with ZKV_ZK_HOSTS).
"""

import os
import threading

from zkv import Txn, TxnCheck, TxnError, TxnOp, ZooKeeperClient


def main():
    """Run transactions example."""
    hosts = os.getenv("ZKV_ZK_HOSTS", "127.0.0.1:2181")
    print("=" * 80)
    print("EXAMPLE 02: ATOMIC TRANSACTIONS AND WATCHES")
    print("=" * 80)

    with ZooKeeperClient(hosts, "/zkv-examples/txn") as kv:
        for key in ("/balance", "/audit"):
            if kv.exists(key).version:
                kv.erase(key)
        kv.create("/balance", b"100")

        txn = Txn(
            checks=[TxnCheck("/balance", 1)],
            ops=[TxnOp.set("/balance", b"80"), TxnOp.create("/audit", b"-20")],
        )
        print("\n1. First commit:")
        for result in kv.commit(txn):
            print(f"   {result.kind.value}: version {result.version}")

        print("\n2. Replaying the same transaction:")
        try:
            kv.commit(txn)
        except TxnError as e:
            print(f"   ✓ rejected at index {e.index}; nothing applied")

        print("\n3. Watching /balance:")
        watch = kv.get("/balance", watch=True).watch
        threading.Timer(0.2, lambda: kv.set("/balance", b"75")).start()
        event = watch.wait()
        print(f"   ✓ {event.type} on {event.path}")


if __name__ == "__main__":
    main()
