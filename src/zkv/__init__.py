"""zkv: flat, versioned key-value store on ZooKeeper."""

__version__ = "0.1.0"

from zkv.client import ClientTarget, KVClientProtocol, open_client, parse_client_target
from zkv.config import ZkvConfig
from zkv.errors import (
    ClientTargetError,
    EntryExistsError,
    EphemeralNotAllowedError,
    MalformedKeyError,
    NoEntryError,
    RetryLimitExceededError,
    TxnError,
    ZkvError,
)
from zkv.keys import SET_RACE_VERSION
from zkv.types import (
    ChildrenResult,
    ExistsResult,
    GetResult,
    Txn,
    TxnCheck,
    TxnOp,
    TxnOpKind,
    TxnOpResult,
    Watch,
)
from zkv.zookeeper import ZooKeeperClient

__all__ = [
    "__version__",
    "ZooKeeperClient",
    "KVClientProtocol",
    "ClientTarget",
    "open_client",
    "parse_client_target",
    "ZkvConfig",
    "SET_RACE_VERSION",
    "Txn",
    "TxnCheck",
    "TxnOp",
    "TxnOpKind",
    "TxnOpResult",
    "Watch",
    "ExistsResult",
    "GetResult",
    "ChildrenResult",
    "ZkvError",
    "MalformedKeyError",
    "EntryExistsError",
    "NoEntryError",
    "EphemeralNotAllowedError",
    "TxnError",
    "RetryLimitExceededError",
    "ClientTargetError",
]
