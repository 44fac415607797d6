"""
Transaction plans and the gateway that submits them to a Sui node.

Services describe what they want executed as a ``TransactionPlan``; the
gateway hands it to the pysui builder to serialize, sign and submit. Read-only
queries go straight to the node over JSON-RPC.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

import requests

from .errors import BraavError, RemoteCallError

logger = logging.getLogger(__name__)

DEFAULT_EXECUTE_OPTIONS = {
    "showEffects": True,
    "showEvents": True,
    "showObjectChanges": True,
    "showBalanceChanges": True,
    "showInput": True,
}


@dataclass(frozen=True)
class Obj:
    object_id: str


@dataclass(frozen=True)
class Pure:
    kind: str  # string | address | u64 | vector<string>
    value: Any

    @classmethod
    def string(cls, value: str) -> "Pure":
        return cls("string", value)

    @classmethod
    def address(cls, value: str) -> "Pure":
        return cls("address", value)

    @classmethod
    def u64(cls, value: int) -> "Pure":
        return cls("u64", int(value))

    @classmethod
    def strings(cls, values: Sequence[str]) -> "Pure":
        return cls("vector<string>", list(values))


@dataclass(frozen=True)
class Result:
    """The value produced by an earlier command of the same plan."""

    index: int


Argument = Union[Obj, Pure, Result]


@dataclass(frozen=True)
class MoveCall:
    target: str
    arguments: tuple = ()
    type_arguments: tuple = ()


@dataclass(frozen=True)
class TransferObjects:
    objects: tuple
    recipient: str


@dataclass(frozen=True)
class SplitGas:
    amount: int


Command = Union[MoveCall, TransferObjects, SplitGas]


@dataclass
class TransactionPlan:
    commands: list = field(default_factory=list)

    def move_call(self, target: str, arguments=(), type_arguments=()) -> Result:
        return self._add(MoveCall(target, tuple(arguments), tuple(type_arguments)))

    def transfer_objects(self, objects, recipient: str) -> Result:
        return self._add(TransferObjects(tuple(objects), recipient))

    def split_gas(self, amount: int) -> Result:
        return self._add(SplitGas(int(amount)))

    def _add(self, command: Command) -> Result:
        self.commands.append(command)
        return Result(len(self.commands) - 1)

    @property
    def targets(self) -> list:
        return [c.target for c in self.commands if isinstance(c, MoveCall)]


class SuiGateway:
    """Everything the services need from a Sui node."""

    def execute(self, signer, plan: TransactionPlan, gas_budget: int) -> dict:
        raise NotImplementedError

    def dev_inspect(self, sender: str, plan: TransactionPlan) -> dict:
        raise NotImplementedError

    def get_balance(self, owner: str, coin_type: str = "0x2::sui::SUI") -> dict:
        raise NotImplementedError

    def get_owned_objects(self, owner: str, struct_type: str) -> list:
        raise NotImplementedError

    def get_object(self, object_id: str) -> dict:
        raise NotImplementedError

    def get_transaction(self, digest: str) -> dict:
        raise NotImplementedError

    def get_move_function(self, package: str, module: str, function: str) -> dict:
        raise NotImplementedError


class SuiRpcGateway(SuiGateway):
    def __init__(self, rpc_url: str, builder, session: Optional[requests.Session] = None, timeout: float = 30):
        self.rpc_url = rpc_url
        self.builder = builder
        self.session = session or requests.Session()
        self.timeout = timeout
        self._request_id = 0

    def call(self, method: str, params: list) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }
        try:
            r = self.session.post(self.rpc_url, json=payload, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            raise RemoteCallError(f"{method} failed: {e}") from e

        if "error" in data:
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise RemoteCallError(message or f"{method} failed")
        return data.get("result")

    def execute(self, signer, plan, gas_budget):
        try:
            tx_bytes = self.builder.transaction_bytes(signer.address, plan, gas_budget)
            signature = self.builder.sign(signer, tx_bytes)
            return self.builder.execute(tx_bytes, signature, DEFAULT_EXECUTE_OPTIONS)
        except BraavError:
            raise
        except Exception as e:
            raise RemoteCallError(str(e)) from e

    def dev_inspect(self, sender, plan):
        try:
            kind_bytes = self.builder.kind_bytes(sender, plan)
            return self.builder.dev_inspect(sender, kind_bytes)
        except BraavError:
            raise
        except Exception as e:
            raise RemoteCallError(str(e)) from e

    def get_balance(self, owner, coin_type="0x2::sui::SUI"):
        return self.call("suix_getBalance", [owner, coin_type])

    def get_owned_objects(self, owner, struct_type):
        query = {"filter": {"StructType": struct_type}, "options": {"showType": True}}
        page = self.call("suix_getOwnedObjects", [owner, query, None, None]) or {}
        return page.get("data", [])

    def get_object(self, object_id):
        return self.call("sui_getObject", [object_id, {"showType": True, "showContent": True, "showOwner": True}])

    def get_transaction(self, digest):
        return self.call("sui_getTransactionBlock", [digest, {"showObjectChanges": True, "showEffects": True}])

    def get_move_function(self, package, module, function):
        return self.call("sui_getNormalizedMoveFunction", [package, module, function])


def create_gateway(settings) -> SuiRpcGateway:
    from .txbuilder import PysuiTransactionBuilder

    logger.info("Connecting to Sui node at %s", settings.sui_network)
    return SuiRpcGateway(settings.sui_network, PysuiTransactionBuilder(settings.sui_network))
