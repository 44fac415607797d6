import base64

from pysui import SuiConfig, SyncClient
from pysui.sui.sui_builders.exec_builders import ExecuteTransaction, InspectTransaction
from pysui.sui.sui_crypto import SuiKeyPairED25519
from pysui.sui.sui_txn import SyncTransaction
from pysui.sui.sui_types.address import SuiAddress
from pysui.sui.sui_types.collections import SuiArray
from pysui.sui.sui_types.scalars import ObjectID, SuiSignature, SuiString, SuiTxBytes, SuiU64

from .chain import MoveCall, Obj, Pure, Result, SplitGas, TransferObjects
from .errors import RemoteCallError


def sign_transaction(keypair, tx_bytes: str) -> str:
    """Intent-sign base64 transaction bytes; returns the serialized Sui signature."""
    sui_keypair = SuiKeyPairED25519.from_bytes(keypair.seed)
    return sui_keypair.new_sign_secure(tx_bytes).value


class PysuiTransactionBuilder:
    """Builds, signs and submits TransactionPlans with pysui."""

    def __init__(self, rpc_url: str):
        self.client = SyncClient(SuiConfig.user_config(rpc_url=rpc_url))

    def transaction_bytes(self, sender: str, plan, gas_budget: int) -> str:
        txn = self._compose(sender, plan)
        return txn.deferred_execution(gas_budget=str(gas_budget))

    def kind_bytes(self, sender: str, plan) -> str:
        txn = self._compose(sender, plan)
        return base64.b64encode(txn.raw_kind().serialize()).decode("utf-8")

    def sign(self, keypair, tx_bytes: str) -> str:
        return sign_transaction(keypair, tx_bytes)

    def execute(self, tx_bytes: str, signature: str, options: dict) -> dict:
        return self._submit(ExecuteTransaction(
            tx_bytes=SuiTxBytes(tx_bytes),
            signatures=SuiArray([SuiSignature(signature)]),
            options=options,
        ))

    def dev_inspect(self, sender: str, kind_bytes: str) -> dict:
        return self._submit(InspectTransaction(sender_address=SuiAddress(sender), tx_bytes=SuiString(kind_bytes)))

    def _submit(self, builder) -> dict:
        result = self.client.execute_no_parse(builder)
        if not result.is_ok():
            raise RemoteCallError(str(result.result_string))
        return result.result_data

    def _compose(self, sender, plan) -> SyncTransaction:
        txn = SyncTransaction(client=self.client, initial_sender=SuiAddress(sender))
        results = []
        for command in plan.commands:
            if isinstance(command, MoveCall):
                results.append(txn.move_call(
                    target=command.target,
                    arguments=[self._argument(a, results) for a in command.arguments],
                    type_arguments=list(command.type_arguments),
                ))
            elif isinstance(command, TransferObjects):
                results.append(txn.transfer_objects(
                    transfers=[self._argument(a, results) for a in command.objects],
                    recipient=SuiAddress(command.recipient),
                ))
            elif isinstance(command, SplitGas):
                results.append(txn.split_coin(coin=txn.gas, amounts=[command.amount]))
            else:
                raise TypeError(f"Unsupported command {command!r}")
        return txn

    @staticmethod
    def _argument(arg, results):
        if isinstance(arg, Result):
            return results[arg.index]
        if isinstance(arg, Obj):
            return ObjectID(arg.object_id)
        if isinstance(arg, Pure):
            if arg.kind == "string":
                return SuiString(arg.value)
            if arg.kind == "address":
                return SuiAddress(arg.value)
            if arg.kind == "u64":
                return SuiU64(arg.value)
            if arg.kind == "vector<string>":
                return SuiArray([SuiString(v) for v in arg.value])
        raise TypeError(f"Unsupported argument {arg!r}")
