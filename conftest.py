import base58
import pytest

from braav_backend.chain import SuiGateway
from braav_backend.config import Settings

MNEMONIC = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"

PACKAGE_ID = "0x" + "a1" * 32
VETTING_TABLE_ID = "0x" + "b2" * 32
ADMIN_CAP_ID = "0x" + "c3" * 32
CREATOR_CAP_ID = "0x" + "d4" * 32
PUBLISHER_ID = "0x" + "e5" * 32
APPLICANT = "0x" + "f6" * 32
RECIPIENT = "0x" + "07" * 32
DIGEST = base58.b58encode(bytes(range(1, 33))).decode()


def created(object_type, object_id, owner=None):
    change = {"type": "created", "objectType": object_type, "objectId": object_id}
    if owner:
        change["owner"] = {"AddressOwner": owner}
    return change


def tx_response(*changes, status="success", error=None, digest=DIGEST):
    effects = {"status": {"status": status}, "gasUsed": {"computationCost": "1000"}}
    if error:
        effects["status"]["error"] = error
    return {"digest": digest, "effects": effects, "objectChanges": list(changes)}


def inspect_response(encoded, status="success"):
    return {
        "effects": {"status": {"status": status}},
        "results": [{"returnValues": [[encoded, "0x1::option::Option<bool>"]]}],
    }


class FakeGateway(SuiGateway):
    """Records every call; answers from canned responses."""

    def __init__(self):
        self.calls = []
        self.execute_responses = []
        self.inspect_result = inspect_response([0])
        self.balance = {"totalBalance": "2000000000"}
        self.owned = []
        self.objects = {}
        self.transactions = {}
        self.functions = {}

    def execute(self, signer, plan, gas_budget):
        self.calls.append(("execute", signer.address, plan, gas_budget))
        response = self.execute_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def dev_inspect(self, sender, plan):
        self.calls.append(("dev_inspect", sender, plan))
        if isinstance(self.inspect_result, Exception):
            raise self.inspect_result
        return self.inspect_result

    def get_balance(self, owner, coin_type="0x2::sui::SUI"):
        self.calls.append(("get_balance", owner))
        if isinstance(self.balance, Exception):
            raise self.balance
        return self.balance

    def get_owned_objects(self, owner, struct_type):
        self.calls.append(("get_owned_objects", owner, struct_type))
        return self.owned

    def get_object(self, object_id):
        self.calls.append(("get_object", object_id))
        value = self.objects.get(object_id, {"error": {"code": "notExists"}})
        if isinstance(value, list):
            return value.pop(0)
        return value

    def get_transaction(self, digest):
        self.calls.append(("get_transaction", digest))
        return self.transactions[digest]

    def get_move_function(self, package, module, function):
        self.calls.append(("get_move_function", package, module, function))
        return self.functions[(module, function)]

    def executed_plans(self):
        return [call[2] for call in self.calls if call[0] == "execute"]


@pytest.fixture
def settings():
    return Settings(
        package_id=PACKAGE_ID,
        vetting_table_id=VETTING_TABLE_ID,
        admin_cap_id=ADMIN_CAP_ID,
        creator_cap_id=CREATOR_CAP_ID,
        publisher_id=PUBLISHER_ID,
        mnemonic=MNEMONIC,
        wallet_secret="test",
    )


@pytest.fixture
def gateway():
    return FakeGateway()
