import base64
import hashlib

import nacl.signing
import pytest

from braav_backend.chain import Pure, Result
from braav_backend.txbuilder import PysuiTransactionBuilder, sign_transaction
from braav_backend.wallets import Keypair


def intent_digest(tx_bytes):
    return hashlib.blake2b(bytes([0, 0, 0]) + base64.b64decode(tx_bytes), digest_size=32).digest()


def test_signature_layout_and_intent():
    keypair = Keypair(bytes(range(32)))
    tx_bytes = base64.b64encode(b"transaction data").decode()

    raw = base64.b64decode(sign_transaction(keypair, tx_bytes))

    assert len(raw) == 97
    assert raw[0] == 0x00
    assert raw[65:] == keypair.public_key
    nacl.signing.VerifyKey(keypair.public_key).verify(intent_digest(tx_bytes), raw[1:65])


def test_signing_is_deterministic():
    keypair = Keypair(bytes(range(32)))
    tx_bytes = base64.b64encode(b"transaction data").decode()
    assert sign_transaction(keypair, tx_bytes) == sign_transaction(keypair, tx_bytes)


def test_result_arguments_resolve_to_earlier_commands():
    results = ["first", "second"]
    assert PysuiTransactionBuilder._argument(Result(1), results) == "second"


def test_unknown_pure_kind_is_rejected():
    with pytest.raises(TypeError):
        PysuiTransactionBuilder._argument(Pure("u128", 1), [])
    with pytest.raises(TypeError):
        PysuiTransactionBuilder._argument("0x6", [])
