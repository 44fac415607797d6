import pytest

from braav_backend import lookups, nfts, supply, transfers
from braav_backend.chain import MoveCall, Obj, Pure, Result, SplitGas, TransferObjects
from braav_backend.config import DEFAULT_WALLET_SECRET, Settings
from braav_backend.errors import ConfigurationError, ObjectNotFoundError, RemoteCallError
from braav_backend.wallets import keypair_from_mnemonic
from conftest import (
    CREATOR_CAP_ID,
    DIGEST,
    MNEMONIC,
    PACKAGE_ID,
    PUBLISHER_ID,
    RECIPIENT,
    created,
    tx_response,
)

SUPPLY_CAP_ID = "0x" + "31" * 32
LINEAGE_ID = "0x" + "32" * 32
COUNTER_ID = "0x" + "33" * 32
NFT_ID = "0x" + "34" * 32
DISPLAY_ID = "0x" + "35" * 32

SIGNER = keypair_from_mnemonic(MNEMONIC).address


def mint_params(**overrides):
    params = {
        "packageId": PACKAGE_ID,
        "supplyCapId": SUPPLY_CAP_ID,
        "lineageId": LINEAGE_ID,
        "counterId": COUNTER_ID,
        "recipientAddress": RECIPIENT,
        "nftName": "Founders Badge",
        "badgeCoinId": "COIN-1",
    }
    params.update(overrides)
    return params


def test_mint_builds_single_call_with_version(settings, gateway):
    nft_type = f"{PACKAGE_ID}::braav_public::NFT<{PACKAGE_ID}::xoa::BRAAV3>"
    gateway.execute_responses.append(tx_response(created(nft_type, NFT_ID, owner=RECIPIENT)))

    result = nfts.mint_nft(settings, gateway, mint_params(nftVersion="BRAAV3"))

    assert result["nftObjectId"] == NFT_ID
    assert result["transactionDigest"] == DIGEST
    assert result["recipientAddress"] == RECIPIENT
    assert result["gasUsed"] == {"computationCost": "1000"}

    (call,) = gateway.executed_plans()[0].commands
    assert call.target == f"{PACKAGE_ID}::braav_public::mint_and_transfer"
    assert call.type_arguments == (f"{PACKAGE_ID}::xoa::BRAAV3",)
    assert call.arguments == (
        Pure.string("Founders Badge"),
        Pure.string("COIN-1"),
        Obj(SUPPLY_CAP_ID),
        Obj(LINEAGE_ID),
        Obj(COUNTER_ID),
        Pure.address(RECIPIENT),
        Obj("0x6"),
    )


def test_mint_defaults_version(settings, gateway):
    gateway.execute_responses.append(tx_response(created(f"{PACKAGE_ID}::braav_public::NFT<x::y::Z>", NFT_ID)))
    nfts.mint_nft(settings, gateway, mint_params())
    call = gateway.executed_plans()[0].commands[0]
    assert call.type_arguments == (f"{PACKAGE_ID}::xoa::{nfts.DEFAULT_NFT_VERSION}",)


def test_restricted_mint_puts_creator_cap_first(settings, gateway):
    gateway.execute_responses.append(tx_response(
        created(f"{PACKAGE_ID}::braav_public::RestrictedNFT<{PACKAGE_ID}::xoa::BRAAV16>", NFT_ID),
    ))
    params = mint_params(creatorCapId=CREATOR_CAP_ID, coinId="C-9", braavVersion="BRAAV16")

    result = nfts.mint_nft(settings, gateway, params, restricted=True)

    assert result["restrictedNftObjectId"] == NFT_ID
    call = gateway.executed_plans()[0].commands[0]
    assert call.target == f"{PACKAGE_ID}::braav_public::mint_restricted_and_transfer"
    assert call.arguments[:4] == (
        Obj(CREATOR_CAP_ID), Pure.string("Founders Badge"), Pure.string("C-9"), Pure.string("COIN-1"),
    )


def test_mint_reports_every_missing_field(settings, gateway):
    with pytest.raises(ConfigurationError) as exc:
        nfts.mint_nft(settings, gateway, {"packageId": PACKAGE_ID, "nftName": "x"}, restricted=True)
    assert exc.value.fields == [
        "supplyCapId", "lineageId", "counterId", "recipientAddress", "badgeCoinId", "creatorCapId", "coinId",
    ]
    assert gateway.calls == []


def test_mint_without_nft_in_effects_fails(settings, gateway):
    gateway.execute_responses.append(tx_response(
        created(f"{PACKAGE_ID}::braav_public::RestrictedNFT<{PACKAGE_ID}::xoa::BRAAV16>", NFT_ID),
    ))
    with pytest.raises(ObjectNotFoundError):
        nfts.mint_nft(settings, gateway, mint_params())


def test_edit_restricted_nft(settings, gateway):
    gateway.execute_responses.append(tx_response())
    result = nfts.edit_nft(settings, gateway, NFT_ID, "Renamed", "C-2", "BRAAV7", restricted=True)

    assert result["restrictedNftObjectId"] == NFT_ID
    call = gateway.executed_plans()[0].commands[0]
    assert call.target == f"{PACKAGE_ID}::braav_public::update_restricted_nft"
    assert call.arguments == (Obj(CREATOR_CAP_ID), Obj(NFT_ID), Pure.string("Renamed"), Pure.string("C-2"))
    assert call.type_arguments == (f"{PACKAGE_ID}::xoa::BRAAV7",)


def test_create_display_chains_results(settings, gateway):
    gateway.objects[PUBLISHER_ID] = {"data": {"type": nfts.PUBLISHER_TYPE}}
    nft_type = f"{PACKAGE_ID}::braav_public::NFT<{PACKAGE_ID}::xoa::BRAAV16>"
    gateway.execute_responses.append(tx_response(created(f"0x2::display::Display<{nft_type}>", DISPLAY_ID)))

    result = nfts.create_display(settings, gateway, ["name"], ["{name}"], "BRAAV16")

    assert result == {"nftDisplayId": DISPLAY_ID, "transactionDigest": DIGEST}
    new, update, transfer = gateway.executed_plans()[0].commands
    assert new.target == "0x2::display::new_with_fields"
    assert new.arguments == (Obj(PUBLISHER_ID), Pure.strings(["name"]), Pure.strings(["{name}"]))
    assert update == MoveCall("0x2::display::update_version", (Result(0),), (nft_type,))
    assert transfer == TransferObjects((Result(0),), SIGNER)
    assert gateway.calls[-1][3] == settings.display_gas_budget


def test_create_display_rejects_non_publisher(settings, gateway):
    gateway.objects[PUBLISHER_ID] = {"data": {"type": "0x2::coin::Coin<0x2::sui::SUI>"}}
    with pytest.raises(ConfigurationError, match="Invalid PUBLISHER_ID"):
        nfts.create_display(settings, gateway, ["name"], ["x"], "BRAAV16", restricted=True)
    assert gateway.executed_plans() == []


def test_create_display_length_mismatch(settings, gateway):
    with pytest.raises(ConfigurationError):
        nfts.create_display(settings, gateway, ["name", "image_url"], ["x"], "BRAAV16")


def supply_response(counter_owner=None):
    type_arg = f"{PACKAGE_ID}::xoa::BRAAV1"
    changes = [
        created(f"{PACKAGE_ID}::braav_public::BRAAV<{type_arg}>", SUPPLY_CAP_ID, owner=SIGNER),
        created(f"{PACKAGE_ID}::braav_public::Lineage<{type_arg}>", LINEAGE_ID),
    ]
    if counter_owner:
        changes.append(created(f"{PACKAGE_ID}::counter::Counter", COUNTER_ID, owner=counter_owner))
    return tx_response(*changes)


def test_create_supply_reads_created_objects(settings, gateway):
    gateway.execute_responses.append(supply_response(counter_owner=SIGNER))

    result = supply.create_supply(settings, gateway, 100, "BRAAV1")

    assert result == {
        "transactionDigest": DIGEST,
        "tokenType": f"{PACKAGE_ID}::xoa::BRAAV1",
        "supplyLimit": 100,
        "supplyCapId": SUPPLY_CAP_ID,
        "lineageId": LINEAGE_ID,
        "counterId": COUNTER_ID,
    }
    create, transfer = gateway.executed_plans()[0].commands
    assert create.arguments == (Obj(CREATOR_CAP_ID), Pure.u64(100))
    assert transfer == TransferObjects((Result(0),), SIGNER)


def test_create_supply_falls_back_to_counter_field(settings, gateway):
    gateway.execute_responses.append(supply_response(counter_owner="0x" + "99" * 32))
    gateway.objects[SUPPLY_CAP_ID] = [
        {"error": {"code": "notExists"}},
        {"data": {"content": {"dataType": "moveObject", "fields": {"counter": COUNTER_ID}}}},
    ]

    result = supply.create_supply(settings, gateway, 5, "BRAAV1", retry_delay=0)
    assert result["counterId"] == COUNTER_ID


def test_create_supply_refuses_reused_type(settings, gateway):
    gateway.owned = [{"data": {"objectId": SUPPLY_CAP_ID}}]
    with pytest.raises(ConfigurationError, match="BRAAV1 already used"):
        supply.create_supply(settings, gateway, 5, "BRAAV1")
    assert gateway.executed_plans() == []


@pytest.mark.parametrize("limit", [0, -3, True, "10"])
def test_create_supply_rejects_bad_limits(settings, gateway, limit):
    with pytest.raises(ConfigurationError):
        supply.create_supply(settings, gateway, limit, "BRAAV1")


def test_create_supply_names_missing_configuration(gateway):
    with pytest.raises(ConfigurationError) as exc:
        supply.create_supply(Settings(), gateway, 10, "BRAAV1")
    assert exc.value.fields == ["MNEMONIC", "PACKAGE_ID", "CREATOR_CAP_ID"]
    assert gateway.calls == []


def test_fetch_with_retry_gives_up():
    from conftest import FakeGateway

    gateway = FakeGateway()
    with pytest.raises(ObjectNotFoundError):
        supply.fetch_with_retry(gateway, SUPPLY_CAP_ID, retries=3, delay=0)
    assert len(gateway.calls) == 3


def test_transfer_sui_splits_gas(settings, gateway):
    gateway.execute_responses.append(tx_response())
    result = transfers.transfer_sui(settings, gateway, RECIPIENT, 1_000)

    assert result["sender"] == SIGNER
    split, transfer = gateway.executed_plans()[0].commands
    assert split == SplitGas(1_000)
    assert transfer == TransferObjects((Result(0),), RECIPIENT)


def test_transfer_sui_checks_balance(settings, gateway):
    gateway.balance = {"totalBalance": "10"}
    with pytest.raises(RemoteCallError, match="Insufficient balance"):
        transfers.transfer_sui(settings, gateway, RECIPIENT, 1_000)


def test_find_created_object_in_publish(gateway):
    cap = "0x" + "44" * 32
    gateway.transactions[DIGEST] = tx_response(created(f"{PACKAGE_ID}::braav_public::CreatorCap", cap))
    assert lookups.find_created_object(gateway, DIGEST) == {
        "digest": DIGEST, "structName": "CreatorCap", "objectId": cap,
    }


def test_find_created_object_rejects_bad_digest(gateway):
    with pytest.raises(ConfigurationError):
        lookups.find_created_object(gateway, "not-a-digest")
    assert gateway.calls == []


def test_describe_function(gateway):
    gateway.functions[("braav_public", "create_supply")] = {
        "visibility": "Public", "isEntry": True, "parameters": ["U64"], "return": [],
    }
    info = lookups.describe_function(gateway, PACKAGE_ID, "braav_public", "create_supply")
    assert info["target"] == f"{PACKAGE_ID}::braav_public::create_supply"
    assert info["isEntry"] is True
    assert info["typeParameters"] == []


def test_settings_from_environment():
    settings = Settings.from_env(environ={"PACKAGE_ID": PACKAGE_ID, "ADMIN_CAP": "0xabc", "PORT": "8080", "MNEMONIC": " "})
    assert settings.package_id == PACKAGE_ID
    assert settings.admin_cap_id == "0xabc"
    assert settings.port == 8080
    assert settings.mnemonic is None
    assert settings.wallet_secret == DEFAULT_WALLET_SECRET


def test_settings_require_names_env_vars():
    with pytest.raises(ConfigurationError) as exc:
        Settings(package_id=PACKAGE_ID).require("package_id", "admin_cap_id", "mnemonic")
    assert exc.value.fields == ["ADMIN_CAP", "MNEMONIC"]


def test_redacted_hides_secrets(settings):
    data = settings.redacted()
    assert data["mnemonic"] == "***loaded***"
    assert data["private_key"] is None
