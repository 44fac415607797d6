import logging

from .chain import Obj, Pure, TransactionPlan
from .effects import TransactionOutcome
from .errors import ConfigurationError
from .utils import is_valid_sui_address, nft_base_type
from .wallets import load_keypair

logger = logging.getLogger(__name__)

DEFAULT_NFT_VERSION = "BRAAV16"
PUBLISHER_TYPE = "0x2::package::Publisher"

MINT_FIELDS = (
    "packageId", "supplyCapId", "lineageId", "counterId", "recipientAddress", "nftName", "badgeCoinId",
)
RESTRICTED_MINT_FIELDS = ("creatorCapId", "coinId")


def _signer(settings):
    settings.require("mnemonic")
    return load_keypair(mnemonic=settings.mnemonic)


def _require_addresses(**values):
    invalid = [name for name, value in values.items() if not is_valid_sui_address(value)]
    if invalid:
        raise ConfigurationError(f"Invalid object ID or address: {', '.join(invalid)}", fields=invalid)


def mint_nft(settings, gateway, params: dict, restricted: bool = False) -> dict:
    """Mint a BRAAV NFT (or RestrictedNFT) and transfer it to the recipient."""
    required = MINT_FIELDS + RESTRICTED_MINT_FIELDS if restricted else MINT_FIELDS
    missing = [name for name in required if not params.get(name)]
    if missing:
        raise ConfigurationError("Missing required fields", fields=missing)
    keypair = _signer(settings)
    package_id = params["packageId"]
    recipient = params["recipientAddress"]
    _require_addresses(recipientAddress=recipient)

    if restricted:
        version = params.get("braavVersion") or DEFAULT_NFT_VERSION
        function, struct_name = "mint_restricted_and_transfer", "RestrictedNFT"
        arguments = [
            Obj(params["creatorCapId"]),
            Pure.string(params["nftName"]),
            Pure.string(params["coinId"]),
            Pure.string(params["badgeCoinId"]),
        ]
    else:
        version = params.get("nftVersion") or DEFAULT_NFT_VERSION
        function, struct_name = "mint_and_transfer", "NFT"
        arguments = [Pure.string(params["nftName"]), Pure.string(params["badgeCoinId"])]

    arguments += [
        Obj(params["supplyCapId"]),
        Obj(params["lineageId"]),
        Obj(params["counterId"]),
        Pure.address(recipient),
        Obj(settings.clock_object_id),
    ]
    nft_type = nft_base_type(package_id, version)

    logger.info(
        "Minting %s %r of type %s to %s (supply cap %s, lineage %s, counter %s, badge %s)",
        struct_name, params["nftName"], nft_type, recipient,
        params["supplyCapId"], params["lineageId"], params["counterId"], params["badgeCoinId"],
    )

    plan = TransactionPlan()
    plan.move_call(f"{package_id}::braav_public::{function}", arguments, [nft_type])

    outcome = TransactionOutcome.from_response(gateway.execute(keypair, plan, settings.gas_budget))
    outcome.require_success()
    object_id = outcome.find_created(struct_name, module="braav_public")

    key = "restrictedNftObjectId" if restricted else "nftObjectId"
    return {
        "transactionDigest": outcome.digest,
        key: object_id,
        "recipientAddress": recipient,
        "nftName": params["nftName"],
        "badgeCoinId": params["badgeCoinId"],
        "gasUsed": outcome.gas_used,
    }


def edit_nft(settings, gateway, nft_object_id, new_name, new_coin_id, braav_version, restricted=False) -> dict:
    settings.require("package_id", "creator_cap_id")
    keypair = _signer(settings)
    _require_addresses(nftObjectId=nft_object_id, creatorCapId=settings.creator_cap_id)

    nft_type = nft_base_type(settings.package_id, braav_version)
    function = "update_restricted_nft" if restricted else "update_nft"
    logger.info("Editing %s of type %s: name=%r coin_id=%r", nft_object_id, nft_type, new_name, new_coin_id)

    plan = TransactionPlan()
    plan.move_call(
        f"{settings.package_id}::braav_public::{function}",
        [Obj(settings.creator_cap_id), Obj(nft_object_id), Pure.string(new_name), Pure.string(new_coin_id)],
        [nft_type],
    )

    outcome = TransactionOutcome.from_response(gateway.execute(keypair, plan, settings.gas_budget))
    outcome.require_success()
    logger.info("Updated NFT %s with name: %s, coin_id: %s", nft_object_id, new_name, new_coin_id)

    key = "restrictedNftObjectId" if restricted else "nftObjectId"
    return {
        "transactionDigest": outcome.digest,
        key: nft_object_id,
        "newName": new_name,
        "newCoinId": new_coin_id,
        "braavVersion": braav_version,
        "gasUsed": outcome.gas_used,
    }


def create_display(settings, gateway, keys, values, braav_version, restricted=False) -> dict:
    """Create and publish a Display for NFT<T> or RestrictedNFT<T>."""
    if len(keys) != len(values):
        raise ConfigurationError("displayKeys and displayValues must have the same length",
                                 fields=["displayKeys", "displayValues"])
    settings.require("package_id", "publisher_id")
    keypair = _signer(settings)

    publisher = gateway.get_object(settings.publisher_id) or {}
    publisher_type = (publisher.get("data") or {}).get("type")
    if publisher.get("error") or publisher_type != PUBLISHER_TYPE:
        raise ConfigurationError(
            f"Invalid PUBLISHER_ID: {settings.publisher_id} is not a valid Publisher object",
            fields=["PUBLISHER_ID"],
        )

    struct_name = "RestrictedNFT" if restricted else "NFT"
    nft_type = f"{settings.package_id}::braav_public::{struct_name}<{nft_base_type(settings.package_id, braav_version)}>"

    plan = TransactionPlan()
    display = plan.move_call(
        "0x2::display::new_with_fields",
        [Obj(settings.publisher_id), Pure.strings(keys), Pure.strings(values)],
        [nft_type],
    )
    plan.move_call("0x2::display::update_version", [display], [nft_type])
    plan.transfer_objects([display], keypair.address)

    outcome = TransactionOutcome.from_response(gateway.execute(keypair, plan, settings.display_gas_budget))
    outcome.require_success()
    display_id = outcome.find_created("Display", module="display", inner=struct_name)

    key = "restrictedNftDisplayId" if restricted else "nftDisplayId"
    logger.info("Created display %s for %s", display_id, nft_type)
    return {key: display_id, "transactionDigest": outcome.digest}
