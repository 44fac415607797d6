"""Command-line runners for the same operations the HTTP service exposes."""
import argparse
import json
import logging
import sys

from . import lookups, nfts, supply, transfers, vetting, wallets
from .chain import create_gateway
from .config import Settings
from .errors import BraavError

logger = logging.getLogger("braav_backend")


def cmd_serve(args, settings):
    import uvicorn

    uvicorn.run("braav_backend.main:app", host=args.host, port=args.port or settings.port)


def cmd_create_wallet(args, settings):
    if args.standard:
        return wallets.create_standard_wallet().to_dict()
    details = wallets.complete_user_details(
        {"id": args.id, "created_at": args.created_at, "secret_key": args.secret}
    )
    return wallets.derive_custodial_wallet(
        details["id"], details["created_at"], details["secret_key"], settings.wallet_secret
    ).to_dict()


def cmd_wallet_address(args, settings):
    if args.mnemonic or args.private_key:
        keypair = wallets.load_keypair(mnemonic=args.mnemonic, private_key=args.private_key)
    else:
        keypair = wallets.load_keypair(mnemonic=settings.mnemonic, private_key=settings.private_key)
    return {"address": keypair.address}


def cmd_init_vetting_table(args, settings):
    return {"vettingTableId": vetting.initialize_vetting_table(settings, create_gateway(settings))}


def cmd_submit_for_vetting(args, settings):
    return vetting.submit_for_vetting(settings, create_gateway(settings))


def cmd_approve_vetting(args, settings):
    return vetting.approve_vetting(settings, create_gateway(settings), args.address)


def cmd_status_of_vetting(args, settings):
    return vetting.status_of_vetting(settings, create_gateway(settings), args.address).to_dict()


def cmd_create_supply(args, settings):
    return supply.create_supply(settings, create_gateway(settings), args.limit, args.token_type)


def cmd_mint_nft(args, settings):
    params = {
        "packageId": args.package or settings.package_id,
        "supplyCapId": args.supply_cap,
        "lineageId": args.lineage,
        "counterId": args.counter,
        "recipientAddress": args.recipient,
        "nftName": args.name,
        "badgeCoinId": args.badge_coin_id,
        "nftVersion": args.version,
        "braavVersion": args.version,
        "creatorCapId": args.creator_cap or settings.creator_cap_id,
        "coinId": args.coin_id,
    }
    if not params["packageId"]:
        settings.require("package_id")
    return nfts.mint_nft(settings, create_gateway(settings), params, restricted=args.restricted)


def cmd_edit_nft(args, settings):
    return nfts.edit_nft(
        settings, create_gateway(settings), args.nft_object_id, args.name, args.coin_id, args.version,
        restricted=args.restricted,
    )


def cmd_create_display(args, settings):
    keys, values = [], []
    for field in args.field:
        key, _, value = field.partition("=")
        keys.append(key)
        values.append(value)
    return nfts.create_display(settings, create_gateway(settings), keys, values, args.version, restricted=args.restricted)


def cmd_find_creator_cap(args, settings):
    return lookups.find_created_object(create_gateway(settings), args.digest, args.struct)


def cmd_check_function(args, settings):
    package = args.package or settings.package_id
    if not package:
        settings.require("package_id")
    return lookups.describe_function(create_gateway(settings), package, args.module, args.function)


def cmd_transfer_sui(args, settings):
    return transfers.transfer_sui(settings, create_gateway(settings), args.recipient, args.amount)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="braav", description=__doc__)
    parser.add_argument("--env-file", help="dotenv file to load before reading the environment")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("serve", help="run the HTTP API")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int)
    p.set_defaults(func=cmd_serve)

    p = sub.add_parser("create-wallet", help="derive a custodial wallet")
    p.add_argument("--id")
    p.add_argument("--created-at")
    p.add_argument("--secret")
    p.add_argument("--standard", action="store_true", help="random wallet with a BIP-39 mnemonic")
    p.set_defaults(func=cmd_create_wallet)

    p = sub.add_parser("wallet-address", help="print the address of a mnemonic or private key")
    p.add_argument("--mnemonic")
    p.add_argument("--private-key")
    p.set_defaults(func=cmd_wallet_address)

    p = sub.add_parser("init-vetting-table")
    p.set_defaults(func=cmd_init_vetting_table)

    p = sub.add_parser("submit-for-vetting")
    p.set_defaults(func=cmd_submit_for_vetting)

    p = sub.add_parser("approve-vetting")
    p.add_argument("address")
    p.set_defaults(func=cmd_approve_vetting)

    p = sub.add_parser("status-of-vetting")
    p.add_argument("address")
    p.set_defaults(func=cmd_status_of_vetting)

    p = sub.add_parser("create-supply")
    p.add_argument("limit", type=int)
    p.add_argument("token_type", help="BRAAV1 or <package>::xoa::BRAAV1")
    p.set_defaults(func=cmd_create_supply)

    p = sub.add_parser("mint-nft")
    p.add_argument("--package")
    p.add_argument("--supply-cap", required=True)
    p.add_argument("--lineage", required=True)
    p.add_argument("--counter", required=True)
    p.add_argument("--recipient", required=True)
    p.add_argument("--name", required=True)
    p.add_argument("--badge-coin-id", required=True)
    p.add_argument("--version", default=nfts.DEFAULT_NFT_VERSION)
    p.add_argument("--restricted", action="store_true")
    p.add_argument("--creator-cap")
    p.add_argument("--coin-id")
    p.set_defaults(func=cmd_mint_nft)

    p = sub.add_parser("edit-nft")
    p.add_argument("nft_object_id")
    p.add_argument("name")
    p.add_argument("coin_id")
    p.add_argument("--version", default=nfts.DEFAULT_NFT_VERSION)
    p.add_argument("--restricted", action="store_true")
    p.set_defaults(func=cmd_edit_nft)

    p = sub.add_parser("create-display")
    p.add_argument("field", nargs="+", help="key=value display field")
    p.add_argument("--version", required=True)
    p.add_argument("--restricted", action="store_true")
    p.set_defaults(func=cmd_create_display)

    p = sub.add_parser("find-creator-cap", help="find a created capability in a past transaction")
    p.add_argument("digest")
    p.add_argument("--struct", default="CreatorCap")
    p.set_defaults(func=cmd_find_creator_cap)

    p = sub.add_parser("check-function", help="print a Move function signature")
    p.add_argument("--package")
    p.add_argument("--module", default="braav_public")
    p.add_argument("--function", default="create_supply")
    p.set_defaults(func=cmd_check_function)

    p = sub.add_parser("transfer-sui", help="send MIST from the configured wallet")
    p.add_argument("recipient")
    p.add_argument("amount", type=int)
    p.set_defaults(func=cmd_transfer_sui)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = Settings.from_env(args.env_file)

    try:
        result = args.func(args, settings)
    except BraavError as e:
        logger.error("%s failed: %s", args.command, e)
        return 1

    if result is not None:
        print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
