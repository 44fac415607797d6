import logging
import time

from .chain import Obj, Pure, TransactionPlan
from .effects import TransactionOutcome
from .errors import ConfigurationError, ObjectNotFoundError, RemoteCallError
from .utils import braav_label, qualify_token_type
from .wallets import load_keypair

logger = logging.getLogger(__name__)


def fetch_with_retry(gateway, object_id, retries=10, delay=2.0) -> dict:
    """Read an object that a just-executed transaction created."""
    for attempt in range(retries):
        obj = gateway.get_object(object_id) or {}
        if obj.get("data"):
            return obj
        error = obj.get("error") or {}
        if error and error.get("code") != "notExists":
            raise RemoteCallError(f"Could not read object {object_id}: {error}")
        logger.info("Object %s not yet available, retrying... (%d left)", object_id, retries - attempt - 1)
        time.sleep(delay)
    raise ObjectNotFoundError(f"Object {object_id} not found after {retries} retries")


def create_supply(settings, gateway, limit, token_type_name, retry_delay=2.0) -> dict:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ConfigurationError("supplyLimit must be a positive number", fields=["supplyLimit"])
    settings.require("mnemonic", "package_id", "creator_cap_id")

    keypair = load_keypair(mnemonic=settings.mnemonic)
    owner = keypair.address
    type_arg = qualify_token_type(settings.package_id, token_type_name)
    label = braav_label(type_arg)
    braav_type = f"{settings.package_id}::braav_public::BRAAV<{type_arg}>"

    if gateway.get_owned_objects(owner, braav_type):
        raise ConfigurationError(f"{label} already used for packageId {settings.package_id}.",
                                 fields=["tokenTypeName"])

    logger.info("Creating %s supply of %d for %s", label, limit, type_arg)
    plan = TransactionPlan()
    braav = plan.move_call(
        f"{settings.package_id}::braav_public::create_supply",
        [Obj(settings.creator_cap_id), Pure.u64(limit)],
        [type_arg],
    )
    plan.transfer_objects([braav], owner)

    outcome = TransactionOutcome.from_response(gateway.execute(keypair, plan, settings.gas_budget))
    outcome.require_success()

    supply_cap_id = outcome.find_created("BRAAV", module="braav_public")
    lineage_id = outcome.find_created("Lineage", module="braav_public")

    counters = outcome.created("Counter", module="counter", owner=owner)
    if counters:
        counter_id = counters[0].object_id
    else:
        braav_object = fetch_with_retry(gateway, supply_cap_id, delay=retry_delay)
        content = braav_object["data"].get("content") or {}
        counter_id = (content.get("fields") or {}).get("counter") if content.get("dataType") == "moveObject" else None
        if not counter_id:
            raise ObjectNotFoundError(f"Counter not found for supply cap {supply_cap_id}", digest=outcome.digest)

    logger.info("SupplyCapId=%s LineageObjectId=%s CounterId=%s", supply_cap_id, lineage_id, counter_id)
    return {
        "transactionDigest": outcome.digest,
        "tokenType": type_arg,
        "supplyLimit": limit,
        "supplyCapId": supply_cap_id,
        "lineageId": lineage_id,
        "counterId": counter_id,
    }
