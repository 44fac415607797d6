import logging

from .effects import TransactionOutcome
from .errors import ConfigurationError
from .utils import is_valid_digest

logger = logging.getLogger(__name__)


def find_created_object(gateway, digest: str, struct_name: str = "CreatorCap") -> dict:
    """Look up a past transaction (usually the package publish) for a created capability."""
    if not is_valid_digest(digest):
        raise ConfigurationError(f"Invalid transaction digest: {digest}", fields=["digest"])

    outcome = TransactionOutcome.from_response(gateway.get_transaction(digest) or {})
    for created in outcome.created(struct_name):
        logger.info("Found %s %s", created.object_type, created.object_id)
    object_id = outcome.find_created(struct_name)
    return {"digest": digest, "structName": struct_name, "objectId": object_id}


def describe_function(gateway, package_id: str, module: str, function: str) -> dict:
    normalized = gateway.get_move_function(package_id, module, function) or {}
    parameters = normalized.get("parameters") or []
    return {
        "target": f"{package_id}::{module}::{function}",
        "visibility": normalized.get("visibility"),
        "isEntry": normalized.get("isEntry"),
        "typeParameters": normalized.get("typeParameters") or [],
        "parameters": parameters,
        "return": normalized.get("return") or [],
    }


def wallet_balance(gateway, address: str) -> int:
    balance = gateway.get_balance(address) or {}
    return int(balance.get("totalBalance", 0))
