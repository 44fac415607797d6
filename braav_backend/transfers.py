import logging

from .chain import TransactionPlan
from .effects import TransactionOutcome
from .errors import ConfigurationError, RemoteCallError
from .lookups import wallet_balance
from .utils import is_valid_sui_address
from .wallets import load_keypair

logger = logging.getLogger(__name__)


def transfer_sui(settings, gateway, recipient: str, amount: int) -> dict:
    """Send `amount` MIST from the configured wallet to `recipient`."""
    if not is_valid_sui_address(recipient):
        raise ConfigurationError(f"Invalid recipient address: {recipient}", fields=["recipient"])
    if amount <= 0:
        raise ConfigurationError("amount must be a positive number of MIST", fields=["amount"])
    if not (settings.mnemonic or settings.private_key):
        settings.require("mnemonic")

    keypair = load_keypair(mnemonic=settings.mnemonic, private_key=settings.private_key)
    balance = wallet_balance(gateway, keypair.address)
    logger.info("Treasury %s balance: %d MIST", keypair.address, balance)
    if balance < amount:
        raise RemoteCallError(f"Insufficient balance. Have: {balance}, Need: {amount}")

    plan = TransactionPlan()
    coin = plan.split_gas(amount)
    plan.transfer_objects([coin], recipient)

    outcome = TransactionOutcome.from_response(gateway.execute(keypair, plan, settings.gas_budget))
    outcome.require_success()
    logger.info("Transferred %d MIST to %s in %s", amount, recipient, outcome.digest)
    return {
        "transactionDigest": outcome.digest,
        "sender": keypair.address,
        "recipient": recipient,
        "amount": amount,
        "gasUsed": outcome.gas_used,
    }
