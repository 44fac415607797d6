import logging
from dataclasses import dataclass
from typing import Optional

from .chain import Obj, Pure, TransactionPlan
from .effects import TransactionOutcome
from .errors import ConfigurationError, RemoteCallError
from .utils import is_valid_sui_address
from .wallets import load_keypair

logger = logging.getLogger(__name__)

MIST_PER_SUI = 1_000_000_000

NOT_APPLIED = "not_applied"
DECIDED = "decided"
UNEXPECTED = "unexpected"
UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class VettingStatus:
    applicant_address: str
    state: str
    approved: Optional[bool] = None
    error: Optional[str] = None

    @property
    def has_applied(self) -> bool:
        return self.state == DECIDED

    @property
    def pending(self) -> bool:
        # the contract records false on submission and true on approval
        return self.state == DECIDED and not self.approved

    @property
    def message(self) -> str:
        if self.state == DECIDED:
            return f"Approval status: {str(self.approved).lower()}"
        if self.state == UNEXPECTED:
            return "Unexpected return value"
        return "This address has not applied"

    def to_dict(self) -> dict:
        data = {
            "applicantAddress": self.applicant_address,
            "hasApplied": self.has_applied,
            "isApproved": self.approved,
            "message": self.message,
            "queryFailed": self.state == UNAVAILABLE,
        }
        if self.error:
            data["error"] = self.error
        return data


def _is_byte_list(value) -> bool:
    return isinstance(value, (list, tuple)) and all(
        isinstance(b, int) and not isinstance(b, bool) for b in value
    )


def decode_vetting_status(applicant_address: str, encoded) -> VettingStatus:
    """Decode the BCS bytes of an Option<bool> vetting record. Total over any input."""
    if encoded is None:
        return VettingStatus(applicant_address, NOT_APPLIED)
    if isinstance(encoded, bytes) or _is_byte_list(encoded):
        value = list(encoded)
        if not value or value == [0]:
            return VettingStatus(applicant_address, NOT_APPLIED)
        if len(value) == 2 and value[0] == 1:
            return VettingStatus(applicant_address, DECIDED, approved=value[1] == 1)
    logger.warning("Unexpected vetting status encoding for %s: %r", applicant_address, encoded)
    return VettingStatus(applicant_address, UNEXPECTED)


def _vetting_target(settings, function: str) -> str:
    return f"{settings.package_id}::vetting::{function}"


def status_of_vetting(settings, gateway, applicant_address: str) -> VettingStatus:
    """Never raises once configured: query failures come back as an UNAVAILABLE status."""
    settings.require("package_id", "vetting_table_id")

    plan = TransactionPlan()
    plan.move_call(
        _vetting_target(settings, "status_of_vetting"),
        [Obj(settings.vetting_table_id), Pure.address(applicant_address)],
    )

    try:
        result = gateway.dev_inspect(applicant_address, plan)
    except Exception as e:
        logger.error("Error querying status: %s", e)
        return VettingStatus(applicant_address, UNAVAILABLE, error=str(e))

    effects = result.get("effects") if isinstance(result, dict) else None
    status = effects.get("status") if isinstance(effects, dict) else None
    if not isinstance(status, dict) or status.get("status") != "success":
        error = status.get("error") if isinstance(status, dict) else None
        return VettingStatus(applicant_address, UNAVAILABLE, error=error or "query did not succeed")

    try:
        encoded = result["results"][0]["returnValues"][0][0]
    except (KeyError, IndexError, TypeError):
        encoded = None
    return decode_vetting_status(applicant_address, encoded)


def _check_balance(gateway, address: str) -> None:
    try:
        balance = gateway.get_balance(address)
        total = int(balance.get("totalBalance", 0))
    except Exception as e:
        logger.warning("Could not check balance: %s", e)
        return
    if total == 0:
        raise RemoteCallError(f"No SUI tokens found in wallet {address}. Please fund your wallet first.")
    logger.info("Wallet %s holds %s SUI", address, total / MIST_PER_SUI)


def submit_for_vetting(settings, gateway, wallet_credentials: Optional[dict] = None) -> dict:
    settings.require("package_id", "vetting_table_id")

    if wallet_credentials:
        keypair = load_keypair(
            mnemonic=wallet_credentials.get("mnemonic"),
            private_key=wallet_credentials.get("privateKey"),
        )
    elif settings.mnemonic or settings.private_key:
        keypair = load_keypair(mnemonic=settings.mnemonic, private_key=settings.private_key)
    else:
        raise ConfigurationError(
            "Either MNEMONIC or PRIVATE_KEY must be set, or provide walletCredentials",
            fields=["MNEMONIC", "PRIVATE_KEY"],
        )

    address = keypair.address
    _check_balance(gateway, address)

    plan = TransactionPlan()
    plan.move_call(_vetting_target(settings, "submit_for_vetting"), [Obj(settings.vetting_table_id)])

    outcome = TransactionOutcome.from_response(gateway.execute(keypair, plan, settings.gas_budget))
    outcome.require_success()
    logger.info("Vetting submitted for %s in %s", address, outcome.digest)
    return {
        "success": True,
        "transactionDigest": outcome.digest,
        "applicantAddress": address,
        "message": "Vetting submission successful",
    }


def approve_vetting(settings, gateway, applicant_address: str) -> dict:
    settings.require("package_id", "vetting_table_id", "admin_cap_id", "mnemonic")
    if not is_valid_sui_address(applicant_address):
        raise ConfigurationError(f"Invalid applicant address: {applicant_address}", fields=["applicantAddress"])

    keypair = load_keypair(mnemonic=settings.mnemonic)

    plan = TransactionPlan()
    plan.move_call(
        _vetting_target(settings, "approve_vetting"),
        [Obj(settings.admin_cap_id), Obj(settings.vetting_table_id), Pure.address(applicant_address)],
    )

    outcome = TransactionOutcome.from_response(gateway.execute(keypair, plan, settings.gas_budget))
    outcome.require_success()
    logger.info("Vetting approved for %s in %s", applicant_address, outcome.digest)
    return {
        "success": True,
        "transactionDigest": outcome.digest,
        "applicantAddress": applicant_address,
        "message": "Vetting approved successfully",
    }


def initialize_vetting_table(settings, gateway) -> str:
    settings.require("package_id", "admin_cap_id", "mnemonic")
    keypair = load_keypair(mnemonic=settings.mnemonic)

    plan = TransactionPlan()
    plan.move_call(_vetting_target(settings, "initialize_vetting_table"), [Obj(settings.admin_cap_id)])

    outcome = TransactionOutcome.from_response(gateway.execute(keypair, plan, settings.gas_budget))
    outcome.require_success()
    table_id = outcome.find_created("VettingTable")
    logger.info("VettingTable Object ID: %s", table_id)
    return table_id
