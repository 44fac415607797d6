"""
Typed view of a transaction execution response.

Object changes are decoded into one dataclass per change kind and created
objects are matched on their parsed struct tag, never on a substring of the
raw type string.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .errors import ObjectNotFoundError, RemoteCallError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StructTag:
    address: str
    module: str
    name: str
    type_params: tuple = ()

    @classmethod
    def parse(cls, type_str: str) -> "StructTag":
        type_str = type_str.strip()
        head, params = type_str, ()
        if "<" in type_str and type_str.endswith(">"):
            start = type_str.index("<")
            head = type_str[:start]
            params = tuple(_parse_param(p) for p in _split_type_params(type_str[start + 1:-1]))
        parts = head.split("::")
        if len(parts) != 3:
            raise ValueError(f"Not a struct type: {type_str}")
        return cls(normalize_address(parts[0]), parts[1], parts[2], params)

    def matches(self, name: str, module: Optional[str] = None, address: Optional[str] = None) -> bool:
        if self.name != name:
            return False
        if module is not None and self.module != module:
            return False
        if address is not None and self.address != normalize_address(address):
            return False
        return True

    def __str__(self):
        text = f"{self.address}::{self.module}::{self.name}"
        if self.type_params:
            text += "<" + ", ".join(str(p) for p in self.type_params) + ">"
        return text


def _parse_param(text: str):
    text = text.strip()
    try:
        return StructTag.parse(text)
    except ValueError:
        # primitives and vectors such as u64 or vector<u8> stay plain strings
        return text


def _split_type_params(text: str) -> list:
    params, depth, current = [], 0, ""
    for ch in text:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        if ch == "," and depth == 0:
            params.append(current)
            current = ""
        else:
            current += ch
    if current.strip():
        params.append(current)
    return params


def normalize_address(address: str) -> str:
    value = address.lower()
    if value.startswith("0x"):
        value = value[2:]
    return "0x" + value.rjust(64, "0")


def owner_address(owner) -> Optional[str]:
    if isinstance(owner, dict):
        return owner.get("AddressOwner") or owner.get("ObjectOwner")
    return None


@dataclass(frozen=True)
class Created:
    object_id: str
    object_type: StructTag
    owner: Optional[str] = None


@dataclass(frozen=True)
class Mutated:
    object_id: str
    object_type: StructTag
    owner: Optional[str] = None


@dataclass(frozen=True)
class Transferred:
    object_id: str
    object_type: StructTag
    recipient: Optional[str] = None


@dataclass(frozen=True)
class Deleted:
    object_id: str
    object_type: StructTag


@dataclass(frozen=True)
class Wrapped:
    object_id: str
    object_type: StructTag


@dataclass(frozen=True)
class Published:
    package_id: str
    modules: tuple = ()


ObjectChange = Union[Created, Mutated, Transferred, Deleted, Wrapped, Published]


def decode_object_change(change: dict) -> Optional[ObjectChange]:
    kind = change.get("type")
    if kind == "published":
        return Published(change["packageId"], tuple(change.get("modules") or ()))

    object_id = change.get("objectId")
    object_type = change.get("objectType")
    if not object_id or not object_type:
        return None
    try:
        tag = StructTag.parse(object_type)
    except ValueError:
        logger.warning("Skipping object change with unparseable type %s", object_type)
        return None

    if kind == "created":
        return Created(object_id, tag, owner_address(change.get("owner")))
    if kind == "mutated":
        return Mutated(object_id, tag, owner_address(change.get("owner")))
    if kind == "transferred":
        return Transferred(object_id, tag, owner_address(change.get("recipient")))
    if kind == "deleted":
        return Deleted(object_id, tag)
    if kind == "wrapped":
        return Wrapped(object_id, tag)
    return None


@dataclass
class TransactionOutcome:
    digest: Optional[str]
    succeeded: bool
    error: Optional[str] = None
    object_changes: List[ObjectChange] = field(default_factory=list)
    gas_used: Optional[dict] = None
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, response: dict) -> "TransactionOutcome":
        effects = response.get("effects") or {}
        status = effects.get("status") or {}
        changes = []
        for change in response.get("objectChanges") or []:
            decoded = decode_object_change(change)
            if decoded is not None:
                changes.append(decoded)
        return cls(
            digest=response.get("digest"),
            succeeded=status.get("status") == "success",
            error=status.get("error"),
            object_changes=changes,
            gas_used=effects.get("gasUsed"),
            raw=response,
        )

    def require_success(self) -> "TransactionOutcome":
        if not self.succeeded:
            raise RemoteCallError(f"Transaction failed: {self.error or 'Unknown error'}", digest=self.digest)
        return self

    def created(self, name: str, module: Optional[str] = None, owner: Optional[str] = None,
                inner: Optional[str] = None) -> List[Created]:
        found = []
        for change in self.object_changes:
            if not isinstance(change, Created) or not change.object_type.matches(name, module):
                continue
            if owner is not None and (change.owner is None or normalize_address(change.owner) != normalize_address(owner)):
                continue
            if inner is not None and not any(getattr(p, "name", None) == inner for p in change.object_type.type_params):
                continue
            found.append(change)
        return found

    def find_created(self, name: str, module: Optional[str] = None, owner: Optional[str] = None,
                     inner: Optional[str] = None) -> str:
        found = self.created(name, module, owner, inner)
        if not found:
            label = f"{module}::{name}" if module else name
            raise ObjectNotFoundError(f"{label} object not found in transaction {self.digest}", digest=self.digest)
        return found[0].object_id
