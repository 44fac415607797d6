"""
Ed25519 keys for Sui: custodial derivation, mnemonic recovery and addresses.

Custodial wallets are derived with HMAC-SHA256 over the user's identity fields,
keyed by the process-wide wallet secret. Anyone holding that secret can
recompute every custodial private key; the derivation is kept deterministic on
purpose so wallets never have to be stored. Transaction signing happens in
the pysui layer (see txbuilder).
"""
import base64
import hashlib
import hmac
import secrets
from dataclasses import dataclass

import nacl.signing
from bip_utils import Bip39SeedGenerator, Bip44, Bip44Changes, Bip44Coins
from mnemonic import Mnemonic

from .errors import ConfigurationError
from .utils import timestamp

ED25519_FLAG = 0x00

# 136 words taken from the start of the BIP-39 English list. Only used for the display
# mnemonic, which is NOT a BIP-39 encoding and cannot recover the key.
DISPLAY_WORDS = (
    "abandon", "ability", "able", "about", "above", "absent", "absorb", "abstract",
    "absurd", "abuse", "access", "accident", "account", "accuse", "achieve", "acid",
    "acoustic", "acquire", "across", "act", "action", "actor", "actress", "actual",
    "adapt", "add", "addict", "address", "adjust", "admit", "adult", "advance",
    "advice", "aerobic", "affair", "afford", "afraid", "again", "against", "agent",
    "agree", "ahead", "aim", "air", "airport", "aisle", "alarm", "album",
    "alcohol", "alert", "alien", "all", "alley", "allow", "almost", "alone",
    "alpha", "already", "also", "alter", "always", "amateur", "amazing", "among",
    "amount", "amused", "analyst", "anchor", "ancient", "anger", "angle", "angry",
    "animal", "ankle", "announce", "annual", "another", "answer", "antenna", "antique",
    "anxiety", "any", "apart", "apology", "appear", "apple", "approve", "april",
    "arcade", "arch", "arctic", "area", "arena", "argue", "arm", "armed",
    "armor", "army", "around", "arrange", "arrest", "arrive", "arrow", "art",
    "article", "artist", "artwork", "ask", "aspect", "assault", "asset", "assist",
    "assume", "asthma", "athlete", "atom", "attack", "attend", "attitude", "attract",
    "auction", "audit", "august", "aunt", "author", "auto", "autumn", "average",
    "avocado", "avoid", "awake", "aware", "away", "awesome", "awful", "awkward",
)


def sui_address(public_key: bytes) -> str:
    digest = hashlib.blake2b(bytes([ED25519_FLAG]) + public_key, digest_size=32).digest()
    return "0x" + digest.hex()


class Keypair:
    """An Ed25519 signing key plus its Sui address."""

    def __init__(self, seed: bytes):
        if len(seed) != 32:
            raise ConfigurationError(f"Ed25519 seed must be 32 bytes, got {len(seed)}")
        self._signing_key = nacl.signing.SigningKey(seed)

    @classmethod
    def generate(cls) -> "Keypair":
        return cls(nacl.signing.SigningKey.generate().encode())

    @property
    def seed(self) -> bytes:
        return self._signing_key.encode()

    @property
    def public_key(self) -> bytes:
        return self._signing_key.verify_key.encode()

    @property
    def address(self) -> str:
        return sui_address(self.public_key)


def keypair_from_mnemonic(phrase: str) -> Keypair:
    """BIP-39 seed, then the Sui path m/44'/784'/0'/0'/0'."""
    words = " ".join(phrase.split())
    if not Mnemonic("english").check(words):
        raise ConfigurationError("Invalid mnemonic phrase")

    seed_bytes = Bip39SeedGenerator(words).Generate()
    bip44_ctx = (
        Bip44.FromSeed(seed_bytes, Bip44Coins.SUI)
        .Purpose()
        .Coin()
        .Account(0)
        .Change(Bip44Changes.CHAIN_EXT)
        .AddressIndex(0)
    )
    return Keypair(bip44_ctx.PrivateKey().Raw().ToBytes())


def keypair_from_private_key(private_key: str) -> Keypair:
    """Accepts 64 hex characters (optionally 0x-prefixed) or a 128-char full secret."""
    value = private_key.strip()
    if value.startswith("0x"):
        value = value[2:]
    if len(value) not in (64, 128):
        raise ConfigurationError(
            f"Invalid private key format. Expected 64 hex characters, got {len(value)}"
        )
    try:
        key_bytes = bytes.fromhex(value)
    except ValueError:
        raise ConfigurationError("Private key is not a valid hex string")
    # full secret key is private || public
    return Keypair(key_bytes[:32])


def load_keypair(mnemonic=None, private_key=None) -> Keypair:
    if mnemonic:
        return keypair_from_mnemonic(mnemonic)
    if private_key:
        return keypair_from_private_key(private_key)
    raise ConfigurationError("Either mnemonic or privateKey must be provided")


def display_mnemonic(seed: bytes) -> str:
    """Twelve words picked from even seed bytes. Lossy, display only."""
    return " ".join(DISPLAY_WORDS[seed[i * 2] % len(DISPLAY_WORDS)] for i in range(12))


@dataclass(frozen=True)
class DerivedWallet:
    address: str
    public_key: bytes
    private_key_seed: bytes
    mnemonic: str
    mnemonic_kind: str = "display"

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "publicKey": base64.b64encode(self.public_key).decode("utf-8"),
            "privateKey": self.private_key_seed.hex(),
            "privateKeyBase64": base64.b64encode(self.private_key_seed).decode("utf-8"),
            "mnemonic": self.mnemonic,
            "mnemonicKind": self.mnemonic_kind,
        }


def derive_custodial_wallet(user_id, created_at, user_secret, wallet_secret) -> DerivedWallet:
    if not user_id:
        raise ConfigurationError("userDetails.id is required", fields=["id"])
    if not user_secret:
        raise ConfigurationError("userDetails.secret_key is required", fields=["secret_key"])

    seed_input = f"{user_id}:{created_at}:{user_secret}"
    seed = hmac.new(wallet_secret.encode("utf-8"), seed_input.encode("utf-8"), hashlib.sha256).digest()

    keypair = Keypair(seed)
    return DerivedWallet(
        address=keypair.address,
        public_key=keypair.public_key,
        private_key_seed=seed,
        mnemonic=display_mnemonic(seed),
    )


def create_standard_wallet() -> DerivedWallet:
    """Random wallet with a recoverable BIP-39 phrase."""
    mnemo = Mnemonic("english")
    words = mnemo.generate(strength=128)
    keypair = keypair_from_mnemonic(words)
    return DerivedWallet(
        address=keypair.address,
        public_key=keypair.public_key,
        private_key_seed=keypair.seed,
        mnemonic=words,
        mnemonic_kind="bip39",
    )


def complete_user_details(user_details: dict) -> dict:
    """Fill created_at and secret_key when the caller left them out."""
    completed = {
        "created_at": timestamp(),
        "secret_key": secrets.token_hex(32),
    }
    completed.update({k: v for k, v in user_details.items() if v is not None})
    return completed
