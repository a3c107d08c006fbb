"""
Claimant identity primitives: keys, addresses and signatures.
"""
import hashlib
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives import serialization
from cryptography.exceptions import InvalidSignature
from Crypto.Hash import keccak

ADDRESS_LENGTH = 20


def generate_hash(data: bytes) -> bytes:
    """Keccak-256 digest, used for claim request ids."""
    return keccak.new(digest_bits=256, data=data).digest()

def generate_key_pair() -> tuple[ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey]:
    """New SECP256R1 key pair for a claimant."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    return private_key, private_key.public_key()

def serialize_public_key(public_key: ec.EllipticCurvePublicKey) -> str:
    return public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode('utf-8')

def deserialize_public_key(pem_data: str) -> ec.EllipticCurvePublicKey:
    return serialization.load_pem_public_key(pem_data.encode('utf-8'))

def public_key_to_address(public_key_pem: str) -> bytes:
    """
    Claimant address: first 20 bytes of sha256 over the DER-encoded key.

    This is the identity the airdrop engine records as claimed.
    """
    der_bytes = deserialize_public_key(public_key_pem).public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    )
    return hashlib.sha256(der_bytes).digest()[:ADDRESS_LENGTH]

def sign(private_key: ec.EllipticCurvePrivateKey, data: bytes) -> bytes:
    return private_key.sign(data, ec.ECDSA(hashes.SHA256()))

def verify_signature(public_key_pem: str, signature: bytes, data: bytes) -> bool:
    """True when `signature` over `data` was made by the key in `public_key_pem`."""
    try:
        deserialize_public_key(public_key_pem).verify(signature, data, ec.ECDSA(hashes.SHA256()))
        return True
    except (InvalidSignature, ValueError):
        return False
