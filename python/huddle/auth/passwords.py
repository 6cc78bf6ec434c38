"""Password hashing for the identity store.

Uses argon2id via PyNaCl (libsodium bindings). Hashing happens explicitly in
the user-creation path; nothing hashes implicitly on save.

Security invariants:
- Only the encoded argon2id string is persisted (it embeds salt and cost params)
- Raw passwords and hashes are never logged
"""

import nacl.pwhash
from nacl.exceptions import InvalidkeyError

# Interactive cost: ~64 MiB memory, suitable for request-path hashing
OPSLIMIT = nacl.pwhash.argon2id.OPSLIMIT_INTERACTIVE
MEMLIMIT = nacl.pwhash.argon2id.MEMLIMIT_INTERACTIVE


def hash_password(raw_password: str) -> str:
    """Hash a raw password into an encoded argon2id string.

    Args:
        raw_password: The plaintext password.

    Returns:
        ASCII-encoded hash suitable for storage.
    """
    encoded = nacl.pwhash.argon2id.str(
        raw_password.encode("utf-8"),
        opslimit=OPSLIMIT,
        memlimit=MEMLIMIT,
    )
    return encoded.decode("ascii")


def verify_password(password_hash: str, raw_password: str) -> bool:
    """Check a raw password against a stored hash.

    Returns:
        True on match, False on mismatch or an unrecognized hash.
    """
    try:
        return nacl.pwhash.verify(password_hash.encode("ascii"), raw_password.encode("utf-8"))
    except InvalidkeyError:
        return False
