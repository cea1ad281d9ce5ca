"""
Initialization Vectors — Per-policy IVs pinned in document annotations.

The IV for a (policy, cluster) pair is generated once and stored, base64
encoded, in the replicated policy's annotations. Re-encrypting the same
plaintext with the same key and IV yields the same ciphertext, so repeated
reconciliations do not churn the replicated policy.
"""
import base64
import binascii
import logging
from collections.abc import MutableMapping

from .config import IV_ANNOTATION, IV_SIZE
from .keys import generate_random_bytes

logger = logging.getLogger("propagator.encryption")


def _decode_iv(value: str, size: int) -> bytes | None:
    try:
        iv = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return None
    if len(iv) != size:
        return None
    return iv


def get_initialization_vector(
    policy_name: str,
    cluster_name: str,
    annotations: MutableMapping[str, str],
    *,
    annotation: str = IV_ANNOTATION,
    size: int = IV_SIZE,
) -> bytes:
    """Return the IV pinned in ``annotations``, generating one if needed.

    A missing IV, or one that is not valid base64 of exactly ``size`` bytes, is
    replaced by a fresh random IV written back into ``annotations``.

    Args:
        policy_name: Name of the replicated policy (used for logging).
        cluster_name: Target cluster of the policy (used for logging).
        annotations: Policy annotations; updated in place on generation.
        annotation: Annotation key holding the base64 IV.
        size: IV length in bytes.

    Returns:
        The initialization vector (16 bytes by default).

    Raises:
        RandomSourceError: If a new IV could not be generated.
    """
    current = annotations.get(annotation)
    if current is not None:
        iv = _decode_iv(current, size)
        if iv is not None:
            return iv
        logger.warning(
            "Replacing invalid initialization vector on policy=%s cluster=%s",
            policy_name, cluster_name,
        )

    iv = generate_random_bytes(size)
    annotations[annotation] = base64.b64encode(iv).decode("ascii")
    logger.debug(
        "Generated initialization vector for policy=%s cluster=%s",
        policy_name, cluster_name,
    )
    return iv
