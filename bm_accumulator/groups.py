"""
Group Initialization and Setup
===============================

This module is the boundary to the algebraic group provider (charm-crypto).

According to charm-crypto documentation (https://jhuisi.github.io/charm/tutorial.html):
- PairingGroup('MNT224') provides asymmetric Type-3 pairings with 224-bit base field
- Alternative curves: 'BN254', 'SS512' (symmetric, but can be used)
- G1, G2 are the source groups; GT is the target group
- Pairing operation: pair(g1_elem, g2_elem) -> GT element

Everything the accumulator needs from the provider is composition (*),
inverse (** -1), exponentiation (**), equality, random sampling,
serialization and the pairing itself.
"""

import logging

from charm.toolbox.pairinggroup import PairingGroup, ZR, G1, G2, GT, pair

from .config import config

logger = logging.getLogger(__name__)

FALLBACK_CURVES = ('BN254', 'SS512')


def setup(group_name: str = None) -> dict:
    """
    Initialize the pairing group used by the accumulator.

    Parameters
    ----------
    group_name : str, optional
        The pairing curve identifier. Defaults to ``config.pairing_curve``
        (``MNT224`` unless ``ACC_PAIRING_CURVE`` is set).
        Supported curves:
        - 'MNT224': Asymmetric Type-3, 224-bit base field (preferred)
        - 'BN254': Asymmetric Type-3, 254-bit base field (fallback)
        - 'SS512': Symmetric, 512-bit base field (fallback)

    Returns
    -------
    dict
        A dictionary containing:
        - 'group': The PairingGroup object
        - 'group_name': The name of the curve used
        - 'G1', 'G2', 'GT', 'ZR': The charm type constants
        - 'pair': The pairing function

    Examples
    --------
    >>> params = setup('MNT224')
    >>> group = params['group']
    >>> g, h = get_generators(group)
    >>> e_result = pair(g, h)  # e_result is in GT
    """
    group_name = group_name or config.pairing_curve
    try:
        group = PairingGroup(group_name)
    except Exception as e:
        last_error = e
        group = None
        for fallback in FALLBACK_CURVES:
            if fallback == group_name:
                continue
            logger.warning("%s not available (%s), falling back to %s",
                           group_name, last_error, fallback)
            try:
                group = PairingGroup(fallback)
                group_name = fallback
                break
            except Exception as e2:
                last_error = e2
        if group is None:
            raise last_error

    logger.debug("Initialized pairing group %s", group_name)
    return {
        'group': group,
        'group_name': group_name,
        'G1': G1,
        'G2': G2,
        'GT': GT,
        'ZR': ZR,
        'pair': pair,
    }


def get_generators(group: PairingGroup) -> tuple:
    """
    Sample the public generators g ∈ G1 and h ∈ G2.

    Parameters
    ----------
    group : PairingGroup
        The initialized pairing group

    Returns
    -------
    tuple
        (g, h), drawn from charm's secure random source.

    Notes
    -----
    The generators are generated once per authority and published together
    with its public key.
    """
    g = group.random(G1)
    h = group.random(G2)
    return g, h


def group_order(group: PairingGroup) -> int:
    """Return the prime order r shared by G1, G2, GT and Z_r."""
    return int(group.order())
