"""
Authority Key Pair
==================

The authority's trapdoor s ∈ Z_r and its public images
pk1 = g^s ∈ G1 and pk2 = h^s ∈ G2.

Security:
---------
- s is required to add, delete and directly derive witnesses; it is
  never serialized by this package
- pk2 is what verifiers need for the pairing check
- pk1 is the seed value of every fresh accumulator
"""

from charm.toolbox.pairinggroup import PairingGroup, ZR, G1, G2


class AccumulatorPublicKey:
    """
    Published verification material (g, h, pk1, pk2).
    """

    def __init__(self, g: G1, h: G2, pk1: G1, pk2: G2):
        self.g = g
        self.h = h
        self.pk1 = pk1
        self.pk2 = pk2

    def __eq__(self, other):
        if not isinstance(other, AccumulatorPublicKey):
            return NotImplemented
        return (self.g == other.g and self.h == other.h
                and self.pk1 == other.pk1 and self.pk2 == other.pk2)

    def __repr__(self):
        return "AccumulatorPublicKey(g=%s, h=%s, pk1=%s, pk2=%s)" % (self.g, self.h, self.pk1, self.pk2)


class AccumulatorKeyPair:
    """
    The authority's trapdoor together with its public key.
    """

    def __init__(self, secret: ZR, public_key: AccumulatorPublicKey):
        self.secret = secret
        self.public_key = public_key

    @classmethod
    def generate(cls, group: PairingGroup, g: G1, h: G2, secret: ZR = None) -> "AccumulatorKeyPair":
        """
        Generate the accumulator key pair.

        Parameters
        ----------
        group : PairingGroup
            The pairing group
        g, h : G1, G2
            The published generators
        secret : ZR, optional
            Fixed trapdoor. Sampled with group.random(ZR) when omitted;
            only tests should pass one.

        Returns
        -------
        AccumulatorKeyPair
            With secret s, pk1 = g^s and pk2 = h^s.
        """
        s = secret if secret is not None else group.random(ZR)
        return cls(s, AccumulatorPublicKey(g, h, g ** s, h ** s))

    def __repr__(self):
        # never print the trapdoor
        return "AccumulatorKeyPair(public_key=%r)" % (self.public_key,)
