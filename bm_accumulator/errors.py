"""
Error Taxonomy
==============

All accumulator errors are local, synchronous and non-retryable: calling
again with identical inputs fails the same way.

- InvalidScalar: a required scalar inverse does not exist (the exponent
  reduces to 0 mod r). Raised before any division.
- DecodeError: malformed bytes handed to an element or scalar decoder.
- RecordTypeMismatch: record equality invoked across incompatible records.
- StaleWitness: a witness update was applied out of order.
- InvalidUpdate: an update announcement failed its signature or epoch check.

verify_witness never raises; rejection is reported as False only.
"""


class AccumulatorError(ValueError):
    """Base class for every error raised by this package."""


class InvalidScalar(AccumulatorError):
    """The exponent has no inverse in Z_r."""


class DecodeError(AccumulatorError):
    """Bytes do not decode to the expected group element or scalar."""


class RecordTypeMismatch(AccumulatorError):
    """Two records of incompatible shapes were compared."""


class StaleWitness(AccumulatorError):
    """The witness snapshot does not match the transition being applied."""


class InvalidUpdate(AccumulatorError):
    """An update announcement is unsigned, forged or out of sequence."""
