"""Package‑wide thresholds and fixed parameters."""

WORD_BITS = 32
WORD_MASK = 0xFFFFFFFF

# Sampled values this close to 2**32 - 1 are redrawn.
OVERFLOW_GUARD = 100

# Deterministic Miller–Rabin witnesses for every n < 4_759_123_141.
MILLER_RABIN_WITNESSES: tuple[int, ...] = (2, 7, 61)

# Transform rotations used by the diffusion evaluator.
TRANSFORM_ROTATE_IN = 5
TRANSFORM_ROTATE_OUT = 3

# Candidate gates
MIN_HAMMING_WEIGHT = 12
MAX_HAMMING_WEIGHT = 20
MIN_PAIR_HAMMING_DISTANCE = 12

# Statistical test thresholds
MIN_P_VALUE = 0.01
MAX_P_VALUE = 0.99
MAX_BIT_FREQUENCY_DEVIATION = 0.15
MIN_RUNS_Z_SCORE = -3.0
MAX_RUNS_Z_SCORE = 3.0
RUNS_Z_SCALE = 6.0
MAX_SERIAL_CORRELATION = 0.5
MAX_AUTOCORRELATION_SHIFT = 15
EXPECTED_LINEAR_COMPLEXITY = 16.0
MIN_LINEAR_COMPLEXITY = 12

# Share of final statistical tests allowed to fail (1 in 5).
MAX_FAILED_TEST_FRACTION = 0.2

# Low‑complexity patterns; a value equal to one of these or its complement
# is a weak key.
WEAK_PATTERNS: dict[int, str] = {
    0xAAAAAAAA: "alternating bits",
    0x55555555: "alternating bits",
    0x33333333: "repeating pairs",
    0xCCCCCCCC: "repeating pairs",
    0x0F0F0F0F: "repeating nibbles",
    0xF0F0F0F0: "repeating nibbles",
}

SELECTION_STRICT = "strict"
SELECTION_SECOND_BEST = "second_best"
SELECTION_FALLBACKS = (SELECTION_STRICT, SELECTION_SECOND_BEST)

# Reduced workload used by ``--quick``.
QUICK_CANDIDATES = 10
QUICK_AVALANCHE_CASES = 100

__all__ = [
    "WORD_BITS",
    "WORD_MASK",
    "OVERFLOW_GUARD",
    "MILLER_RABIN_WITNESSES",
    "TRANSFORM_ROTATE_IN",
    "TRANSFORM_ROTATE_OUT",
    "MIN_HAMMING_WEIGHT",
    "MAX_HAMMING_WEIGHT",
    "MIN_PAIR_HAMMING_DISTANCE",
    "MIN_P_VALUE",
    "MAX_P_VALUE",
    "MAX_BIT_FREQUENCY_DEVIATION",
    "MIN_RUNS_Z_SCORE",
    "MAX_RUNS_Z_SCORE",
    "RUNS_Z_SCALE",
    "MAX_SERIAL_CORRELATION",
    "MAX_AUTOCORRELATION_SHIFT",
    "EXPECTED_LINEAR_COMPLEXITY",
    "MIN_LINEAR_COMPLEXITY",
    "MAX_FAILED_TEST_FRACTION",
    "WEAK_PATTERNS",
    "SELECTION_STRICT",
    "SELECTION_SECOND_BEST",
    "SELECTION_FALLBACKS",
    "QUICK_CANDIDATES",
    "QUICK_AVALANCHE_CASES",
]
