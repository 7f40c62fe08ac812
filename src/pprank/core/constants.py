"""
Default parameters for the PageRank estimators.

This module centralizes the defaults shared by the random-walk, forward push
and FORA estimators so that every entry point and config dataclass agrees.
"""

# =============================================================================
# Damping
# =============================================================================

# Per-step restart probability. Walks stop with probability alpha at every
# step, so 0.15 corresponds to the classic 0.85 link-following factor.
DEFAULT_ALPHA: float = 0.15

# =============================================================================
# Monte-Carlo Random Walks
# =============================================================================

DEFAULT_ITERATIONS: int = 1_000_000

# Walks simulated together in one vectorised batch
DEFAULT_BATCH_SIZE: int = 65_536

DEFAULT_WORKERS: int = 1

# =============================================================================
# Forward Push
# =============================================================================

# Residue per unit of outgoing weight below which a node is not pushed
DEFAULT_PUSH_THRESHOLD: float = 1e-6

# =============================================================================
# FORA
# =============================================================================

# Target relative error for nodes whose PPR exceeds delta
DEFAULT_EPSILON: float = 0.5

# Coefficients of the FORA walk budget,
# omega = (EPS_LINEAR * eps + EPS_CONSTANT) * ln(2 / p_f) / (eps^2 * delta)
FORA_EPSILON_LINEAR: float = 2.0 / 3.0
FORA_EPSILON_CONSTANT: float = 2.0
