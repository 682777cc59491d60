"""Default bounds for every retrying loop in factual.

These are policies, not semantic contracts. Every function or fact that loops
accepts an explicit keyword argument which defaults to the constant here.
"""

from __future__ import annotations

# satisfy(): full mutate-then-check attempts before raising SatisfyFailed.
SATISFY_ATTEMPTS: int = 7

# and_(): fixed-point rounds over all sub-facts before raising MutationExhausted.
AND_ROUNDS: int = 10

# Random-search facts (ne, not_, distinct, brute, ...): candidates drawn from
# the entropy source before raising MutationExhausted.
BRUTE_ATTEMPTS: int = 100
