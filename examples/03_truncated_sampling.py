"""
Zero-Truncated Poisson Sampling Example
=======================================

Draws zero-truncated Poisson deviates by inverse-CDF sampling and
compares the empirical distribution with the theoretical one.
"""

import numpy as np

from zihurdle.stats.distributions import sample_truncated_poisson, truncated_poisson_cdf, truncated_poisson_mean

rng = np.random.default_rng(2137)
lam = 2.0

draws = sample_truncated_poisson(lam, rng, size=100_000)
print(f"Smallest draw: {draws.min()}")
print(f"Empirical mean: {draws.mean():.4f}  theoretical: {truncated_poisson_mean(lam):.4f}")

ks = np.arange(1, 11)
empirical = np.array([(draws <= k).mean() for k in ks])
theoretical = truncated_poisson_cdf(ks, lam)
print(f"Max CDF difference: {np.max(np.abs(empirical - theoretical)):.5f}")

# Tiny rates still return 1, never 0
print(f"lambda=1e-12 draws: {np.unique(sample_truncated_poisson(1e-12, rng, size=1000))}")
