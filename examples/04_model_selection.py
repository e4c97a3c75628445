"""
Replicated Model Selection Example
==================================

Repeats the zero-inflation walkthrough on independent datasets and reports
how often each model has the lowest AIC.
"""

from zihurdle import PrintReporter, ZeroInflationStudy

study = ZeroInflationStudy(sample_size=500, n_groups=10).set_effects("pz=0.2")
result = study.replicate(n_replicates=100, progress_callback=PrintReporter())

print(f"\nFailed replicates: {result['n_failed']}")
study.plot_selection(result)
