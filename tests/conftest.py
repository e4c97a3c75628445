"""
Shared pytest fixtures for ZIHurdle tests.
"""

import contextlib
import io

import numpy as np
import pytest

from tests.config import N_GROUPS, N_OBS, SEED


@pytest.fixture
def rng():
    """Fresh seeded generator."""
    return np.random.default_rng(SEED)


@pytest.fixture
def zi_data():
    """Zero-inflated dataset with the walkthrough defaults."""
    from zihurdle.stats.data_generation import generate_zero_inflated_data

    return generate_zero_inflated_data(sample_size=N_OBS, n_groups=N_GROUPS, pz=0.3, rng=SEED)


@pytest.fixture
def hurdle_data():
    """Hurdle dataset with the walkthrough defaults."""
    from zihurdle.stats.data_generation import generate_hurdle_data

    return generate_hurdle_data(sample_size=N_OBS, n_groups=N_GROUPS, rng=SEED)


@pytest.fixture
def small_zi_study():
    """Small zero-inflation study for fast end-to-end tests."""
    from zihurdle import ZeroInflationStudy

    return ZeroInflationStudy(sample_size=300, n_groups=10).set_effects("pz=0.3")


@pytest.fixture
def suppress_output():
    """Swallow printed AIC tables."""
    with contextlib.redirect_stdout(io.StringIO()):
        yield
