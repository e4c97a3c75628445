"""Statistical simulation, sampling and fitting modules."""

from . import data_generation as data_generation
from . import distributions as distributions
from . import fitting as fitting
from . import hurdle as hurdle
