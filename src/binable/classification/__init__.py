"""
Classification of numeric values into the ordered groups ``Low``, ``Medium``, and
``High``.

The :class:`.Classifier` distributes values across groups either by ranges of
equal width, or by equal numbers of values per group. The underlying binners
:class:`.RangeBinner` and :class:`.EqualFrequencyBinner` can also be used
directly, to inspect the fitted bin boundaries.
"""

from ._binning import *
from ._classification import *
