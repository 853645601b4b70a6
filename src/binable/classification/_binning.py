"""
Binners partitioning a sample of numeric values into three ordered bins.

:class:`RangeBinner` assigns values to bins by comparing them to a set of
boundaries derived from the lowest and highest value of the sample.
:class:`EqualFrequencyBinner` assigns values to bins by their rank, so that every
bin holds the same number of values.
"""

import logging
import math
import numbers
from abc import ABCMeta, abstractmethod
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence, Tuple, TypeVar

import numpy as np
import numpy.typing as npt
import pandas as pd

from pytools.api import AllTracker, inheritdoc
from pytools.fit import FittableMixin, fitted_only

log = logging.getLogger(__name__)

__all__ = [
    "BinningMode",
    "InvalidInputError",
    "Binner",
    "RangeBinner",
    "EqualFrequencyBinner",
]

#
# Type variables
#

T_Binner = TypeVar("T_Binner", bound="Binner")

#
# Constants
#

_N_BINS = 3


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class BinningMode(Enum):
    """
    The strategy used to distribute values across bins.
    """

    #: range-based bins, with the bin width derived from the highest value as is
    NONE = "none"

    #: range-based bins, with the highest value raised to the next integer
    #: divisible by the number of bins before deriving the bin width
    EQUAL_WIDTH = "equal_width"

    #: rank-based bins, each holding the same number of values
    EQUAL_FREQUENCY = "equal_frequency"


class InvalidInputError(ValueError):
    """
    Raised when values cannot be binned: either a value is not a finite real
    number, or the number of values cannot be distributed equally across bins.
    """


@inheritdoc(match="[see superclass]")
class Binner(FittableMixin[Sequence[Any]], metaclass=ABCMeta):
    """
    Abstract base class of binners.

    A binner is fitted to a sample of numeric values and assigns each of them to
    one of :attr:`.N_BINS` ordered bins, where lower bins hold lower values.
    """

    #: the number of bins
    N_BINS = _N_BINS

    def __init__(self) -> None:
        super().__init__()
        self._bin_indices: Optional[npt.NDArray[np.intp]] = None

    @property
    def n_bins(self) -> int:
        """
        The number of bins.
        """
        return self.N_BINS

    @property
    def is_fitted(self) -> bool:
        """[see superclass]"""
        return self._bin_indices is not None

    def fit(self: T_Binner, values: Sequence[Any], **fit_params: Any) -> T_Binner:
        """
        Fit this binner to the given values.

        :param values: the numeric values to bin
        :param fit_params: additional fit parameters (unused)
        :return: ``self``
        :raises InvalidInputError: if the values cannot be binned
        """

        # noinspection PyMethodFirstArgAssignment
        self: Binner

        # reset fit in case we get an exception along the way
        self._bin_indices = None
        self._reset_fit()

        values = _validate_values(values)
        array = _to_float_array(values)
        bin_indices = self._fit(values, array)

        assert len(bin_indices) == len(array), "one bin index per value"
        self._bin_indices = bin_indices

        return self

    @property
    @fitted_only
    def bin_indices_(self) -> npt.NDArray[np.intp]:
        """
        The index of the bin of each value the binner was fitted to, in the order
        of the values.
        """
        return self._bin_indices

    @property
    @fitted_only
    def frequencies_(self) -> npt.NDArray[np.intp]:
        """
        The number of values in each bin.
        """
        return np.bincount(self._bin_indices, minlength=self.N_BINS)

    @property
    @fitted_only
    def boundaries_(self) -> npt.NDArray[np.float64]:
        """
        The :attr:`.N_BINS` + 1 cut points delimiting the bins, in ascending order.
        """
        return self._get_boundaries()

    @abstractmethod
    def _fit(
        self, values: List[Any], array: npt.NDArray[np.float64]
    ) -> npt.NDArray[np.intp]:
        # fit to the validated values, given as is and as floats, and return the
        # bin index of each value
        pass

    @abstractmethod
    def _reset_fit(self) -> None:
        pass

    @abstractmethod
    def _get_boundaries(self) -> npt.NDArray[np.float64]:
        pass


class RangeBinner(Binner):
    """
    Bin numeric values into consecutive ranges of the same width.

    The width of the ranges is a third of the highest value, where the highest
    value is never less than zero. With ``equal_width=True``, the highest value is
    first rounded up to the nearest integer divisible by the number of bins.

    The first range starts at the lowest value. Each range includes its lower
    boundary and excludes its upper boundary; the last range is unbounded above,
    so that it also holds the highest value.

    For example, values ``[0.1, 2.8, 6.0, 9.0]`` yield boundaries
    ``[0.1, 3.1, 6.1, 9.1]`` and bins ``[0.1, 3.1), [3.1, 6.1), [6.1, inf)``.
    """

    def __init__(self, equal_width: bool = False) -> None:
        """
        :param equal_width: if ``True``, raise the highest value to the nearest
            integer divisible by the number of bins before deriving the range width
        """
        super().__init__()
        self.equal_width = equal_width
        self.lower_bound_: Optional[float] = None
        self.upper_bound_: Optional[float] = None
        self.width_: Optional[float] = None

    @property
    @fitted_only
    def bins_(self) -> List[Tuple[float, float]]:
        """
        The ``(lower, upper)`` range of each bin; the upper bound of the last bin
        is infinite.
        """
        boundaries = self._get_boundaries()
        return [
            *zip(boundaries[:-2].tolist(), boundaries[1:-1].tolist()),
            (float(boundaries[-2]), math.inf),
        ]

    @fitted_only
    def assign(self, values: Iterable[Any]) -> npt.NDArray[np.intp]:
        """
        Get the bin index for each of the given values.

        Values are matched against the ranges in ascending order and assigned to
        the first range they fall into, or to the last bin otherwise.

        :param values: the numeric values to assign to bins
        :return: the bin index of each value, in the order of the values
        :raises InvalidInputError: if any value is not a finite real number
        """
        return self._assign(_to_float_array(_validate_values(values)))

    def _fit(
        self, values: List[Any], array: npt.NDArray[np.float64]
    ) -> npt.NDArray[np.intp]:
        if len(array):
            lower_bound = float(array.min())
            upper_bound = max(0.0, float(array.max()))
        else:
            lower_bound = upper_bound = 0.0

        if self.equal_width:
            upper_bound = float(_ceil_to_multiple(upper_bound, self.N_BINS))

        self.lower_bound_ = lower_bound
        self.upper_bound_ = upper_bound
        self.width_ = upper_bound / self.N_BINS

        log.debug(
            f"fitted {type(self).__name__} to {len(values)} values: "
            f"boundaries={self._get_boundaries().tolist()}"
        )

        return self._assign(array)

    def _reset_fit(self) -> None:
        self.lower_bound_ = self.upper_bound_ = self.width_ = None

    def _get_boundaries(self) -> npt.NDArray[np.float64]:
        return self.lower_bound_ + self.width_ * np.arange(self.N_BINS + 1)

    def _assign(self, values: npt.NDArray[np.float64]) -> npt.NDArray[np.intp]:
        # the inner boundaries separate the bins; counting the inner boundaries
        # at or below a value yields its bin index
        boundaries = self._get_boundaries()
        bin_indices = np.searchsorted(boundaries[1:-1], values, side="right")

        # values below the first range fall through to the last bin
        bin_indices[values < boundaries[0]] = self.N_BINS - 1
        return bin_indices.astype(np.intp)


class EqualFrequencyBinner(Binner):
    """
    Bin numeric values by rank, such that each bin holds the same number of values.

    The values are sorted in ascending order and split into :attr:`.N_BINS`
    consecutive chunks of equal size. Equal values keep their relative order,
    so ties spanning two bins are split by position in the sample.

    The number of values must be divisible by the number of bins.
    """

    def __init__(self) -> None:
        super().__init__()
        self.bin_size_: Optional[int] = None
        self._boundaries: Optional[npt.NDArray[np.float64]] = None

    def _fit(
        self, values: List[Any], array: npt.NDArray[np.float64]
    ) -> npt.NDArray[np.intp]:
        n_values = len(values)
        if n_values % self.N_BINS != 0:
            raise InvalidInputError(
                f"cannot distribute {n_values} values equally across "
                f"{self.N_BINS} bins"
            )

        self.bin_size_ = bin_size = n_values // self.N_BINS

        order = _argsort(values)
        bin_indices = np.empty(n_values, dtype=np.intp)
        if bin_size:
            bin_indices[order] = np.arange(n_values) // bin_size

            sorted_values = array[order]
            self._boundaries = np.append(sorted_values[::bin_size], sorted_values[-1])
        else:
            self._boundaries = np.zeros(self.N_BINS + 1)

        log.debug(
            f"fitted {type(self).__name__} to {n_values} values: "
            f"bin_size={bin_size}, boundaries={self._boundaries.tolist()}"
        )

        return bin_indices

    def _reset_fit(self) -> None:
        self.bin_size_ = None
        self._boundaries = None

    def _get_boundaries(self) -> npt.NDArray[np.float64]:
        return self._boundaries


#
# Auxiliary functions
#


def _is_numeric(value: Any) -> bool:
    """
    Check whether a value can be binned.

    :param value: the value to check
    :return: ``True`` if the value is a finite real number; ``False`` for booleans
    """
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
        return False
    return isinstance(value, numbers.Integral) or math.isfinite(value)


def _validate_values(values: Iterable[Any]) -> List[Any]:
    """
    Validate the given values and collect them in a list.

    :param values: the values to validate
    :return: the values as a list
    :raises InvalidInputError: if any value is not a finite real number
    """
    if isinstance(values, (str, bytes)):
        raise InvalidInputError(f"arg values must be a sequence of numbers: {values!r}")

    if isinstance(values, pd.Series):
        values = values.tolist()
    elif not isinstance(values, list):
        values = list(values)

    for position, value in enumerate(values):
        if not _is_numeric(value):
            raise InvalidInputError(
                f"arg values contains non-numeric value {value!r} "
                f"at position {position}"
            )

    return values


def _to_float_array(values: List[Any]) -> npt.NDArray[np.float64]:
    try:
        return np.asarray(values, dtype=float)
    except OverflowError as e:
        raise InvalidInputError(
            "arg values contains an integer too large to convert to a float"
        ) from e


def _argsort(values: List[Any]) -> npt.NDArray[np.intp]:
    # compare the original values, since large integers lose precision as floats;
    # the sort is stable, so equal values keep their order
    return np.array(
        sorted(range(len(values)), key=values.__getitem__), dtype=np.intp
    )


def _ceil_to_multiple(value: float, divisor: int) -> int:
    # round up to the nearest integer, then on to the next multiple of divisor
    ceiling = math.ceil(value)
    return ceiling + (-ceiling) % divisor


__tracker.validate()
