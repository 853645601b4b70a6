"""
Core implementation of :mod:`binable.classification`
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from pytools.api import AllTracker

from ._binning import (
    Binner,
    BinningMode,
    EqualFrequencyBinner,
    InvalidInputError,
    RangeBinner,
    _argsort,
)

log = logging.getLogger(__name__)

__all__ = ["Classifier"]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class Classifier:
    """
    Classifies numeric values into the three ordered groups ``Low``, ``Medium``,
    and ``High``.

    The binning mode determines how values are distributed across groups:

    - :attr:`.BinningMode.EQUAL_WIDTH`: the groups span ranges of equal width
    - :attr:`.BinningMode.EQUAL_FREQUENCY`: the groups hold equal numbers of values
    - :attr:`.BinningMode.NONE`: the groups span ranges of equal width, without
      rounding the highest value to a multiple of the number of groups

    The mode is set when creating the classifier, changed with the fluent setters
    :meth:`.set_equal_width` and :meth:`.set_equal_frequency`, or overridden for
    a single call to :meth:`.classify` or :meth:`.label`.
    """

    #: the names of the groups, ordered from lowest to highest values
    GROUPS = ("Low", "Medium", "High")

    def __init__(self, mode: BinningMode = BinningMode.NONE) -> None:
        """
        :param mode: the binning mode to use unless overridden per call
        """
        self._mode = _validate_mode(mode)

    @property
    def mode(self) -> BinningMode:
        """
        The binning mode used unless overridden per call.
        """
        return self._mode

    @property
    def equal_width(self) -> bool:
        """
        ``True`` if groups are required to span ranges of equal width.
        """
        return self._mode is BinningMode.EQUAL_WIDTH

    @property
    def equal_frequency(self) -> bool:
        """
        ``True`` if groups are required to hold equal numbers of values.
        """
        return self._mode is BinningMode.EQUAL_FREQUENCY

    def set_equal_width(self, enabled: bool = True) -> "Classifier":
        """
        Require the groups to span ranges of equal width.

        Enabling equal width disables equal frequency.

        :param enabled: whether to enable or disable equal width
        :return: ``self``
        """
        self._set_mode(BinningMode.EQUAL_WIDTH, enabled)
        return self

    def set_equal_frequency(self, enabled: bool = True) -> "Classifier":
        """
        Require the groups to hold equal numbers of values.

        Enabling equal frequency disables equal width.

        :param enabled: whether to enable or disable equal frequency
        :return: ``self``
        """
        self._set_mode(BinningMode.EQUAL_FREQUENCY, enabled)
        return self

    def with_mode(self, mode: BinningMode) -> "Classifier":
        """
        Create a new classifier with the given binning mode, leaving this classifier
        unchanged.

        :param mode: the binning mode of the new classifier
        :return: the new classifier
        """
        return type(self)(mode=mode)

    def classify(
        self, values: Sequence[Any], *, mode: Optional[BinningMode] = None
    ) -> Dict[str, List[Any]]:
        """
        Classify the given values into groups.

        All values are validated before any group is computed.

        :param values: the numeric values to classify
        :param mode: the binning mode for this call; defaults to :attr:`.mode`
        :return: a dictionary mapping each group name, in the order of
            :attr:`.GROUPS`, to the values in that group in ascending order
        :raises InvalidInputError: if any value is not a finite real number, or
            if the values cannot be distributed equally across the groups in
            equal frequency mode
        """
        values = _to_list(values)
        binner = self._fit_binner(values, mode=mode)

        groups: Dict[str, List[Any]] = {group: [] for group in Classifier.GROUPS}
        bin_indices = binner.bin_indices_

        # visit the values in ascending order so that each group is sorted
        for position in _argsort(values):
            groups[Classifier.GROUPS[bin_indices[position]]].append(values[position])

        return groups

    def label(
        self, values: Sequence[Any], *, mode: Optional[BinningMode] = None
    ) -> pd.Series:
        """
        Get the group name of each of the given values.

        :param values: the numeric values to label
        :param mode: the binning mode for this call; defaults to :attr:`.mode`
        :return: a series of ordered categorical group names, aligned with the
            values; keeps the index if the values are a series
        :raises InvalidInputError: if the values cannot be classified (see
            :meth:`.classify`)
        """
        index = values.index if isinstance(values, pd.Series) else None
        binner = self._fit_binner(_to_list(values), mode=mode)

        return pd.Series(
            pd.Categorical.from_codes(
                binner.bin_indices_,
                categories=list(Classifier.GROUPS),
                ordered=True,
            ),
            index=index,
            name="group",
        )

    def _set_mode(self, mode: BinningMode, enabled: bool) -> None:
        if enabled:
            self._mode = mode
        elif self._mode is mode:
            self._mode = BinningMode.NONE

    def _fit_binner(self, values: List[Any], *, mode: Optional[BinningMode]) -> Binner:
        mode = self._mode if mode is None else _validate_mode(mode)

        log.debug(f"classifying {len(values)} values in mode {mode.name}")

        binner: Binner
        if mode is BinningMode.EQUAL_FREQUENCY:
            binner = EqualFrequencyBinner()
        else:
            binner = RangeBinner(equal_width=mode is BinningMode.EQUAL_WIDTH)

        return binner.fit(values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(mode={self._mode})"


#
# Auxiliary functions
#


def _validate_mode(mode: BinningMode) -> BinningMode:
    if not isinstance(mode, BinningMode):
        raise TypeError(
            f"arg mode must be a {BinningMode.__name__}, "
            f"but got a {type(mode).__name__}"
        )
    return mode


def _to_list(values: Sequence[Any]) -> List[Any]:
    if isinstance(values, (str, bytes)):
        raise InvalidInputError(f"arg values must be a sequence of numbers: {values!r}")
    elif isinstance(values, pd.Series):
        return values.tolist()
    else:
        return list(values)


__tracker.validate()
