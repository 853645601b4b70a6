"""
Binning of numeric values into ordered groups.

This is the class and function reference of binable, for classifying numeric
values into the groups ``Low``, ``Medium``, and ``High`` by equal-width or
equal-frequency ranges.
"""


__version__ = "1.0.0"
