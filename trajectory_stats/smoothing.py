"""
Boundary-truncated moving averages.

Edge samples are averaged over the neighbours that exist rather than padded
with zeros, so the first and last values of a series are not pulled toward 0.
NaN entries are skipped in every neighbourhood and stay NaN in the output.
"""

import numpy as np
import pandas as pd


def moving_average(values: np.ndarray, window: int) -> np.ndarray:
    """
    Symmetric moving average with a truncated window at the boundaries.

    output[i] = mean(values[i - window // 2 : i + window // 2 + 1]) over the
    indices that exist and are not NaN.

    Args:
        values: 1-D array of values
        window: Odd window size (1 returns a copy)

    Returns:
        Array of the same length as values
    """
    if window < 1 or window % 2 == 0:
        raise ValueError(f"Moving average window must be a positive odd integer, got {window}")

    values = np.asarray(values, dtype=float)
    if len(values) == 0:
        return values.copy()

    rolling = pd.Series(values).rolling(window, center=True, min_periods=1)
    result = rolling.mean().to_numpy(copy=True)
    result[np.isnan(values)] = np.nan
    return result


def trailing_average(values: np.ndarray, window: int) -> np.ndarray:
    """Mean of the current value and up to window - 1 preceding values."""
    if window < 1:
        raise ValueError(f"Trailing window must be positive, got {window}")

    values = np.asarray(values, dtype=float)
    if len(values) == 0:
        return values.copy()
    return pd.Series(values).rolling(window, min_periods=1).mean().to_numpy(copy=True)
