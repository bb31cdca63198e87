# xmath.py - mathmatics calculation.


import numpy as np

from scipy.stats import t as t_dist
from statsmodels.stats.multitest import multipletests



### Two-sample test

def calc_tscore(x1, x2):
    """Pooled-variance two-sample t statistic of `x2` versus `x1`.

    Parameters
    ----------
    x1 : numpy.ndarray
        The (1d) vector of the first group, e.g., control.
    x2 : numpy.ndarray
        The (1d) vector of the second group, e.g., experimental.
        Both groups should have at least 2 values.

    Returns
    -------
    float
        The t statistic, positive when `mean(x2) > mean(x1)`.
        When the pooled standard error is 0, it is 0 if the two means are
        equal, +/-inf otherwise.
    """
    x1 = np.asarray(x1, dtype = float)
    x2 = np.asarray(x2, dtype = float)
    n1, n2 = x1.shape[0], x2.shape[0]
    assert n1 >= 2 and n2 >= 2

    diff = np.mean(x2) - np.mean(x1)
    ss = np.sum((x1 - np.mean(x1)) ** 2) + np.sum((x2 - np.mean(x2)) ** 2)
    sp2 = ss / (n1 + n2 - 2)
    se = np.sqrt(sp2 * (1.0 / n1 + 1.0 / n2))

    # tolerate floating point noise of identical values.
    if se <= 1e-12:
        if abs(diff) <= 1e-12:
            return(0.0)
        return(float(np.inf) if diff > 0 else float(-np.inf))
    return(float(diff / se))


def calc_pvalue_t(tscore, df):
    """Two-tailed p-value of a t statistic.

    Parameters
    ----------
    tscore : float
        The t statistic; +/-inf is allowed.
    df : int
        Degrees of freedom, positive.

    Returns
    -------
    float
        The two-tailed p-value, within [0, 1].
    """
    assert df > 0
    if np.isnan(tscore):
        raise ValueError("t statistic is NaN.")
    if np.isinf(tscore):
        return(0.0)
    p = 2.0 * t_dist.sf(abs(tscore), df)
    return(float(min(p, 1.0)))



### Multiple testing

def benjamini_hochberg(pvalues):
    """Benjamini-Hochberg FDR adjustment.

    Parameters
    ----------
    pvalues : list of float or numpy.ndarray
        The raw p-values, in any order.

    Returns
    -------
    numpy.ndarray
        The adjusted q-values, with the same length and order as `pvalues`.
        The i-th smallest p-value of `m` is adjusted to
        `min_{j >= i} (p_j * m / j)`.
    """
    pvalues = np.asarray(pvalues, dtype = float)
    if pvalues.shape[0] == 0:
        return(np.array([], dtype = float))
    if np.any(np.isnan(pvalues)):
        raise ValueError("p-values contain NaN.")
    _, qvalues, _, _ = multipletests(
        pvalues, alpha = 0.05, method = "fdr_bh",
        is_sorted = False, returnsorted = False
    )
    return(qvalues)
