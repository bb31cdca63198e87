# test_xmath.py - t statistic, p-values and FDR.


import math
import numpy as np
import pytest

from juncdiff.utils.xmath import benjamini_hochberg, calc_pvalue_t, \
    calc_tscore


def test_bh_example():
    q = benjamini_hochberg([0.01, 0.04, 0.03, 0.005])
    assert q == pytest.approx([0.02, 0.04, 0.04, 0.02])


def test_bh_same_length_and_order():
    p = [0.5, 0.001, 0.2, 0.04, 0.04, 0.9]
    q = benjamini_hochberg(p)
    assert len(q) == len(p)
    # permuting the input permutes the output the same way.
    perm = [3, 0, 5, 1, 4, 2]
    q2 = benjamini_hochberg([p[i] for i in perm])
    assert q2 == pytest.approx([q[i] for i in perm])


def test_bh_monotone_and_bounded():
    rng = np.random.default_rng(1)
    p = rng.uniform(size = 50)
    q = benjamini_hochberg(p)
    order = np.argsort(p)
    assert np.all(np.diff(q[order]) >= -1e-12)
    assert np.all(q >= p - 1e-12)
    assert np.all(q <= 1.0)


def test_bh_empty():
    assert len(benjamini_hochberg([])) == 0


def test_bh_nan():
    with pytest.raises(ValueError):
        benjamini_hochberg([0.1, float("nan")])


def test_tscore():
    t = calc_tscore([0.9, 0.8], [0.2, 0.1])
    assert t == pytest.approx(-0.7 / math.sqrt(0.005))
    assert calc_tscore([0.2, 0.1], [0.9, 0.8]) == pytest.approx(-t)


def test_tscore_zero_variance():
    assert calc_tscore([0.5, 0.5], [0.5, 0.5]) == 0.0
    assert calc_tscore([0.2, 0.2], [0.7, 0.7]) == math.inf
    assert calc_tscore([0.7, 0.7], [0.2, 0.2]) == -math.inf


def test_pvalue_t():
    # with 2 degrees of freedom, the two-tailed p-value has a closed form.
    for t in (0.0, 1.0, -2.5, 9.9):
        expected = 1.0 - abs(t) / math.sqrt(t * t + 2)
        assert calc_pvalue_t(t, 2) == pytest.approx(expected)
    assert calc_pvalue_t(math.inf, 4) == 0.0
    assert calc_pvalue_t(-math.inf, 4) == 0.0
    assert calc_pvalue_t(0.0, 10) == pytest.approx(1.0)


def test_pvalue_deterministic():
    assert calc_pvalue_t(1.7, 5) == calc_pvalue_t(1.7, 5)
