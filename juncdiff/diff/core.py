# core.py - differential junction statistics.


import numpy as np
import pandas as pd

from logging import info
from .config import GROUP_CONTROL, GROUP_EXP
from ..utils.junction import SITE_ACCEPTOR, SITE_DONOR, SITE_TYPES
from ..utils.xerror import InsufficientDataError
from ..utils.xmath import benjamini_hochberg, calc_pvalue_t



def calc_pvalue(tscore, site_type, groups):
    """Two-tailed p-value of the t statistic of one site test.

    Parameters
    ----------
    tscore : float
        The t statistic returned in :class:`~diff.counts.JunctionStats`.
    site_type : {"donor", "acceptor"}
        The site type of the test. Both site types use the same degrees of
        freedom.
    groups : list of int
        Group label of each sample.

    Returns
    -------
    float
        The p-value, from Student's t distribution with
        `n_control + n_exp - 2` degrees of freedom.
    """
    if site_type not in SITE_TYPES:
        raise ValueError("invalid site type '%s'." % site_type)
    groups = np.asarray(groups)
    n_ctrl = int(np.sum(groups == GROUP_CONTROL))
    n_exp = int(np.sum(groups == GROUP_EXP))
    if n_ctrl < 2 or n_exp < 2:
        raise InsufficientDataError(
            "both groups need at least 2 samples (control %d, "
            "experimental %d)." % (n_ctrl, n_exp))
    return(calc_pvalue_t(tscore, n_ctrl + n_exp - 2))



def calc_site_tests(count_set, groups, site_type):
    """Test every valid junction at one site type.

    Parameters
    ----------
    count_set : diff.counts.JunctionCountSet
        The finalized junction counts.
    groups : list of int
        Group label of each sample.
    site_type : {"donor", "acceptor"}
        The site type to be tested.

    Returns
    -------
    list of tuple
        One `(JunctionKey, JunctionStats, pvalue, qvalue)` tuple per valid
        junction, in the junction order of `count_set`.
        The q-values are Benjamini-Hochberg adjusted within this site type.
    """
    tests = []
    for junc in count_set:
        if not junc.is_valid(site_type):
            continue
        stats = junc.calc_stats(site_type, groups)
        pvalue = calc_pvalue(stats.tscore, site_type, groups)
        tests.append((junc.key, stats, pvalue))

    qvalues = benjamini_hochberg([t[2] for t in tests])
    res = [(key, stats, pvalue, float(q)) for (key, stats, pvalue), q in \
        zip(tests, qvalues)]
    info("%d %s tests done." % (len(res), site_type))
    return(res)



def calc_diff_table(count_set, groups):
    """Build the per-junction table.

    Parameters
    ----------
    count_set : diff.counts.JunctionCountSet
        The finalized junction counts.
    groups : list of int
        Group label of each sample.

    Returns
    -------
    pandas.DataFrame
        One row per (junction, site type) test, with columns "junction",
        "strand", "site_type", "site", "<sample>_counts",
        "<sample>_site_counts", "<sample>_site_pct", "control_pct",
        "exp_pct", "pct_diff", "tscore", "pvalue" and "fdr".
        For each junction, the donor row (if valid) precedes the acceptor
        row (if valid); junctions follow the order of `count_set`.
    """
    samples = count_set.samples
    columns = ["junction", "strand", "site_type", "site"]
    columns += ["%s_counts" % s for s in samples]
    columns += ["%s_site_counts" % s for s in samples]
    columns += ["%s_site_pct" % s for s in samples]
    columns += ["control_pct", "exp_pct", "pct_diff", "tscore", "pvalue",
                "fdr"]

    site_res = {}
    for site_type in SITE_TYPES:
        site_res[site_type] = {key: (stats, p, q) for key, stats, p, q in \
            calc_site_tests(count_set, groups, site_type)}

    rows = []
    for junc in count_set:
        key = junc.key
        for site_type in (SITE_DONOR, SITE_ACCEPTOR):
            if key not in site_res[site_type]:
                continue
            stats, pvalue, qvalue = site_res[site_type][key]
            row = [key.name, key.strand, site_type, key.get_site(site_type).name]
            row.extend([int(x) for x in junc.counts])
            row.extend([int(x) for x in junc.get_site_total(site_type)])
            row.extend([float(x) for x in junc.get_site_pct(site_type)])
            row.extend([stats.control_pct, stats.exp_pct, stats.pct_diff,
                        stats.tscore, pvalue, qvalue])
            rows.append(row)

    df = pd.DataFrame(rows, columns = columns)
    return(df)



def count_unique_junctions(df):
    """Number of distinct junctions in the per-junction table."""
    if df.shape[0] <= 0:
        return(0)
    return(int(df[["junction", "strand"]].drop_duplicates().shape[0]))
