# counts.py - junction count aggregation across samples.


import anndata as ad
import numpy as np
import os
import pandas as pd

from logging import debug, info
from .config import GROUP_CONTROL, GROUP_EXP, \
    check_filters, check_groups, check_sample_ids
from .io import load_junction_counts
from ..utils.base import strip_suffix
from ..utils.junction import SITE_ACCEPTOR, SITE_DONOR, SITE_TYPES
from ..utils.xerror import ConfigurationError, InsufficientDataError
from ..utils.xmath import calc_tscore


SAMPLE_NAME_SUFFIXES = (".gz", ".tsv", ".txt", ".counts", ".junctions")



class JunctionDiffSample:
    def __init__(self, sample_name, group, filename):
        self.sample_name = sample_name
        self.group = group
        self.filename = filename


class JunctionDiffStats:
    """Run-level summary of the count aggregation.

    Attributes
    ----------
    total_junctions : int
        Number of distinct junctions observed in any sample.
    filtered_junctions : int
        Number of junctions removed by the edit-distance filter.
    valid_donors : int
        Number of junctions usable for the donor test.
    valid_acceptors : int
        Number of junctions usable for the acceptor test.
    final_junctions : int
        Number of junctions usable for at least one test.
    samples : list of JunctionDiffSample
        The samples, in input order.
    """
    def __init__(self, samples):
        self.samples = samples
        self.total_junctions = 0
        self.filtered_junctions = 0
        self.valid_donors = 0
        self.valid_acceptors = 0
        self.final_junctions = 0


class JunctionStats:
    """Statistics of one junction at one site type."""
    def __init__(self, control_pct, exp_pct, pct_diff, tscore):
        self.control_pct = control_pct
        self.exp_pct = exp_pct
        self.pct_diff = pct_diff
        self.tscore = tscore



class JunctionCounts:
    """Per-sample counts of one junction.

    The counts are filled by :meth:`JunctionCountSet.add_count` and the
    site totals, percentages and validity flags are set by
    :meth:`JunctionCountSet.finalize`, after which all arrays are read-only.
    """
    def __init__(self, key, n_samples):
        self.key = key

        # counts : numpy.ndarray of int
        #   Raw read count in each sample.
        self.counts = np.zeros(n_samples, dtype = np.int64)

        # ed_sums : numpy.ndarray of float
        #   Sum of `count * edit_distance` in each sample.
        self.ed_sums = np.zeros(n_samples, dtype = float)

        # derived in `JunctionCountSet.finalize()`.
        self.donor_total = None
        self.acceptor_total = None
        self.donor_pct = None
        self.acceptor_pct = None
        self.avg_edit_distance = None
        self.is_filtered = False
        self.is_valid_donor = False
        self.is_valid_acceptor = False

    def get_count(self, idx):
        return int(self.counts[idx])

    def get_site_total(self, site_type):
        if site_type == SITE_DONOR:
            return self.donor_total
        elif site_type == SITE_ACCEPTOR:
            return self.acceptor_total
        raise ValueError("invalid site type '%s'." % site_type)

    def get_site_pct(self, site_type):
        if site_type == SITE_DONOR:
            return self.donor_pct
        elif site_type == SITE_ACCEPTOR:
            return self.acceptor_pct
        raise ValueError("invalid site type '%s'." % site_type)

    def is_valid(self, site_type):
        if site_type == SITE_DONOR:
            return self.is_valid_donor
        elif site_type == SITE_ACCEPTOR:
            return self.is_valid_acceptor
        raise ValueError("invalid site type '%s'." % site_type)

    def calc_stats(self, site_type, groups):
        """Compare the site usage between control and experimental samples.

        Parameters
        ----------
        site_type : {"donor", "acceptor"}
            Which site of the junction to test.
        groups : list of int
            Group label of each sample, 1 for control and 2 for
            experimental.

        Returns
        -------
        JunctionStats
            The mean site percentages of both groups, their difference
            (experimental minus control) and the t statistic.

        Raises
        ------
        ValueError
            If the junction is not valid at `site_type`.
        utils.xerror.InsufficientDataError
            If either group has fewer than 2 samples.
        """
        if not self.is_valid(site_type):
            raise ValueError("junction '%s' (%s) is not a valid %s." % \
                (self.key.name, self.key.strand, site_type))
        ctrl_idx, exp_idx = split_groups(groups)
        assert len(groups) == self.counts.shape[0]

        pct = self.get_site_pct(site_type)
        x_ctrl = pct[ctrl_idx]
        x_exp = pct[exp_idx]
        control_pct = float(np.mean(x_ctrl))
        exp_pct = float(np.mean(x_exp))
        return JunctionStats(
            control_pct = control_pct,
            exp_pct = exp_pct,
            pct_diff = exp_pct - control_pct,
            tscore = calc_tscore(x_ctrl, x_exp)
        )



class JunctionCountSet:
    """Junction counts of all samples, keyed by JunctionKey.

    Junctions are kept in the order they were first observed, which is the
    order used by all downstream steps.
    """
    def __init__(self, samples):
        """
        Parameters
        ----------
        samples : list of str
            Sample names, in input order.
        """
        self.samples = list(samples)
        self.n_samples = len(self.samples)
        self.junctions = {}
        self.is_frozen = False

    def __contains__(self, key):
        return key in self.junctions

    def __iter__(self):
        return iter(self.junctions.values())

    def __len__(self):
        return len(self.junctions)

    def get(self, key):
        return self.junctions[key]

    def keys(self):
        return list(self.junctions.keys())

    def add_count(self, sample_idx, key, count, edit_distance = None):
        """Record the count of one junction in one sample."""
        assert not self.is_frozen
        assert 0 <= sample_idx < self.n_samples
        junc = self.junctions.get(key)
        if junc is None:
            junc = JunctionCounts(key, self.n_samples)
            self.junctions[key] = junc
        junc.counts[sample_idx] += count
        if edit_distance is not None:
            junc.ed_sums[sample_idx] += count * edit_distance

    def finalize(self, min_total_count = -1, max_edit_distance = -1,
                 min_competitors = 2):
        """Compute site totals, percentages and validity, then freeze.

        Parameters
        ----------
        min_total_count : int, default -1
            Minimum number of reads at the site, summed over all samples.
            -1 means not used.
        max_edit_distance : float, default -1
            Maximum average edit distance of the junction reads.
            -1 means not used.
        min_competitors : int, default 2
            Minimum number of distinct junctions sharing the site.

        Returns
        -------
        dict of {str : int}
            The counters "filtered_junctions", "valid_donors",
            "valid_acceptors" and "final_junctions".
        """
        assert not self.is_frozen
        junc_list = list(self.junctions.values())

        n_filtered = 0
        for junc in junc_list:
            n = np.sum(junc.counts)
            junc.avg_edit_distance = float(np.sum(junc.ed_sums) / n) \
                if n > 0 else 0.0
            if max_edit_distance >= 0 and \
                    junc.avg_edit_distance > max_edit_distance:
                junc.is_filtered = True
                n_filtered += 1

        for site_type in SITE_TYPES:
            self.__finalize_site(
                junc_list, site_type, min_total_count, min_competitors)

        for junc in junc_list:
            junc.counts.flags.writeable = False
            junc.ed_sums.flags.writeable = False
        self.is_frozen = True

        res = dict(
            filtered_junctions = n_filtered,
            valid_donors = sum([j.is_valid_donor for j in junc_list]),
            valid_acceptors = sum([j.is_valid_acceptor for j in junc_list]),
            final_junctions = sum([j.is_valid_donor or j.is_valid_acceptor \
                for j in junc_list])
        )
        return(res)

    def __finalize_site(self, junc_list, site_type, min_total_count,
                        min_competitors):
        site_juncs = {}
        for junc in junc_list:
            if junc.is_filtered:
                continue
            site = junc.key.get_site(site_type)
            if site not in site_juncs:
                site_juncs[site] = []
            site_juncs[site].append(junc)

        zeros = np.zeros(self.n_samples, dtype = np.int64)
        zeros.flags.writeable = False
        for junc in junc_list:
            if junc.is_filtered:
                self.__set_site(junc, site_type, zeros,
                                np.zeros(self.n_samples), False)

        for site, members in site_juncs.items():
            total = np.sum([j.counts for j in members], axis = 0)
            total.flags.writeable = False
            passed = len(members) >= min_competitors
            if min_total_count >= 0 and np.sum(total) < min_total_count:
                passed = False
            for junc in members:
                pct = np.zeros(self.n_samples, dtype = float)
                np.divide(junc.counts, total, out = pct, where = total > 0)
                self.__set_site(junc, site_type, total, pct, passed)

    def __set_site(self, junc, site_type, total, pct, is_valid):
        pct.flags.writeable = False
        if site_type == SITE_DONOR:
            junc.donor_total = total
            junc.donor_pct = pct
            junc.is_valid_donor = is_valid
        else:
            junc.acceptor_total = total
            junc.acceptor_pct = pct
            junc.is_valid_acceptor = is_valid

    def compute_stats(self, key, site_type, groups):
        """Statistics of junction `key` at `site_type`.

        See :meth:`JunctionCounts.calc_stats`.
        """
        assert self.is_frozen
        return self.junctions[key].calc_stats(site_type, groups)

    def to_adata(self, groups = None, filenames = None):
        """Export the finalized counts as a *sample x junction* AnnData.

        Parameters
        ----------
        groups : list of int or None, default None
            Group label of each sample, stored in `obs["group"]`.
        filenames : list of str or None, default None
            Count file of each sample, stored in `obs["filename"]`.

        Returns
        -------
        anndata.AnnData
            `X` stores the raw counts; layers "donor_total",
            "acceptor_total", "donor_pct" and "acceptor_pct" store the
            site totals and percentages.
        """
        assert self.is_frozen
        junc_list = list(self.junctions.values())

        obs = pd.DataFrame({"sample": self.samples})
        if groups is not None:
            obs["group"] = list(groups)
        if filenames is not None:
            obs["filename"] = list(filenames)
        obs.index = obs["sample"].astype(str)

        var = pd.DataFrame({
            "junction": [j.key.name for j in junc_list],
            "strand": [j.key.strand for j in junc_list],
            "chrom": [j.key.span.chrom for j in junc_list],
            "start": [j.key.span.start for j in junc_list],
            "end": [j.key.span.end for j in junc_list],
            "donor": [j.key.donor.name for j in junc_list],
            "acceptor": [j.key.acceptor.name for j in junc_list],
            "avg_edit_distance": [j.avg_edit_distance for j in junc_list],
            "is_filtered": [j.is_filtered for j in junc_list],
            "is_valid_donor": [j.is_valid_donor for j in junc_list],
            "is_valid_acceptor": [j.is_valid_acceptor for j in junc_list]
        })
        var.index = ["%s:%s" % (j.key.name, j.key.strand) for j in junc_list]

        def _stack(attr, dtype):
            if len(junc_list) <= 0:
                return(np.zeros((self.n_samples, 0), dtype = dtype))
            return(np.array([getattr(j, attr) for j in junc_list], \
                dtype = dtype).T)

        adata = ad.AnnData(
            X = _stack("counts", np.int64),
            obs = obs,
            var = var
        )
        adata.layers["donor_total"] = _stack("donor_total", np.int64)
        adata.layers["acceptor_total"] = _stack("acceptor_total", np.int64)
        adata.layers["donor_pct"] = _stack("donor_pct", float)
        adata.layers["acceptor_pct"] = _stack("acceptor_pct", float)
        return(adata)



def split_groups(groups):
    """Split sample indices by group label.

    Returns
    -------
    numpy.ndarray
        Indices of control samples.
    numpy.ndarray
        Indices of experimental samples.

    Raises
    ------
    utils.xerror.InsufficientDataError
        If either group has fewer than 2 samples.
    """
    groups = np.asarray(groups)
    ctrl_idx = np.where(groups == GROUP_CONTROL)[0]
    exp_idx = np.where(groups == GROUP_EXP)[0]
    if len(ctrl_idx) < 2 or len(exp_idx) < 2:
        raise InsufficientDataError(
            "both groups need at least 2 samples (control %d, "
            "experimental %d)." % (len(ctrl_idx), len(exp_idx)))
    return((ctrl_idx, exp_idx))


def aggregate_counts(
    fn_list, groups,
    sample_ids = None,
    min_total_count = -1,
    max_edit_distance = -1,
    min_competitors = 2
):
    """Aggregate junction counts of all samples.

    Parameters
    ----------
    fn_list : list of str
        Junction count files, one per sample. Their order defines the
        sample index used everywhere downstream.
    groups : list of int
        Group label of each sample, 1 for control and 2 for experimental.
    sample_ids : list of str or None, default None
        Sample names. If None, use the basenames of `fn_list` with known
        suffixes removed.
    min_total_count : int, default -1
        Minimum number of reads at a site, summed over all samples.
        -1 means not used.
    max_edit_distance : float, default -1
        Maximum average edit distance of the junction reads.
        -1 means not used.
    min_competitors : int, default 2
        Minimum number of distinct junctions sharing a site for it to be
        tested.

    Returns
    -------
    JunctionCountSet
        The finalized (read-only) junction counts.
    JunctionDiffStats
        The run-level summary.
    """
    groups = check_groups(groups, len(fn_list))
    check_sample_ids(sample_ids, len(fn_list))
    check_filters(min_total_count, max_edit_distance, min_competitors)

    if sample_ids is None:
        sample_ids = [strip_suffix(fn, SAMPLE_NAME_SUFFIXES) \
            for fn in fn_list]
        if len(set(sample_ids)) != len(sample_ids):
            sample_ids = ["%s_%d" % (s, i) for i, s in enumerate(sample_ids)]

    samples = [JunctionDiffSample(s, g, fn) for s, g, fn in \
        zip(sample_ids, groups, fn_list)]
    jd_stats = JunctionDiffStats(samples)
    count_set = JunctionCountSet(sample_ids)

    for fn in fn_list:
        if not os.path.exists(fn):
            raise ConfigurationError("count file '%s' not found." % fn)

    for idx, fn in enumerate(fn_list):
        n = 0
        for key, count, ed in load_junction_counts(
            fn, need_edit_distance = max_edit_distance >= 0
        ):
            count_set.add_count(idx, key, count, ed)
            n += 1
        info("load %d junctions from '%s'." % (n, fn))

    jd_stats.total_junctions = len(count_set)
    res = count_set.finalize(
        min_total_count = min_total_count,
        max_edit_distance = max_edit_distance,
        min_competitors = min_competitors
    )
    jd_stats.filtered_junctions = res["filtered_junctions"]
    jd_stats.valid_donors = res["valid_donors"]
    jd_stats.valid_acceptors = res["valid_acceptors"]
    jd_stats.final_junctions = res["final_junctions"]
    debug("aggregation counters: %s." % str(res))

    return((count_set, jd_stats))
