# config.py - configuration


import sys

from ..utils.xerror import ConfigurationError

COMMAND = "diff"

GROUP_CONTROL = 1
GROUP_EXP = 2


class Config:
    """Configuration of the `diff` (differential junction) module.

    Attributes
    ----------
    See `diff::main::diff_wrapper()`.
    """
    def __init__(self):
        # defaults : DefaultConfig
        #   The default values of parameters.
        self.defaults = DefaultConfig()

        # command-line arguments/parameters.
        self.count_fn_list = None
        self.groups = None
        self.sample_ids = None
        self.out_fn = None
        self.h5ad_fn = None
        self.debug = self.defaults.DEBUG

        # junction filtering.
        self.min_total_count = self.defaults.MIN_TOTAL_COUNT
        self.max_edit_distance = self.defaults.MAX_EDIT_DISTANCE
        self.min_competitors = self.defaults.MIN_COMPETITORS

        # internal parameters.

        # argv : list of str or None
        #   The command line, recorded in the output preamble.
        self.argv = None

        # out_prefix : str
        #   The prefix of the output files.
        self.out_prefix = COMMAND

    def show(self, fp = None, prefix = ""):
        if fp is None:
            fp = sys.stdout

        s =  "%s\n" % prefix
        s += "%scount_files = %s\n" % (prefix, self.count_fn_list)
        s += "%sgroups = %s\n" % (prefix, self.groups)
        s += "%ssample_ids = %s\n" % (prefix, self.sample_ids)
        s += "%sout_file = %s\n" % (prefix, self.out_fn)
        s += "%sh5ad_file = %s\n" % (prefix, self.h5ad_fn)
        s += "%sdebug_level = %d\n" % (prefix, self.debug)
        s += "%s\n" % prefix

        # junction filtering.
        s += "%smin_total_count = %d\n" % (prefix, self.min_total_count)
        s += "%smax_edit_distance = %f\n" % (prefix, self.max_edit_distance)
        s += "%smin_competitors = %d\n" % (prefix, self.min_competitors)
        s += "%s\n" % prefix

        fp.write(s)

    def check(self):
        """Validate the parameters.

        Raises
        ------
        utils.xerror.ConfigurationError
            If any parameter is invalid.
        """
        if not self.count_fn_list:
            raise ConfigurationError("no count file specified.")
        self.groups = check_groups(self.groups, len(self.count_fn_list))
        check_sample_ids(self.sample_ids, len(self.count_fn_list))
        check_filters(
            self.min_total_count, self.max_edit_distance, self.min_competitors)

    def use_edit_distance(self):
        return self.max_edit_distance >= 0

    def use_min_total_count(self):
        return self.min_total_count >= 0


class DefaultConfig:
    def __init__(self):
        self.DEBUG = 0

        # -1 means not used.
        self.MIN_TOTAL_COUNT = -1
        self.MAX_EDIT_DISTANCE = -1.0

        self.MIN_COMPETITORS = 2



def check_groups(groups, n_files):
    """Check and format the group labels.

    Parameters
    ----------
    groups : list of int or str, or str
        Group labels in the same order as the count files, 1 for control
        and 2 for experimental; a string is split by ",".
    n_files : int
        Number of count files.

    Returns
    -------
    list of int
        The formatted group labels.
    """
    if groups is None:
        raise ConfigurationError("group labels are required.")
    if isinstance(groups, str):
        groups = [x.strip() for x in groups.split(",") if x.strip()]
    try:
        groups = [int(g) for g in groups]
    except (TypeError, ValueError):
        raise ConfigurationError("group labels should be integers: %s." % \
            str(groups))
    if len(groups) != n_files:
        raise ConfigurationError(
            "%d group labels given for %d count files." % \
            (len(groups), n_files))
    for g in groups:
        if g not in (GROUP_CONTROL, GROUP_EXP):
            raise ConfigurationError(
                "invalid group label %d (1=control, 2=experimental)." % g)
    return(groups)


def check_sample_ids(sample_ids, n_files):
    if sample_ids is None:
        return
    if len(sample_ids) != n_files:
        raise ConfigurationError("%d sample IDs given for %d count files." % \
            (len(sample_ids), n_files))
    if len(set(sample_ids)) != len(sample_ids):
        raise ConfigurationError("duplicate sample IDs.")


def check_filters(min_total_count, max_edit_distance, min_competitors):
    # negative values other than the sentinel -1 are most likely typos.
    if min_total_count < 0 and min_total_count != -1:
        raise ConfigurationError(
            "invalid min_total_count %s." % str(min_total_count))
    if max_edit_distance < 0 and max_edit_distance != -1:
        raise ConfigurationError(
            "invalid max_edit_distance %s." % str(max_edit_distance))
    if min_competitors < 1:
        raise ConfigurationError(
            "invalid min_competitors %s." % str(min_competitors))


if __name__ == "__main__":
    conf = Config()
    conf.show()
