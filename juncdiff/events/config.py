# config.py - configuration


import os
import sys

from ..utils.xerror import ConfigurationError

COMMAND = "events"


class Config:
    """Configuration of the `events` (event aggregation) module.

    Attributes
    ----------
    See `events::main::events_wrapper()`.
    """
    def __init__(self):
        # defaults : DefaultConfig
        #   The default values of parameters.
        self.defaults = DefaultConfig()

        # command-line arguments/parameters.
        self.diff_fn = None
        self.out_fn = None
        self.bed_fn = None
        self.failed_fn = None
        self.debug = self.defaults.DEBUG

        # thresholds.
        self.junc_fdr = self.defaults.JUNC_FDR
        self.event_fdr = self.defaults.EVENT_FDR
        self.min_pct_diff = self.defaults.MIN_PCT_DIFF

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
        s += "%sdiff_file = %s\n" % (prefix, self.diff_fn)
        s += "%sout_file = %s\n" % (prefix, self.out_fn)
        s += "%sbed_file = %s\n" % (prefix, self.bed_fn)
        s += "%sfailed_file = %s\n" % (prefix, self.failed_fn)
        s += "%sdebug_level = %d\n" % (prefix, self.debug)
        s += "%s\n" % prefix

        s += "%sjunc_fdr = %f\n" % (prefix, self.junc_fdr)
        s += "%sevent_fdr = %f\n" % (prefix, self.event_fdr)
        s += "%smin_pct_diff = %f\n" % (prefix, self.min_pct_diff)
        s += "%s\n" % prefix

        fp.write(s)

    def check(self):
        """Validate the parameters.

        Raises
        ------
        utils.xerror.ConfigurationError
            If any parameter is invalid.
        """
        if not self.diff_fn:
            raise ConfigurationError("no per-junction table specified.")
        if not os.path.exists(self.diff_fn):
            raise ConfigurationError(
                "per-junction table '%s' not found." % self.diff_fn)
        check_thresholds(self.junc_fdr, self.event_fdr, self.min_pct_diff)


class DefaultConfig:
    def __init__(self):
        self.DEBUG = 0

        self.JUNC_FDR = 0.2
        self.EVENT_FDR = 0.1
        self.MIN_PCT_DIFF = 0.1



def check_thresholds(junc_fdr, event_fdr, min_pct_diff):
    for name, val in (("junc_fdr", junc_fdr), ("event_fdr", event_fdr),
                      ("min_pct_diff", min_pct_diff)):
        if val is None or not 0 <= val <= 1:
            raise ConfigurationError(
                "%s should be within [0, 1], got %s." % (name, str(val)))


if __name__ == "__main__":
    conf = Config()
    conf.show()
