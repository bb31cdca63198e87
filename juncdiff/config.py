# config.py - global configuration.


import sys

from .diff.config import Config as Diff_Conf
from .events.config import Config as Events_Conf


class Config:
    """Configuration of the whole pipeline.

    Attributes
    ----------
    See :func:`~.main.main_wrapper()`.
    """
    def __init__(self):
        self.g = GlobalConfig()
        self.diff = Diff_Conf()
        self.events = Events_Conf()

    def show(self, fp = None):
        if fp is None:
            fp = sys.stdout

        fp.write("Global Config:\n")
        self.g.show(fp = fp, prefix = "\t")

        fp.write("Differential Junction Config:\n")
        self.diff.show(fp = fp, prefix = "\t")

        fp.write("Event Aggregation Config:\n")
        self.events.show(fp = fp, prefix = "\t")


class GlobalConfig:
    """Global configuration

    Attributes
    ----------
    out_dir : str
        The output folder.
    out_prefix : str
        Prefix of the output files in `out_dir`.
        Default is `"juncdiff"`.
    debug : int
        The debugging level.
        Default is `0`.
    argv : list of str or None
        The command line arguments, passed to each step for its output
        preamble.
        Default is `None`.
    """
    def __init__(self):
        self.out_dir = None
        self.out_prefix = "juncdiff"
        self.debug = 0
        self.argv = None

    def show(self, fp = None, prefix = ""):
        if fp is None:
            fp = sys.stdout

        s =  "%s\n" % prefix
        s += "%sout_dir = %s\n" % (prefix, self.out_dir)
        s += "%sout_prefix = %s\n" % (prefix, self.out_prefix)
        s += "%sdebug_level = %d\n" % (prefix, self.debug)
        s += "%s\n" % prefix

        fp.write(s)
