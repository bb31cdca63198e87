# main.py - aggregate differentially spliced junctions into events.


import getopt
import logging
import sys
import time

from logging import error, info
from .config import Config, COMMAND
from .core import combine_events, event_bed_records, failed_bed_records
from .io import load_diff_table, save_bed, save_events
from ..app import APP, VERSION
from ..utils.xlog import init_logging



def usage(fp = sys.stdout, conf = None):
    s =  "\n"
    s += "Version: %s\n" % VERSION
    s += "Usage:   %s %s [options] <diff_file>\n" % (APP, COMMAND)
    s += "\n"
    s += "Options:\n"
    s += "  -o, --out FILE          Output event table [stdout].\n"
    s += "      --bed FILE          Output BED file of all junctions passing the filters.\n"
    s += "      --failed FILE       Output BED file of junctions failing the filters.\n"
    s += "  -h, --help              Print this message and exit.\n"
    s += "\n"
    s += "Thresholds:\n"
    s += "      --fdrJunc FLOAT     Maximum FDR of a junction to be clustered [%s]\n" % conf.JUNC_FDR
    s += "      --fdrEvent FLOAT    Maximum FDR of an event to be reported [%s]\n" % conf.EVENT_FDR
    s += "      --minPctDiff FLOAT  Minimum absolute percent difference (effect size)\n"
    s += "                          of a junction to be clustered [%s]\n" % conf.MIN_PCT_DIFF
    s += "  -D, --debug INT         Used by developer for debugging [%d]\n" % conf.DEBUG
    s += "\n"

    fp.write(s)


def events_main(argv):
    """Command-Line interface.

    Parameters
    ----------
    argv : list
        A list of cmdline parameters, starting with the program and the
        command name.

    Returns
    -------
    int
        0 if success, -1 otherwise [int]
    """
    conf = Config()

    if len(argv) <= 2:
        usage(sys.stdout, conf.defaults)
        return(0)

    conf.argv = argv.copy()
    init_logging(stream = sys.stderr)

    try:
        opts, args = getopt.getopt(
            args = argv[2:],
            shortopts = "o:hD:",
            longopts = [
                "out=", "bed=", "failed=", "help",
                "fdrJunc=", "fdrEvent=", "minPctDiff=",
                "debug="
            ])
    except getopt.GetoptError as e:
        error(str(e))
        return(-1)

    for op, val in opts:
        if len(op) > 2:
            op = op.lower()
        if op in   ("-o", "--out"): conf.out_fn = val
        elif op in (      "--bed",): conf.bed_fn = val
        elif op in (      "--failed",): conf.failed_fn = val
        elif op in ("-h", "--help"): usage(sys.stdout, conf.defaults); return(0)

        elif op in ("--fdrjunc",): conf.junc_fdr = float(val)
        elif op in ("--fdrevent",): conf.event_fdr = float(val)
        elif op in ("--minpctdiff",): conf.min_pct_diff = float(val)
        elif op in ("-D", "--debug"): conf.debug = int(val)

        else:
            error("invalid option: '%s'." % op)
            return(-1)

    if conf.debug > 0:
        init_logging(stream = sys.stderr, level = logging.DEBUG)

    if len(args) != 1:
        error("one per-junction table expected, got %d." % len(args))
        return(-1)
    conf.diff_fn = args[0]

    ret, res = events_run(conf)
    return(ret)


def events_wrapper(
    diff_fn,
    out_fn = None,
    junc_fdr = 0.2,
    event_fdr = 0.1,
    min_pct_diff = 0.1,
    bed_fn = None,
    failed_fn = None,
    debug_level = 0,
    argv = None
):
    """Wrapper for running the events (event aggregation) module.

    Parameters
    ----------
    diff_fn : str
        The per-junction table written by the `diff` module.
    out_fn : str or None, default None
        Output event table; None means stdout.
    junc_fdr : float, default 0.2
        Maximum FDR of a junction to be clustered.
    event_fdr : float, default 0.1
        Maximum FDR (the minimum over members) of an event to be reported.
    min_pct_diff : float, default 0.1
        Minimum absolute percent difference of a junction to be clustered.
    bed_fn : str or None, default None
        If not None, write all junctions passing the junction filters into
        this BED file.
    failed_fn : str or None, default None
        If not None, write all junctions failing the junction filters into
        this BED file.
    debug_level : {0, 1, 2}
        The debugging level.
    argv : list of str or None, default None
        The command line arguments, written into the output preamble.

    Returns
    -------
    int
        The return code. 0 if success, negative otherwise.
    dict
        The returned data and parameters to be used by downstream analysis.
    """
    conf = Config()
    conf.diff_fn = diff_fn
    conf.out_fn = out_fn
    conf.junc_fdr = junc_fdr
    conf.event_fdr = event_fdr
    conf.min_pct_diff = min_pct_diff
    conf.bed_fn = bed_fn
    conf.failed_fn = failed_fn
    conf.debug = debug_level
    conf.argv = argv

    ret, res = events_run(conf)
    return((ret, res))



def events_core(conf):
    conf.check()

    info("configuration:")
    conf.show(fp = sys.stderr, prefix = "\t")

    info("load per-junction table ...")
    df = load_diff_table(conf.diff_fn)
    info("load %d site tests." % df.shape[0])

    info("combine junctions into events ...")
    result = combine_events(
        df,
        junc_fdr = conf.junc_fdr,
        event_fdr = conf.event_fdr,
        min_pct_diff = conf.min_pct_diff,
        fn = conf.diff_fn
    )

    if conf.failed_fn:
        info("save failed junctions ...")
        save_bed(failed_bed_records(result), conf.failed_fn)

    if conf.bed_fn:
        info("save passing junctions ...")
        save_bed(event_bed_records(result), conf.bed_fn)

    info("save events ...")
    save_events(result.events, conf.out_fn, events_preamble(conf, result))

    res = {
        # out_fn : str or None
        #   Path to the event table; None if written to stdout.
        "out_fn": conf.out_fn,

        # result : events.core.EventResult
        #   The events and counters.
        "result": result
    }
    return(res)



def events_run(conf):
    ret = -1
    res = None

    start_time = time.time()
    time_str = time.strftime(
        "%Y-%m-%d %H:%M:%S", time.localtime(start_time))
    info("start time: %s." % time_str)

    try:
        res = events_core(conf)
    except ValueError as e:
        error(str(e))
        error("Running program failed.")
        error("Quiting ...")
        ret = -1
    else:
        info("All Done!")
        ret = 0
    finally:
        end_time = time.time()
        time_str = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(end_time))
        info("end time: %s" % time_str)
        info("time spent: %.2fs" % (end_time - start_time, ))

    return((ret, res))



def events_preamble(conf, result):
    lst = []
    lst.append(("program", "%s %s" % (APP, VERSION)))
    if conf.argv:
        lst.append(("cmd", " ".join(conf.argv)))
    lst.append(("input", conf.diff_fn))
    lst.append(("event-fdr-threshold", conf.event_fdr))
    lst.append(("junc-fdr-threshold", conf.junc_fdr))
    lst.append(("pct-threshold", conf.min_pct_diff))
    lst.append(("total-junctions", result.total_junctions))
    lst.append(("passing-junctions", len(result.valid)))
    lst.append(("passing-donors", result.passing_donors))
    lst.append(("passing-acceptors", result.passing_acceptors))
    lst.append(("multi-events", result.multi_events))
    lst.append(("solo-events", result.solo_events))
    lst.append(("reported-events", len(result.events)))
    return(lst)
