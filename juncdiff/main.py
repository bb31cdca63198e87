# main.py - cmdline interface.


import getopt
import logging
import os
import sys
import time

from logging import error, info
from .app import APP, VERSION
from .config import Config
from .diff.main import diff_main, diff_wrapper
from .events.main import events_main, events_wrapper
from .io.base import load_h5ad, load_list_from_str, save_h5ad
from .utils.xerror import ConfigurationError
from .utils.xlog import init_logging


COMMAND = "pipeline"


def main():
    argv = sys.argv
    if len(argv) < 2:
        usage(sys.stdout)
        sys.exit(0)

    command = argv[1]
    if command == "diff":
        ret = diff_main(argv)
    elif command == "events":
        ret = events_main(argv)
    elif command == COMMAND:
        ret = pipeline_main(argv)
    elif command in ("-h", "--help"):
        usage(sys.stdout)
        ret = 0
    elif command in ("-V", "--version"):
        sys.stdout.write("%s\n" % VERSION)
        ret = 0
    else:
        sys.stderr.write("invalid command '%s'.\n" % command)
        usage(sys.stderr)
        ret = -1
    sys.exit(0 if ret == 0 else 1)


def usage(fp = sys.stdout):
    s =  "\n"
    s += "Program: %s (differential splice junction analysis)\n" % APP
    s += "Version: %s\n" % VERSION
    s += "\n"
    s += "Usage:   %s <command> [options]\n" % APP
    s += "\n"
    s += "Commands:\n"
    s += "  diff         Per-site differential usage tests of junctions.\n"
    s += "  events       Combine differentially spliced junctions into events.\n"
    s += "  pipeline     Run `diff` and `events` in one go.\n"
    s += "\n"
    s += "Options:\n"
    s += "  -h, --help       Print this message and exit.\n"
    s += "  -V, --version    Print version and exit.\n"
    s += "\n"

    fp.write(s)


def pipeline_usage(fp = sys.stdout, conf = None):
    d = conf.diff.defaults
    e = conf.events.defaults

    s =  "\n"
    s += "Version: %s\n" % VERSION
    s += "Usage:   %s %s [options] <count_file1> <count_file2> ...\n" % \
        (APP, COMMAND)
    s += "\n"
    s += "Options:\n"
    s += "  -O, --outdir DIR        Output folder.\n"
    s += "  -g, --groups STR        Comma separated group labels in the same order as\n"
    s += "                          the count files (1=control, 2=experimental).\n"
    s += "  -i, --sampleIDs STR     Comma separated sample IDs [file basenames].\n"
    s += "      --h5ad              Also save the junction counts into a h5ad file.\n"
    s += "  -h, --help              Print this message and exit.\n"
    s += "\n"
    s += "Junction filtering:\n"
    s += "      --minTotalCount INT      Minimum number of reads at a site [%d]\n" % d.MIN_TOTAL_COUNT
    s += "      --maxEditDistance FLOAT  Maximum average edit distance [%s]\n" % d.MAX_EDIT_DISTANCE
    s += "      --minCompetitors INT     Minimum number of junctions sharing a site [%d]\n" % d.MIN_COMPETITORS
    s += "\n"
    s += "Event thresholds:\n"
    s += "      --fdrJunc FLOAT     Maximum FDR of a junction to be clustered [%s]\n" % e.JUNC_FDR
    s += "      --fdrEvent FLOAT    Maximum FDR of an event to be reported [%s]\n" % e.EVENT_FDR
    s += "      --minPctDiff FLOAT  Minimum absolute percent difference [%s]\n" % e.MIN_PCT_DIFF
    s += "  -D, --debug INT         Used by developer for debugging [%d]\n" % d.DEBUG
    s += "\n"

    fp.write(s)


def pipeline_main(argv):
    conf = Config()

    if len(argv) <= 2:
        pipeline_usage(sys.stdout, conf)
        return(0)

    conf.g.argv = argv.copy()

    init_logging(stream = sys.stderr)

    try:
        opts, args = getopt.getopt(
            args = argv[2:],
            shortopts = "O:g:i:hD:",
            longopts = [
                "outdir=", "groups=", "sampleIDs=", "h5ad", "help",
                "minTotalCount=", "maxEditDistance=", "minCompetitors=",
                "fdrJunc=", "fdrEvent=", "minPctDiff=",
                "debug="
            ])
    except getopt.GetoptError as e:
        error(str(e))
        return(-1)

    save_h5ad = False
    for op, val in opts:
        if len(op) > 2:
            op = op.lower()
        if op in   ("-O", "--outdir"): conf.g.out_dir = val
        elif op in ("-g", "--groups"): conf.diff.groups = val
        elif op in ("-i", "--sampleids"): conf.diff.sample_ids = load_list_from_str(val, sep = ",")
        elif op in (      "--h5ad",): save_h5ad = True
        elif op in ("-h", "--help"): pipeline_usage(sys.stdout, conf); return(0)

        elif op in ("--mintotalcount",): conf.diff.min_total_count = int(val)
        elif op in ("--maxeditdistance",): conf.diff.max_edit_distance = float(val)
        elif op in ("--mincompetitors",): conf.diff.min_competitors = int(val)
        elif op in ("--fdrjunc",): conf.events.junc_fdr = float(val)
        elif op in ("--fdrevent",): conf.events.event_fdr = float(val)
        elif op in ("--minpctdiff",): conf.events.min_pct_diff = float(val)
        elif op in ("-D", "--debug"): conf.g.debug = int(val)

        else:
            error("invalid option: '%s'." % op)
            return(-1)

    if conf.g.debug > 0:
        init_logging(stream = sys.stderr, level = logging.DEBUG)

    conf.diff.count_fn_list = args
    if save_h5ad and conf.g.out_dir:
        conf.diff.h5ad_fn = os.path.join(
            conf.g.out_dir, "%s.counts.h5ad" % conf.g.out_prefix)

    ret, res = main_run(conf)
    return(ret)


def main_wrapper(
    count_fn_list, groups, out_dir,
    sample_ids = None,
    min_total_count = -1,
    max_edit_distance = -1,
    min_competitors = 2,
    junc_fdr = 0.2,
    event_fdr = 0.1,
    min_pct_diff = 0.1,
    save_h5ad = False,
    debug_level = 0
):
    """Wrapper for running the main pipeline.

    Parameters
    ----------
    count_fn_list : list of str
        Junction count files, one per sample.
    groups : list of int or str
        Group labels in the same order as `count_fn_list`, 1 for control
        and 2 for experimental.
    out_dir : str
        The output folder.
        The per-junction table, the event table and the two BED files are
        written as "juncdiff.diff.tsv", "juncdiff.events.tsv",
        "juncdiff.events.bed" and "juncdiff.failed.bed".
    sample_ids : list of str or None, default None
        Sample IDs. If None, use the basenames of the count files.
    min_total_count : int, default -1
        See :func:`~.diff.main.diff_wrapper`.
    max_edit_distance : float, default -1
        See :func:`~.diff.main.diff_wrapper`.
    min_competitors : int, default 2
        See :func:`~.diff.main.diff_wrapper`.
    junc_fdr : float, default 0.2
        See :func:`~.events.main.events_wrapper`.
    event_fdr : float, default 0.1
        See :func:`~.events.main.events_wrapper`.
    min_pct_diff : float, default 0.1
        See :func:`~.events.main.events_wrapper`.
    save_h5ad : bool, default False
        Whether to save the junction counts into "juncdiff.counts.h5ad",
        with the reported event of each junction in `var["event"]`.
    debug_level : {0, 1, 2}
        The debugging level.

    Returns
    -------
    int
        The return code. 0 if success, negative otherwise.
    dict
        The returned data and parameters to be used by downstream analysis.
    """
    conf = Config()

    conf.g.out_dir = out_dir
    conf.g.debug = debug_level

    conf.diff.count_fn_list = count_fn_list
    conf.diff.groups = groups
    conf.diff.sample_ids = sample_ids
    conf.diff.min_total_count = min_total_count
    conf.diff.max_edit_distance = max_edit_distance
    conf.diff.min_competitors = min_competitors
    if save_h5ad:
        conf.diff.h5ad_fn = os.path.join(
            out_dir, "%s.counts.h5ad" % conf.g.out_prefix)

    conf.events.junc_fdr = junc_fdr
    conf.events.event_fdr = event_fdr
    conf.events.min_pct_diff = min_pct_diff

    ret, res = main_run(conf)
    return((ret, res))


def main_core(conf):
    prepare_config(conf)
    conf.show(fp = sys.stderr)
    os.makedirs(conf.g.out_dir, exist_ok = True)

    # Note:
    # Use `xx_wrapper()` function in each step instead of directly accessing
    # or modifying the internal `config` object, to keep codes independent.

    # differential junction statistics.
    info("start differential junction statistics ...")
    diff_ret, diff_res = diff_wrapper(
        count_fn_list = conf.diff.count_fn_list,
        groups = conf.diff.groups,
        out_fn = conf.diff.out_fn,
        sample_ids = conf.diff.sample_ids,
        min_total_count = conf.diff.min_total_count,
        max_edit_distance = conf.diff.max_edit_distance,
        min_competitors = conf.diff.min_competitors,
        h5ad_fn = conf.diff.h5ad_fn,
        debug_level = conf.g.debug,
        argv = conf.g.argv
    )
    if diff_ret < 0:
        raise ValueError("differential junction statistics failed (%d)." % \
            diff_ret)
    info("diff results:")
    info(str(diff_res))


    # event aggregation.
    info("start event aggregation ...")
    events_ret, events_res = events_wrapper(
        diff_fn = diff_res["out_fn"],
        out_fn = conf.events.out_fn,
        junc_fdr = conf.events.junc_fdr,
        event_fdr = conf.events.event_fdr,
        min_pct_diff = conf.events.min_pct_diff,
        bed_fn = conf.events.bed_fn,
        failed_fn = conf.events.failed_fn,
        debug_level = conf.g.debug,
        argv = conf.g.argv
    )
    if events_ret < 0:
        raise ValueError("event aggregation failed (%d)." % events_ret)
    info("events results:")
    info(str(events_res))


    # event annotation of the junction counts.
    if conf.diff.h5ad_fn:
        info("add event annotation into h5ad file ...")
        add_event_anno(
            adata_fn = conf.diff.h5ad_fn,
            result = events_res["result"],
            out_adata_fn = conf.diff.h5ad_fn
        )


    res = {
        # diff : dict
        #   Results of the `diff` step.
        "diff": diff_res,

        # events : dict
        #   Results of the `events` step.
        "events": events_res
    }
    return(res)


def main_run(conf):
    ret = -1
    res = None

    start_time = time.time()
    time_str = time.strftime(
        "%Y-%m-%d %H:%M:%S", time.localtime(start_time))
    info("start time: %s." % time_str)
    info("%s (VERSION %s)." % (APP, VERSION))

    try:
        res = main_core(conf)
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


def prepare_config(conf):
    """Set the output files of each step.

    Raises
    ------
    utils.xerror.ConfigurationError
        If the output folder is not specified.
    """
    if not conf.g.out_dir:
        raise ConfigurationError("no output folder specified.")

    prefix = os.path.join(conf.g.out_dir, conf.g.out_prefix)
    conf.diff.out_fn = prefix + ".diff.tsv"
    conf.events.out_fn = prefix + ".events.tsv"
    conf.events.bed_fn = prefix + ".events.bed"
    conf.events.failed_fn = prefix + ".failed.bed"


def add_event_anno(adata_fn, result, out_adata_fn):
    """Add the reported event of each junction into `var["event"]`.

    Junctions outside any reported event get an empty string.
    """
    adata = load_h5ad(adata_fn)
    assert "junction" in adata.var.columns
    assert "strand" in adata.var.columns

    event_of = {}
    for ev in result.events:
        name = ";".join([j.name for j in ev.junctions])
        for junc in ev.junctions:
            event_of[(junc.name, junc.strand)] = name
    adata.var["event"] = [event_of.get((j, s), "") for j, s in \
        zip(adata.var["junction"], adata.var["strand"])]

    save_h5ad(adata, out_adata_fn)
    return(adata)
