# main.py - differential junction statistics.


import getopt
import logging
import sys
import time

from logging import error, info
from .config import Config, COMMAND
from .core import calc_diff_table, count_unique_junctions
from .counts import aggregate_counts, split_groups
from .io import save_diff_table
from ..app import APP, VERSION
from ..io.base import load_list_from_str, save_h5ad
from ..utils.xlog import init_logging



def usage(fp = sys.stdout, conf = None):
    s =  "\n"
    s += "Version: %s\n" % VERSION
    s += "Usage:   %s %s [options] <count_file1> <count_file2> ...\n" % \
        (APP, COMMAND)
    s += "\n"
    s += "Options:\n"
    s += "  -g, --groups STR        Comma separated group labels in the same order as\n"
    s += "                          the count files (1=control, 2=experimental),\n"
    s += "                          e.g., 1,1,1,2,2,2.\n"
    s += "  -i, --sampleIDs STR     Comma separated sample IDs [file basenames].\n"
    s += "  -o, --out FILE          Output per-junction table [stdout].\n"
    s += "      --h5ad FILE         Also save the junction counts into a h5ad file.\n"
    s += "  -h, --help              Print this message and exit.\n"
    s += "\n"
    s += "Junction filtering:\n"
    s += "      --minTotalCount INT      Minimum number of reads at a site, summed over\n"
    s += "                               all samples; -1 to disable [%d]\n" % conf.MIN_TOTAL_COUNT
    s += "      --maxEditDistance FLOAT  Maximum average edit distance of junction\n"
    s += "                               reads; -1 to disable [%s]\n" % conf.MAX_EDIT_DISTANCE
    s += "      --minCompetitors INT     Minimum number of junctions sharing a site [%d]\n" % conf.MIN_COMPETITORS
    s += "  -D, --debug INT              Used by developer for debugging [%d]\n" % conf.DEBUG
    s += "\n"

    fp.write(s)


def diff_main(argv):
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
            shortopts = "g:i:o:hD:",
            longopts = [
                "groups=", "sampleIDs=", "out=", "h5ad=", "help",
                "minTotalCount=", "maxEditDistance=", "minCompetitors=",
                "debug="
            ])
    except getopt.GetoptError as e:
        error(str(e))
        return(-1)

    for op, val in opts:
        if len(op) > 2:
            op = op.lower()
        if op in   ("-g", "--groups"): conf.groups = val
        elif op in ("-i", "--sampleids"): conf.sample_ids = load_list_from_str(val, sep = ",")
        elif op in ("-o", "--out"): conf.out_fn = val
        elif op in (      "--h5ad",): conf.h5ad_fn = val
        elif op in ("-h", "--help"): usage(sys.stdout, conf.defaults); return(0)

        elif op in ("--mintotalcount",): conf.min_total_count = int(val)
        elif op in ("--maxeditdistance",): conf.max_edit_distance = float(val)
        elif op in ("--mincompetitors",): conf.min_competitors = int(val)
        elif op in ("-D", "--debug"): conf.debug = int(val)

        else:
            error("invalid option: '%s'." % op)
            return(-1)

    if conf.debug > 0:
        init_logging(stream = sys.stderr, level = logging.DEBUG)

    conf.count_fn_list = args

    ret, res = diff_run(conf)
    return(ret)


def diff_wrapper(
    count_fn_list, groups,
    out_fn = None,
    sample_ids = None,
    min_total_count = -1,
    max_edit_distance = -1,
    min_competitors = 2,
    h5ad_fn = None,
    debug_level = 0,
    argv = None
):
    """Wrapper for running the diff (differential junction) module.

    Parameters
    ----------
    count_fn_list : list of str
        Junction count files, one per sample.
        See :func:`~diff.io.load_junction_counts` for the format.
    groups : list of int or str
        Group labels in the same order as `count_fn_list`, 1 for control
        and 2 for experimental. A string is split by ",".
    out_fn : str or None, default None
        Output per-junction table; None means stdout.
    sample_ids : list of str or None, default None
        Sample IDs. If None, use the basenames of the count files.
    min_total_count : int, default -1
        Minimum number of reads at a site, summed over all samples.
        -1 means not used.
    max_edit_distance : float, default -1
        Maximum average edit distance of the junction reads.
        -1 means not used.
    min_competitors : int, default 2
        Minimum number of distinct junctions sharing a site.
    h5ad_fn : str or None, default None
        If not None, save the junction counts into this h5ad file.
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
    conf.count_fn_list = count_fn_list
    conf.groups = groups
    conf.out_fn = out_fn
    conf.sample_ids = sample_ids
    conf.min_total_count = min_total_count
    conf.max_edit_distance = max_edit_distance
    conf.min_competitors = min_competitors
    conf.h5ad_fn = h5ad_fn
    conf.debug = debug_level
    conf.argv = argv

    ret, res = diff_run(conf)
    return((ret, res))



def diff_core(conf):
    conf.check()
    split_groups(conf.groups)

    info("configuration:")
    conf.show(fp = sys.stderr, prefix = "\t")

    info("aggregate junction counts ...")
    count_set, jd_stats = aggregate_counts(
        fn_list = conf.count_fn_list,
        groups = conf.groups,
        sample_ids = conf.sample_ids,
        min_total_count = conf.min_total_count,
        max_edit_distance = conf.max_edit_distance,
        min_competitors = conf.min_competitors
    )
    for smp in jd_stats.samples:
        info("sample '%s' [%d] - %s" % \
            (smp.sample_name, smp.group, smp.filename))
    info("total junctions: %d" % jd_stats.total_junctions)
    info("filtered junctions: %d" % jd_stats.filtered_junctions)
    info("valid donors: %d" % jd_stats.valid_donors)
    info("valid acceptors: %d" % jd_stats.valid_acceptors)
    info("final junctions: %d" % jd_stats.final_junctions)

    if conf.h5ad_fn:
        info("save junction counts into h5ad file ...")
        adata = count_set.to_adata(
            groups = conf.groups,
            filenames = conf.count_fn_list
        )
        save_h5ad(adata, conf.h5ad_fn)

    info("calculate statistics and FDR ...")
    df = calc_diff_table(count_set, conf.groups)

    info("save per-junction table ...")
    preamble = diff_preamble(conf, jd_stats, count_unique_junctions(df))
    save_diff_table(df, conf.out_fn, preamble)

    res = {
        # out_fn : str or None
        #   Path to the per-junction table; None if written to stdout.
        "out_fn": conf.out_fn,

        # h5ad_fn : str or None
        #   Path to the h5ad file storing junction counts.
        "h5ad_fn": conf.h5ad_fn,

        # stats : diff.counts.JunctionDiffStats
        #   The run-level summary.
        "stats": jd_stats,

        # n_tests : int
        #   Number of rows in the per-junction table.
        "n_tests": df.shape[0]
    }
    return(res)



def diff_run(conf):
    ret = -1
    res = None

    start_time = time.time()
    time_str = time.strftime(
        "%Y-%m-%d %H:%M:%S", time.localtime(start_time))
    info("start time: %s." % time_str)

    try:
        res = diff_core(conf)
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



def diff_preamble(conf, jd_stats, n_unique):
    lst = []
    lst.append(("program", "%s %s" % (APP, VERSION)))
    if conf.argv:
        lst.append(("cmd", " ".join(conf.argv)))
    lst.append(("files", ",".join(conf.count_fn_list)))
    lst.append(("groups", ",".join([str(g) for g in conf.groups])))
    if conf.use_min_total_count():
        lst.append(("min-total-count", conf.min_total_count))
    if conf.use_edit_distance():
        lst.append(("max-edit-distance", conf.max_edit_distance))
    lst.append(("min-competitors", conf.min_competitors))
    for smp in jd_stats.samples:
        lst.append(("sample", "%s;%d;%s" % \
            (smp.sample_name, smp.group, smp.filename)))
    lst.append(("total-junctions", jd_stats.total_junctions))
    lst.append(("filtered-junctions", jd_stats.filtered_junctions))
    lst.append(("valid-donors", jd_stats.valid_donors))
    lst.append(("valid-acceptors", jd_stats.valid_acceptors))
    lst.append(("final-junctions", jd_stats.final_junctions))
    lst.append(("unique-junctions", n_unique))
    return(lst)
