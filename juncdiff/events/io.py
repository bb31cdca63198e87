# io.py - input and output.


import pandas as pd

from ..utils.xerror import ParseError
from ..utils.xfile import ZF_F_PLAIN, guess_file_type, zopen


DIFF_REQUIRED_COLUMNS = ("junction", "strand", "site_type", "pct_diff", "fdr")

EVENT_COLUMNS = ("event", "genome_span", "strand", "junction_count",
                 "min_pvalue", "max_pctdiff", "retained_intron", "pvalues",
                 "pctdiffs")



def load_diff_table(fn):
    """Load the per-junction table written by the `diff` module.

    Parameters
    ----------
    fn : str
        Path to the per-junction table.
        Leading lines starting with "#" are skipped; the next line is the
        header, which should contain the columns "junction", "strand",
        "site_type", "pct_diff" and "fdr".

    Returns
    -------
    pandas.DataFrame
        The table, with "pct_diff" and "fdr" converted to float, and an
        extra column "line_no" recording the 1-based line number of each
        row.

    Raises
    ------
    utils.xerror.ParseError
        If a required column is missing or a value fails to parse.
    """
    n_skip = 0
    with zopen(fn, "r") as fp:
        for line in fp:
            if line.startswith("#"):
                n_skip += 1
            else:
                break

    compression = None if guess_file_type(fn) == ZF_F_PLAIN else "gzip"
    try:
        df = pd.read_csv(fn, sep = "\t", skiprows = n_skip, dtype = str,
                         keep_default_na = False, compression = compression)
    except pd.errors.EmptyDataError:
        raise ParseError(fn, None, "header line not found.")
    except pd.errors.ParserError as e:
        raise ParseError(fn, None, str(e))

    header_no = n_skip + 1
    for col in DIFF_REQUIRED_COLUMNS:
        if col not in df.columns:
            raise ParseError(fn, header_no,
                "missing column '%s' in header." % col)

    df["line_no"] = [header_no + i + 1 for i in range(df.shape[0])]
    for col in ("pct_diff", "fdr"):
        values = pd.to_numeric(df[col], errors = "coerce")
        bad = values.isna()
        if bad.any():
            i = int(bad.values.argmax())
            raise ParseError(fn, int(df["line_no"].iloc[i]),
                "invalid %s '%s'." % (col, df[col].iloc[i]))
        df[col] = values.astype(float)

    bad = ~df["site_type"].isin(["donor", "acceptor"])
    if bad.any():
        i = int(bad.values.argmax())
        raise ParseError(fn, int(df["line_no"].iloc[i]),
            "invalid site_type '%s'." % df["site_type"].iloc[i])
    return(df)



def save_events(events, fn, preamble = None):
    """Save events into a TSV file.

    Parameters
    ----------
    events : list of events.core.Event
        The events to be saved.
    fn : str or None
        Path to the output file; None means stdout.
    preamble : list of tuple of (str, object) or None, default None
        Meta information written as "## key: value" lines before the table.

    Returns
    -------
    Void.
    """
    with zopen(fn, "w") as fp:
        if preamble:
            for k, v in preamble:
                fp.write("## %s: %s\n" % (k, v))
        fp.write_line(*EVENT_COLUMNS)
        for ev in events:
            fp.write_line(
                ";".join([j.name for j in ev.junctions]),
                ev.get_span_str(),
                ev.strand,
                len(ev.junctions),
                ev.min_pvalue,
                ev.max_pct_diff,
                "Y" if ev.retained_intron else "N",
                ";".join([str(x) for x in ev.pvalues]),
                ";".join([str(x) for x in ev.pct_diffs])
            )


def save_bed(records, fn):
    """Save BED records.

    Parameters
    ----------
    records : list of tuple
        Each tuple has 6 elements: chrom, start, end, name, score, strand.
    fn : str
        Path to the output BED file; ".gz" and ".bgz" suffixes select
        GZIP and BGZF compression.

    Returns
    -------
    Void.
    """
    with zopen(fn, "w") as fp:
        for rec in records:
            fp.write_line(*rec)
