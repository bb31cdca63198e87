# io.py - input and output.


import math

from ..utils.junction import JunctionKey
from ..utils.xerror import ParseError
from ..utils.xfile import zopen


# columns of the junction count file.
COL_JUNCTION = "junction"
COL_STRAND = "strand"
COL_COUNT = "count"
COL_EDIT_DISTANCE = "edit_distance"

COUNT_REQUIRED_COLUMNS = (COL_JUNCTION, COL_STRAND, COL_COUNT)



def load_junction_counts(fn, need_edit_distance = False):
    """Load junction counts of one sample.

    Parameters
    ----------
    fn : str
        Path to the junction count file, plain or gzip compressed.
        Lines starting with "#" are comments; the first other line is the
        header, which should contain the columns:
        - "junction" (str): junction identifier, "chrom:start-end", 0-based
          start (inclusive) and end (exclusive).
        - "strand" (str): "+", "-" or ".".
        - "count" (int): number of reads spanning the junction.
        - "edit_distance" (float, optional): average edit distance of these
          reads.
        Other columns are ignored.
    need_edit_distance : bool, default False
        Whether the "edit_distance" column is required.

    Yields
    ------
    utils.junction.JunctionKey
        The junction.
    int
        The read count.
    float or None
        The average edit distance; None if the column is absent.

    Raises
    ------
    utils.xerror.ParseError
        If the file is malformed.
    """
    header = None
    col_idx = None
    ed_idx = None
    seen = set()
    with zopen(fn, "r") as fp:
        for line_no, line in enumerate(fp, start = 1):
            line = line.rstrip("\r\n")
            if not line.strip() or line[0] == "#":
                continue
            cols = line.split("\t")
            if header is None:
                header = [c.strip() for c in cols]
                col_idx = {}
                for col in COUNT_REQUIRED_COLUMNS:
                    if col not in header:
                        raise ParseError(fn, line_no,
                            "missing column '%s' in header." % col)
                    col_idx[col] = header.index(col)
                if COL_EDIT_DISTANCE in header:
                    ed_idx = header.index(COL_EDIT_DISTANCE)
                elif need_edit_distance:
                    raise ParseError(fn, line_no,
                        "missing column '%s' in header, required by "
                        "edit-distance filtering." % COL_EDIT_DISTANCE)
                continue

            if len(cols) != len(header):
                raise ParseError(fn, line_no,
                    "expect %d columns, got %d." % (len(header), len(cols)))

            try:
                key = JunctionKey.parse(
                    cols[col_idx[COL_JUNCTION]], cols[col_idx[COL_STRAND]])
            except ValueError as e:
                raise ParseError(fn, line_no, str(e))
            if key in seen:
                raise ParseError(fn, line_no,
                    "duplicate junction '%s' (%s)." % (key.name, key.strand))
            seen.add(key)

            count = __parse_count(fn, line_no, cols[col_idx[COL_COUNT]])
            ed = None
            if ed_idx is not None:
                ed = __parse_edit_distance(fn, line_no, cols[ed_idx])
            yield key, count, ed

    if header is None:
        raise ParseError(fn, None, "header line not found.")


def __parse_count(fn, line_no, s):
    try:
        x = float(s)
    except ValueError:
        raise ParseError(fn, line_no, "invalid count '%s'." % s)
    if math.isnan(x) or math.isinf(x) or x < 0 or x != int(x):
        raise ParseError(fn, line_no, "invalid count '%s'." % s)
    return(int(x))


def __parse_edit_distance(fn, line_no, s):
    try:
        x = float(s)
    except ValueError:
        raise ParseError(fn, line_no, "invalid edit distance '%s'." % s)
    if math.isnan(x) or x < 0:
        raise ParseError(fn, line_no, "invalid edit distance '%s'." % s)
    return(x)



def save_diff_table(df, fn, preamble = None):
    """Save the per-junction table.

    Parameters
    ----------
    df : pandas.DataFrame
        The per-junction table, see :func:`~diff.core.calc_diff_table`.
    fn : str or None
        Path to the output file; None means stdout.
    preamble : list of tuple of (str, object) or None, default None
        Meta information written as "## key: value" lines before the table.

    Returns
    -------
    Void.
    """
    with zopen(fn, "w") as fp:
        write_preamble(fp, preamble)
        fp.write(df.to_csv(sep = "\t", index = False, lineterminator = "\n"))


def write_preamble(fp, preamble):
    if not preamble:
        return
    for k, v in preamble:
        fp.write("## %s: %s\n" % (k, v))
