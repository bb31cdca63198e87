# conftest.py - shared fixtures.


import gzip
import logging
import pytest


@pytest.fixture(autouse = True)
def reset_logging():
    """Drop the handlers installed by the command line entry points."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for h in root.handlers[:]:
        if h not in handlers:
            root.removeHandler(h)
    root.setLevel(level)


def _write_counts(path, rows, edit_distance = False, comment = None):
    header = ["junction", "strand", "count"]
    if edit_distance:
        header.append("edit_distance")
    lines = []
    if comment:
        lines.append("# %s" % comment)
    lines.append("\t".join(header))
    for row in rows:
        lines.append("\t".join([str(x) for x in row]))
    s = "\n".join(lines) + "\n"
    if str(path).endswith(".gz"):
        with gzip.open(path, "wt") as fp:
            fp.write(s)
    else:
        with open(path, "w") as fp:
            fp.write(s)
    return(str(path))


@pytest.fixture
def write_counts(tmp_path):
    """Factory writing one junction count file into `tmp_path`."""
    def _factory(name, rows, edit_distance = False, comment = None):
        return _write_counts(tmp_path / name, rows,
            edit_distance = edit_distance, comment = comment)
    return _factory


# Two junctions sharing the donor chr1:100 on "+" switch usage between the
# groups; two junctions sharing the donor chr2:600 on "-" barely change.
SAMPLE_COUNTS = [
    # (name, group, A, B, C, D)
    ("ctrl1", 1, 90, 10, 50, 50),
    ("ctrl2", 1, 80, 20, 40, 60),
    ("exp1",  2, 20, 80, 50, 50),
    ("exp2",  2, 10, 90, 60, 40),
]


@pytest.fixture
def count_files(write_counts):
    """Four count files (2 control, 2 experimental) and their groups."""
    fn_list = []
    groups = []
    for name, group, a, b, c, d in SAMPLE_COUNTS:
        rows = [
            ("chr1:100-200", "+", a),
            ("chr1:100-250", "+", b),
            ("chr2:500-600", "-", c),
            ("chr2:400-600", "-", d)
        ]
        fn_list.append(write_counts("%s.tsv" % name, rows))
        groups.append(group)
    return((fn_list, groups))
