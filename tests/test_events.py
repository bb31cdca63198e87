# test_events.py - combining junctions into events.


import gzip
import pandas as pd
import pytest

from juncdiff.diff.main import diff_wrapper
from juncdiff.events.core import build_site_index, combine_events, \
    event_bed_records, failed_bed_records, filter_junctions, find_events, \
    summarize_event
from juncdiff.events.io import load_diff_table
from juncdiff.events.main import events_wrapper
from juncdiff.utils.junction import JunctionKey
from juncdiff.utils.xerror import ParseError


def _table(rows):
    """Build a per-junction table from (junction, strand, site_type,
    pct_diff, fdr) tuples."""
    return pd.DataFrame(rows, columns = ["junction", "strand", "site_type",
                                         "pct_diff", "fdr"])


def _names(ev):
    return [j.name for j in ev.junctions]


def test_shared_donor_event():
    df = _table([
        ("chr1:100-200", "+", "donor", -0.5, 0.01),
        ("chr1:100-250", "+", "donor", 0.5, 0.01)
    ])
    res = combine_events(df)
    assert len(res.events) == 1
    ev = res.events[0]
    assert ev.get_span_str() == "chr1:100-250"
    assert _names(ev) == ["chr1:100-200", "chr1:100-250"]
    assert ev.strand == "+"
    assert ev.min_pvalue == pytest.approx(0.01)
    assert ev.max_pct_diff == pytest.approx(0.5)
    assert not ev.retained_intron
    assert res.multi_events == 1 and res.solo_events == 0


def test_transitive_clustering():
    # a-b share a donor and b-c share an acceptor.
    df = _table([
        ("chr1:100-200", "+", "donor", 0.3, 0.05),
        ("chr1:100-300", "+", "donor", -0.3, 0.05),
        ("chr1:150-300", "+", "acceptor", 0.3, 0.05),
        ("chr1:500-600", "+", "donor", 0.3, 0.05)
    ])
    res = combine_events(df)
    assert [_names(ev) for ev in res.events] == [
        ["chr1:100-200", "chr1:100-300", "chr1:150-300"],
        ["chr1:500-600"]
    ]
    assert res.events[0].get_span_str() == "chr1:100-300"
    assert res.multi_events == 1 and res.solo_events == 1


def test_partition_and_idempotence():
    rows = [
        ("chr1:100-200", "+", "donor", 0.3, 0.05),
        ("chr1:100-300", "+", "donor", -0.3, 0.05),
        ("chr1:150-300", "+", "acceptor", 0.3, 0.15),
        ("chr1:500-600", "-", "donor", 0.3, 0.15),
        ("chr1:400-600", "-", "donor", -0.2, 0.15),
        ("chr3:10-20", ".", "donor", 0.9, 0.001),
        ("chr2:10-20", "+", "donor", 0.05, 0.01),
        ("chr2:10-30", "+", "donor", 0.3, 0.5)
    ]
    res = combine_events(_table(rows))
    members = [j for ev in res.all_events for j in ev.junctions]
    # every valid junction is in exactly one event.
    assert len(members) == len(set(members))
    assert set(members) == set(res.valid.keys())
    assert len(res.valid) == 6
    assert [j.name for j in res.failed] == ["chr2:10-20", "chr2:10-30"]

    res2 = combine_events(_table(rows))
    assert [_names(ev) for ev in res.all_events] == \
        [_names(ev) for ev in res2.all_events]

    # clustering only the junctions of one event gives back that event.
    ev = res.all_events[0]
    sub = _table([r for r in rows if r[0] in _names(ev)])
    res3 = combine_events(sub)
    assert [_names(e) for e in res3.all_events] == [_names(ev)]


def test_event_fdr_gate():
    rows = [
        ("chr1:100-200", "+", "donor", 0.3, 0.15),
        ("chr1:100-300", "+", "donor", -0.3, 0.18),
        ("chr2:100-200", "+", "donor", 0.3, 0.05)
    ]
    res = combine_events(_table(rows), junc_fdr = 0.2, event_fdr = 0.1)
    assert len(res.all_events) == 2
    assert [_names(ev) for ev in res.events] == [["chr2:100-200"]]
    res = combine_events(_table(rows), junc_fdr = 0.2, event_fdr = 0.15)
    assert len(res.events) == 2


def test_intake_filter():
    rows = [
        ("chr1:100-200", "+", "donor", 0.3, 0.5),
        ("chr1:100-200", "+", "acceptor", -0.4, 0.02),
        ("chr1:100-300", "+", "donor", 0.3, 0.02),
        ("chr1:100-300", "+", "acceptor", 0.35, 0.01),
        ("chr1:500-600", "+", "donor", 0.09, 0.01),
        ("chr2:100-200", "+", "donor", 0.3, 0.01),
        ("chr2:100-200", "+", "acceptor", 0.25, 0.15)
    ]
    valid, failed, n = filter_junctions(_table(rows), 0.2, 0.1)
    assert n == 4
    a = JunctionKey("chr1:100-200", "+")
    b = JunctionKey("chr1:100-300", "+")
    c = JunctionKey("chr2:100-200", "+")
    assert list(valid.keys()) == [a, b, c]
    assert valid[a].site_type == "acceptor"
    assert valid[a].pct_diff == pytest.approx(-0.4)
    assert valid[b].fdr == pytest.approx(0.01)
    assert valid[b].site_type == "acceptor"
    # the last passing row is used when both tests pass.
    assert valid[c].fdr == pytest.approx(0.15)
    assert valid[c].pct_diff == pytest.approx(0.25)
    assert valid[c].site_type == "acceptor"
    assert [j.name for j in failed] == ["chr1:500-600"]

    res = combine_events(_table(rows[-2:]), junc_fdr = 0.2, event_fdr = 0.2)
    ev = res.events[0]
    assert ev.pvalues == [pytest.approx(0.15)]
    assert ev.min_pvalue == pytest.approx(0.15)


def test_site_index():
    a = JunctionKey("chr1:100-200", "-")
    b = JunctionKey("chr1:150-200", "-")
    donors, acceptors = build_site_index([a, b])
    assert donors[a.donor] == [a, b]
    assert len(acceptors) == 2
    assert find_events([a, b], donors, acceptors) == [[a, b]]


def test_retained_intron():
    df = _table([
        ("chr1:100-100", "+", "donor", 0.4, 0.01),
        ("chr1:100-200", "+", "donor", -0.4, 0.01)
    ])
    res = combine_events(df)
    assert len(res.events) == 1
    ev = res.events[0]
    assert len(ev.junctions) == 2
    assert ev.retained_intron


def test_events_sorted_by_first_member():
    df = _table([
        ("chr2:100-200", "+", "donor", 0.4, 0.01),
        ("chr1:300-400", "+", "donor", 0.4, 0.01),
        ("chr1:50-400", "+", "donor", 0.4, 0.01)
    ])
    res = combine_events(df)
    assert [_names(ev) for ev in res.events] == [
        ["chr1:50-400", "chr1:300-400"],
        ["chr2:100-200"]
    ]


def test_mixed_chromosomes():
    a = JunctionKey("chr1:100-200", "+")
    b = JunctionKey("chr2:100-200", "+")
    valid, _, _ = filter_junctions(_table([
        ("chr1:100-200", "+", "donor", 0.4, 0.01),
        ("chr2:100-200", "+", "donor", 0.4, 0.01)
    ]), 0.2, 0.1)
    with pytest.raises(ValueError):
        summarize_event([a, b], valid)


def test_bed_records():
    df = _table([
        ("chr1:100-200", "+", "donor", -0.25, 0.01),
        ("chr1:100-250", "+", "donor", 0.25, 0.01),
        ("chr2:10-20", "-", "donor", 0.5, 0.15),
        ("chr3:10-20", "-", "donor", 0.01, 0.01)
    ])
    res = combine_events(df)
    assert len(res.events) == 1
    recs = event_bed_records(res)
    assert recs == [
        ("chr1", 100, 200, "chr1:100-200", pytest.approx(25.0), "-"),
        ("chr1", 100, 250, "chr1:100-250", pytest.approx(25.0), "+"),
        ("chr2", 10, 20, "chr2:10-20", pytest.approx(50.0), "+")
    ]
    assert failed_bed_records(res) == [("chr3", 10, 20, "chr3:10-20", 0, "-")]



### Input and output

def test_load_diff_table_missing_column(tmp_path):
    fn = tmp_path / "diff.tsv"
    fn.write_text("## program: x\njunction\tstrand\tsite_type\tpct_diff\n"
                  "chr1:1-2\t+\tdonor\t0.1\n")
    with pytest.raises(ParseError) as exc:
        load_diff_table(str(fn))
    assert exc.value.line_no == 2
    assert "fdr" in str(exc.value)


def test_load_diff_table_bad_value(tmp_path):
    fn = tmp_path / "diff.tsv"
    fn.write_text("junction\tstrand\tsite_type\tpct_diff\tfdr\n"
                  "chr1:1-2\t+\tdonor\t0.1\t0.01\n"
                  "chr1:1-3\t+\tdonor\tNA\t0.01\n")
    with pytest.raises(ParseError) as exc:
        load_diff_table(str(fn))
    assert exc.value.line_no == 3


def test_bad_junction_in_table(tmp_path):
    fn = tmp_path / "diff.tsv"
    fn.write_text("junction\tstrand\tsite_type\tpct_diff\tfdr\n"
                  "chr1:1-2\t+\tdonor\t0.1\t0.01\n"
                  "chr1:5-2\t+\tdonor\t0.1\t0.01\n")
    df = load_diff_table(str(fn))
    with pytest.raises(ParseError) as exc:
        combine_events(df, fn = str(fn))
    assert exc.value.line_no == 3


def test_events_wrapper(count_files, tmp_path):
    fn_list, groups = count_files
    diff_fn = str(tmp_path / "diff.tsv.gz")
    ret, _ = diff_wrapper(fn_list, groups, out_fn = diff_fn)
    assert ret == 0

    out_fn = str(tmp_path / "events.tsv")
    bed_fn = str(tmp_path / "events.bed")
    failed_fn = str(tmp_path / "failed.bed.bgz")
    ret, res = events_wrapper(diff_fn, out_fn = out_fn, bed_fn = bed_fn,
                              failed_fn = failed_fn)
    assert ret == 0
    result = res["result"]
    assert result.total_junctions == 4
    assert len(result.valid) == 2
    assert result.passing_donors == 1
    assert result.passing_acceptors == 2

    df = pd.read_csv(out_fn, sep = "\t", comment = "#")
    assert df.shape[0] == 1
    rec = df.iloc[0]
    assert rec["event"] == "chr1:100-200;chr1:100-250"
    assert rec["genome_span"] == "chr1:100-250"
    assert rec["junction_count"] == 2
    assert rec["max_pctdiff"] == pytest.approx(0.7)
    assert rec["retained_intron"] == "N"

    with open(out_fn) as fp:
        text = fp.read()
    assert "## multi-events: 1" in text
    assert "## passing-junctions: 2" in text

    with open(bed_fn) as fp:
        bed = [line.split("\t") for line in fp.read().splitlines()]
    assert [b[3] for b in bed] == ["chr1:100-200", "chr1:100-250"]
    assert [b[5] for b in bed] == ["-", "+"]

    with gzip.open(failed_fn, "rt") as fp:
        failed = [line.split("\t") for line in fp.read().splitlines()]
    assert [b[3] for b in failed] == ["chr2:400-600", "chr2:500-600"]
    assert [b[4] for b in failed] == ["0", "0"]


def test_events_wrapper_failures(tmp_path):
    ret, res = events_wrapper(str(tmp_path / "none.tsv"))
    assert ret < 0
    ret, res = events_wrapper(str(tmp_path / "none.tsv"), junc_fdr = 1.5)
    assert ret < 0
