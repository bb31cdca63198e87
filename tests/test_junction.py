# test_junction.py - splice sites, junction keys and genomic spans.


import pytest

from juncdiff.utils.grange import GenomicSpan, span2str, str2tuple
from juncdiff.utils.junction import JunctionKey, SpliceSite, \
    SITE_ACCEPTOR, SITE_DONOR


def test_str2tuple():
    assert str2tuple("chr1:100-200") == ("chr1", 100, 200)
    assert str2tuple("HLA-A*01:01:01:01:10-20") == ("HLA-A*01:01:01:01", 10, 20)
    assert str2tuple("chr1:100-100") == ("chr1", 100, 100)
    assert str2tuple("chr1:200-100") is None
    assert str2tuple("chr1:100") is None
    assert str2tuple("chr1-100-200") is None
    assert str2tuple(":100-200") is None
    assert str2tuple("chr1:a-200") is None
    assert str2tuple(None) is None


def test_span():
    s1 = GenomicSpan("chr1", 100, 200, "+")
    s2 = GenomicSpan("chr1", 100, 200, "+")
    s3 = GenomicSpan("chr1", 100, 250, "+")
    assert s1 == s2
    assert hash(s1) == hash(s2)
    assert s1.compare(s3) < 0
    assert s3.compare(s1) > 0
    assert GenomicSpan("chr1", 100, 200, "+") != \
        GenomicSpan("chr1", 100, 200, "-")
    assert str(s1) == "chr1:100-200"
    assert span2str("chrX", 1, 2) == "chrX:1-2"


def test_sites_plus_strand():
    key = JunctionKey("chr1:100-200", "+")
    assert key.donor == SpliceSite("chr1", 100, "+", SITE_DONOR)
    assert key.acceptor == SpliceSite("chr1", 200, "+", SITE_ACCEPTOR)
    assert key.get_site(SITE_DONOR) is key.donor
    assert key.get_site(SITE_ACCEPTOR) is key.acceptor
    assert key.donor.name == "chr1:100"


def test_sites_unstranded_as_plus():
    key = JunctionKey("chr1:100-200", ".")
    assert key.donor.pos == 100
    assert key.acceptor.pos == 200
    assert key.donor.strand == "."


def test_sites_minus_strand():
    key = JunctionKey("chr1:100-200", "-")
    assert key.donor == SpliceSite("chr1", 200, "-", SITE_DONOR)
    assert key.acceptor == SpliceSite("chr1", 100, "-", SITE_ACCEPTOR)


def test_site_role_and_strand_matter():
    donor = SpliceSite("chr1", 100, "+", SITE_DONOR)
    assert donor != SpliceSite("chr1", 100, "+", SITE_ACCEPTOR)
    assert donor != SpliceSite("chr1", 100, "-", SITE_DONOR)
    assert len({donor, SpliceSite("chr1", 100, "+", SITE_DONOR)}) == 1


def test_shared_donor():
    a = JunctionKey("chr1:100-200", "+")
    b = JunctionKey("chr1:100-250", "+")
    assert a.donor == b.donor
    assert a.acceptor != b.acceptor


def test_key_identity():
    a = JunctionKey("chr1:100-200", "+")
    assert a == JunctionKey.parse(" chr1:100-200 ", "+ ")
    assert a != JunctionKey("chr1:100-200", "-")
    assert len({a, JunctionKey("chr1:100-200", "+")}) == 1


def test_key_ordering():
    keys = [
        JunctionKey("chr2:10-20", "+"),
        JunctionKey("chr1:100-250", "+"),
        JunctionKey("chr1:100-200", "-"),
        JunctionKey("chr1:100-200", "+"),
        JunctionKey("chr1:50-300", "+")
    ]
    # coordinates are compared as numbers.
    names = [(k.name, k.strand) for k in sorted(keys)]
    assert names == [
        ("chr1:50-300", "+"),
        ("chr1:100-200", "+"),
        ("chr1:100-200", "-"),
        ("chr1:100-250", "+"),
        ("chr2:10-20", "+")
    ]


def test_retained_intron():
    assert JunctionKey("chr1:100-100", "+").is_retained_intron()
    assert not JunctionKey("chr1:100-101", "+").is_retained_intron()


@pytest.mark.parametrize("name, strand", [
    ("chr1:200-100", "+"),
    ("chr1100-200", "+"),
    ("chr1:100-200", "x"),
    ("chr1:100-200", "")
])
def test_invalid_key(name, strand):
    with pytest.raises(ValueError):
        JunctionKey(name, strand)
