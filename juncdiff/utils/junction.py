# junction.py - splice sites and junction keys.


import functools

from .grange import GenomicSpan, str2tuple


STRANDS = ("+", "-", ".")

SITE_DONOR = "donor"
SITE_ACCEPTOR = "acceptor"
SITE_TYPES = (SITE_DONOR, SITE_ACCEPTOR)


class SpliceSite:
    """One end of an intron, used as a graph-connectivity key.

    Two junctions sharing a `SpliceSite` (same chrom, pos, strand and role)
    compete for the same splice site.
    """
    __slots__ = ("_chrom", "_pos", "_strand", "_role")

    def __init__(self, chrom, pos, strand, role):
        """
        Parameters
        ----------
        chrom : str
            Chromosome name.
        pos : int
            0-based genomic position of the site, i.e., the start or the
            end coordinate of the junction span.
        strand : str
            One of "+", "-", ".".
        role : str
            One of "donor", "acceptor".
        """
        assert role in SITE_TYPES
        self._chrom = chrom
        self._pos = pos
        self._strand = strand
        self._role = role

    chrom = property(lambda self: self._chrom)
    pos = property(lambda self: self._pos)
    strand = property(lambda self: self._strand)
    role = property(lambda self: self._role)

    @property
    def name(self):
        return "%s:%d" % (self._chrom, self._pos)

    def _tuple(self):
        return (self._chrom, self._pos, self._strand, self._role)

    def __eq__(self, other):
        if not isinstance(other, SpliceSite):
            return NotImplemented
        return self._tuple() == other._tuple()

    def __hash__(self):
        return hash(self._tuple())

    def __repr__(self):
        return "SpliceSite(%s, %s, %s)" % (self.name, self._strand, self._role)


@functools.total_ordering
class JunctionKey:
    """Identity of a junction across all samples.

    Attributes
    ----------
    name : str
        Junction identifier, "chrom:start-end", 0-based start (inclusive)
        and end (exclusive) of the intron.
    strand : str
        One of "+", "-", ".".
    span : utils.grange.GenomicSpan
        The intron span.
    donor : SpliceSite
        The 5' splice site.
    acceptor : SpliceSite
        The 3' splice site.
    """
    __slots__ = ("_name", "_strand", "_span", "_donor", "_acceptor")

    def __init__(self, name, strand):
        res = str2tuple(name)
        if res is None:
            raise ValueError("invalid junction '%s'." % name)
        if strand not in STRANDS:
            raise ValueError("invalid strand '%s'." % strand)
        chrom, start, end = res
        self._name = name
        self._strand = strand
        self._span = GenomicSpan(chrom, start, end, strand)
        if strand == "-":
            self._donor = SpliceSite(chrom, end, strand, SITE_DONOR)
            self._acceptor = SpliceSite(chrom, start, strand, SITE_ACCEPTOR)
        else:
            self._donor = SpliceSite(chrom, start, strand, SITE_DONOR)
            self._acceptor = SpliceSite(chrom, end, strand, SITE_ACCEPTOR)

    @classmethod
    def parse(cls, name, strand):
        return cls(name.strip(), strand.strip())

    name = property(lambda self: self._name)
    strand = property(lambda self: self._strand)
    span = property(lambda self: self._span)
    donor = property(lambda self: self._donor)
    acceptor = property(lambda self: self._acceptor)

    def get_site(self, site_type):
        if site_type == SITE_DONOR:
            return self._donor
        elif site_type == SITE_ACCEPTOR:
            return self._acceptor
        raise ValueError("invalid site type '%s'." % site_type)

    def is_retained_intron(self):
        return self._span.start == self._span.end

    def _sort_key(self):
        return (self._span.chrom, self._span.start, self._span.end,
                self._strand, self._name)

    def __eq__(self, other):
        if not isinstance(other, JunctionKey):
            return NotImplemented
        return self._name == other._name and self._strand == other._strand

    def __lt__(self, other):
        if not isinstance(other, JunctionKey):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self):
        return hash((self._name, self._strand))

    def __repr__(self):
        return "JunctionKey(%s, %s)" % (self._name, self._strand)

    def __str__(self):
        return self._name
