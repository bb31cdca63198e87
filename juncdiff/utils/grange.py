# grange.py - genomic range/interval routine


class GenomicSpan:
    """Genomic span.

    Attributes
    ----------
    chrom : str
        Chromosome name.
    start : int
        0-based start pos, inclusive.
    end : int
        0-based end pos, exclusive.
    strand : str
        DNA strand orientation, one of "+", "-", ".".
    """
    def __init__(self, chrom, start, end, strand = "."):
        self.chrom = chrom
        self.start = start
        self.end = end
        self.strand = strand

    def __eq__(self, other):
        if not isinstance(other, GenomicSpan):
            return NotImplemented
        return self.compare(other) == 0

    def __hash__(self):
        return hash((self.chrom, self.start, self.end, self.strand))

    def __repr__(self):
        return "GenomicSpan(%s, %s)" % (str(self), self.strand)

    def __str__(self):
        return span2str(self.chrom, self.start, self.end)

    def compare(self, span):
        """Compare with another span.

        Parameters
        ----------
        span : `GenomicSpan`
            The span to be compared with `self`.

        Returns
        -------
        int
            Comparison result
            - negative integer if `self` is smaller;
            - 0 if equal;
            - positive integer if bigger.
        """
        if self.chrom != span.chrom:
            return(-1 if self.chrom < span.chrom else 1)
        if self.start != span.start:
            return(self.start - span.start)
        if self.end != span.end:
            return(self.end - span.end)
        if self.strand != span.strand:
            return(-1 if self.strand < span.strand else 1)
        return(0)


def span2str(chrom, start, end):
    return("%s:%d-%d" % (chrom, start, end))


def str2tuple(s):
    """Convert a string of genomic region into 3-element tuple.

    The chromosome name may itself contain ":" (e.g., HLA contigs), hence
    the coordinates are taken from the last ":".

    Parameters
    ----------
    s : str
        The string of genomic region, e.g., "chr1:100-200".

    Returns
    -------
    tuple
        A tuple of 3 elements: chrom (str), start (int), and end (int).
        `None` if the input `s` is invalid.
    """
    if s is None or not isinstance(s, str):
        return(None)
    if ":" not in s:
        return(None)
    chrom, coord = s.rsplit(":", 1)
    if len(chrom) <= 0 or coord.count("-") != 1:
        return(None)
    start, end = coord.split("-")
    try:
        start = int(start)
        end = int(end)
    except ValueError:
        return(None)
    if start < 0 or end < start:
        return(None)
    return((chrom, start, end))
