# core.py - aggregate differentially spliced junctions into events.


from logging import debug, info
from ..utils.grange import span2str
from ..utils.junction import JunctionKey
from ..utils.xerror import ParseError



class JunctionEventStats:
    """Statistics of a junction passing the intake filter."""
    def __init__(self, fdr, pct_diff, site_type):
        # fdr : float
        #   The BH-adjusted p-value of the selected site test.
        self.fdr = fdr

        # pct_diff : float
        #   The signed percent difference, experimental minus control.
        self.pct_diff = pct_diff

        # site_type : str
        #   The site type of the selected test.
        self.site_type = site_type


class Event:
    """A maximal set of junctions connected by shared splice sites.

    Attributes
    ----------
    junctions : list of utils.junction.JunctionKey
        The member junctions, sorted.
    chrom : str
        Chromosome name.
    start : int
        Minimum start of the member spans, 0-based.
    end : int
        Maximum end of the member spans, 0-based, exclusive.
    strand : str
        Strand of the first member.
    min_pvalue : float
        Minimum FDR of the members.
    max_pct_diff : float
        Maximum absolute percent difference of the members.
    retained_intron : bool
        Whether any member is a retained intron.
    pvalues : list of float
        FDR of each member.
    pct_diffs : list of float
        Signed percent difference of each member.
    """
    def __init__(self, junctions):
        self.junctions = junctions
        self.chrom = None
        self.start = None
        self.end = None
        self.strand = None
        self.min_pvalue = None
        self.max_pct_diff = None
        self.retained_intron = False
        self.pvalues = []
        self.pct_diffs = []

    def get_span_str(self):
        return span2str(self.chrom, self.start, self.end)

    def is_solo(self):
        return len(self.junctions) == 1


class EventResult:
    def __init__(self):
        # events : list of Event
        #   Events passing the event-level FDR threshold.
        self.events = []

        # all_events : list of Event
        #   All events, including the ones failing the threshold.
        self.all_events = []

        # valid : dict of {JunctionKey : JunctionEventStats}
        #   Junctions passing the intake filter.
        self.valid = {}

        # failed : list of JunctionKey
        #   Junctions failing the intake filter, sorted.
        self.failed = []

        # counters.
        self.total_junctions = 0
        self.passing_donors = 0
        self.passing_acceptors = 0
        self.multi_events = 0
        self.solo_events = 0



def filter_junctions(df, junc_fdr, min_pct_diff, fn = None):
    """Intake filter of the per-junction table.

    Parameters
    ----------
    df : pandas.DataFrame
        The per-junction table, see :func:`~events.io.load_diff_table`.
    junc_fdr : float
        Maximum FDR of a passing test.
    min_pct_diff : float
        Minimum absolute percent difference of a passing test.
    fn : str or None, default None
        The file `df` was loaded from, used in error messages.

    Returns
    -------
    dict of {JunctionKey : JunctionEventStats}
        Junctions with at least one passing test, in table order.
        If both tests of a junction pass, the last one in `df` is used.
    list of JunctionKey
        Junctions without any passing test, sorted.
    int
        Number of distinct junctions in `df`.
    """
    valid = {}
    seen = {}
    for i in range(df.shape[0]):
        rec = df.iloc[i]
        try:
            key = JunctionKey.parse(rec["junction"], rec["strand"])
        except ValueError as e:
            line_no = int(rec["line_no"]) if "line_no" in df.columns else None
            raise ParseError(fn if fn else "<table>", line_no, str(e))
        seen[key] = True

        fdr = float(rec["fdr"])
        pct_diff = float(rec["pct_diff"])
        if fdr > junc_fdr or abs(pct_diff) < min_pct_diff:
            continue
        # a later passing row of the same junction replaces the earlier one.
        valid[key] = JunctionEventStats(fdr, pct_diff, rec["site_type"])

    failed = sorted([key for key in seen if key not in valid])
    return((valid, failed, len(seen)))


def build_site_index(junctions):
    """Index junctions by their donor and acceptor sites.

    Parameters
    ----------
    junctions : iterable of JunctionKey
        The junctions to be indexed.

    Returns
    -------
    dict of {SpliceSite : list of JunctionKey}
        The donor index.
    dict of {SpliceSite : list of JunctionKey}
        The acceptor index.
    """
    donors = {}
    acceptors = {}
    for key in junctions:
        donors.setdefault(key.donor, []).append(key)
        acceptors.setdefault(key.acceptor, []).append(key)
    return((donors, acceptors))


def find_events(junctions, donors, acceptors):
    """Find connected components of junctions sharing splice sites.

    Parameters
    ----------
    junctions : iterable of JunctionKey
        The junctions to be clustered.
    donors : dict of {SpliceSite : list of JunctionKey}
        The donor index.
    acceptors : dict of {SpliceSite : list of JunctionKey}
        The acceptor index.

    Returns
    -------
    list of list of JunctionKey
        The events. Members of each event are sorted; events are sorted by
        their first member.
    """
    used = set()
    events = []
    for junc in junctions:
        if junc in used:
            continue
        members = []
        used.add(junc)
        stack = [junc]
        while stack:
            cur = stack.pop()
            members.append(cur)
            for sib in donors.get(cur.donor, []) + \
                    acceptors.get(cur.acceptor, []):
                if sib not in used:
                    used.add(sib)
                    stack.append(sib)
        events.append(sorted(members))
    events.sort(key = lambda ev: ev[0])
    return(events)


def summarize_event(members, valid):
    """Summary statistics of one event.

    Parameters
    ----------
    members : list of JunctionKey
        The sorted member junctions.
    valid : dict of {JunctionKey : JunctionEventStats}
        Statistics of all valid junctions.

    Returns
    -------
    Event
        The event with summary fields set.
    """
    ev = Event(members)
    for junc in members:
        span = junc.span
        if ev.chrom is None:
            ev.chrom = span.chrom
            ev.start = span.start
            ev.end = span.end
            ev.strand = junc.strand
        else:
            if span.chrom != ev.chrom:
                raise ValueError(
                    "junctions '%s' and '%s' are on different chromosomes." \
                    % (members[0].name, junc.name))
            ev.start = min(ev.start, span.start)
            ev.end = max(ev.end, span.end)
        if junc.is_retained_intron():
            ev.retained_intron = True

        stats = valid[junc]
        ev.pvalues.append(stats.fdr)
        ev.pct_diffs.append(stats.pct_diff)
        if ev.min_pvalue is None or stats.fdr < ev.min_pvalue:
            ev.min_pvalue = stats.fdr
        if ev.max_pct_diff is None or abs(stats.pct_diff) > ev.max_pct_diff:
            ev.max_pct_diff = abs(stats.pct_diff)
    return(ev)


def combine_events(df, junc_fdr = 0.2, event_fdr = 0.1, min_pct_diff = 0.1,
                   fn = None):
    """Aggregate the per-junction table into events.

    Parameters
    ----------
    df : pandas.DataFrame
        The per-junction table, see :func:`~events.io.load_diff_table`.
    junc_fdr : float, default 0.2
        Maximum FDR of a junction to be clustered.
    event_fdr : float, default 0.1
        Maximum `min_pvalue` of an event to be reported.
    min_pct_diff : float, default 0.1
        Minimum absolute percent difference of a junction to be clustered.
    fn : str or None, default None
        The file `df` was loaded from, used in error messages.

    Returns
    -------
    EventResult
        The events and counters.
    """
    res = EventResult()
    res.valid, res.failed, res.total_junctions = filter_junctions(
        df, junc_fdr, min_pct_diff, fn = fn)
    info("%d out of %d junctions pass the intake filter." % \
        (len(res.valid), res.total_junctions))

    donors, acceptors = build_site_index(res.valid.keys())
    res.passing_donors = len(donors)
    res.passing_acceptors = len(acceptors)

    for members in find_events(res.valid.keys(), donors, acceptors):
        ev = summarize_event(members, res.valid)
        res.all_events.append(ev)
        if ev.is_solo():
            res.solo_events += 1
        else:
            res.multi_events += 1
        if ev.min_pvalue <= event_fdr:
            res.events.append(ev)
    info("%d events found (%d multi, %d solo); %d pass the event FDR." % \
        (len(res.all_events), res.multi_events, res.solo_events,
         len(res.events)))
    debug("passing donor sites: %d; passing acceptor sites: %d." % \
        (res.passing_donors, res.passing_acceptors))
    return(res)



def event_bed_records(result):
    """BED records of all junctions passing the intake filter.

    Junctions are listed in event order; score is `|pct_diff| * 100` and
    strand is "+" for increased usage in the experimental group, "-"
    otherwise.
    """
    records = []
    for ev in result.all_events:
        for junc in ev.junctions:
            stats = result.valid[junc]
            span = junc.span
            records.append((span.chrom, span.start, span.end, junc.name,
                abs(stats.pct_diff) * 100, "+" if stats.pct_diff > 0 else "-"))
    return(records)


def failed_bed_records(result):
    """BED records of the junctions failing the intake filter."""
    records = []
    for junc in result.failed:
        span = junc.span
        records.append((span.chrom, span.start, span.end, junc.name, 0,
            junc.strand))
    return(records)
