# base.py - basic utils.


import os


def strip_suffix(fn, suffixes):
    """Remove known suffixes from the basename of `fn`, repeatedly.

    Parameters
    ----------
    fn : str
        Path to the file.
    suffixes : list of str
        Suffixes to be removed, e.g., ".gz", ".tsv".

    Returns
    -------
    str
        The stripped basename.
    """
    name = os.path.basename(fn)
    changed = True
    while changed:
        changed = False
        for sfx in suffixes:
            if len(name) > len(sfx) and name.lower().endswith(sfx):
                name = name[:-len(sfx)]
                changed = True
    return(name)
