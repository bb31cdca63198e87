# base.py - basic input and output.


import anndata as ad



def load_h5ad(fn):
    """Wrapper to load anndata h5ad file.

    Parameters
    ----------
    fn : str
        Path to the h5ad file.

    Returns
    -------
    anndata.AnnData
    """
    adata = ad.read_h5ad(fn)
    adata.obs.index = adata.obs.index.astype(str)
    adata.var.index = adata.var.index.astype(str)
    return(adata)


def save_h5ad(adata, filename, compression = "gzip"):
    """Wrapper to save anndata into a h5ad file."""
    return(adata.write_h5ad(filename = filename, compression = compression))


def load_list_from_str(s, sep = ","):
    """Split the string into a list.

    Parameters
    ----------
    s : str
        The string to be splitted.
    sep : str, default ","
        The delimiter.

    Returns
    -------
    list of str
        A list of strings extracted from `s`, empty items removed.
    """
    dat = [x.strip().strip('"').strip("'") for x in s.split(sep)]
    return([x for x in dat if x])
