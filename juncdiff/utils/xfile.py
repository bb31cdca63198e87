# xfile.py - wrapper of file object, supporting GZIP/BGZIP.

# BGZIP files are read with gzip (pysam's BGZFile drops blank lines when
# reading in older versions) and written with pysam.


import gzip
import pysam
import sys



class ZFile:
    """Simple wrapper of text file object that supports plain/GZIP/BGZF."""

    def __init__(self, file_name, mode, file_type):
        """
        Parameters
        ----------
        file_name : str or None
            Path to the file. None means stdin (read) or stdout (write),
            which must be plain.
        mode : str
            File mode, "r", "w" or "a".
        file_type : int
            File type / format, one of `ZF_F_XXX`.
        """
        self.file_name = file_name
        self.mode = mode

        # fp
        #   The file object.
        self.fp = None

        # buf : str
        #   The write buffer.
        self.buf = ""

        if file_type == ZF_F_AUTO:
            file_type = guess_file_type(file_name)
        self.file_type = file_type

        if file_name is None:
            if file_type != ZF_F_PLAIN:
                raise ValueError("stdin/stdout must be plain text.")
            self.fp = sys.stdin if "r" in mode else sys.stdout
            self.is_std = True
        else:
            self.is_std = False
            if file_type == ZF_F_PLAIN:
                self.fp = open(file_name, mode + "t")
            elif file_type == ZF_F_GZIP:
                self.fp = gzip.open(file_name, mode + "t")
            elif file_type == ZF_F_BGZIP:
                if "r" in mode:
                    self.fp = gzip.open(file_name, mode + "t")
                else:
                    self.fp = pysam.BGZFile(file_name, mode + "b")
            else:
                raise ValueError("invalid file type")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __iter__(self):
        return iter(self.fp)

    def close(self):
        if self.fp:
            self.flush()
            if not self.is_std:
                self.fp.close()
            self.fp = None

    def flush(self):
        if self.buf:
            self.__write_raw(self.buf)
            self.buf = ""
        if self.is_std:
            self.fp.flush()

    def write(self, data):
        if not self.fp:
            raise OSError("file '%s' is closed." % self.file_name)
        self.buf += data
        if len(self.buf) >= ZF_BUFSIZE:
            self.__write_raw(self.buf)
            self.buf = ""
        return(len(data))

    def write_line(self, *cols):
        """Write one tab-delimited line."""
        return self.write("\t".join([str(c) for c in cols]) + "\n")

    def __write_raw(self, s):
        if self.file_type == ZF_F_BGZIP:
            self.fp.write(s.encode("utf8"))
        else:
            self.fp.write(s)



def guess_file_type(file_name):
    if file_name is None:
        return(ZF_F_PLAIN)
    fn = file_name.lower()
    if fn.endswith(".bgz"):
        return(ZF_F_BGZIP)
    elif fn.endswith(".gz") or fn.endswith(".gzip"):
        return(ZF_F_GZIP)
    return(ZF_F_PLAIN)


def zopen(file_name, mode, file_type = None):
    """Open a file.

    Parameters
    ----------
    file_name : str or None
        Path to the file. None means stdin/stdout.
    mode : str
        File mode, "r", "w" or "a".
    file_type : int or None, default None
        File type / format, one of ZF_F_XXX.
        If None, set to ZF_F_AUTO.

    Returns
    -------
    utils.xfile.ZFile
        The file object.
    """
    if file_type is None:
        file_type = ZF_F_AUTO
    return ZFile(file_name, mode, file_type)



# file type / format.
ZF_F_PLAIN = 0
ZF_F_GZIP = 1
ZF_F_BGZIP = 2
ZF_F_AUTO = 3

ZF_BUFSIZE = 1048576   # 1M
