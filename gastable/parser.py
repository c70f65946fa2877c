""" Reading of cross-section files in the BOLSIG+ / LXCat format.

The parser does not depend on the rest of the package: it returns plain
dictionaries that can be passed to :func:`solver.BoltzmannSolver.load_collisions`
or turned into processes with

>>> process = process.Process(**d)

The built-in cross-section sets in :mod:`gases` use the same dictionary
layout, so both sources are interchangeable.
"""

import re
import logging

import numpy as np


def parse(fp):
    """ Parses a BOLSIG+ cross-sections file.

    Parameters
    ----------
    fp : file-like
       An open text file (or any iterable of lines with a `readline`
       method) with cross-sections in the BOLSIG+ format.

    Returns
    -------
    processes : list of dictionaries
       One dictionary per process found in the file.  All of them contain
       the keys `kind`, `target`, `comment` and `data`; the rest depend on
       the kind of process.

    Notes
    -----
    Any line that is not one of the recognized keywords is skipped, so
    the headers and the free text that LXCat adds between blocks are
    ignored.
    """
    processes = []
    for line in fp:
        key = line.strip()
        if key not in KEYWORDS:
            continue

        logging.debug("New process of type '%s'", key)
        d = KEYWORDS[key](fp)
        d['kind'] = key
        processes.append(d)

    logging.info("Parsing complete. %d processes read.", len(processes))

    return processes


# The BOLSIG+ user guide says that separators have at least five dashes.
RE_SEP = re.compile(r"-----+")
RE_ARROW = re.compile(r"<?->")


def _until_separator(fp):
    """ Returns the stripped lines of fp up to the next separator. """
    lines = []
    for line in fp:
        line = line.strip()
        if RE_SEP.match(line):
            break
        lines.append(line)

    return lines


def _block(fp, has_arg=True):
    """ Reads the header, the comment and the table of a process.
    The header is the target line, followed by an argument line when
    has_arg is true. """
    target = fp.readline().strip()
    arg = fp.readline().split() if has_arg else None

    comment = "\n".join(_until_separator(fp))
    table = [line for line in _until_separator(fp) if line]
    data = np.loadtxt(table, ndmin=2).tolist()

    logging.debug("Read process '%s' (%d points)", target, len(data))

    return target, arg, comment, data


def _split_reaction(signature):
    """ Splits 'A -> B' into ('A', 'B'); a bare species gives ('A', None). """
    sides = [s.strip() for s in RE_ARROW.split(signature)]
    if len(sides) == 2:
        return sides[0], sides[1]

    return signature.strip(), None


def _read_momentum(fp):
    """ ELASTIC, MOMENTUM and EFFECTIVE blocks: the argument is the
    electron to target mass ratio. """
    target, arg, comment, data = _block(fp)

    return dict(target=target,
                mass_ratio=float(arg[0]),
                comment=comment,
                data=data)


def _read_excitation(fp):
    """ EXCITATION and IONIZATION blocks: the argument is the threshold and,
    for reversible processes (marked with '<->'), the statistical weight
    ratio. """
    signature, arg, comment, data = _block(fp)
    target, product = _split_reaction(signature)

    d = dict(target=target,
             product=product,
             threshold=float(arg[0]),
             comment=comment,
             data=data)

    if '<->' in signature:
        d['weight_ratio'] = float(arg[1])

    return d


def _read_attachment(fp):
    """ ATTACHMENT blocks carry no argument line. """
    signature, _, comment, data = _block(fp, has_arg=False)
    target, product = _split_reaction(signature)

    return dict(target=target,
                product=product,
                threshold=0.0,
                comment=comment,
                data=data)


KEYWORDS = {"MOMENTUM": _read_momentum,
            "ELASTIC": _read_momentum,
            "EFFECTIVE": _read_momentum,
            "EXCITATION": _read_excitation,
            "IONIZATION": _read_excitation,
            "ATTACHMENT": _read_attachment}
