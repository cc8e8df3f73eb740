def format_range(start, end):
    """
    Formats an inclusive run of zero based indices for display, one based.
    >>> format_range(0, 0)
    '1'
    >>> format_range(0, 2)
    '1-3'
    """
    start += 1
    end += 1
    return str(start) if start == end else "%d-%d" % (start, end)


def format_ports_as_range(indices):
    """
    Compresses zero based port indices into one based runs.

    The indices are sorted and duplicates removed first, so the order reports arrived in does not matter.

    >>> format_ports_as_range([0, 1, 2, 5, 6, 9])
    '1-3,6-7,10'
    >>> format_ports_as_range([3])
    '4'
    >>> format_ports_as_range([])
    ''
    """
    ordered = sorted(set(indices))
    if not ordered:
        return ""

    parts = []
    start = prev = ordered[0]
    for n in ordered[1:]:
        if n == prev + 1:
            prev = n
            continue
        parts.append(format_range(start, prev))
        start = prev = n
    parts.append(format_range(start, prev))
    return ",".join(parts)
