"""Identifier classification — static vs. expression-bearing frame ids.

A frame id is *dynamic* when it contains an unescaped expression marker
(``@`` by default).  A doubled marker (``@@``) is a literal escape and
does not make the id dynamic::

    contains_expression("item_@Model.Id")   # True
    contains_expression("user@@example")    # False
    static_portion("item_@Model.Id")        # "item_"
    static_portion("@Model.Id")             # ""
"""

DEFAULT_MARKER = "@"


def _first_marker(value: str, marker: str) -> int:
    """Index of the first unescaped marker in *value*, or -1."""
    i = 0
    n = len(value)
    while i < n:
        if value[i] == marker:
            if i + 1 < n and value[i + 1] == marker:
                i += 2
                continue
            return i
        i += 1
    return -1


def contains_expression(value: str, marker: str = DEFAULT_MARKER) -> bool:
    """True if *value* contains an unescaped expression marker."""
    if not value:
        return False
    return _first_marker(value, marker) != -1


def static_portion(value: str, marker: str = DEFAULT_MARKER) -> str:
    """Return the leading text of *value* before its first unescaped marker.

    Ids without an expression are returned unchanged.  An id that starts
    with an expression has an empty static portion.
    """
    if not value:
        return ""
    index = _first_marker(value, marker)
    if index == -1:
        return value
    return value[:index]
