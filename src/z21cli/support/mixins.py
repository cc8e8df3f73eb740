def quote(val):
    """
    >>> quote(None)
    'None'
    >>> quote(0x12)
    '18'
    """
    return str(val) if val is not None else "None"


class StringerMixin:

    def __repr__(self):
        """
        outputs the class name and the object attributes in key sorted order
        """
        return type(self).__name__ + self._sorted_items_string()

    def _sorted_items_string(self):
        return "(" + ", ".join([str(key).lstrip('_') + "=" + quote(val)
                                for key, val in sorted(self.__dict__.items())]) + ")"


class CommonEqualityMixin(object):
    """  equality for value objects: same type and same attributes. """

    def __eq__(self, other):
        return type(other) is type(self) and self.__dict__ == other.__dict__

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash((type(self), tuple(sorted(self.__dict__.items()))))
