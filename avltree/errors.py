class AVLTreeError(Exception):
    def __str__(self):
        return "".join(map(str, self.args))


class PreconditionViolated(AVLTreeError, ValueError):
    """A split/join argument broke the operation's documented contract."""

    pass


class InvariantViolation(AVLTreeError, AssertionError):
    """The tree reached a state its own operations can never produce.

    This always indicates a bug and is not meant to be caught.
    """

    def __init__(self, key, msg):
        super().__init__(key, msg)
        self.key = key
        self.msg = msg

    def __str__(self):
        if self.key is None:
            return str(self.msg)
        return "node " + str(self.key) + ": " + str(self.msg)
