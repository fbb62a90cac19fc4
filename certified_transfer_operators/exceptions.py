class CertificationError(RuntimeError):
    """
    A guaranteed enclosure could not be certified (e.g. no root of a branch can be
    bracketed inside the search range). Fatal: the discretization is aborted.
    """


class UnsortedSequenceError(ValueError):
    """
    A partition that must be weakly sorted has a decreasing lower or upper bound.
    """


class IncompleteBranchError(NotImplementedError):
    """
    Derivative tracking was requested for a dynamic that is not provably full-branch.
    """
