import logging

import numpy as np
import control as ct
from scipy.linalg import block_diag

from PartitionedSS.errors import ShapeError, DimensionMismatch
from PartitionedSS.timeevol import common_timeevol, timeevol_kind

logger = logging.getLogger(__name__)


class PartitionedStateSpace:
    """
    State-space system with partitioned inputs and outputs:
        x' = A x  + B1 w  + B2 u
        z  = C1 x + D11 w + D12 u
        y  = C2 x + D21 w + D22 u

    i.e.

        A  | B1  B2
        ---+--------
        C1 | D11 D12
        C2 | D21 D22

    The first ``nu1`` inputs (w) and ``ny1`` outputs (z) form partition 1,
    the remaining inputs (u) and outputs (y) partition 2. Only the wrapped
    control.StateSpace is stored; the blocks are slices of its matrices.
    """

    __slots__ = ('_P', '_nu1', '_ny1')

    def __init__(self, P, nu1, ny1):
        if not isinstance(P, ct.StateSpace):
            raise TypeError(f"P must be a control.StateSpace, got {type(P).__name__}")
        if not 0 <= nu1 <= P.ninputs:
            raise ShapeError(f"nu1={nu1} must lie in [0, {P.ninputs}] (number of inputs)")
        if not 0 <= ny1 <= P.noutputs:
            raise ShapeError(f"ny1={ny1} must lie in [0, {P.noutputs}] (number of outputs)")
        self._P = P
        self._nu1 = int(nu1)
        self._ny1 = int(ny1)

    @classmethod
    def from_blocks(cls, A, B1, B2, C1, C2, D11, D12, D21, D22, dt=0):
        """
        Build a partitioned system from its nine blocks.

        All blocks must be 2-D; a vector is not read as a column. A system
        with states but neither inputs nor outputs cannot be represented by
        control.StateSpace and is rejected.

        Parameters
        ----------
        A : ndarray (nx x nx)
        B1 : ndarray (nx x nw)
        B2 : ndarray (nx x nu)
        C1 : ndarray (nz x nx)
        C2 : ndarray (ny x nx)
        D11, D12, D21, D22 : ndarray
            (nz x nw), (nz x nu), (ny x nw), (ny x nu)
        dt : None, bool or float
            python-control timebase (0 is continuous time)

        Returns
        -------
        sys : PartitionedStateSpace
            System with nu1 = nw and ny1 = nz

        Raises
        ------
        ShapeError
            If two blocks disagree on a shared dimension
        """
        blocks = dict(A=A, B1=B1, B2=B2, C1=C1, C2=C2, D11=D11, D12=D12, D21=D21, D22=D22)
        for name, M in blocks.items():
            M = np.asarray(M, dtype=float)
            if M.ndim != 2:
                raise ShapeError(f"{name} must be a 2-D array, got shape {M.shape}")
            blocks[name] = M
        A, B1, B2, C1, C2, D11, D12, D21, D22 = blocks.values()

        nx = A.shape[0]
        nw = B1.shape[1]
        nu = B2.shape[1]
        nz = C1.shape[0]
        ny = C2.shape[0]

        if nx != 0 and A.shape[1] != nx:
            raise ShapeError(f"A must be square, got {A.shape}")
        # (block, axis, reference block, reference axis, expected size)
        checks = [
            ('B1', 0, 'A', 0, nx), ('B2', 0, 'A', 0, nx),
            ('C1', 1, 'A', 1, nx), ('C2', 1, 'A', 1, nx),
            ('D11', 1, 'B1', 1, nw), ('D21', 1, 'B1', 1, nw),
            ('D12', 1, 'B2', 1, nu), ('D22', 1, 'B2', 1, nu),
            ('D11', 0, 'C1', 0, nz), ('D12', 0, 'C1', 0, nz),
            ('D21', 0, 'C2', 0, ny), ('D22', 0, 'C2', 0, ny),
        ]
        axis_name = ('row', 'column')
        for name, axis, ref, ref_axis, size in checks:
            if blocks[name].shape[axis] != size:
                raise ShapeError(
                    f"{name} {blocks[name].shape} must have the same {axis_name[axis]} size "
                    f"as the {axis_name[ref_axis]} size of {ref} {blocks[ref].shape}")
        if nx > 0 and nw + nu == 0 and nz + ny == 0:
            raise ShapeError(f"A system with {nx} states needs at least one input or output")

        B = np.hstack([B1, B2])
        C = np.vstack([C1, C2])
        D = np.block([[D11, D12], [D21, D22]])
        P = ct.ss(A, B, C, D, dt)
        return cls(P, nw, nz)

    # ---- stored fields ----
    @property
    def P(self):
        return self._P

    @property
    def nu1(self):
        return self._nu1

    @property
    def ny1(self):
        return self._ny1

    # ---- blocks ----
    @property
    def A(self):
        return self._P.A

    @property
    def B1(self):
        return self._P.B[:, :self._nu1]

    @property
    def B2(self):
        return self._P.B[:, self._nu1:]

    @property
    def C1(self):
        return self._P.C[:self._ny1, :]

    @property
    def C2(self):
        return self._P.C[self._ny1:, :]

    @property
    def D11(self):
        return self._P.D[:self._ny1, :self._nu1]

    @property
    def D12(self):
        return self._P.D[:self._ny1, self._nu1:]

    @property
    def D21(self):
        return self._P.D[self._ny1:, :self._nu1]

    @property
    def D22(self):
        return self._P.D[self._ny1:, self._nu1:]

    # ---- sizes and forwarded properties ----
    @property
    def nx(self):
        return self._P.nstates

    @property
    def nu(self):
        return self._P.ninputs

    @property
    def ny(self):
        return self._P.noutputs

    @property
    def nu2(self):
        return self.nu - self._nu1

    @property
    def ny2(self):
        return self.ny - self._ny1

    @property
    def dt(self):
        return self._P.dt

    @property
    def timeevol(self):
        return timeevol_kind(self._P.dt)

    @property
    def data(self):
        return self._P.A, self._P.B, self._P.C, self._P.D

    def isdtime(self, strict=False):
        return self._P.isdtime(strict=strict)

    def isctime(self, strict=False):
        return self._P.isctime(strict=strict)

    def block(self, i, j):
        """
        Sub-system Pij from partition-j inputs to partition-i outputs.

        Parameters
        ----------
        i, j : int
            Output and input partition, 1 or 2

        Returns
        -------
        Pij : control.StateSpace
            (A, Bj, Ci, Dij) with the timebase of the system
        """
        if i not in (1, 2) or j not in (1, 2):
            raise ValueError(f"Partition indices must be 1 or 2, got ({i}, {j})")
        B = self.B1 if j == 1 else self.B2
        C = self.C1 if i == 1 else self.C2
        D = {(1, 1): self.D11, (1, 2): self.D12, (2, 1): self.D21, (2, 2): self.D22}[(i, j)]
        return ct.ss(self.A, B, C, D, self.dt)

    def evalfr(self, x):
        """
        Frequency response at the complex point x (s or z).

        Returns
        -------
        G : ndarray (ny x nu), complex
        """
        return self._P.horner(x)[:, :, 0]

    # ---- equality ----
    def __eq__(self, other):
        if not isinstance(other, PartitionedStateSpace):
            return NotImplemented
        if (self._nu1, self._ny1) != (other._nu1, other._ny1):
            return False
        if self.dt != other.dt or (self.dt is True) != (other.dt is True):
            return False
        return all(np.array_equal(M1, M2) for M1, M2 in zip(self.data, other.data))

    __hash__ = None

    def __repr__(self):
        return ("PartitionedStateSpace with %d states, inputs %d+%d, outputs %d+%d, %s (dt=%s)"
                % (self.nx, self._nu1, self.nu2, self._ny1, self.ny2, self.timeevol, self.dt))

    # ---- algebra ----
    def __add__(self, other):
        other = _as_partitioned(other)
        if other is NotImplemented:
            return NotImplemented
        return parallel(self, other)

    def __radd__(self, other):
        other = _as_partitioned(other)
        if other is NotImplemented:
            return NotImplemented
        return parallel(other, self)

    def __mul__(self, other):
        other = _as_partitioned(other)
        if other is NotImplemented:
            return NotImplemented
        return series(self, other)

    def __rmul__(self, other):
        other = _as_partitioned(other)
        if other is NotImplemented:
            return NotImplemented
        return series(other, self)


def partition(sys, nu1=None, ny1=None):
    """
    Lift a state-space system to a PartitionedStateSpace.

    Parameters
    ----------
    sys : control.StateSpace or PartitionedStateSpace
    nu1 : int, optional
        Size of the first input partition (default: all inputs)
    ny1 : int, optional
        Size of the first output partition (default: all outputs)

    Returns
    -------
    sys_p : PartitionedStateSpace
    """
    if isinstance(sys, PartitionedStateSpace):
        if nu1 is None and ny1 is None:
            return sys
        sys = sys.P
    if not isinstance(sys, ct.StateSpace):
        raise TypeError(f"Cannot partition object of type {type(sys).__name__}")
    nu1 = sys.ninputs if nu1 is None else nu1
    ny1 = sys.noutputs if ny1 is None else ny1
    return PartitionedStateSpace(sys, nu1, ny1)


def _as_partitioned(obj):
    if isinstance(obj, PartitionedStateSpace):
        return obj
    if isinstance(obj, ct.StateSpace):
        return partition(obj)
    return NotImplemented


def parallel(s1, s2):
    """
    Parallel connection: partition-1 paths are summed, partition-2
    channels and the states are kept separate.

    Both systems must have the same partition-1 sizes. The result carries
    nu1 = s1.nu1 + s2.nu1 and ny1 = s1.ny1 + s2.ny1, counting the shared
    partition-1 channel once per operand, so that split must fit in the
    nu1 + s1.nu2 + s2.nu2 inputs and ny1 + s1.ny2 + s2.ny2 outputs of the
    connection. Systems lifted with every channel in partition 1 can
    therefore not be added.
    """
    if (s1.nu1, s1.ny1) != (s2.nu1, s2.ny1):
        raise DimensionMismatch(
            f"Parallel connection needs equal partition-1 sizes, got "
            f"(nu1, ny1) = {(s1.nu1, s1.ny1)} and {(s2.nu1, s2.ny1)}")
    nu = s1.nu1 + s1.nu2 + s2.nu2
    ny = s1.ny1 + s1.ny2 + s2.ny2
    if 2 * s1.nu1 > nu or 2 * s1.ny1 > ny:
        raise DimensionMismatch(
            f"Parallel connection reports nu1 = {2 * s1.nu1} and ny1 = {2 * s1.ny1} "
            f"(the shared partition-1 channel counted for both operands), but the "
            f"connection only has {nu} inputs and {ny} outputs; "
            f"move channels to partition 2 before adding")
    dt = common_timeevol(s1, s2)

    A = block_diag(s1.A, s2.A)
    B = np.hstack([np.vstack([s1.B1, s2.B1]), block_diag(s1.B2, s2.B2)])
    C = np.vstack([np.hstack([s1.C1, s2.C1]), block_diag(s1.C2, s2.C2)])
    D = np.block([
        [s1.D11 + s2.D11, s1.D12, s2.D12],
        [np.vstack([s1.D21, s2.D21]), block_diag(s1.D22, s2.D22)]
    ])

    sys = PartitionedStateSpace(ct.ss(A, B, C, D, dt), s1.nu1 + s2.nu1, s1.ny1 + s2.ny1)
    logger.debug("parallel: %r", sys)
    return sys


def series(s1, s2):
    """
    Series connection s1*s2: the partition-1 output of s2 drives the
    partition-1 input of s1.

    Inputs of the result are [w2; u1; u2] and outputs [z1; y1; y2], where
    w, z are partition-1 and u, y partition-2 signals of s1 and s2.
    """
    if s1.nu1 != s2.ny1:
        raise DimensionMismatch(
            f"Series connection needs s1.nu1 == s2.ny1, got {s1.nu1} and {s2.ny1}")
    dt = common_timeevol(s1, s2)

    n1, n2 = s1.nx, s2.nx

    A = np.block([
        [s1.A, s1.B1 @ s2.C1],
        [np.zeros((n2, n1)), s2.A]
    ])
    B = np.block([
        [s1.B1 @ s2.D11, s1.B2, s1.B1 @ s2.D12],
        [s2.B1, np.zeros((n2, s1.nu2)), s2.B2]
    ])
    C = np.block([
        [s1.C1, s1.D11 @ s2.C1],
        [s1.C2, s1.D21 @ s2.C1],
        [np.zeros((s2.ny2, n1)), s2.C2]
    ])
    D = np.block([
        [s1.D11 @ s2.D11, s1.D12, s1.D11 @ s2.D12],
        [s1.D21 @ s2.D11, s1.D22, s1.D21 @ s2.D12],
        [s2.D21, np.zeros((s2.ny2, s1.nu2)), s2.D22]
    ])

    sys = PartitionedStateSpace(ct.ss(A, B, C, D, dt), s2.nu1, s1.ny1)
    logger.debug("series: %r", sys)
    return sys
