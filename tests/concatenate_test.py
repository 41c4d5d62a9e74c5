import numpy as np
import pytest

from PartitionedSS.concatenate import vcat_1, hcat_1
from PartitionedSS.errors import DimensionMismatch, IncompatibleTimeError


def split(s, x):
    G = s.evalfr(x)
    return G[:s.ny1, :s.nu1], G[:s.ny1, s.nu1:], G[s.ny1:, :s.nu1], G[s.ny1:, s.nu1:]


def test_vcat_shared_first_input(random_system, points, check_shapes):
    s1 = random_system(2, 1, 1, 2, 1)
    s2 = random_system(1, 1, 2, 1, 2)
    s = vcat_1([s1, s2])

    check_shapes(s)
    assert s.nx == 3
    assert (s.nu1, s.ny1) == (1, 3)
    assert (s.nu2, s.ny2) == (3, 3)
    for x in points:
        a11, a12, a21, a22 = split(s1, x)
        b11, b12, b21, b22 = split(s2, x)
        # inputs [u1; u2_1; u2_2], outputs [y1_1; y1_2; y2_1; y2_2]
        expected = np.block([
            [a11, a12, np.zeros((2, 2))],
            [b11, np.zeros((1, 1)), b12],
            [a21, a22, np.zeros((1, 2))],
            [b21, np.zeros((2, 1)), b22],
        ])
        np.testing.assert_allclose(s.evalfr(x), expected)


def test_hcat_shared_first_output(random_system, points, check_shapes):
    s1 = random_system(2, 2, 1, 1, 1)
    s2 = random_system(1, 1, 1, 1, 2)
    s = hcat_1([s1, s2])

    check_shapes(s)
    assert s.nx == 3
    assert (s.nu1, s.ny1) == (3, 1)
    assert (s.nu2, s.ny2) == (2, 3)
    for x in points:
        a11, a12, a21, a22 = split(s1, x)
        b11, b12, b21, b22 = split(s2, x)
        # inputs [u1_1; u1_2; u2_1; u2_2], outputs [y1; y2_1; y2_2]
        expected = np.block([
            [a11, b11, a12, b12],
            [a21, np.zeros((1, 1)), a22, np.zeros((1, 1))],
            [np.zeros((2, 2)), b21, np.zeros((2, 1)), b22],
        ])
        np.testing.assert_allclose(s.evalfr(x), expected)


def test_three_systems(random_system, check_shapes):
    systems = [random_system(1, 2, 1, 1, 1) for _ in range(3)]
    s = vcat_1(systems)
    check_shapes(s)
    assert (s.nu1, s.ny1, s.nu2, s.ny2, s.nx) == (2, 3, 3, 3, 3)

    systems = [random_system(1, 1, 1, 2, 1) for _ in range(3)]
    s = hcat_1(iter(systems))
    check_shapes(s)
    assert (s.nu1, s.ny1, s.nu2, s.ny2, s.nx) == (3, 2, 3, 3, 3)


def test_single_system(random_system):
    s1 = random_system(2, 1, 1, 1, 1)
    assert vcat_1([s1]) == s1
    assert hcat_1([s1]) == s1


def test_vcat_rejects_different_first_input(random_system):
    systems = [random_system(1, 1, 1, 1, 1), random_system(1, 2, 1, 1, 1)]
    with pytest.raises(DimensionMismatch, match="system 1 has nu1=2"):
        vcat_1(systems)


def test_hcat_rejects_different_first_output(random_system):
    systems = [random_system(1, 1, 1, 1, 1), random_system(1, 1, 1, 1, 1),
               random_system(1, 1, 1, 3, 1)]
    with pytest.raises(DimensionMismatch, match="system 2 has ny1=3"):
        hcat_1(systems)


@pytest.mark.parametrize("cat", [vcat_1, hcat_1])
def test_empty(cat):
    with pytest.raises(ValueError):
        cat([])


@pytest.mark.parametrize("cat", [vcat_1, hcat_1])
def test_incompatible_timebases(cat, random_system):
    with pytest.raises(IncompatibleTimeError):
        cat([random_system(1, 1, 1, 1, 1, dt=0.1), random_system(1, 1, 1, 1, 1, dt=0.05)])


@pytest.mark.parametrize("cat", [vcat_1, hcat_1])
def test_discrete_result(cat, random_system):
    s = cat([random_system(1, 1, 1, 1, 1, dt=0.1), random_system(1, 1, 1, 1, 1, dt=True)])
    assert s.dt == 0.1
