"""Shared test fixtures."""

import math

import numpy as np
import pytest


class Dual:
    """Minimal forward-mode dual number used to check generic-scalar evaluation."""

    def __init__(self, a, v=0.0):
        self.a = float(a)
        self.v = float(v)

    @staticmethod
    def lift(other):
        return other if isinstance(other, Dual) else Dual(other, 0.0)

    def __add__(self, other):
        if isinstance(other, np.ndarray):
            return NotImplemented
        other = Dual.lift(other)
        return Dual(self.a + other.a, self.v + other.v)

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, np.ndarray):
            return NotImplemented
        other = Dual.lift(other)
        return Dual(self.a - other.a, self.v - other.v)

    def __rsub__(self, other):
        return Dual.lift(other) - self

    def __mul__(self, other):
        if isinstance(other, np.ndarray):
            return NotImplemented
        other = Dual.lift(other)
        return Dual(self.a * other.a, self.a * other.v + self.v * other.a)

    __rmul__ = __mul__

    def __truediv__(self, other):
        if isinstance(other, np.ndarray):
            return NotImplemented
        other = Dual.lift(other)
        return Dual(self.a / other.a, (self.v * other.a - self.a * other.v) / (other.a * other.a))

    def __rtruediv__(self, other):
        return Dual.lift(other) / self

    def __neg__(self):
        return Dual(-self.a, -self.v)

    def __pos__(self):
        return self

    def __lt__(self, other):
        return self.a < Dual.lift(other).a

    def __gt__(self, other):
        return self.a > Dual.lift(other).a

    def __le__(self, other):
        return self.a <= Dual.lift(other).a

    def __ge__(self, other):
        return self.a >= Dual.lift(other).a

    def __eq__(self, other):
        return self.a == Dual.lift(other).a

    __hash__ = None

    def sqrt(self):
        s = math.sqrt(self.a)
        return Dual(s, self.v / (2.0 * s))

    def arctan2(self, other):
        other = Dual.lift(other)
        denom = self.a * self.a + other.a * other.a
        return Dual(math.atan2(self.a, other.a), (other.a * self.v - self.a * other.v) / denom)

    def sin(self):
        return Dual(math.sin(self.a), math.cos(self.a) * self.v)

    def cos(self):
        return Dual(math.cos(self.a), -math.sin(self.a) * self.v)


def seed_blocks(blocks, block_index, component):
    """Lift parameter blocks to dual numbers, seeding one component."""
    lifted = []
    for i, block in enumerate(blocks):
        lifted.append(np.array([
            Dual(value, 1.0 if (i == block_index and j == component) else 0.0)
            for j, value in enumerate(block)
        ], dtype=object))
    return lifted


def central_difference(functor, blocks, block_index, component, h=1e-6):
    """Derivative of a residual w.r.t. one parameter component."""
    plus = [np.array(b, dtype=np.float64) for b in blocks]
    minus = [np.array(b, dtype=np.float64) for b in blocks]
    plus[block_index][component] += h
    minus[block_index][component] -= h
    return (functor(*plus) - functor(*minus)) / (2 * h)


@pytest.fixture
def dual():
    return Dual


@pytest.fixture
def derivative_check():
    """Compare dual-number derivatives of a functor to central differences."""

    def check(functor, blocks, atol=1e-5):
        for block_index, block in enumerate(blocks):
            for component in range(len(block)):
                residual = functor(*seed_blocks(blocks, block_index, component))
                assert residual.shape == (functor.residual_dimension(),)

                values = np.array([Dual.lift(r).a for r in residual])
                derivative = np.array([Dual.lift(r).v for r in residual])

                np.testing.assert_allclose(
                    values, functor(*blocks), atol=1e-10
                )
                np.testing.assert_allclose(
                    derivative,
                    central_difference(functor, blocks, block_index, component),
                    atol=atol,
                    rtol=1e-4
                )

    return check
