"""
Convergence property checker for state merge functions.

The checker is a test oracle: a ``False`` result means the merge function
under test is wrong, not that something failed at runtime.
"""

import operator
from dataclasses import dataclass
from itertools import product
from typing import Any, Callable, Generic, List, Sequence, Tuple, TypeVar

S = TypeVar('S')

COMMUTATIVITY = 'commutativity'
ASSOCIATIVITY = 'associativity'
IDEMPOTENCE = 'idempotence'


@dataclass(frozen=True)
class PropertyViolation:
    """A law that did not hold, with the operands that broke it."""
    law: str
    operands: Tuple[Any, ...]


class ConvergenceChecker(Generic[S]):
    """
    Verifies the three laws a state merge must satisfy to converge.

    Args:
        merge: Binary merge function ``(S, S) -> S``
        eq: Structural equality on states, ``==`` by default
    """

    def __init__(self, merge: Callable[[S, S], S], eq: Callable[[S, S], bool] = operator.eq):
        self.merge = merge
        self.eq = eq

    def check_commutativity(self, a: S, b: S) -> bool:
        return self.eq(self.merge(a, b), self.merge(b, a))

    def check_associativity(self, a: S, b: S, c: S) -> bool:
        merge = self.merge
        return self.eq(merge(merge(a, b), c), merge(a, merge(b, c)))

    def check_idempotence(self, a: S) -> bool:
        return self.eq(self.merge(a, a), a)

    def find_violations(self, states: Sequence[S]) -> List[PropertyViolation]:
        """
        Run every law over a sample of states.

        Idempotence is checked for each state, commutativity for each
        ordered pair and associativity for each ordered triple, so the
        cost grows with the cube of the sample size.

        Returns:
            The violations found, empty when the merge function passed
        """
        violations = []
        for a in states:
            if not self.check_idempotence(a):
                violations.append(PropertyViolation(IDEMPOTENCE, (a,)))
        for a, b in product(states, repeat=2):
            if not self.check_commutativity(a, b):
                violations.append(PropertyViolation(COMMUTATIVITY, (a, b)))
        for a, b, c in product(states, repeat=3):
            if not self.check_associativity(a, b, c):
                violations.append(PropertyViolation(ASSOCIATIVITY, (a, b, c)))
        return violations

    def check_all(self, states: Sequence[S]) -> bool:
        return not self.find_violations(states)
