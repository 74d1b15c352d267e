"""
Utility functions for the mapspace package.
"""

import time


def get_divisors(n: int, include_one: bool = True) -> list[int]:
    """
    Get all divisors of a number.

    Args:
        n: The number to factorize
        include_one: Whether to include 1 as a divisor

    Returns:
        List of divisors in ascending order
    """
    if n <= 0:
        return [1] if include_one else []

    divisors = []
    large_divisors = []
    i = 1
    while i * i <= n:
        if n % i == 0:
            divisors.append(i)
            if i * i != n:
                large_divisors.append(n // i)
        i += 1
    divisors.extend(reversed(large_divisors))

    if not include_one:
        divisors.remove(1)

    return divisors


def get_prime_factors(n: int) -> list[int]:
    """
    Get prime factorization of a number.

    Args:
        n: Number to factorize

    Returns:
        List of prime factors (with repetition)
    """
    if n <= 1:
        return []

    factors = []
    d = 2
    while d * d <= n:
        while n % d == 0:
            factors.append(d)
            n //= d
        d += 1
    if n > 1:
        factors.append(n)

    return factors


def format_number(n: int, precision: int = 2) -> str:
    """
    Format a (possibly huge) count for display.

    Exact below one million, scientific notation above.
    """
    if abs(n) >= 10**6:
        exponent = len(str(abs(n))) - 1
        mantissa = n / 10**exponent
        return f"{mantissa:.{precision}f}e+{exponent:02d}"
    return f"{n:,}"


def validate_mapping(mapping, workload) -> list[str]:
    """
    Validate a decoded mapping against a workload.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    # Check dimension factorization
    for dim, dim_bound in zip(workload.dim_names, workload.bounds):
        total = 1
        for level in mapping.loop_bounds:
            total *= mapping.loop_bounds[level].get(dim, 1)

        if total != dim_bound:
            errors.append(
                f"Dimension {dim}: product of factors ({total}) != "
                f"problem size ({dim_bound})"
            )

    # Check loop orders
    for level, order in mapping.permutation.items():
        if sorted(order) != sorted(workload.dim_names):
            errors.append(f"Level {level}: loop order {order} is not a permutation of all dimensions")

    return errors


class Timer:
    """Simple timer for profiling."""

    def __init__(self):
        self.times = {}
        self._starts = {}

    def start(self, name: str):
        """Start timing a section."""
        self._starts[name] = time.perf_counter()

    def stop(self, name: str):
        """Stop timing a section."""
        if name in self._starts:
            elapsed = time.perf_counter() - self._starts[name]
            if name not in self.times:
                self.times[name] = 0.0
            self.times[name] += elapsed
            del self._starts[name]

    def report(self) -> str:
        """Generate timing report."""
        lines = ["Timing Report:"]
        for name, elapsed in sorted(self.times.items(), key=lambda x: -x[1]):
            lines.append(f"  {name}: {elapsed:.3f}s")
        return "\n".join(lines)
