"""Test doubles shared by the test modules."""


class FixedRng:
    """Stands in for the random module: random() and uniform() read a fixed fraction."""
    def __init__(self, fraction):
        self.fraction = fraction

    def random(self):
        return self.fraction

    def uniform(self, a, b):
        return a + (b - a) * self.fraction


# Never rolls under a chance threshold; drift noise sits near the top of its range.
CALM = FixedRng(0.99)
