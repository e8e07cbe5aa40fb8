"""convergent: state-based CRDTs that converge without coordination."""

__version__ = "0.1.0"
