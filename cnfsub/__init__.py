"""DIMACS CNF handling, d-DNNF circuit nodes, propagation checks and an indexed heap."""

__version__ = "0.1.0"