# cnfsub

A library for propositional formulas in DIMACS CNF format and for decision-DNNF
circuits used in model counting.

## Modules

- `cnfsub.cnf` holds `Literal`, `Variable`, `Clause` and `CNF`.
  - `CNF.from_file` and `CNF.parse` read DIMACS text. `c ind` lines name the
    independent variables.
  - `CNF.simplify` runs unit propagation.
  - `CNF.subsumption` deactivates every clause that contains another active
    clause.
  - `CNF.compute_free_vars` collects the variables that occur in no clause.
  - `CNF.rename_vars` renumbers the variables of the active non-unit clauses
    compactly.
  - `CNF.set_active` switches single clauses on or off.
  - `CNF.nb_by_clause_len` and `CNF.vars_by_clause_len` give statistics by
    clause length.
  - `str(cnf)` gives the active clauses, the units and the free variables back
    as DIMACS text.
- `cnfsub.dag` provides the pieces every circuit is built from:
  - `DagContext`, the state the nodes of one circuit share.
  - `Branch`, an edge that carries unit literals and free variables.
  - The leaf nodes `TrueNode`, `FalseNode` and `ConstantNode`.
  - `RootNode`, the entry point of a circuit.
  - The literal helpers `make_lit`, `lit_var`, `lit_sign` and `readable_lit`.
- `cnfsub.decision` adds the inner nodes `DeterministicOrNode`,
  `BinaryDeterministicOrNode` and `DecomposableAndNode`. Each has a certified
  variant that also records unit reasons and cache origins.
- `cnfsub.unary` adds `UnaryNode` and `UnaryNodeCertified`.
- Every circuit node supports these operations:
  - weighted and projected model counting with `compute_nb_models` and
    `compute_nb_models_conditioning`;
  - satisfiability checks with `is_sat`;
  - writing the circuit in NNF text form with `print_nnf`.
- `cnfsub.propagation` decides satisfiability by unit propagation under the
  context's fixed values:
  - `KromFormula` for 2-CNF;
  - `RenamableHornFormula` for Horn-like clause sets.
- `cnfsub.heap.Heap` is an indexed binary min-heap of non-negative integers.
  After a key changes, `decrease`, `increase` and `update` move the element back
  into place.

```python
from cnfsub.cnf import CNF

cnf = CNF.parse("p cnf 3 3\n1 0\n-1 2 0\n2 3 0\n")
cnf.simplify()
cnf.compute_free_vars()
print(cnf)
```

## What it does not do

The package has no command-line program; it is used as a library only. It
does not compile CNF formulas into circuits, because it has no SAT solver or
compiler. You build circuits by hand from the node classes. The package does
not provide a hash function for formulas either.

## Tests

```
pip install -e .[test]
pytest
```