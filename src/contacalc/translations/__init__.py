"""JSON translation catalogues bundled with the ContaCalc package."""
