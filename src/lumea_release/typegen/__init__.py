"""TypeScript declaration generators."""
from lumea_release.typegen.declarations import wrap_declarations
from lumea_release.typegen.ops import generate_op_bindings, parse_ops

__all__ = ["wrap_declarations", "generate_op_bindings", "parse_ops"]
