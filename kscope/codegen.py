import enum
import logging

from .backend import LLVMBackend
from .errors import Diagnostics

logger = logging.getLogger('kscope.codegen')


class FunctionState(enum.Enum):
    UNDECLARED = 'undeclared'
    DECLARED = 'declared'
    DEFINING = 'defining'
    DEFINED = 'defined'
    ERASED = 'erased'


class FunctionRecord:
    def __init__(self, prototype, handle, state):
        self.prototype = prototype
        self.handle = handle
        self.state = state

    @property
    def arity(self):
        return len(self.prototype.params)


class CodeGen:
    """Walks the AST and materializes it through an ``IRBackend``.

    Failures are reported to the diagnostics collector and produce ``None``;
    an error anywhere in a construct abandons the whole construct.
    """

    BINARY_OPS = ('+', '-', '*', '<')

    def __init__(self, backend=None, diagnostics=None):
        self.backend = LLVMBackend() if backend is None else backend
        self.diagnostics = Diagnostics() if diagnostics is None else diagnostics
        self.functions = {}  # name -> FunctionRecord
        self.named_values = {}

    def error(self, message):
        return self.diagnostics.error(message)

    def state_of(self, name):
        record = self.functions.get(name)
        if record is None:
            return FunctionState.UNDECLARED
        return record.state

    def lookup(self, name):
        """Return the record of a declared or defined function, else None."""
        record = self.functions.get(name)
        if record is None or record.state == FunctionState.ERASED:
            return None
        return record

    def visit(self, node):
        method_name = f'visit_{type(node).__name__}'
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node):
        raise TypeError(f"No visit_{type(node).__name__} method")

    def visit_NumberExpr(self, node):
        return self.backend.emit_constant(node.value)

    def visit_VariableExpr(self, node):
        # Flat scope: only the parameters of the function being generated.
        value = self.named_values.get(node.name)
        if value is None:
            return self.error(f"unknown variable name '{node.name}'")
        return value

    def visit_BinaryExpr(self, node):
        left = self.visit(node.left)
        if left is None:
            return None
        right = self.visit(node.right)
        if right is None:
            return None

        if node.op not in self.BINARY_OPS:
            return self.error(f"invalid binary operator '{node.op}'")
        return self.backend.emit_binary_op(node.op, left, right)

    def visit_CallExpr(self, node):
        record = self.lookup(node.callee)
        if record is None:
            return self.error(f"unknown function referenced '{node.callee}'")

        if len(node.args) != record.arity:
            return self.error(
                f"incorrect number of arguments passed to '{node.callee}': "
                f"expected {record.arity}, got {len(node.args)}")

        args = []
        for arg in node.args:
            value = self.visit(arg)
            if value is None:
                return None
            args.append(value)
        return self.backend.emit_call(record.handle, args)

    def visit_Prototype(self, node):
        if node.is_anonymous:
            return self.backend.declare_function(node.name, len(node.params))

        record = self.lookup(node.name)
        if record is not None:
            if record.arity != len(node.params):
                return self.error(
                    f"function '{node.name}' redeclared with a different "
                    f"number of arguments")
            return record.handle

        handle = self.backend.declare_function(node.name, len(node.params))
        self.functions[node.name] = FunctionRecord(
            node, handle, FunctionState.DECLARED)
        return handle

    def visit_FunctionDef(self, node):
        proto = node.prototype
        previous = self.lookup(proto.name)
        if previous is not None and previous.state == FunctionState.DEFINED:
            return self.error(f"function '{proto.name}' cannot be redefined")
        declared_proto = previous.prototype if previous is not None else None

        handle = self.visit(proto)
        if handle is None:
            return None

        record = self.lookup(proto.name)
        if record is not None:
            # The definition's parameter names win over an extern's.
            record.prototype = proto
            record.state = FunctionState.DEFINING

        self.named_values = self.backend.begin_function_body(handle, proto.params)
        try:
            ret_val = self.visit(node.body)
            if ret_val is not None:
                self.backend.emit_return(ret_val)
                if self.backend.verify_function(handle):
                    if record is not None:
                        record.state = FunctionState.DEFINED
                    logger.debug('defined %s', self.backend.function_name(handle))
                    return handle
                self.error(f"function '{proto.name}' failed verification")
        finally:
            self.named_values = {}

        # Error reading body, remove function.
        self.backend.erase_function(handle)
        if record is not None:
            record.handle = None
            record.state = FunctionState.ERASED
            if declared_proto is not None:
                # Earlier calls still refer to the extern; declare it again.
                self.visit(declared_proto)
        return None

    def generate(self, node):
        return self.visit(node)
