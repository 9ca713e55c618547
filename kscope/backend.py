"""IR backends the code generator drives.

``IRBackend`` is the narrow interface the generator relies on. ``LLVMBackend``
implements it on top of ``llvmlite.ir``; every value is a double.
"""
import abc
import logging

import llvmlite.binding as llvm
from llvmlite import ir

logger = logging.getLogger('kscope.backend')

ANON_FUNCTION_NAME = "__anon_expr"


class IRBackend(abc.ABC):
    @abc.abstractmethod
    def declare_function(self, name, arity):
        """Declare ``name`` as taking ``arity`` numbers and returning one."""

    @abc.abstractmethod
    def begin_function_body(self, handle, param_names):
        """Open the body of ``handle`` and return a fresh name -> value scope."""

    @abc.abstractmethod
    def emit_constant(self, value):
        pass

    @abc.abstractmethod
    def emit_binary_op(self, op, left, right):
        pass

    @abc.abstractmethod
    def emit_call(self, handle, args):
        pass

    @abc.abstractmethod
    def emit_return(self, value):
        pass

    @abc.abstractmethod
    def verify_function(self, handle):
        pass

    @abc.abstractmethod
    def erase_function(self, handle):
        pass

    @abc.abstractmethod
    def function_name(self, handle):
        pass

    @abc.abstractmethod
    def dump(self, handle=None):
        """Textual form of one function, or of the whole module."""


class LLVMBackend(IRBackend):
    def __init__(self, module_name="kscope_module"):
        self.module = ir.Module(name=module_name)
        self.double = ir.DoubleType()
        self.builder = None

    def declare_function(self, name, arity):
        if not name:
            name = self.module.get_unique_name(ANON_FUNCTION_NAME)
        func_ty = ir.FunctionType(self.double, [self.double] * arity)
        func = ir.Function(self.module, func_ty, name=name)
        logger.debug('declared %s/%d', name, arity)
        return func

    def begin_function_body(self, handle, param_names):
        entry_block = handle.append_basic_block(name="entry")
        self.builder = ir.IRBuilder(entry_block)

        # Later duplicates overwrite earlier bindings.
        scope = {}
        for arg, pname in zip(handle.args, param_names):
            arg.name = pname
            scope[pname] = arg
        return scope

    def emit_constant(self, value):
        return ir.Constant(self.double, value)

    def emit_binary_op(self, op, left, right):
        if op == '+':
            return self.builder.fadd(left, right, name="addtmp")
        elif op == '-':
            return self.builder.fsub(left, right, name="subtmp")
        elif op == '*':
            return self.builder.fmul(left, right, name="multmp")
        elif op == '<':
            cmp = self.builder.fcmp_unordered('<', left, right, name="cmptmp")
            # Convert bool 0/1 to double 0.0 or 1.0
            return self.builder.uitofp(cmp, self.double, name="booltmp")
        raise ValueError(f"invalid binary operator {op!r}")

    def emit_call(self, handle, args):
        return self.builder.call(handle, args, name="calltmp")

    def emit_return(self, value):
        self.builder.ret(value)

    def verify_function(self, handle):
        if not handle.blocks or not handle.blocks[-1].is_terminated:
            return False
        try:
            llvm.parse_assembly(str(self.module)).verify()
        except RuntimeError as e:
            logger.debug('verification of %s failed: %s', handle.name, e)
            return False
        return True

    def erase_function(self, handle):
        name = handle.name
        del self.module.globals[name]
        # llvmlite has no public way to release a global name.
        self.module.scope._useset.discard(name)
        self.builder = None
        logger.debug('erased %s', name)

    def function_name(self, handle):
        return handle.name

    def dump(self, handle=None):
        if handle is None:
            return str(self.module)
        return str(handle)
