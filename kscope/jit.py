import ctypes
import logging
import sys

import llvmlite.binding as llvm

logger = logging.getLogger('kscope.jit')

c_double = ctypes.c_double

_initialized = False


def _init_llvm():
    global _initialized
    if _initialized:
        return
    llvm.initialize_native_target()
    llvm.initialize_native_asmprinter()
    _initialized = True


class JIT:
    """Compiles the backend's module with MCJIT and runs nullary functions.

    A couple of library functions are provided from Python so that
    ``extern putchard(x)`` and ``extern printd(x)`` resolve when called.
    """

    def __init__(self, out=None):
        _init_llvm()
        self.out = sys.stdout if out is None else out
        self._callbacks = []
        self.add_runtime_function("putchard", self.putchard, 1)
        self.add_runtime_function("printd", self.printd, 1)

    # --- Runtime library ---

    def putchard(self, x):
        self.out.write(chr(int(x)))
        return 0.0

    def printd(self, x):
        self.out.write(f"{x:f}\n")
        return 0.0

    def add_runtime_function(self, name, func, arity):
        proto = ctypes.CFUNCTYPE(c_double, *([c_double] * arity))
        callback = proto(func)
        # The ctypes thunk must outlive every engine that may call it.
        self._callbacks.append(callback)
        llvm.add_symbol(name, ctypes.cast(callback, ctypes.c_void_p).value)

    # --- JIT Engine ---

    def compile(self, llvm_ir):
        target = llvm.Target.from_default_triple()
        target_machine = target.create_target_machine()

        mod = llvm.parse_assembly(llvm_ir)
        mod.triple = target_machine.triple
        mod.data_layout = str(target_machine.target_data)
        mod.verify()

        ee = llvm.create_mcjit_compiler(mod, target_machine)
        ee.finalize_object()
        return ee

    def evaluate(self, backend, handle):
        """Run the nullary function ``handle`` and return its double result."""
        name = backend.function_name(handle)
        ee = self.compile(backend.dump())
        func_ptr = ee.get_function_address(name)
        if not func_ptr:
            raise RuntimeError(f"function '{name}' not found in JIT module")

        cfunc = ctypes.CFUNCTYPE(c_double)(func_ptr)
        result = cfunc()
        logger.debug('%s returned %r', name, result)
        return result
