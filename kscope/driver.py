import logging
import sys

from .backend import LLVMBackend
from .codegen import CodeGen
from .errors import Diagnostics
from .lexer import Lexer
from .parser import Parser

logger = logging.getLogger('kscope.driver')


class Driver:
    """Top-level loop: reads definitions, externs and expressions until EOF.

    Each construct is parsed and generated before the next one is read. When
    parsing fails the driver skips exactly one token and carries on.
    """

    def __init__(self, source, backend=None, jit=None, diagnostics=None,
                 out=None, prompt=None, echo=False, binop_precedence=None):
        self.diagnostics = Diagnostics() if diagnostics is None else diagnostics
        self.backend = LLVMBackend() if backend is None else backend
        self.jit = jit
        self.out = sys.stdout if out is None else out
        self.prompt = prompt
        self.echo = echo
        self.lexer = Lexer(source)
        self.parser = Parser(self.lexer, self.diagnostics, binop_precedence)
        self.codegen = CodeGen(self.backend, self.diagnostics)
        self.results = []

    def show_prompt(self):
        if self.prompt:
            print(self.prompt, end='', file=sys.stderr, flush=True)

    def run(self):
        self.show_prompt()
        self.parser.get_next_token()
        while True:
            tok = self.parser.cur_tok
            if tok.type == 'EOF':
                return
            if tok.is_char(';'):
                # ignore top-level semicolons.
                self.parser.get_next_token()
            elif tok.type == 'DEF':
                self.handle_definition()
            elif tok.type == 'EXTERN':
                self.handle_extern()
            else:
                self.handle_top_level_expression()
            self.show_prompt()

    def skip_token(self):
        skipped = self.parser.cur_tok
        self.parser.get_next_token()
        logger.debug('skipped %r for error recovery', skipped)
        return skipped

    def handle_definition(self):
        fn_ast = self.parser.parse_definition()
        if fn_ast is None:
            self.skip_token()
            return None
        handle = self.codegen.generate(fn_ast)
        if handle is not None and self.echo:
            print("Read function definition:", file=self.out)
            print(self.backend.dump(handle), file=self.out)
        return handle

    def handle_extern(self):
        proto_ast = self.parser.parse_extern()
        if proto_ast is None:
            self.skip_token()
            return None
        handle = self.codegen.generate(proto_ast)
        if handle is not None and self.echo:
            print("Read extern:", file=self.out)
            print(self.backend.dump(handle), file=self.out)
        return handle

    def handle_top_level_expression(self):
        fn_ast = self.parser.parse_top_level_expr()
        if fn_ast is None:
            self.skip_token()
            return None
        handle = self.codegen.generate(fn_ast)
        if handle is None:
            return None
        if self.echo:
            print("Read top-level expression:", file=self.out)
            print(self.backend.dump(handle), file=self.out)
        if self.jit is not None:
            result = self.jit.evaluate(self.backend, handle)
            self.results.append(result)
            print(f"Evaluated to {result:f}", file=self.out)
            # The anonymous function has served its purpose.
            self.backend.erase_function(handle)
        return handle


def compile_source(source, binop_precedence=None, file=None):
    """Compile ``source`` and return the module's LLVM IR text.

    Raises ``CompilerError`` if any construct failed to parse or generate.
    """
    diagnostics = Diagnostics(file=file, quiet=True)
    driver = Driver(source, diagnostics=diagnostics,
                    binop_precedence=binop_precedence)
    driver.run()
    diagnostics.raise_if_errors()
    return driver.backend.dump()
