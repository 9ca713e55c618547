import logging

from .lexer import Token

logger = logging.getLogger('kscope.parser')

# Binding strength of each binary operator; higher binds tighter.
DEFAULT_BINOP_PRECEDENCE = {
    '<': 10,
    '+': 20,
    '-': 20,
    '*': 40,
}


class ASTNode:
    _fields = ()

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return all(getattr(self, f) == getattr(other, f) for f in self._fields)

    def __repr__(self):
        args = ", ".join(repr(getattr(self, f)) for f in self._fields)
        return f"{type(self).__name__}({args})"


class NumberExpr(ASTNode):
    _fields = ('value',)

    def __init__(self, value):
        self.value = value


class VariableExpr(ASTNode):
    _fields = ('name',)

    def __init__(self, name):
        self.name = name


class BinaryExpr(ASTNode):
    _fields = ('op', 'left', 'right')

    def __init__(self, op, left, right):
        self.op = op
        self.left = left
        self.right = right


class CallExpr(ASTNode):
    _fields = ('callee', 'args')

    def __init__(self, callee, args):
        self.callee = callee
        self.args = args


class Prototype(ASTNode):
    """Function signature: a name plus the ordered parameter names.

    Top-level expressions are wrapped in a prototype with an empty name.
    """
    _fields = ('name', 'params')

    def __init__(self, name, params):
        self.name = name
        self.params = params

    @property
    def is_anonymous(self):
        return self.name == ''


class FunctionDef(ASTNode):
    _fields = ('prototype', 'body')

    def __init__(self, prototype, body):
        self.prototype = prototype
        self.body = body


class Parser:
    def __init__(self, lexer, diagnostics, binop_precedence=None):
        self.lexer = lexer
        self.diagnostics = diagnostics
        if binop_precedence is None:
            binop_precedence = DEFAULT_BINOP_PRECEDENCE
        self.binop_precedence = dict(binop_precedence)
        self.cur_tok = Token('EOF')

    def get_next_token(self):
        self.cur_tok = self.lexer.next_token()
        return self.cur_tok

    def error(self, message):
        tok = self.cur_tok
        return self.diagnostics.error(message, tok.line, tok.column)

    def get_token_precedence(self):
        if self.cur_tok.type != 'CHAR':
            return -1
        prec = self.binop_precedence.get(self.cur_tok.value, -1)
        if prec <= 0:
            return -1
        return prec

    # numberexpr ::= number
    def parse_number_expr(self):
        result = NumberExpr(self.cur_tok.value)
        self.get_next_token()
        return result

    # parenexpr ::= '(' expression ')'
    def parse_paren_expr(self):
        self.get_next_token()  # eat '('
        expr = self.parse_expression()
        if expr is None:
            return None
        if not self.cur_tok.is_char(')'):
            return self.error("expected ')'")
        self.get_next_token()  # eat ')'
        return expr

    # identifierexpr ::= identifier | identifier '(' expression* ')'
    def parse_identifier_expr(self):
        name = self.cur_tok.value
        self.get_next_token()  # eat identifier

        if not self.cur_tok.is_char('('):
            return VariableExpr(name)

        self.get_next_token()  # eat '('
        args = []
        if not self.cur_tok.is_char(')'):
            while True:
                arg = self.parse_expression()
                if arg is None:
                    return None
                args.append(arg)
                if self.cur_tok.is_char(')'):
                    break
                if not self.cur_tok.is_char(','):
                    return self.error("expected ')' or ',' in argument list")
                self.get_next_token()
        self.get_next_token()  # eat ')'
        return CallExpr(name, args)

    def parse_primary(self):
        if self.cur_tok.type == 'IDENTIFIER':
            return self.parse_identifier_expr()
        if self.cur_tok.type == 'NUMBER':
            return self.parse_number_expr()
        if self.cur_tok.is_char('('):
            return self.parse_paren_expr()
        return self.error("unknown token when expecting an expression")

    def parse_binop_rhs(self, min_prec, lhs):
        """Precedence climbing over ``(op primary)*``.

        Keeps folding operators into ``lhs`` while they bind at least as
        tightly as ``min_prec``; a tighter operator after the right operand
        pulls that operand into a recursive call first.
        """
        while True:
            tok_prec = self.get_token_precedence()
            if tok_prec < min_prec:
                return lhs

            op = self.cur_tok.value
            self.get_next_token()  # eat binop

            rhs = self.parse_primary()
            if rhs is None:
                return None

            next_prec = self.get_token_precedence()
            if tok_prec < next_prec:
                rhs = self.parse_binop_rhs(tok_prec + 1, rhs)
                if rhs is None:
                    return None

            lhs = BinaryExpr(op, lhs, rhs)

    # expression ::= primary binoprhs
    def parse_expression(self):
        lhs = self.parse_primary()
        if lhs is None:
            return None
        return self.parse_binop_rhs(0, lhs)

    # prototype ::= id '(' id* ')'
    def parse_prototype(self):
        if self.cur_tok.type != 'IDENTIFIER':
            return self.error("expected function name in prototype")
        name = self.cur_tok.value
        self.get_next_token()

        if not self.cur_tok.is_char('('):
            return self.error("expected '(' in prototype")

        params = []
        while self.get_next_token().type == 'IDENTIFIER':
            params.append(self.cur_tok.value)
        if not self.cur_tok.is_char(')'):
            return self.error("expected ')' in prototype")

        self.get_next_token()  # eat ')'
        return Prototype(name, params)

    # definition ::= 'def' prototype expression
    def parse_definition(self):
        self.get_next_token()  # eat def
        proto = self.parse_prototype()
        if proto is None:
            return None
        body = self.parse_expression()
        if body is None:
            return None
        return FunctionDef(proto, body)

    # external ::= 'extern' prototype
    def parse_extern(self):
        self.get_next_token()  # eat extern
        return self.parse_prototype()

    # toplevelexpr ::= expression
    def parse_top_level_expr(self):
        body = self.parse_expression()
        if body is None:
            return None
        return FunctionDef(Prototype('', []), body)
