"""macro.py - Build-time expansion of ``tap(...)`` call-sites.

Modules opt in by importing the marker::

    from logtap.macro import tap

    best = max(tap(parse(rows), "parsed"))

and are then compiled through ``compile_source()`` / ``run_path()`` (or
``python -m logtap``). Every ``tap(value, *rest)`` call is rewritten into::

    (__tap_value_0__ := value,
     __tap_logging__.getLogger(__name__).info("%s %s", __tap_value_0__, *rest),
     __tap_value_0__)[-1]

with a numbered temporary per call-site. The expression still evaluates to
``value`` and the expanded code calls ``logging`` directly, with no runtime
dependency on this package. The marker
import is removed and replaced by a single ``import logging as
__tap_logging__`` near the top of the module.

Line numbers:
    Synthesised nodes take the location of the call they replace, argument
    nodes keep their own, and no statements are inserted between existing
    ones. Code compiled from the transformed tree therefore reports the
    original line numbers in tracebacks and log records. Text produced by
    ``expand_source()`` is for reading only; ``ast.unparse`` does not keep
    comments or layout.

Restrictions:
    The tap name may only appear as the callee of a call. ``tap`` cannot be
    used where Python forbids ``:=``: inside a comprehension's iterable, or
    inside a comprehension directly in a class body. These raise
    ``TapMacroError`` at expansion time. So does a starred value
    (``tap(*xs)``); starred arguments after the value are fine, the format
    string is then sized at runtime.
"""

import ast
import os
import sys
from types import CodeType
from typing import Any, Dict, Iterable, List, Optional, Set

from .tap import DEFAULT_METHOD, check_method

MACRO_MODULE = "logtap.macro"
MACRO_NAME = "tap"
TAP_VALUE_PREFIX = "__tap_value"
TAP_ARGS_PREFIX = "__tap_args"
LOGGING_ALIAS = "__tap_logging__"


class TapMacroError(SyntaxError):
    """Raised when a tap call-site cannot be expanded."""


def tap(*args: Any, **kwargs: Any) -> Any:
    """Marker for the tap macro. Only meaningful before expansion."""
    raise RuntimeError(
        "logtap.macro.tap() was called at runtime; the module must be expanded "
        "first (logtap.macro.compile_source, logtap.macro.run_path or `python -m logtap run`)"
    )


# --------------------------------------------------------------------------- #
# Syntax transformer
# --------------------------------------------------------------------------- #


class TapTransformer(ast.NodeTransformer):
    """Rewrite calls to the tap names into inline assign/log/value sequences.

    Args:
        names: Identifiers that refer to the tap macro in this tree.
        method: Logger method the expanded code calls.
        source: Original source text, used to quote offending code in errors.
        filename: Reported in ``TapMacroError``.

    Attributes:
        expanded (int): Number of call-sites rewritten so far.
    """

    def __init__(
        self,
        names: Iterable[str] = (MACRO_NAME,),
        method: str = DEFAULT_METHOD,
        source: Optional[str] = None,
        filename: str = "<unknown>",
    ) -> None:
        self.names = frozenset(names)
        self.method = check_method(method)
        self.expanded = 0
        self._source = source
        self._filename = filename
        self._parents: List[ast.AST] = []
        # Innermost last: "function", "class", "comprehension" or "iterable".
        self._scopes: List[str] = []

    def visit(self, node: ast.AST) -> Any:
        self._parents.append(node)
        try:
            return super().visit(node)
        finally:
            self._parents.pop()

    # -- scope tracking, only as far as := placement rules need it ---------- #

    def _visit_scoped(self, node: ast.AST, scope: str) -> ast.AST:
        self._scopes.append(scope)
        try:
            return self.generic_visit(node)
        finally:
            self._scopes.pop()

    def visit_FunctionDef(self, node: ast.FunctionDef) -> ast.AST:
        return self._visit_scoped(node, "function")

    visit_AsyncFunctionDef = visit_FunctionDef
    visit_Lambda = visit_FunctionDef

    def visit_ClassDef(self, node: ast.ClassDef) -> ast.AST:
        return self._visit_scoped(node, "class")

    def visit_ListComp(self, node: ast.AST) -> ast.AST:
        return self._visit_scoped(node, "comprehension")

    visit_SetComp = visit_ListComp
    visit_DictComp = visit_ListComp
    visit_GeneratorExp = visit_ListComp

    def visit_comprehension(self, node: ast.comprehension) -> ast.comprehension:
        node.target = self.visit(node.target)
        self._scopes.append("iterable")
        try:
            node.iter = self.visit(node.iter)
        finally:
            self._scopes.pop()
        node.ifs = [self.visit(cond) for cond in node.ifs]
        return node

    # -- the rewrite -------------------------------------------------------- #

    def visit_Call(self, node: ast.Call) -> ast.AST:
        if isinstance(node.func, ast.Name) and node.func.id in self.names:
            return self._expand(node)
        return self.generic_visit(node)

    def visit_Name(self, node: ast.Name) -> ast.AST:
        # Callee positions never get here, visit_Call handles those.
        if node.id in self.names:
            raise self._error(
                f"This is not supported: `{self._quote(self._enclosing_expr())}`.", node
            )
        return node

    def _expand(self, call: ast.Call) -> ast.AST:
        if not call.args:
            raise self._error(
                f"tap() needs a value to log: `{self._quote(call)}`.", call
            )
        if isinstance(call.args[0], ast.Starred):
            raise self._error(
                f"The tapped value cannot be starred: `{self._quote(call)}`.", call.args[0]
            )
        self._check_walrus_allowed(call)

        # Each call-site gets its own temporaries so taps nested anywhere in
        # the arguments cannot overwrite the outer value.
        index = self.expanded
        self.expanded += 1
        value_name = f"{TAP_VALUE_PREFIX}_{index}__"
        args_name = f"{TAP_ARGS_PREFIX}_{index}__"

        # Inside-out, so nested taps in the arguments are already expanded.
        args = [self.visit(arg) for arg in call.args]
        keywords = [self.visit(kw) for kw in call.keywords]
        value, *rest = args

        def at(node: ast.AST) -> ast.AST:
            return ast.copy_location(node, call)

        def name(id: str, ctx: ast.expr_context) -> ast.Name:
            return at(ast.Name(id=id, ctx=ctx))

        elts = [at(ast.NamedExpr(target=name(value_name, ast.Store()), value=value))]
        if any(isinstance(arg, ast.Starred) for arg in rest):
            # The number of arguments is only known at runtime: collect them
            # once, then size the format string from the collected tuple.
            elts.append(
                at(
                    ast.NamedExpr(
                        target=name(args_name, ast.Store()),
                        value=at(ast.Tuple(elts=rest, ctx=ast.Load())),
                    )
                )
            )
            count = at(
                ast.BinOp(
                    left=at(ast.Constant(value=1)),
                    op=ast.Add(),
                    right=at(
                        ast.Call(
                            func=name("len", ast.Load()),
                            args=[name(args_name, ast.Load())],
                            keywords=[],
                        )
                    ),
                )
            )
            fmt = at(
                ast.Call(
                    func=at(ast.Attribute(value=at(ast.Constant(value=" ")), attr="join", ctx=ast.Load())),
                    args=[
                        at(
                            ast.BinOp(
                                left=at(ast.List(elts=[at(ast.Constant(value="%s"))], ctx=ast.Load())),
                                op=ast.Mult(),
                                right=count,
                            )
                        )
                    ],
                    keywords=[],
                )
            )
            log_args = [at(ast.Starred(value=name(args_name, ast.Load()), ctx=ast.Load()))]
        else:
            fmt = at(ast.Constant(value=" ".join(["%s"] * len(args))))
            log_args = rest

        get_logger = at(
            ast.Call(
                func=at(
                    ast.Attribute(
                        value=name(LOGGING_ALIAS, ast.Load()),
                        attr="getLogger",
                        ctx=ast.Load(),
                    )
                ),
                args=[name("__name__", ast.Load())],
                keywords=[],
            )
        )
        elts.append(
            at(
                ast.Call(
                    func=at(ast.Attribute(value=get_logger, attr=self.method, ctx=ast.Load())),
                    args=[fmt, name(value_name, ast.Load()), *log_args],
                    keywords=keywords,
                )
            )
        )
        elts.append(name(value_name, ast.Load()))
        return at(
            ast.Subscript(
                value=at(ast.Tuple(elts=elts, ctx=ast.Load())),
                slice=at(ast.UnaryOp(op=ast.USub(), operand=at(ast.Constant(value=1)))),
                ctx=ast.Load(),
            )
        )

    def _check_walrus_allowed(self, call: ast.Call) -> None:
        in_comprehension = False
        for scope in reversed(self._scopes):
            if scope == "comprehension":
                in_comprehension = True
            elif scope == "iterable":
                raise self._error(
                    f"tap() cannot be used in a comprehension iterable: `{self._quote(call)}`.",
                    call,
                )
            elif scope == "class" and in_comprehension:
                raise self._error(
                    f"tap() cannot be used in a comprehension in a class body: `{self._quote(call)}`.",
                    call,
                )
            else:
                return

    # -- error reporting ---------------------------------------------------- #

    def _enclosing_expr(self) -> ast.AST:
        # _parents[-1] is the node being visited.
        for parent in reversed(self._parents[:-1]):
            if isinstance(parent, ast.expr):
                return parent
        for parent in reversed(self._parents[:-1]):
            if isinstance(parent, ast.stmt):
                return parent
        return self._parents[-1]

    def _quote(self, node: ast.AST) -> str:
        segment = None
        if self._source is not None:
            segment = ast.get_source_segment(self._source, node)
        return segment if segment is not None else ast.unparse(node)

    def _error(self, msg: str, node: ast.AST) -> TapMacroError:
        lineno = getattr(node, "lineno", None)
        offset = getattr(node, "col_offset", None)
        text = None
        if self._source is not None and lineno is not None:
            lines = self._source.splitlines()
            if lineno <= len(lines):
                text = lines[lineno - 1]
        return TapMacroError(
            msg, (self._filename, lineno, None if offset is None else offset + 1, text)
        )


class _MacroImportRemover(ast.NodeTransformer):
    """Drop ``from logtap.macro import tap`` aliases, recording bound names."""

    def __init__(self) -> None:
        self.names: Set[str] = set()

    def visit_ImportFrom(self, node: ast.ImportFrom) -> ast.AST:
        if node.level or node.module != MACRO_MODULE:
            return node
        kept = []
        for alias in node.names:
            if alias.name == MACRO_NAME:
                self.names.add(alias.asname or alias.name)
            else:
                kept.append(alias)
        if kept:
            node.names = kept
            return node
        return ast.copy_location(ast.Pass(), node)


def _prelude_index(body: List[ast.stmt]) -> int:
    index = 0
    if (
        body
        and isinstance(body[0], ast.Expr)
        and isinstance(body[0].value, ast.Constant)
        and isinstance(body[0].value.value, str)
    ):
        index = 1
    while (
        index < len(body)
        and isinstance(body[index], ast.ImportFrom)
        and body[index].module == "__future__"
    ):
        index += 1
    return index


def transform(
    tree: ast.Module,
    *,
    names: Optional[Iterable[str]] = None,
    method: str = DEFAULT_METHOD,
    source: Optional[str] = None,
    filename: str = "<unknown>",
) -> ast.Module:
    """Expand every tap call-site in a parsed module, in place.

    Args:
        tree: Module returned by ``ast.parse``.
        names: Extra identifiers to treat as the tap macro, on top of those
            bound by ``from logtap.macro import tap [as ...]``.
        method: Logger method the expanded code calls. Defaults to ``"info"``.
        source: Original text of ``tree``, used to quote code in errors.
        filename: Reported in errors.

    Returns:
        ``tree``, rewritten. Modules with no tap names are returned as is.

    Raises:
        TapMacroError: If a tap name is used anywhere but as a callee, or a
            call-site cannot be expanded.
    """
    if not isinstance(tree, ast.Module):
        raise TypeError(f"expected an ast.Module, got {type(tree).__name__}")

    remover = _MacroImportRemover()
    tree = remover.visit(tree)
    tap_names = remover.names | set(names or ())
    if not tap_names:
        return tree

    transformer = TapTransformer(tap_names, method=method, source=source, filename=filename)
    tree = transformer.visit(tree)

    if transformer.expanded:
        index = _prelude_index(tree.body)
        anchor = tree.body[index] if index < len(tree.body) else tree.body[-1]
        logging_import = ast.copy_location(
            ast.Import(names=[ast.alias(name="logging", asname=LOGGING_ALIAS)]), anchor
        )
        tree.body.insert(index, logging_import)
    return ast.fix_missing_locations(tree)


def _parse(source: str, filename: str, **kwargs: Any) -> ast.Module:
    tree = ast.parse(source, filename=filename)
    return transform(tree, source=source, filename=filename, **kwargs)


def expand_source(source: str, filename: str = "<unknown>", **kwargs: Any) -> str:
    """Return the expanded module as source text (comments are lost)."""
    return ast.unparse(_parse(source, filename, **kwargs))


def compile_source(source: str, filename: str = "<unknown>", **kwargs: Any) -> CodeType:
    """Expand and compile a module, keeping the original line numbers.

    Keyword arguments are passed to ``transform()``.
    """
    return compile(_parse(source, filename, **kwargs), filename, "exec")


def run_path(path: str, run_name: str = "__main__", **kwargs: Any) -> Dict[str, Any]:
    """Expand, compile and execute the file at ``path``.

    Works like ``runpy.run_path`` for a single source file: the module runs in
    a fresh namespace named ``run_name``, whose globals are returned.
    """
    with open(path, encoding="utf-8") as f:
        source = f.read()
    code = compile_source(source, filename=path, **kwargs)
    module_globals: Dict[str, Any] = {"__name__": run_name, "__file__": path}
    script_dir = os.path.dirname(os.path.abspath(path))
    sys.path.insert(0, script_dir)
    try:
        exec(code, module_globals)
    finally:
        if script_dir in sys.path:
            sys.path.remove(script_dir)
    return module_globals
